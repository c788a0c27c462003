# tests/test_git_ops_integration.py
import shutil
import subprocess
from pathlib import Path

import pytest
from bugfinder.analyzer import BugAnalyzer, Outcome
from bugfinder.git_ops import FetchError, SearchError, find_commit, get_commit_diff

pytestmark = pytest.mark.skipif(
    shutil.which("git") is None,
    reason="git not available"
)


def _git(path: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", "-c", "commit.gpgsign=false", *args],
        cwd=path, check=True, capture_output=True, text=True
    )
    return result.stdout.strip()


def _commit(path: Path, filename: str, content: str, message: str) -> str:
    (path / filename).write_text(content, encoding="utf-8")
    _git(path, "add", ".")
    _git(path, "commit", "-m", message)
    return _git(path, "rev-parse", "HEAD")


@pytest.fixture
def repo(tmp_path):
    """A small repo with bug-referencing commits on two branches."""
    path = tmp_path / "repo"
    path.mkdir()
    _git(path, "init")
    _git(path, "config", "user.email", "test@example.com")
    _git(path, "config", "user.name", "Test User")

    hashes = {}
    hashes["initial"] = _commit(path, "Main.java", "class Main {}\n", "initial commit")
    hashes["first_fix"] = _commit(
        path, "MainTest.java", "class MainTest {}\n", "PROJ-1: first attempt"
    )
    hashes["second_fix"] = _commit(
        path, "MainTest.java",
        "class MainTest {\n    @Test void flakyCase() {}\n}\n",
        "PROJ-1: mark flaky test",
    )
    hashes["no_test"] = _commit(path, "Main.java", "class Main { int x; }\n", "PROJ-4 fix field")

    _git(path, "checkout", "-b", "side")
    hashes["side"] = _commit(path, "Side.java", "class Side {}\n", "PROJ-3 on a side branch")
    _git(path, "checkout", "-")
    return path, hashes


def test_find_commit_returns_most_recent_match(repo):
    path, hashes = repo
    assert find_commit(str(path), "PROJ-1") == hashes["second_fix"]


def test_find_commit_is_idempotent(repo):
    path, _ = repo
    assert find_commit(str(path), "PROJ-1") == find_commit(str(path), "PROJ-1")


def test_find_commit_searches_all_branches(repo):
    path, hashes = repo
    assert find_commit(str(path), "PROJ-3") == hashes["side"]


def test_find_commit_no_match_is_empty(repo):
    path, _ = repo
    assert find_commit(str(path), "PROJ-2") == ""


def test_find_commit_matches_literally(repo):
    """Regex metacharacters in the id are not interpreted."""
    path, _ = repo
    assert find_commit(str(path), "PROJ.1") == ""


def test_find_commit_missing_repo_raises(tmp_path):
    with pytest.raises(SearchError):
        find_commit(str(tmp_path / "does-not-exist"), "PROJ-1")


def test_get_commit_diff_contains_added_lines(repo):
    path, hashes = repo
    diff = get_commit_diff(str(path), hashes["second_fix"])
    assert "+++ b/MainTest.java" in diff
    assert "+    @Test void flakyCase() {}" in diff


def test_get_commit_diff_unknown_commit_raises(repo):
    path, _ = repo
    with pytest.raises(FetchError):
        get_commit_diff(str(path), "0" * 40)


def test_analyzer_against_real_repo(repo):
    path, hashes = repo
    analyzer = BugAnalyzer(
        repo_path=str(path),
        keywords=["flaky"],
        jira_base_url="https://jira.example.com/browse",
        repo_commit_url="https://git.example.com/commit",
    )

    result = analyzer.analyze(["PROJ-1", "PROJ-2", "PROJ-4"])

    assert [m.bug_id for m in result.matches] == ["PROJ-1"]
    assert result.matches[0].commit_hash == hashes["second_fix"]
    assert [o.outcome for o in result.outcomes] == [
        Outcome.MATCHED, Outcome.NO_COMMIT, Outcome.NO_KEYWORD_MATCH
    ]


def test_colored_git_config_does_not_hide_added_lines(repo):
    path, hashes = repo
    _git(path, "config", "color.ui", "always")
    _git(path, "config", "color.diff", "always")

    diff = get_commit_diff(str(path), hashes["second_fix"])
    assert "\x1b[" not in diff

    analyzer = BugAnalyzer(
        repo_path=str(path),
        keywords=["flaky"],
        jira_base_url="https://jira.example.com/browse",
        repo_commit_url="https://git.example.com/commit",
    )
    result = analyzer.analyze(["PROJ-1"])

    assert result.outcomes[0].outcome is Outcome.MATCHED
    assert result.matches[0].commit_hash == hashes["second_fix"]


def test_non_ascii_keyword_in_added_line(repo):
    path, _ = repo
    commit = _commit(path, "UnicodeTest.java", "// größe überprüfen\n", "PROJ-5 unicode test")

    analyzer = BugAnalyzer(
        repo_path=str(path),
        keywords=["größe"],
        jira_base_url="https://jira.example.com/browse",
        repo_commit_url="https://git.example.com/commit",
    )
    result = analyzer.analyze(["PROJ-5"])

    assert [m.commit_hash for m in result.matches] == [commit]
