# bugfinder/git_ops.py
from __future__ import annotations
import logging
import subprocess
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class SearchError(Exception):
    """Raised when git failed while searching history for a bug id."""


class FetchError(Exception):
    """Raised when git failed while retrieving a commit's changeset."""


class ToolStatus(Enum):
    OK = "ok"
    SILENT_FAILURE = "silent_failure"
    FAILED = "failed"


@dataclass
class GitOutput:
    returncode: int
    stdout: str
    stderr: str

    @property
    def status(self) -> ToolStatus:
        """Classify the invocation.

        A non-zero exit only counts as a failure when git also wrote to
        stderr. A silent non-zero exit means "nothing found".
        """
        if self.returncode == 0:
            return ToolStatus.OK
        if self.stderr.strip():
            return ToolStatus.FAILED
        return ToolStatus.SILENT_FAILURE


def run_git(repo_path: str, args: list[str]) -> GitOutput:
    """Run git inside repo_path with stdout and stderr captured separately.

    Spawn failures (git not installed, repo_path missing) are reported as a
    failed invocation rather than raised.
    """
    cmd = ["git", *args]
    try:
        result = subprocess.run(
            cmd,
            cwd=repo_path,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        return GitOutput(returncode=-1, stdout="", stderr=str(e) or repr(e))

    output = GitOutput(
        returncode=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
    )
    if output.status is ToolStatus.SILENT_FAILURE:
        logger.debug("git %s exited %d with no diagnostics", args[0], result.returncode)
    return output


def find_commit(repo_path: str, bug_id: str) -> str:
    """Return the most recent commit on any ref whose message contains bug_id.

    Returns an empty string when no commit mentions the id.
    """
    output = run_git(repo_path, [
        "log",
        "--no-color",
        "--all",
        "--fixed-strings",
        f"--grep={bug_id}",
        "-n", "1",
        "--pretty=format:%H",
    ])
    if output.status is ToolStatus.FAILED:
        raise SearchError(f"git log failed: {output.stderr.strip()}")
    return output.stdout.strip()


def get_commit_diff(repo_path: str, commit_hash: str) -> str:
    """Return the full `git show` text for a commit, all files included."""
    output = run_git(repo_path, ["show", "--no-color", "--no-ext-diff", commit_hash])
    if output.status is ToolStatus.FAILED:
        raise FetchError(f"git show failed: {output.stderr.strip()}")
    return output.stdout
