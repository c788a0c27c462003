# bugfinder/analyzer.py
from __future__ import annotations
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable

from bugfinder.diff_classifier import ClassifyError, analyze_diff
from bugfinder.git_ops import FetchError, SearchError, find_commit, get_commit_diff
from bugfinder.models import MatchRecord

logger = logging.getLogger(__name__)


class Outcome(Enum):
    MATCHED = "matched"
    NO_COMMIT = "no_commit"
    SEARCH_ERROR = "search_error"
    FETCH_ERROR = "fetch_error"
    EMPTY_CHANGESET = "empty_changeset"
    CLASSIFY_ERROR = "classify_error"
    NO_KEYWORD_MATCH = "no_keyword_match"


@dataclass
class BugOutcome:
    bug_id: str
    outcome: Outcome
    commit_hash: str = ""
    error: str | None = None


@dataclass
class AnalysisResult:
    matches: list[MatchRecord] = field(default_factory=list)
    outcomes: list[BugOutcome] = field(default_factory=list)

    def counts(self) -> dict[str, int]:
        """Number of bugs per terminal outcome, in Outcome declaration order."""
        tally = Counter(o.outcome for o in self.outcomes)
        return {outcome.value: tally[outcome] for outcome in Outcome}


# Outcome callback type: (bug_outcome) -> None
OutcomeCallback = Callable[[BugOutcome], None]


class BugAnalyzer:
    """Correlate bug ids with fixing commits and filter them by diff keywords.

    Bugs are processed one at a time in the order given. A failure for one
    bug is logged and recorded as its outcome; it never stops the run.
    """

    def __init__(
        self,
        repo_path: str,
        keywords: list[str],
        jira_base_url: str,
        repo_commit_url: str,
        on_outcome: OutcomeCallback | None = None,
    ):
        self.repo_path = repo_path
        self.keywords = list(keywords)
        self.jira_base_url = jira_base_url
        self.repo_commit_url = repo_commit_url
        self.on_outcome = on_outcome

    def analyze(self, bug_ids: Iterable[str]) -> AnalysisResult:
        result = AnalysisResult()
        for bug_id in bug_ids:
            outcome = self.analyze_bug(bug_id)
            result.outcomes.append(outcome)
            if outcome.outcome is Outcome.MATCHED:
                result.matches.append(self._record(bug_id, outcome.commit_hash))
            if self.on_outcome:
                self.on_outcome(outcome)
        return result

    def analyze_bug(self, bug_id: str) -> BugOutcome:
        """Run locate -> fetch -> classify for a single bug."""
        try:
            commit_hash = find_commit(self.repo_path, bug_id)
        except SearchError as e:
            logger.warning("%s: error searching git: %s", bug_id, e)
            return BugOutcome(bug_id, Outcome.SEARCH_ERROR, error=str(e))

        if not commit_hash:
            logger.debug("%s: no commit found", bug_id)
            return BugOutcome(bug_id, Outcome.NO_COMMIT)

        if not self.keywords:
            logger.debug("%s: match found (no keywords) -> %s", bug_id, commit_hash)
            return BugOutcome(bug_id, Outcome.MATCHED, commit_hash)

        try:
            diff = get_commit_diff(self.repo_path, commit_hash)
        except FetchError as e:
            logger.warning("%s: error getting diff for %s: %s", bug_id, commit_hash, e)
            return BugOutcome(bug_id, Outcome.FETCH_ERROR, commit_hash, error=str(e))

        if not diff:
            logger.debug("%s: empty changeset for %s", bug_id, commit_hash)
            return BugOutcome(bug_id, Outcome.EMPTY_CHANGESET, commit_hash)

        try:
            matched = analyze_diff(diff, self.keywords)
        except ClassifyError as e:
            logger.warning("%s: error analyzing diff for %s: %s", bug_id, commit_hash, e)
            return BugOutcome(bug_id, Outcome.CLASSIFY_ERROR, commit_hash, error=str(e))

        if not matched:
            logger.debug("%s: no keyword in added lines of %s", bug_id, commit_hash)
            return BugOutcome(bug_id, Outcome.NO_KEYWORD_MATCH, commit_hash)

        logger.debug("%s: match found -> %s", bug_id, commit_hash)
        return BugOutcome(bug_id, Outcome.MATCHED, commit_hash)

    def _record(self, bug_id: str, commit_hash: str) -> MatchRecord:
        return MatchRecord.build(bug_id, commit_hash, self.jira_base_url, self.repo_commit_url)
