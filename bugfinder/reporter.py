# bugfinder/reporter.py
from __future__ import annotations
import csv
import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

from bugfinder.analyzer import AnalysisResult
from bugfinder.models import MatchRecord

CSV_HEADER = ["BugID", "JiraURL", "CommitHash", "CommitURL"]


class ReportWriteError(Exception):
    """Raised when the report could not be persisted."""


class Reporter:
    def __init__(self, project_name: str = ""):
        self.project_name = project_name

    def write_csv(self, path: str | Path, records: list[MatchRecord]) -> Path:
        """Write records as CSV, creating or truncating path.

        An empty record list still produces a well-formed header-only file.
        """
        out = Path(path)
        try:
            out.parent.mkdir(parents=True, exist_ok=True)
            with open(out, "w", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(CSV_HEADER)
                for r in records:
                    writer.writerow([r.bug_id, r.jira_url, r.commit_hash, r.commit_url])
        except OSError as e:
            raise ReportWriteError(f"could not write {out}: {e}") from e
        return out

    def write_json(self, path: str | Path, result: AnalysisResult) -> Path:
        """Write matches, per-bug outcomes and outcome counts as JSON."""
        data = {
            "project": self.project_name,
            "timestamp": datetime.now().strftime("%Y-%m-%dT%H:%M:%S"),
            "summary": {
                "bugs_analyzed": len(result.outcomes),
                "matches": len(result.matches),
                "outcomes": result.counts(),
            },
            "matches": [asdict(r) for r in result.matches],
            "outcomes": [
                {
                    "bug_id": o.bug_id,
                    "outcome": o.outcome.value,
                    "commit_hash": o.commit_hash,
                    "error": o.error,
                }
                for o in result.outcomes
            ],
        }
        out = Path(path)
        try:
            out.parent.mkdir(parents=True, exist_ok=True)
            with open(out, "w") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise ReportWriteError(f"could not write {out}: {e}") from e
        return out
