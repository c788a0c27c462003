# bugfinder/models.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError, field_validator


class ConfigError(Exception):
    """Raised when the settings file cannot be loaded or validated."""


class Settings(BaseModel):
    project_name: str
    local_repo_path: str
    max_bugs_to_find: int = 50
    output_csv_file: str = "results.csv"
    jira_base_url: str = "https://issues.apache.org/jira/browse"
    jira_api_url: str = "https://issues.apache.org/jira/"
    repo_commit_url: str
    analysis_keywords: list[str] = []
    jira_timeout: float = 10.0

    @field_validator("max_bugs_to_find")
    @classmethod
    def validate_max_bugs(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_bugs_to_find must be positive")
        return v

    @field_validator("jira_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("jira_timeout must be positive")
        return v

    @field_validator("analysis_keywords")
    @classmethod
    def drop_empty_keywords(cls, v: list[str]) -> list[str]:
        # An empty keyword would match every added line
        return [k for k in v if k]

    @classmethod
    def from_file(cls, path: Path) -> Settings:
        """Load settings from a YAML (or JSON) file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"could not open config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"could not parse config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"config file {path} must contain a mapping")

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"invalid config file {path}: {e}") from e


def join_url(base: str, leaf: str) -> str:
    return f"{base.rstrip('/')}/{leaf}"


@dataclass(frozen=True)
class MatchRecord:
    bug_id: str
    commit_hash: str
    jira_url: str
    commit_url: str

    @classmethod
    def build(
        cls,
        bug_id: str,
        commit_hash: str,
        jira_base_url: str,
        repo_commit_url: str,
    ) -> MatchRecord:
        """Build a record, deriving the tracker and commit-browser links."""
        return cls(
            bug_id=bug_id,
            commit_hash=commit_hash,
            jira_url=join_url(jira_base_url, bug_id),
            commit_url=join_url(repo_commit_url, commit_hash),
        )
