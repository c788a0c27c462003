# bugfinder/jira_client.py
from __future__ import annotations
import logging
from urllib.parse import urljoin

import requests

logger = logging.getLogger(__name__)

SEARCH_PATH = "rest/api/2/search"

# Short-request budget for the single search call
DEFAULT_TIMEOUT = 10.0


class TransportError(Exception):
    """Raised when the bug list could not be obtained from the tracker."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def build_jql(project_name: str) -> str:
    return (
        f"project = {project_name} AND issuetype = Bug "
        "AND status in (Resolved, Fixed) ORDER BY updated DESC"
    )


class JiraClient:
    """Minimal Jira search client.

    The base URL is resolved once at construction; every search is a single
    GET with no retry.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        if not base_url.endswith("/"):
            base_url += "/"
        self.base_url = base_url
        self.search_url = urljoin(base_url, SEARCH_PATH)
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def search_bugs(self, project_name: str, max_results: int) -> list[str]:
        """Return up to max_results resolved bug keys, most recently updated first."""
        params = {
            "jql": build_jql(project_name),
            "fields": "key",
            "maxResults": str(max_results),
        }
        logger.info("Querying Jira: %s (project=%s, maxResults=%d)",
                    self.search_url, project_name, max_results)

        try:
            resp = self.session.get(self.search_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"failed to send request: {e}") from e

        if resp.status_code != 200:
            raise TransportError(
                f"Jira request failed with status {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise TransportError(f"failed to decode Jira response: {e}") from e

        return self._extract_keys(data)[:max_results]

    def _extract_keys(self, data) -> list[str]:
        if not isinstance(data, dict) or not isinstance(data.get("issues"), list):
            raise TransportError("malformed Jira response: missing 'issues' array")

        keys = []
        for i, issue in enumerate(data["issues"]):
            key = issue.get("key") if isinstance(issue, dict) else None
            if not isinstance(key, str) or not key:
                raise TransportError(f"malformed Jira response: issue at index {i} has no 'key'")
            keys.append(key)
        return keys
