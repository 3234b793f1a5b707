"""Jira Cloud REST API client."""

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from jira_worklog_sync.errors import FetchError
from jira_worklog_sync.jira.models import JiraIssue

logger = logging.getLogger(__name__)

# Jira Cloud rejects larger pages for issue search
MAX_SEARCH_RESULTS = 100


def format_started(value: datetime) -> str:
    """Format a worklog start time the way Jira expects it."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000+0000")


def text_to_adf(text: str) -> dict[str, Any]:
    """Wrap plain text in an Atlassian Document Format paragraph."""
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {
                "type": "paragraph",
                "content": [{"type": "text", "text": text}],
            }
        ],
    }


class JiraClient:
    """Client for Jira Cloud API."""

    def __init__(
        self,
        endpoint: str,
        email: str,
        api_token: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize Jira client with basic authentication.

        Args:
            endpoint: Jira site URL (e.g., 'https://mycompany.atlassian.net').
            email: Account email.
            api_token: Atlassian API token.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, mainly for tests.
        """
        if not (endpoint and email and api_token):
            raise ValueError("Jira endpoint, email and API token are required")

        self.endpoint = endpoint.rstrip("/")
        self.client = httpx.Client(
            base_url=self.endpoint,
            auth=(email, api_token),
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def search_issues(self, jql: str, max_results: int = MAX_SEARCH_RESULTS) -> list[JiraIssue]:
        """Search issues with JQL.

        Args:
            jql: JQL query.
            max_results: Maximum number of issues to return.

        Returns:
            Matching issues.

        Raises:
            FetchError: If the request fails.
        """
        payload = {
            "jql": jql,
            "maxResults": min(max_results, MAX_SEARCH_RESULTS),
            "fields": ["summary"],
        }

        try:
            response = self.client.post("/rest/api/3/search/jql", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"Jira: issue search failed with HTTP {e.response.status_code}",
                e.response.status_code,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise FetchError(f"Jira: issue search failed: {e}") from e

        return [JiraIssue(**item) for item in data.get("issues", [])]

    def client_issue_mapping(self, project_key: str, issue_type: str = "Client") -> dict[str, str]:
        """Map client issue summaries to issue keys.

        Args:
            project_key: Jira project holding one issue per client.
            issue_type: Issue type used for client issues.

        Returns:
            Dictionary of issue summary to issue key, ordered by summary.
        """
        jql = (
            f'project = "{project_key}" AND issuetype = "{issue_type}" '
            "AND resolution = unresolved ORDER BY summary ASC"
        )
        issues = self.search_issues(jql)
        return {issue.summary: issue.key for issue in issues}

    def post_worklog(
        self,
        issue_key: str,
        seconds: int,
        started: datetime,
        comment: str | None = None,
    ) -> bool:
        """Add a worklog to an issue.

        Args:
            issue_key: Issue key (e.g., 'CLI-4').
            seconds: Time spent in seconds.
            started: When the work started.
            comment: Optional worklog comment.

        Returns:
            True if Jira created the worklog, False otherwise.
        """
        payload: dict[str, Any] = {
            "started": format_started(started),
            "timeSpentSeconds": int(seconds),
        }
        if comment:
            payload["comment"] = text_to_adf(comment)

        try:
            response = self.client.post(f"/rest/api/3/issue/{issue_key}/worklog", json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Failed to post worklog to {issue_key}: {e}")
            return False

        if response.status_code != 201:
            logger.error(
                f"Jira rejected worklog for {issue_key}: HTTP {response.status_code} {response.text}"
            )
            return False

        logger.debug(f"Posted {seconds}s worklog to {issue_key}")
        return True

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> "JiraClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
