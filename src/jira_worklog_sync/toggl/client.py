"""Toggl Track API client."""

import logging
from datetime import datetime
from typing import Any

import httpx

from jira_worklog_sync.errors import FetchError
from jira_worklog_sync.models import Client, Project, TimeEntry
from jira_worklog_sync.toggl.models import TogglClientRecord, TogglProject, TogglTimeEntry

logger = logging.getLogger(__name__)


class TogglClient:
    """Client for Toggl Track API."""

    name = "toggl"
    BASE_URL = "https://api.track.toggl.com/api/v9"

    def __init__(
        self,
        api_token: str,
        workspace_id: int | str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize Toggl client.

        Args:
            api_token: Toggl API token.
            workspace_id: Workspace ID.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, mainly for tests.
        """
        if not api_token:
            raise ValueError("Toggl API token not provided")

        self.workspace_id = workspace_id
        self.client = httpx.Client(
            base_url=self.BASE_URL,
            auth=(api_token, "api_token"),
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Send a GET request and return the decoded body.

        Raises:
            FetchError: If the request fails or does not return 200.
        """
        try:
            response = self.client.get(path, params=params)
        except httpx.HTTPError as e:
            raise FetchError(f"Toggl: request to {path} failed: {e}") from e

        if response.status_code != 200:
            raise FetchError(
                f"Toggl: HTTP {response.status_code} for {path}", response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"Toggl: invalid JSON from {path}") from e

    def list_projects(self) -> list[Project]:
        """List all projects in the workspace."""
        data = self._get(f"/workspaces/{self.workspace_id}/projects")
        return [TogglProject(**item).to_project() for item in data or []]

    def list_clients(self) -> list[Client]:
        """List all clients in the workspace."""
        data = self._get(f"/workspaces/{self.workspace_id}/clients")
        return [TogglClientRecord(**item).to_client() for item in data or []]

    @staticmethod
    def format_boundary(value: datetime) -> str:
        """Format a local boundary as ISO 8601 with its UTC offset."""
        return value.replace(microsecond=0).isoformat()

    def fetch_entries(
        self,
        start: datetime,
        end: datetime | None = None,
    ) -> list[TimeEntry]:
        """Get time entries of the current user.

        Args:
            start: Start boundary in the local timezone.
            end: End boundary in the local timezone. Defaults to now, the API
                needs both boundaries.

        Returns:
            Normalized time entries, running timers included.
        """
        if end is None:
            end = datetime.now(start.tzinfo)

        data = self._get(
            "/me/time_entries",
            params={
                "start_date": self.format_boundary(start),
                "end_date": self.format_boundary(end),
            },
        )
        return [TogglTimeEntry(**item).to_time_entry() for item in data or []]

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> "TogglClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
