"""Clockify API client."""

import logging
from datetime import datetime
from typing import Any

import httpx

from jira_worklog_sync.clockify.models import (
    ClockifyClientRecord,
    ClockifyProject,
    ClockifyTimeEntry,
)
from jira_worklog_sync.errors import FetchError
from jira_worklog_sync.models import Client, Project, TimeEntry

logger = logging.getLogger(__name__)


class ClockifyClient:
    """Client for Clockify API."""

    name = "clockify"
    BASE_URL = "https://api.clockify.me/api/v1"
    PAGE_SIZE = 200

    def __init__(
        self,
        api_key: str,
        workspace_id: str,
        user_id: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize Clockify client.

        Args:
            api_key: Clockify API key.
            workspace_id: Workspace ID.
            user_id: User whose entries are synced. Looked up from the API key if None.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, mainly for tests.
        """
        if not api_key:
            raise ValueError("Clockify API key not provided")

        self.workspace_id = workspace_id
        self._user_id = user_id
        self.client = httpx.Client(
            base_url=self.BASE_URL,
            headers={"X-Api-Key": api_key},
            timeout=timeout,
            transport=transport,
        )

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Send a GET request and return the decoded body.

        Raises:
            FetchError: If the request fails or Clockify returns an error payload.
        """
        try:
            response = self.client.get(path, params=params)
        except httpx.HTTPError as e:
            raise FetchError(f"Clockify: request to {path} failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and "message" in data:
            raise FetchError(f"Clockify: {data['message']}", response.status_code)
        if response.is_error:
            raise FetchError(
                f"Clockify: HTTP {response.status_code} for {path}", response.status_code
            )
        return data

    def get_current_user(self) -> dict[str, Any]:
        """Get current authenticated user.

        Returns:
            User information.
        """
        return self._get("/user")

    @property
    def user_id(self) -> str:
        """Get the ID of the user whose entries are synced."""
        if self._user_id is None:
            self._user_id = self.get_current_user()["id"]
        return self._user_id

    def list_projects(self) -> list[Project]:
        """List all projects in the workspace."""
        data = self._get(f"/workspaces/{self.workspace_id}/projects")
        return [ClockifyProject(**item).to_project() for item in data or []]

    def list_clients(self) -> list[Client]:
        """List all clients in the workspace."""
        data = self._get(f"/workspaces/{self.workspace_id}/clients")
        return [ClockifyClientRecord(**item).to_client() for item in data or []]

    @staticmethod
    def format_boundary(value: datetime) -> str:
        """Format a local boundary the way Clockify reads it.

        Clockify interprets the wall-clock value as local time despite the Z suffix.
        """
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")

    def fetch_entries(
        self,
        start: datetime,
        end: datetime | None = None,
    ) -> list[TimeEntry]:
        """Get finished time entries for the user.

        Args:
            start: Start boundary in the local timezone (inclusive).
            end: End boundary in the local timezone (inclusive).

        Returns:
            Normalized time entries.
        """
        params: dict[str, Any] = {
            "in-progress": "false",
            "page-size": self.PAGE_SIZE,
            "start": self.format_boundary(start),
        }
        if end:
            params["end"] = self.format_boundary(end)

        data = self._get(
            f"/workspaces/{self.workspace_id}/user/{self.user_id}/time-entries",
            params=params,
        )
        return [ClockifyTimeEntry(**item).to_time_entry() for item in data or []]

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> "ClockifyClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
