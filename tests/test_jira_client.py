"""Tests for the Jira client."""

import json
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import httpx
import pytest

from jira_worklog_sync.errors import FetchError
from jira_worklog_sync.jira import JiraClient, format_started


def _client(handler) -> JiraClient:
    return JiraClient(
        endpoint="https://example.atlassian.net/",
        email="dev@example.com",
        api_token="jira_token",
        transport=httpx.MockTransport(handler),
    )


class TestFormatStarted:
    def test_utc(self) -> None:
        value = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

        assert format_started(value) == "2024-01-01T12:00:00.000+0000"

    def test_converts_to_utc(self) -> None:
        value = datetime(2024, 7, 1, 14, 30, 0, tzinfo=ZoneInfo("Europe/Prague"))

        assert format_started(value) == "2024-07-01T12:30:00.000+0000"


class TestJiraClient:
    """Test JiraClient functionality."""

    def test_requires_credentials(self) -> None:
        with pytest.raises(ValueError):
            JiraClient(endpoint="https://example.atlassian.net", email="", api_token="t")

    def test_client_issue_mapping(self) -> None:
        """Test that unresolved client issues map summary to key."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json={
                    "issues": [
                        {"key": "PROJ-4", "fields": {"summary": "Acme"}},
                        {"key": "PROJ-9", "fields": {"summary": "Globex"}},
                    ]
                },
            )

        with _client(handler) as jira:
            mapping = jira.client_issue_mapping("PROJ")

        assert mapping == {"Acme": "PROJ-4", "Globex": "PROJ-9"}
        request = requests[0]
        assert request.method == "POST"
        assert request.url == "https://example.atlassian.net/rest/api/3/search/jql"
        assert request.headers["Authorization"].startswith("Basic ")
        body = json.loads(request.content)
        assert body["jql"] == (
            'project = "PROJ" AND issuetype = "Client" '
            "AND resolution = unresolved ORDER BY summary ASC"
        )
        assert body["fields"] == ["summary"]
        assert body["maxResults"] == 100

    def test_search_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"errorMessages": ["Unauthorized"]})

        with _client(handler) as jira:
            with pytest.raises(FetchError) as exc_info:
                jira.search_issues("project = PROJ")

        assert exc_info.value.status_code == 401

    def test_search_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with _client(handler) as jira:
            with pytest.raises(FetchError, match="connection refused"):
                jira.search_issues("project = PROJ")

    def test_post_worklog(self) -> None:
        """Test the worklog payload."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(201, json={"id": "10001"})

        started = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        with _client(handler) as jira:
            assert jira.post_worklog("PROJ-4", 1800, started) is True

        request = requests[0]
        assert request.url.path == "/rest/api/3/issue/PROJ-4/worklog"
        assert json.loads(request.content) == {
            "started": "2024-01-01T12:00:00.000+0000",
            "timeSpentSeconds": 1800,
        }

    def test_post_worklog_with_comment(self) -> None:
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(201, json={})

        started = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        with _client(handler) as jira:
            jira.post_worklog("PROJ-4", 900, started, comment="Homepage")

        comment = json.loads(requests[0].content)["comment"]
        assert comment["type"] == "doc"
        assert comment["content"][0]["content"][0]["text"] == "Homepage"

    @pytest.mark.parametrize("status", [200, 400, 403, 500])
    def test_post_worklog_rejected(self, status: int) -> None:
        """Test that only 201 Created counts as success."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={})

        started = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        with _client(handler) as jira:
            assert jira.post_worklog("PROJ-4", 900, started) is False

    def test_post_worklog_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        started = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        with _client(handler) as jira:
            assert jira.post_worklog("PROJ-4", 900, started) is False
