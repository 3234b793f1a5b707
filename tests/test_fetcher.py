"""Tests for the cache-backed entry fetcher."""

from datetime import datetime, time, timezone
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import httpx
import pytest

from jira_worklog_sync.clockify import ClockifyClient
from jira_worklog_sync.errors import DateValidationError, FetchError
from jira_worklog_sync.models import Client, Project, SyncWindow, TimeEntry
from jira_worklog_sync.sync import EntryFetcher
from jira_worklog_sync.sync.fetcher import parse_boundary
from jira_worklog_sync.utils import CacheStore, CursorStore


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def mock_adapter(sample_projects: dict, sample_clients: dict) -> MagicMock:
    adapter = MagicMock()
    adapter.name = "clockify"
    adapter.list_projects.return_value = list(sample_projects.values())
    adapter.list_clients.return_value = list(sample_clients.values())
    adapter.fetch_entries.return_value = []
    return adapter


@pytest.fixture
def fetcher(mock_adapter: MagicMock, cache_store: CacheStore, cursor_store: CursorStore) -> EntryFetcher:
    return EntryFetcher(mock_adapter, cache_store, cursor_store, ZoneInfo("Europe/Prague"))


class TestParseBoundary:
    """Test free-form date parsing."""

    def test_iso_with_offset(self) -> None:
        assert parse_boundary("2024-01-01T13:00:00+01:00") == _utc(2024, 1, 1, 12, 0)

    def test_naive_is_utc(self) -> None:
        assert parse_boundary("2024-01-01 12:00") == _utc(2024, 1, 1, 12, 0)

    def test_date_only(self) -> None:
        assert parse_boundary("2024-01-01") == _utc(2024, 1, 1)

    def test_invalid(self) -> None:
        with pytest.raises(DateValidationError, match="Invalid date supplied: not-a-date"):
            parse_boundary("not-a-date")


class TestResolveWindow:
    """Test working out the retrieval window."""

    def test_explicit_start(self, fetcher: EntryFetcher) -> None:
        window = fetcher.resolve_window("2024-01-01T00:00:00Z")

        assert window == SyncWindow(start=_utc(2024, 1, 1), end=None)

    def test_start_from_cursor(self, fetcher: EntryFetcher, cursor_store: CursorStore) -> None:
        cursor_store.write(_utc(2024, 1, 1, 12, 0, 0))

        window = fetcher.resolve_window()

        assert window.start == _utc(2024, 1, 1, 12, 0, 1)

    def test_explicit_start_beats_cursor(self, fetcher: EntryFetcher, cursor_store: CursorStore) -> None:
        cursor_store.write(_utc(2024, 1, 1, 12, 0, 0))

        window = fetcher.resolve_window("2023-12-01")

        assert window.start == _utc(2023, 12, 1)

    def test_default_is_midnight_utc(self, fetcher: EntryFetcher) -> None:
        before = datetime.now(timezone.utc).date()
        window = fetcher.resolve_window()
        after = datetime.now(timezone.utc).date()

        assert window.start in (
            datetime.combine(before, time.min, timezone.utc),
            datetime.combine(after, time.min, timezone.utc),
        )
        assert window.end is None

    def test_end(self, fetcher: EntryFetcher) -> None:
        window = fetcher.resolve_window("2024-01-01", "2024-01-31T23:59:59Z")

        assert window.end == _utc(2024, 1, 31, 23, 59, 59)

    def test_end_before_start(self, fetcher: EntryFetcher) -> None:
        with pytest.raises(DateValidationError):
            fetcher.resolve_window("2024-02-01", "2024-01-01")

    def test_invalid_end(self, fetcher: EntryFetcher) -> None:
        with pytest.raises(DateValidationError):
            fetcher.resolve_window("2024-01-01", "whenever")


class TestReferenceData:
    """Test cached projects and clients."""

    def test_projects_fetched_and_cached(
        self, fetcher: EntryFetcher, mock_adapter: MagicMock, cache_store: CacheStore
    ) -> None:
        projects = fetcher.get_projects()

        assert set(projects) == {"p1", "p2", "p3"}
        assert projects["p1"] == Project(id="p1", name="Website", client_id="c1")
        assert cache_store.get("clockify_projects")["p2"] == {
            "id": "p2",
            "name": "Internal",
            "client_id": None,
        }
        mock_adapter.list_projects.assert_called_once()

    def test_cache_hit_skips_provider(self, fetcher: EntryFetcher, mock_adapter: MagicMock) -> None:
        fetcher.get_clients()
        clients = fetcher.get_clients()

        assert clients["c1"] == Client(id="c1", name="Acme")
        mock_adapter.list_clients.assert_called_once()

    def test_expired_cache_refetches(
        self, fetcher: EntryFetcher, mock_adapter: MagicMock, clock
    ) -> None:
        fetcher.get_projects()
        clock.now += 12 * 60 * 60 + 1

        fetcher.get_projects()

        assert mock_adapter.list_projects.call_count == 2

    def test_invalidated_cache_refetches(
        self, fetcher: EntryFetcher, mock_adapter: MagicMock, cache_store: CacheStore
    ) -> None:
        fetcher.get_clients()
        cache_store.invalidate(fetcher.store_name("clients"))

        fetcher.get_clients()

        assert mock_adapter.list_clients.call_count == 2

    def test_store_names_per_provider(self, fetcher: EntryFetcher, mock_adapter: MagicMock) -> None:
        assert fetcher.store_name("projects") == "clockify_projects"
        mock_adapter.name = "toggl"
        assert fetcher.store_name("clients") == "toggl_clients"

    def test_malformed_cache_refetches(
        self, fetcher: EntryFetcher, mock_adapter: MagicMock, cache_store: CacheStore
    ) -> None:
        cache_store.set("clockify_projects", {"p1": {"unexpected": True}})

        projects = fetcher.get_projects()

        assert "p1" in projects
        mock_adapter.list_projects.assert_called_once()

    def test_provider_failure_propagates(self, fetcher: EntryFetcher, mock_adapter: MagicMock) -> None:
        mock_adapter.list_projects.side_effect = FetchError("Clockify: nope", 401)

        with pytest.raises(FetchError, match="nope"):
            fetcher.get_projects()


class TestGetEntries:
    """Test entry retrieval."""

    def test_boundaries_in_local_timezone(self, fetcher: EntryFetcher, mock_adapter: MagicMock) -> None:
        window = SyncWindow(start=_utc(2024, 1, 1, 12, 0), end=_utc(2024, 1, 2, 12, 0))

        fetcher.get_entries(window)

        start, end = mock_adapter.fetch_entries.call_args.args
        assert start.tzinfo == ZoneInfo("Europe/Prague")
        assert (start.hour, end.hour) == (13, 13)
        assert start == window.start

    def test_open_window(self, fetcher: EntryFetcher, mock_adapter: MagicMock) -> None:
        fetcher.get_entries(SyncWindow(start=_utc(2024, 1, 1)))

        assert mock_adapter.fetch_entries.call_args.args[1] is None

    def test_malformed_provider_entry(
        self, cache_store: CacheStore, cursor_store: CursorStore
    ) -> None:
        """Test that an unparseable entry start becomes a FetchError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json=[{"id": "e1", "timeInterval": {"start": "not a time", "duration": "PT1H"}}],
            )

        clockify = ClockifyClient(
            api_key="clockify_token",
            workspace_id="ws_123",
            user_id="user_123",
            transport=httpx.MockTransport(handler),
        )
        fetcher = EntryFetcher(clockify, cache_store, cursor_store, ZoneInfo("UTC"))

        with clockify:
            with pytest.raises(FetchError, match="error retrieving entries"):
                fetcher.get_entries(SyncWindow(start=_utc(2024, 1, 1)))

    def test_returns_adapter_entries(self, fetcher: EntryFetcher, mock_adapter: MagicMock) -> None:
        entry = TimeEntry(id="e1", project_id="p1", start=_utc(2024, 1, 1, 12), duration_seconds=60)
        mock_adapter.fetch_entries.return_value = [entry]

        assert fetcher.get_entries(SyncWindow(start=_utc(2024, 1, 1))) == [entry]
