"""Cache-backed retrieval of projects, clients and time entries from a provider."""

import logging
from datetime import datetime, time, timezone
from typing import Protocol, TypeVar
from zoneinfo import ZoneInfo

import pydantic
from dateutil import parser as date_parser

from jira_worklog_sync.errors import DateValidationError, FetchError
from jira_worklog_sync.models import Client, Project, SyncWindow, TimeEntry
from jira_worklog_sync.utils.cache import DEFAULT_TTL, CacheStore
from jira_worklog_sync.utils.cursor import CursorStore

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", Project, Client)


class ProviderAdapter(Protocol):
    """A time tracker API normalized to the common records."""

    name: str

    def list_projects(self) -> list[Project]:
        ...

    def list_clients(self) -> list[Client]:
        ...

    def fetch_entries(self, start: datetime, end: datetime | None = None) -> list[TimeEntry]:
        ...


def parse_boundary(value: str) -> datetime:
    """Parse a free-form date/time into an aware UTC datetime.

    Values without an offset are taken as UTC.

    Raises:
        DateValidationError: If the value cannot be parsed.
    """
    try:
        parsed = date_parser.parse(value)
    except (date_parser.ParserError, ValueError, OverflowError) as e:
        raise DateValidationError(f"Invalid date supplied: {value}") from e

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class EntryFetcher:
    """Retrieves provider data for one sync run."""

    def __init__(
        self,
        adapter: ProviderAdapter,
        cache: CacheStore,
        cursor: CursorStore,
        tz: ZoneInfo,
        ttl_seconds: int = DEFAULT_TTL,
    ) -> None:
        """Initialize entry fetcher.

        Args:
            adapter: Provider API client.
            cache: Cache for projects and clients.
            cursor: Store of the last logged timestamp.
            tz: Timezone the provider expects query boundaries in.
            ttl_seconds: Lifetime of refreshed cache documents.
        """
        self.adapter = adapter
        self.cache = cache
        self.cursor = cursor
        self.tz = tz
        self.ttl_seconds = ttl_seconds

    def store_name(self, kind: str) -> str:
        """Cache store name for a record kind, e.g. ``clockify_projects``."""
        return f"{self.adapter.name}_{kind}"

    def _get_records(self, kind: str, model: type[RecordT]) -> dict[str, RecordT]:
        store = self.store_name(kind)
        cached = self.cache.get(store)
        if isinstance(cached, dict):
            try:
                return {key: model.model_validate(item) for key, item in cached.items()}
            except pydantic.ValidationError as e:
                logger.warning(f"Discarding malformed cached {kind}: {e}")

        logger.info(f"Refreshing {kind} data from {self.adapter.name}")
        try:
            if kind == "projects":
                records = self.adapter.list_projects()
            else:
                records = self.adapter.list_clients()
        except pydantic.ValidationError as e:
            raise FetchError(f"There was an error retrieving {kind} data: {e}") from e

        indexed = {record.id: record for record in records}
        self.cache.set(
            store,
            {key: record.model_dump() for key, record in indexed.items()},
            self.ttl_seconds,
        )
        return indexed

    def get_projects(self) -> dict[str, Project]:
        """Get projects indexed by ID.

        Raises:
            FetchError: If the provider request fails.
        """
        return self._get_records("projects", Project)

    def get_clients(self) -> dict[str, Client]:
        """Get clients indexed by ID.

        Raises:
            FetchError: If the provider request fails.
        """
        return self._get_records("clients", Client)

    def resolve_window(self, start: str | None = None, end: str | None = None) -> SyncWindow:
        """Work out the UTC retrieval window.

        Args:
            start: Start expression. Defaults to the last logged timestamp, or
                midnight UTC today.
            end: Optional end expression.

        Raises:
            DateValidationError: If a boundary is invalid.
        """
        if start:
            start_dt = parse_boundary(start)
        else:
            start_dt = self.cursor.read()
            if start_dt is None:
                start_dt = datetime.combine(datetime.now(timezone.utc).date(), time.min, timezone.utc)

        end_dt = parse_boundary(end) if end else None
        if end_dt is not None and end_dt < start_dt:
            raise DateValidationError(f"End date {end} is before start date {start_dt.isoformat()}")

        return SyncWindow(start=start_dt, end=end_dt)

    def get_entries(self, window: SyncWindow) -> list[TimeEntry]:
        """Get normalized time entries for a window.

        Boundaries are converted to the local timezone before the query; the
        returned entries are in UTC.

        Raises:
            FetchError: If the provider request fails.
        """
        start_local = window.start.astimezone(self.tz)
        end_local = window.end.astimezone(self.tz) if window.end else None

        logger.info(f"Using start date {start_local.isoformat()}")
        if end_local:
            logger.info(f"Using end date {end_local.isoformat()}")

        try:
            return self.adapter.fetch_entries(start_local, end_local)
        except pydantic.ValidationError as e:
            raise FetchError(f"There was an error retrieving entries: {e}") from e
