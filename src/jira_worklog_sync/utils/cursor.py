"""Persistence of the last logged timestamp between runs."""

import json
import logging
from datetime import datetime, timedelta, timezone

from jira_worklog_sync.utils.storage import StorageManager

logger = logging.getLogger(__name__)

CURSOR_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_utc(value: datetime) -> str:
    """Format a datetime as a UTC ISO-8601 string with a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(CURSOR_FORMAT)


def parse_utc(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class CursorStore:
    """Reads and writes ``last_logged`` in the state file."""

    def __init__(self, storage: StorageManager) -> None:
        self.storage = storage

    def read(self) -> datetime | None:
        """Get the stored resume point.

        Returns:
            The timestamp to resume from, or None if nothing has been logged yet.
        """
        try:
            state = self.storage.load_state()
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable state file: {e}")
            return None

        last_logged = state.get("last_logged") or ""
        if not last_logged:
            return None

        try:
            return parse_utc(last_logged)
        except ValueError:
            logger.warning(f"Ignoring invalid last_logged value: {last_logged!r}")
            return None

    def write(self, timestamp: datetime) -> datetime:
        """Persist a new resume point one second after ``timestamp``.

        The extra second keeps the entry that started at ``timestamp`` out of
        the next run's query.

        Args:
            timestamp: Start time of the latest logged entry.

        Returns:
            The persisted timestamp.
        """
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        cursor = timestamp.astimezone(timezone.utc).replace(microsecond=0) + timedelta(seconds=1)

        try:
            state = self.storage.load_state()
        except json.JSONDecodeError:
            state = {}
        state["last_logged"] = format_utc(cursor)
        self.storage.save_state(state)

        logger.info(f"Set last logged date to {state['last_logged']}")
        return cursor
