"""Provider-independent records handed to the sync engine."""

from dataclasses import dataclass
from datetime import datetime, timezone

from pydantic import BaseModel, field_validator


class Project(BaseModel):
    """Time tracker project."""

    id: str
    name: str
    client_id: str | None = None


class Client(BaseModel):
    """Time tracker client."""

    id: str
    name: str


class TimeEntry(BaseModel):
    """Normalized time entry.

    ``duration_seconds`` is None while the timer is still running.
    """

    id: str
    project_id: str | None = None
    client_id: str | None = None
    description: str | None = None
    start: datetime
    duration_seconds: int | None = None
    raw_duration: str | None = None

    @field_validator("start")
    @classmethod
    def _start_in_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def is_running(self) -> bool:
        """Whether the entry's timer has not been stopped yet."""
        return self.duration_seconds is None


@dataclass(frozen=True)
class SyncWindow:
    """Absolute UTC boundaries for entry retrieval."""

    start: datetime
    end: datetime | None = None
