"""Pydantic models for Clockify API responses."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from jira_worklog_sync.models import Client, Project, TimeEntry

ISO8601_DURATION = re.compile(
    r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$"
)


def parse_iso8601_duration(duration_str: str | None) -> int:
    """Parse an ISO 8601 duration string to whole seconds.

    Args:
        duration_str: Duration in ISO 8601 format (e.g., 'PT4H', 'PT30M', 'PT1H30M')

    Returns:
        Duration in seconds, or 0 if the string is empty or invalid.
    """
    if not duration_str:
        return 0

    match = ISO8601_DURATION.match(duration_str.strip())
    if not match:
        return 0

    days, hours, minutes, seconds = match.groups()
    total = 0

    if days:
        total += int(days) * 86400
    if hours:
        total += int(hours) * 3600
    if minutes:
        total += int(minutes) * 60
    if seconds:
        total += int(float(seconds))

    return total


class ClockifyProject(BaseModel):
    """Clockify project model."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    client_id: str | None = Field(default=None, alias="clientId")
    archived: bool = False

    def to_project(self) -> Project:
        return Project(id=self.id, name=self.name, client_id=self.client_id or None)


class ClockifyClientRecord(BaseModel):
    """Clockify client model."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    archived: bool = False

    def to_client(self) -> Client:
        return Client(id=self.id, name=self.name)


class ClockifyTimeInterval(BaseModel):
    """Start, end and duration of a Clockify time entry."""

    start: datetime
    end: str | None = None
    duration: str | None = None


class ClockifyTimeEntry(BaseModel):
    """Clockify time entry model."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    description: str | None = None
    project_id: str | None = Field(default=None, alias="projectId")
    task_id: str | None = Field(default=None, alias="taskId")
    user_id: str | None = Field(default=None, alias="userId")
    billable: bool = False
    time_interval: ClockifyTimeInterval = Field(alias="timeInterval")

    @property
    def start_time(self) -> datetime:
        """Get start time of entry."""
        return self.time_interval.start

    @property
    def duration_seconds(self) -> int | None:
        """Get duration in seconds, or None while the timer is running."""
        if self.time_interval.duration is None:
            return None
        return parse_iso8601_duration(self.time_interval.duration)

    def to_time_entry(self) -> TimeEntry:
        return TimeEntry(
            id=self.id,
            project_id=self.project_id,
            description=self.description or None,
            start=self.start_time,
            duration_seconds=self.duration_seconds,
            raw_duration=self.time_interval.duration,
        )
