"""Pydantic models for Toggl Track API responses."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from jira_worklog_sync.models import Client, Project, TimeEntry


def _optional_id(value: int | str | None) -> str | None:
    if value in (None, "", 0):
        return None
    return str(value)


class TogglProject(BaseModel):
    """Toggl project model. Accepts both v9 and legacy field names."""

    model_config = ConfigDict(populate_by_name=True)

    id: int | str
    name: str
    client_id: int | str | None = Field(
        default=None, validation_alias=AliasChoices("client_id", "cid")
    )
    active: bool = True

    def to_project(self) -> Project:
        return Project(id=str(self.id), name=self.name, client_id=_optional_id(self.client_id))


class TogglClientRecord(BaseModel):
    """Toggl client model."""

    id: int | str
    name: str

    def to_client(self) -> Client:
        return Client(id=str(self.id), name=self.name)


class TogglTimeEntry(BaseModel):
    """Toggl time entry model.

    ``duration`` is negative while the timer is running.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int | str
    description: str | None = None
    project_id: int | str | None = Field(
        default=None, validation_alias=AliasChoices("project_id", "pid")
    )
    start: datetime
    stop: datetime | None = None
    duration: int

    def to_time_entry(self) -> TimeEntry:
        return TimeEntry(
            id=str(self.id),
            project_id=_optional_id(self.project_id),
            description=self.description or None,
            start=self.start,
            duration_seconds=None if self.duration < 0 else self.duration,
            raw_duration=str(self.duration),
        )
