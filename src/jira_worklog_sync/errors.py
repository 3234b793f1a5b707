"""Exceptions raised by jira-worklog-sync."""


class WorklogSyncError(Exception):
    """Base class for sync errors."""


class ConfigError(WorklogSyncError):
    """Configuration file is missing or invalid."""


class FetchError(WorklogSyncError):
    """A provider or Jira request failed or returned an error payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DateValidationError(WorklogSyncError):
    """A sync window boundary could not be parsed."""


class UnknownClientError(WorklogSyncError):
    """A project references a client that is not in the fetched client set."""
