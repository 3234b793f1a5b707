"""Clockify API integration."""

from jira_worklog_sync.clockify.client import ClockifyClient
from jira_worklog_sync.clockify.models import (
    ClockifyClientRecord,
    ClockifyProject,
    ClockifyTimeEntry,
    parse_iso8601_duration,
)

__all__ = [
    "ClockifyClient",
    "ClockifyClientRecord",
    "ClockifyProject",
    "ClockifyTimeEntry",
    "parse_iso8601_duration",
]
