"""Toggl Track API integration."""

from jira_worklog_sync.toggl.client import TogglClient
from jira_worklog_sync.toggl.models import TogglClientRecord, TogglProject, TogglTimeEntry

__all__ = [
    "TogglClient",
    "TogglClientRecord",
    "TogglProject",
    "TogglTimeEntry",
]
