"""Utility modules for jira-worklog-sync."""

from jira_worklog_sync.utils.cache import CacheStore
from jira_worklog_sync.utils.cursor import CursorStore
from jira_worklog_sync.utils.logging import get_logger, setup_logging
from jira_worklog_sync.utils.storage import StorageManager
from jira_worklog_sync.utils.timezone import resolve_timezone

__all__ = [
    "CacheStore",
    "CursorStore",
    "get_logger",
    "resolve_timezone",
    "setup_logging",
    "StorageManager",
]
