"""Synchronization engine for Jira worklogs."""

from jira_worklog_sync.sync.engine import ReportLine, SyncEngine, SyncOutcome, SyncReport
from jira_worklog_sync.sync.fetcher import EntryFetcher, ProviderAdapter
from jira_worklog_sync.sync.mapping import MappingResolver, load_client_mapping

__all__ = [
    "EntryFetcher",
    "MappingResolver",
    "ProviderAdapter",
    "ReportLine",
    "SyncEngine",
    "SyncOutcome",
    "SyncReport",
    "load_client_mapping",
]
