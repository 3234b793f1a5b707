"""Jira API integration."""

from jira_worklog_sync.jira.client import JiraClient, format_started
from jira_worklog_sync.jira.models import JiraIssue

__all__ = ["JiraClient", "JiraIssue", "format_started"]
