"""Synchronize time tracker entries to Jira worklogs."""

__version__ = "0.1.0"
