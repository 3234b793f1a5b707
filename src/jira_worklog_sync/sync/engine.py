"""Sync engine for posting time tracker entries as Jira worklogs."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Protocol

from jira_worklog_sync.errors import DateValidationError, FetchError, UnknownClientError
from jira_worklog_sync.models import Client, Project, TimeEntry
from jira_worklog_sync.sync.durations import DEFAULT_ROUND_TO, format_duration, round_up
from jira_worklog_sync.sync.fetcher import EntryFetcher
from jira_worklog_sync.sync.mapping import MappingResolver
from jira_worklog_sync.utils.cursor import CursorStore, format_utc

logger = logging.getLogger(__name__)


class WorklogPoster(Protocol):
    """Anything that can create a worklog, normally a JiraClient."""

    def post_worklog(
        self,
        issue_key: str,
        seconds: int,
        started: datetime,
        comment: str | None = None,
    ) -> bool:
        ...


class SyncOutcome(str, Enum):
    """Terminal state of a run."""

    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class ReportLine:
    """One human-readable line of the run report."""

    level: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class SyncReport:
    """Results from a sync run."""

    outcome: SyncOutcome = SyncOutcome.COMPLETED
    entries_logged: int = 0
    entries_skipped: int = 0
    entries_failed: int = 0
    unmapped_clients: list[str] = field(default_factory=list)
    lines: list[ReportLine] = field(default_factory=list)
    last_logged_start: datetime | None = None
    dry_run_last_logged_start: datetime | None = None
    cursor: datetime | None = None

    @property
    def aborted(self) -> bool:
        return self.outcome is SyncOutcome.ABORTED

    @property
    def has_failures(self) -> bool:
        return self.aborted or self.entries_failed > 0

    def __str__(self) -> str:
        """String representation of results."""
        return (
            f"Logged: {self.entries_logged}, "
            f"Skipped: {self.entries_skipped}, "
            f"Failed: {self.entries_failed}, "
            f"Unmapped: {len(self.unmapped_clients)}"
        )


class SyncEngine:
    """Posts finished, client-assigned time entries to Jira."""

    def __init__(
        self,
        fetcher: EntryFetcher,
        resolver: MappingResolver,
        poster: WorklogPoster,
        cursor: CursorStore,
        round_up: bool = True,
        round_to: int = DEFAULT_ROUND_TO,
        send_descriptions: bool = False,
        echo: Callable[[ReportLine], None] | None = None,
    ) -> None:
        """Initialize sync engine.

        Args:
            fetcher: Provider data access.
            resolver: Client name to issue key mapping for this run.
            poster: Worklog creation, normally the Jira client.
            cursor: Store of the last logged timestamp.
            round_up: Round durations up to ``round_to`` seconds.
            round_to: Rounding quantum in seconds.
            send_descriptions: Forward entry descriptions as worklog comments.
            echo: Called with every report line as soon as it is produced.
        """
        self.fetcher = fetcher
        self.resolver = resolver
        self.poster = poster
        self.cursor = cursor
        self.round_up = round_up
        self.round_to = round_to
        self.send_descriptions = send_descriptions
        self.echo = echo

    def _report(self, report: SyncReport, level: str, message: str) -> None:
        line = ReportLine(level, message)
        report.lines.append(line)
        logger.log(logging.ERROR if level == "error" else logging.INFO, message)
        if self.echo:
            self.echo(line)

    def run(
        self,
        start_date: str | None = None,
        end_date: str | None = None,
        dry_run: bool = False,
    ) -> SyncReport:
        """Synchronize time entries to Jira worklogs.

        Args:
            start_date: Start expression; defaults to the last logged timestamp.
            end_date: Optional end expression.
            dry_run: Report what would be logged without posting or moving the cursor.

        Returns:
            Sync report.
        """
        report = SyncReport()

        try:
            window = self.fetcher.resolve_window(start_date, end_date)
            projects = self.fetcher.get_projects()
            clients = self.fetcher.get_clients()
            entries = self.fetcher.get_entries(window)
            self._check_client_references(entries, projects, clients)
        except (DateValidationError, FetchError, UnknownClientError) as e:
            report.outcome = SyncOutcome.ABORTED
            self._report(report, "error", str(e))
            return report

        logger.info(f"Found {len(entries)} time entries")
        if not entries:
            self._report(report, "info", "No entries found.")

        for entry in entries:
            self._sync_entry(entry, projects, clients, report, dry_run)

        self._finalize(report, dry_run)
        logger.info(f"Sync complete: {report}")
        return report

    @staticmethod
    def _client_id_for(entry: TimeEntry, projects: dict[str, Project]) -> str | None:
        project = projects.get(entry.project_id) if entry.project_id else None
        if project is not None:
            return project.client_id
        return entry.client_id

    def _check_client_references(
        self,
        entries: list[TimeEntry],
        projects: dict[str, Project],
        clients: dict[str, Client],
    ) -> None:
        """Fail before posting anything if an entry points at an unknown client."""
        for entry in entries:
            client_id = self._client_id_for(entry, projects)
            if client_id and client_id not in clients:
                raise UnknownClientError(
                    f"Client {client_id} of entry {entry.id} is not in the client list. "
                    "Try again with --flush-service."
                )

    def _sync_entry(
        self,
        entry: TimeEntry,
        projects: dict[str, Project],
        clients: dict[str, Client],
        report: SyncReport,
        dry_run: bool,
    ) -> None:
        project = projects.get(entry.project_id) if entry.project_id else None
        client_id = self._client_id_for(entry, projects)
        description = f'"{entry.description}"' if entry.description else ""

        if not client_id:
            project_name = project.name if project else ""
            skip_out = " ".join(p for p in (description, project_name, "(no client assigned).") if p)
            self._report(report, "skip", f"Skipping log for {skip_out}")
            report.entries_skipped += 1
            return

        # Never log work that is still being tracked
        if entry.is_running:
            report.entries_skipped += 1
            return

        client = clients[client_id]
        duration = entry.duration_seconds or 0

        if duration == 0:
            self._report(
                report, "warning", f"Invalid duration for {client.name}: {entry.raw_duration}"
            )

        if self.round_up:
            duration = round_up(duration, self.round_to)

        issue_key = self.resolver.resolve(client.name)
        if issue_key is None:
            self._report(
                report, "error", f'Could not find a worklog match for client "{client.name}"'
            )
            report.entries_failed += 1
            if client.name not in report.unmapped_clients:
                report.unmapped_clients.append(client.name)
            return

        friendly = format_duration(duration)
        description_output = f" - {description}" if description else ""

        if dry_run:
            if report.dry_run_last_logged_start is None or entry.start > report.dry_run_last_logged_start:
                report.dry_run_last_logged_start = entry.start
            self._report(
                report,
                "success",
                f"Would have logged {friendly} for {client.name} ({issue_key}){description_output}",
            )
            report.entries_logged += 1
            return

        comment = entry.description if self.send_descriptions else None
        if self.poster.post_worklog(issue_key, duration, entry.start, comment):
            if report.last_logged_start is None or entry.start > report.last_logged_start:
                report.last_logged_start = entry.start
            self._report(
                report,
                "success",
                f"Logged {friendly} for {client.name} ({issue_key}){description_output}",
            )
            report.entries_logged += 1
        else:
            self._report(
                report,
                "error",
                f"Error logging {friendly} for {client.name} ({issue_key}){description_output}",
            )
            report.entries_failed += 1

    def _finalize(self, report: SyncReport, dry_run: bool) -> None:
        if report.last_logged_start is not None:
            current = self.cursor.read()
            candidate = report.last_logged_start.replace(microsecond=0) + timedelta(seconds=1)
            # The cursor never moves backwards, a backfill run keeps it where it was
            if current is not None and candidate <= current:
                report.cursor = current
                self._report(report, "info", f"Keeping last logged date at {format_utc(current)}")
            else:
                report.cursor = self.cursor.write(report.last_logged_start)
                self._report(
                    report, "info", f"Setting last logged date to {format_utc(report.cursor)}"
                )
        elif not dry_run:
            self._report(report, "info", "No new entries with clients found - nothing sent to Jira.")

        if dry_run and report.dry_run_last_logged_start is not None:
            would_be = report.dry_run_last_logged_start.replace(microsecond=0) + timedelta(seconds=1)
            self._report(report, "info", f"Would have set last logged date to {format_utc(would_be)}")

        self._report(report, "info", "All done!")
