"""Command-line interface for jira-worklog-sync."""

import logging
import sys
from contextlib import ExitStack
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from jira_worklog_sync import __version__
from jira_worklog_sync.clockify import ClockifyClient
from jira_worklog_sync.config import AppConfig, Config, flush_targets
from jira_worklog_sync.errors import ConfigError, DateValidationError
from jira_worklog_sync.jira import JiraClient
from jira_worklog_sync.sync import EntryFetcher, ReportLine, SyncEngine, load_client_mapping
from jira_worklog_sync.sync.fetcher import ProviderAdapter
from jira_worklog_sync.sync.mapping import MAPPING_STORE
from jira_worklog_sync.toggl import TogglClient
from jira_worklog_sync.utils import (
    CacheStore,
    CursorStore,
    get_logger,
    resolve_timezone,
    setup_logging,
)
from jira_worklog_sync.utils.cursor import format_utc

app = typer.Typer(help="Log Clockify or Toggl time entries as Jira worklogs")
console = Console()
logger = get_logger(__name__)

LINE_STYLES = {
    "success": "[green]✓[/green] {}",
    "skip": "[yellow]![/yellow] {}",
    "warning": "[yellow]✗ {}[/yellow]",
    "error": "[red]✗ {}[/red]",
    "info": "{}",
}


def _print_line(line: ReportLine) -> None:
    console.print(LINE_STYLES.get(line.level, "{}").format(escape(line.message)), highlight=False)


def _load_config(config_dir: Optional[Path]) -> Config:
    try:
        return Config(config_dir)
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)


def _load_nicknames(config: Config) -> dict[str, str]:
    try:
        return config.get_nicknames()
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)


def build_adapter(settings: AppConfig) -> ClockifyClient | TogglClient:
    """Create the time tracker client selected in the config."""
    if settings.service == "toggl":
        return TogglClient(
            api_token=settings.toggl.token,
            workspace_id=settings.toggl.workspace,
            timeout=settings.http_timeout,
        )
    return ClockifyClient(
        api_key=settings.clockify.token,
        workspace_id=settings.clockify.workspace,
        user_id=settings.clockify.user_id,
        timeout=settings.http_timeout,
    )


def build_jira(settings: AppConfig) -> JiraClient:
    """Create the Jira client from the config."""
    return JiraClient(
        endpoint=settings.jira.endpoint,
        email=settings.jira.email,
        api_token=settings.jira.token,
        timeout=settings.http_timeout,
    )


@app.command(
    "log-time",
    context_settings={"ignore_unknown_options": True, "allow_extra_args": True},
)
def log_time(
    start_date: Optional[str] = typer.Option(
        None,
        "--start-date",
        "--start_date",
        help="Start of the sync window. Defaults to the last logged date or midnight UTC today.",
    ),
    end_date: Optional[str] = typer.Option(
        None,
        "--end-date",
        "--end_date",
        help="End of the sync window.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "--dry_run",
        help="Show what would be logged without creating worklogs.",
    ),
    flush_service: bool = typer.Option(
        False,
        "--flush-service",
        "--flush_service",
        help="Refresh cached projects and clients.",
    ),
    flush_jira: bool = typer.Option(
        False,
        "--flush-jira",
        "--flush_jira",
        help="Refresh the cached client to issue mapping.",
    ),
    flush_all: bool = typer.Option(
        False,
        "--flush-all",
        "--flush_all",
        help="Refresh all caches.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging.",
    ),
    config_dir: Optional[Path] = typer.Option(
        None,
        "--config-dir",
        help="Configuration directory. Defaults to ~/.jira-worklog-sync/",
    ),
) -> None:
    """Log time entries to Jira worklogs."""
    setup_logging(
        log_level=logging.DEBUG if verbose else logging.INFO,
        config_dir=config_dir,
    )
    logger.info(f"jira-worklog-sync v{__version__}")

    config = _load_config(config_dir)
    settings = config.settings
    storage = config.storage
    nicknames = _load_nicknames(config)

    cache = CacheStore(storage.cache_dir)
    cursor = CursorStore(storage)
    tz = resolve_timezone(settings.timezone)

    refresh_service, refresh_jira = flush_targets(settings.flush, flush_service, flush_jira, flush_all)

    with ExitStack() as stack:
        adapter: ProviderAdapter = stack.enter_context(build_adapter(settings))
        jira = stack.enter_context(build_jira(settings))

        fetcher = EntryFetcher(adapter, cache, cursor, tz, ttl_seconds=settings.cache_ttl)
        if refresh_service:
            cache.invalidate(fetcher.store_name("projects"))
            cache.invalidate(fetcher.store_name("clients"))

        # Reject bad dates before anything is requested from Jira
        try:
            fetcher.resolve_window(start_date, end_date)
        except DateValidationError as e:
            console.print(f"[red]✗ {escape(str(e))}[/red]")
            raise typer.Exit(code=1)

        resolver = load_client_mapping(
            cache,
            jira,
            nicknames,
            project_key=settings.jira.project_key,
            issue_type=settings.jira.issue_type,
            refresh=refresh_jira,
            ttl_seconds=settings.cache_ttl,
        )

        engine = SyncEngine(
            fetcher=fetcher,
            resolver=resolver,
            poster=jira,
            cursor=cursor,
            round_up=settings.round_up,
            round_to=settings.round_to,
            send_descriptions=settings.send_descriptions,
            echo=_print_line,
        )

        mode_str = "[bold cyan]DRY RUN[/bold cyan]" if dry_run else "[bold green]SYNC[/bold green]"
        console.print(f"Starting {mode_str} mode ({settings.service} → Jira)...")

        report = engine.run(start_date=start_date, end_date=end_date, dry_run=dry_run)

    table = Table(title="Sync Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="magenta")
    table.add_row("Logged" if not dry_run else "Would log", str(report.entries_logged))
    table.add_row("Skipped", str(report.entries_skipped))
    table.add_row("Failed", str(report.entries_failed))
    table.add_row("Unmapped clients", str(len(report.unmapped_clients)))
    console.print(table)

    if report.unmapped_clients:
        console.print("\n[yellow]Unmapped clients:[/yellow]")
        for name in report.unmapped_clients:
            console.print(f"  - {escape(name)}")
        console.print(f"Add them to {settings.nicknames_file} and run with --flush-jira.")

    raise typer.Exit(code=1 if report.has_failures else 0)


@app.command()
def mapping(
    refresh: bool = typer.Option(
        False,
        "--refresh",
        help="Rebuild the mapping from Jira and the nickname file.",
    ),
    config_dir: Optional[Path] = typer.Option(
        None,
        "--config-dir",
        help="Configuration directory. Defaults to ~/.jira-worklog-sync/",
    ),
) -> None:
    """Show the client to Jira issue mapping."""
    setup_logging(config_dir=config_dir)

    config = _load_config(config_dir)
    settings = config.settings
    cache = CacheStore(config.storage.cache_dir)

    with build_jira(settings) as jira:
        resolver = load_client_mapping(
            cache,
            jira,
            _load_nicknames(config),
            project_key=settings.jira.project_key,
            issue_type=settings.jira.issue_type,
            refresh=refresh,
            ttl_seconds=settings.cache_ttl,
        )

    if not len(resolver):
        console.print("[yellow]No client mappings found.[/yellow]")
        return

    table = Table(title="Client Mapping")
    table.add_column("Client", style="cyan")
    table.add_column("Jira Issue", style="magenta")
    for name, key in resolver.items():
        table.add_row(escape(name), key)
    console.print(table)


@app.command()
def status(
    config_dir: Optional[Path] = typer.Option(
        None,
        "--config-dir",
        help="Configuration directory. Defaults to ~/.jira-worklog-sync/",
    ),
) -> None:
    """Show the last logged date and cache state."""
    setup_logging(config_dir=config_dir)

    config = _load_config(config_dir)
    settings = config.settings
    cache = CacheStore(config.storage.cache_dir)
    last_logged = CursorStore(config.storage).read()

    console.print("[bold cyan]Current Status[/bold cyan]")
    console.print(f"  Service:      {settings.service}")
    console.print(f"  Timezone:     {resolve_timezone(settings.timezone).key}")
    console.print(f"  Last logged:  {format_utc(last_logged) if last_logged else 'never'}")

    table = Table(title="Caches")
    table.add_column("Store", style="cyan")
    table.add_column("Expires", style="magenta")
    now = datetime.now(timezone.utc).timestamp()
    for store in (f"{settings.service}_projects", f"{settings.service}_clients", MAPPING_STORE):
        expires = cache.expires_at(store)
        if expires is None:
            state = "[yellow]not cached[/yellow]"
        else:
            when = format_utc(datetime.fromtimestamp(expires, timezone.utc))
            state = when if expires >= now else f"[red]{when} (expired)[/red]"
        table.add_row(store, state)
    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"jira-worklog-sync v{__version__}")


def main() -> None:
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        console.print(f"[red]Unexpected error: {escape(str(e))}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
