"""Main CLI application using Typer."""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from leakscope.version import __version__
from leakscope.core.config import get_settings
from leakscope.core.exceptions import ProbeExhausted, SourceUnavailable
from leakscope.core.logging import setup_logging
from leakscope.models import CandidateCredential, PageSnapshot

app = typer.Typer(
    name="leakscope",
    help="leakscope - find backend credentials exposed by web applications",
    no_args_is_help=True,
)

console = Console()

KeyOption = Annotated[
    Optional[list[str]],
    typer.Option("--key", "-k", help="Credential to try (repeatable, tried in order)"),
]
SnapshotOption = Annotated[
    Optional[Path],
    typer.Option("--snapshot", "-s", help="Page snapshot JSON to harvest extra keys from"),
]
FormatOption = Annotated[
    str,
    typer.Option("--format", help="Output format: table, json"),
]


def version_callback(value: bool) -> None:
    if value:
        console.print(f"leakscope version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """leakscope - exposed backend credential scanner."""
    setup_logging()


def _load_snapshot(path: Path) -> PageSnapshot:
    try:
        return PageSnapshot.model_validate_json(path.read_text())
    except (OSError, ValidationError) as e:
        console.print(f"[red]Invalid snapshot {path}: {e}[/red]")
        raise typer.Exit(1) from None


def _candidate_queue(keys: list[str] | None, snapshot_path: Path | None) -> list[CandidateCredential]:
    from leakscope.probing.candidates import (
        aggressive_key_scan,
        build_candidate_queue,
        fallback_pattern_keys,
        snapshot_text,
    )

    manual = [CandidateCredential(key=k, source="manual") for k in keys or []]
    aggressive: list[CandidateCredential] = []
    fallbacks: list[CandidateCredential] = []
    if snapshot_path is not None:
        snapshot = _load_snapshot(snapshot_path)
        aggressive, _ = aggressive_key_scan(snapshot)
        fallbacks = fallback_pattern_keys(snapshot_text(snapshot))

    queue = build_candidate_queue(manual, aggressive, fallbacks)
    if not queue:
        console.print("[red]No credentials to try. Pass --key or --snapshot.[/red]")
        raise typer.Exit(1)
    return queue


def _exit_if_exhausted(outcome) -> None:
    from leakscope.probing.prober import CredentialProber

    try:
        CredentialProber.require_success(outcome)
    except ProbeExhausted as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1) from None


@app.command()
def scan(
    url: Annotated[Optional[str], typer.Argument(help="Page URL to fetch and scan")] = None,
    snapshot: Annotated[
        Optional[Path],
        typer.Option("--snapshot", "-s", help="Scan a saved page snapshot (JSON) instead of fetching"),
    ] = None,
    format_type: FormatOption = "table",
    bundles: Annotated[
        bool,
        typer.Option("--bundles/--no-bundles", help="Fetch script bundles and linked pages"),
    ] = True,
    history: Annotated[
        bool,
        typer.Option("--history/--no-history", help="Record a summary in scan history"),
    ] = True,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the JSON report to a file"),
    ] = None,
) -> None:
    """
    Scan a web page for exposed backend credentials.

    Examples:
        leakscope scan https://app.example.com
        leakscope scan --snapshot page.json --no-bundles
    """
    from leakscope.database.connection import close_db
    from leakscope.infrastructure.http import HTTPClient
    from leakscope.orchestration.coordinator import ScanCoordinator
    from leakscope.scanners.snapshot import fetch_snapshot

    if url is None and snapshot is None:
        console.print("[red]Pass a URL or --snapshot[/red]")
        raise typer.Exit(1)

    page = _load_snapshot(snapshot) if snapshot else None
    console.print(
        Panel(
            f"[bold blue]leakscope Scan[/bold blue]\n"
            f"Target: [green]{page.url if page else url}[/green]",
            title="Starting Scan",
        )
    )

    async def run():
        try:
            async with HTTPClient() as client:
                target = page or await fetch_snapshot(url, client)
                coordinator = ScanCoordinator(client=client)
                return await coordinator.run_scan(
                    "cli",
                    target,
                    include_bundles=bundles,
                    record_history=history,
                )
        finally:
            await close_db()

    with console.status("[bold green]Scanning...[/bold green]"):
        try:
            report = asyncio.run(run())
        except SourceUnavailable as e:
            console.print(f"[red]Scan failed: {e.message}[/red]")
            raise typer.Exit(1) from None

    if output:
        from leakscope.cli.formatters.json_fmt import export_json

        export_json(report, output)
        console.print(f"[green]Report saved to {output}[/green]")

    if format_type == "json":
        from leakscope.cli.formatters.json_fmt import format_json

        format_json(console, report)
    else:
        from leakscope.cli.formatters.table import format_scan_report

        format_scan_report(console, report)


@app.command()
def probe(
    base_url: Annotated[str, typer.Argument(help="Backend project URL")],
    key: KeyOption = None,
    snapshot: SnapshotOption = None,
    format_type: FormatOption = "table",
) -> None:
    """Find a credential the backend accepts and list its resources."""
    from leakscope.cli.formatters import format_json, format_probe_outcome
    from leakscope.infrastructure.http import HTTPClient
    from leakscope.probing.prober import CredentialProber

    queue = _candidate_queue(key, snapshot)

    async def run():
        async with HTTPClient() as client:
            return await CredentialProber(client).probe(base_url, queue)

    with console.status(f"[bold green]Probing {len(queue)} credential(s)...[/bold green]"):
        outcome = asyncio.run(run())

    if format_type == "json":
        format_json(console, outcome)
    else:
        format_probe_outcome(console, outcome)
    _exit_if_exhausted(outcome)


@app.command()
def read(
    base_url: Annotated[str, typer.Argument(help="Backend project URL")],
    resource: Annotated[str, typer.Argument(help="Resource (table) name")],
    key: KeyOption = None,
    snapshot: SnapshotOption = None,
    format_type: FormatOption = "table",
) -> None:
    """Read rows of one resource with the first accepted credential."""
    from leakscope.cli.formatters import format_json, format_read_outcome
    from leakscope.infrastructure.http import HTTPClient
    from leakscope.probing.prober import CredentialProber

    queue = _candidate_queue(key, snapshot)

    async def run():
        async with HTTPClient() as client:
            return await CredentialProber(client).read_resource(base_url, resource, queue)

    with console.status(f"[bold green]Reading {resource}...[/bold green]"):
        outcome = asyncio.run(run())

    if format_type == "json":
        format_json(console, outcome)
    else:
        format_read_outcome(console, outcome)
    _exit_if_exhausted(outcome)


@app.command()
def dump(
    base_url: Annotated[str, typer.Argument(help="Backend project URL")],
    key: KeyOption = None,
    snapshot: SnapshotOption = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write dumped rows to a JSON file"),
    ] = None,
) -> None:
    """Read every non-empty resource with the first accepted credential."""
    from leakscope.cli.formatters import format_dump_outcome
    from leakscope.cli.formatters.json_fmt import export_json
    from leakscope.infrastructure.http import HTTPClient
    from leakscope.probing.prober import CredentialProber

    queue = _candidate_queue(key, snapshot)

    async def run():
        async with HTTPClient() as client:
            return await CredentialProber(client).dump_resources(base_url, queue)

    with console.status("[bold green]Dumping...[/bold green]"):
        outcome = asyncio.run(run())

    format_dump_outcome(console, outcome)
    if output and outcome.succeeded:
        export_json(outcome, output)
        console.print(f"[green]Dump saved to {output}[/green]")
    _exit_if_exhausted(outcome)


@app.command()
def history(
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", help="Number of entries to show"),
    ] = 20,
    clear: Annotated[
        bool,
        typer.Option("--clear", help="Delete all history entries"),
    ] = False,
) -> None:
    """Show recent scans (counts only, no credentials)."""
    from leakscope.cli.formatters import format_history
    from leakscope.database import HistoryRepository, close_db, get_session, init_db

    async def run():
        await init_db()
        try:
            async with get_session() as session:
                repo = HistoryRepository(session)
                if clear:
                    return await repo.clear()
                return await repo.list_recent(limit)
        finally:
            await close_db()

    result = asyncio.run(run())
    if clear:
        console.print(f"[green]Deleted {result} history entries[/green]")
    else:
        format_history(console, result)


@app.command()
def config() -> None:
    """Show current configuration settings."""
    settings = get_settings()

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Log Level", settings.log_level)
    table.add_row("Log Format", settings.log_format)
    table.add_row("Database URL", settings.database_url)
    table.add_row("History Limit", str(settings.history_limit))
    table.add_row("HTTP Timeout", f"{settings.http_timeout}s")
    table.add_row("User Agent", settings.user_agent)
    table.add_row("Max Bundle Fetches", str(settings.max_bundle_fetches))
    table.add_row("Max Linked Pages", str(settings.max_linked_pages))
    table.add_row("Inspect Max Depth", str(settings.inspect_max_depth))
    table.add_row("Probe Timeout", f"{settings.probe_timeout_seconds}s")
    table.add_row("Dump Table Timeout", f"{settings.dump_table_timeout_seconds}s")
    table.add_row("Probe Min Interval", f"{settings.probe_min_interval_seconds}s")
    table.add_row("Resource Read Limit", str(settings.resource_read_limit))

    console.print(table)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
