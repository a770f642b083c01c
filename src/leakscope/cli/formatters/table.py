"""Table formatter for CLI output."""

import json

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from leakscope.models import (
    DumpOutcome,
    HistoryEntry,
    ProbeOutcome,
    ResourceReadOutcome,
    ScanReport,
    Severity,
)
from leakscope.models.base import ProbeState, ProbeStatus
from leakscope.probing.prober import dashboard_url

SEVERITY_STYLES = {
    Severity.CRITICAL: "[red]CRITICAL[/red]",
    Severity.MEDIUM: "[yellow]MEDIUM[/yellow]",
    Severity.INFO: "[cyan]INFO[/cyan]",
}

STATUS_STYLES = {
    ProbeStatus.OK: "[green]ok[/green]",
    ProbeStatus.REJECTED: "[red]rejected[/red]",
    ProbeStatus.TIMED_OUT: "[yellow]timed out[/yellow]",
    ProbeStatus.NETWORK_ERROR: "[yellow]network error[/yellow]",
}


def _shorten(value: str | None, width: int = 48) -> str:
    if not value:
        return "N/A"
    return value if len(value) <= width else value[: width - 3] + "..."


def format_scan_report(console: Console, report: ScanReport) -> None:
    """Format and display a scan report as tables."""
    result = report.result
    status = "[red]Backend detected[/red]" if result.detected else "[green]Nothing detected[/green]"
    console.print()
    console.print(
        Panel(
            f"[bold green]Scan Complete[/bold green]\n"
            f"URL: [cyan]{report.url}[/cyan]\n"
            f"Status: {status}\n"
            f"Provider: {result.primary_provider.value}",
            title="Results",
        )
    )

    if result.supabase.populated:
        _format_supabase(console, report)
    if result.firebase.populated:
        _format_firebase(console, report)
    if result.custom_endpoints:
        table = Table(title="Custom API Endpoints", show_header=True)
        table.add_column("URL", style="cyan")
        for url in result.custom_endpoints:
            table.add_row(url)
        console.print(table)
    if result.tokens:
        _format_tokens(console, report)

    _format_findings(console, report)

    if report.errors:
        console.print("\n[bold red]Errors:[/bold red]")
        for error in report.errors:
            console.print(f"  - {error}")


def _format_supabase(console: Console, report: ScanReport) -> None:
    record = report.result.supabase
    table = Table(title="Supabase", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("URL", record.base_url or "N/A")
    table.add_row("Project", record.project_ref or "N/A")
    table.add_row("Anon key", _shorten(record.anon_key))
    table.add_row("Service key", f"[red]{_shorten(record.service_key)}[/red]" if record.service_key else "N/A")
    if record.project_ref:
        table.add_row("Dashboard", dashboard_url(record.project_ref))
    console.print(table)


def _format_firebase(console: Console, report: ScanReport) -> None:
    record = report.result.firebase
    table = Table(title="Firebase", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("API key", record.api_key or "N/A")
    table.add_row("Project", record.project_id or "N/A")
    table.add_row("Auth domain", record.auth_domain or "N/A")
    table.add_row("Database URL", record.database_url or "N/A")
    console.print(table)


def _format_tokens(console: Console, report: ScanReport) -> None:
    table = Table(title=f"Tokens ({len(report.result.tokens)})", show_header=True)
    table.add_column("Classification", style="cyan")
    table.add_column("Role")
    table.add_column("Origin")
    table.add_column("Token")
    for token in report.result.tokens:
        table.add_row(
            token.classification.value,
            token.role or "-",
            _shorten(token.origin, 40),
            _shorten(token.raw, 32),
        )
    console.print(table)


def _format_findings(console: Console, report: ScanReport) -> None:
    if not report.findings:
        console.print("[green]No findings[/green]")
        return

    table = Table(title=f"Findings ({report.total_findings})", show_header=True)
    table.add_column("ID", style="cyan")
    table.add_column("Severity")
    table.add_column("Title")
    table.add_column("Description")
    for finding in report.findings:
        table.add_row(
            finding.id,
            SEVERITY_STYLES.get(finding.severity, finding.severity.value),
            finding.title,
            finding.description,
        )
    console.print(table)


def _format_attempts(console: Console, outcome: ProbeOutcome | ResourceReadOutcome | DumpOutcome) -> None:
    if not outcome.attempts:
        return
    table = Table(title="Attempts", show_header=True)
    table.add_column("#", style="dim")
    table.add_column("Credential")
    table.add_column("Status")
    table.add_column("HTTP")
    for i, attempt in enumerate(outcome.attempts, 1):
        table.add_row(
            str(i),
            _shorten(attempt.credential, 24),
            STATUS_STYLES.get(attempt.status, attempt.status.value),
            str(attempt.http_status or "-"),
        )
    console.print(table)


def format_probe_outcome(console: Console, outcome: ProbeOutcome) -> None:
    _format_attempts(console, outcome)
    if not outcome.succeeded:
        console.print("[red]No valid credential found[/red]")
        return
    console.print(f"[green]Accepted credential:[/green] {_shorten(outcome.credential)}")
    if outcome.resources:
        console.print(f"[bold]Resources ({len(outcome.resources)}):[/bold] " + ", ".join(outcome.resources))
    else:
        console.print("[yellow]No resources listed (protected)[/yellow]")


def format_read_outcome(console: Console, outcome: ResourceReadOutcome) -> None:
    _format_attempts(console, outcome)
    if not outcome.succeeded:
        console.print("[red]No valid credential found[/red]")
        return
    console.print(f"[bold]=== {outcome.resource} ({outcome.row_count}) ===[/bold]")
    console.print_json(json.dumps(outcome.rows, default=str))


def format_dump_outcome(console: Console, outcome: DumpOutcome) -> None:
    _format_attempts(console, outcome)
    if outcome.state != ProbeState.SUCCESS:
        console.print("[red]No valid credential found[/red]")
        return
    console.print(f"[bold]=== {outcome.table_count} tables ===[/bold]")
    for name, rows in outcome.tables.items():
        console.print(f"[cyan]{name}[/cyan]: {len(rows)} row(s)")


def format_history(console: Console, entries: list[HistoryEntry]) -> None:
    if not entries:
        console.print("[dim]No scan history[/dim]")
        return
    table = Table(title="Scan History", show_header=True)
    table.add_column("Time", style="dim")
    table.add_column("URL", style="cyan")
    table.add_column("Detected")
    table.add_column("Findings")
    table.add_column("Critical")
    for entry in entries:
        table.add_row(
            entry.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            entry.url,
            "[red]yes[/red]" if entry.detected else "no",
            str(entry.finding_count),
            f"[red]{entry.critical_count}[/red]" if entry.critical_count else "0",
        )
    console.print(table)
