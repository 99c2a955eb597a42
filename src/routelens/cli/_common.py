"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..analysis.engine import AnalysisOutcome
from ..config import AnalysisConfig, load_config
from ..logging_config import setup_logging
from ..history.models import MetricChange
from ..metrics.result import Severity
from ..metrics.tree import Scalar, flatten

console = Console()

_SEVERITY_STYLE = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "blue",
}

_TREND_STYLE = {"better": "green", "worse": "red", "neutral": "dim"}

MAX_ROUTE_ROWS = 50


def resolve_config(
    config: Optional[Path] = None,
    workers: Optional[int] = None,
    no_history: bool = False,
    no_report: bool = False,
    use_cache: bool = False,
    verbose: bool = False,
    quiet: bool = False,
) -> AnalysisConfig:
    """Build config from CLI options."""
    overrides = {}
    if workers is not None:
        overrides["workers"] = workers
    if no_history:
        overrides["enable_history"] = False
    if no_report:
        overrides["write_reports"] = False
    if use_cache:
        overrides["cache_enabled"] = True
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, **overrides)


def configure_logging(settings: AnalysisConfig, json_output: bool = False) -> None:
    """Log at the configured verbosity; JSON output keeps stderr to errors only."""
    setup_logging(
        verbosity="quiet" if json_output else settings.verbosity,
        log_file=settings.log_file or None,
    )


def render_outcome(outcome: AnalysisOutcome, show_routes: bool = True) -> None:
    """Print an analysis outcome as rich tables."""
    result = outcome.result
    source = "[dim](from history)[/dim]" if outcome.from_history else ""
    console.print()
    console.print(
        f"[bold cyan]{outcome.analysis_type.upper()}[/bold cyan] "
        f"[dim]{outcome.snapshot.file_count} files, "
        f"fingerprint {outcome.snapshot.fingerprint[:12]}[/dim] {source}"
    )

    if show_routes and result.routes:
        table = Table(title="Routes", show_lines=False)
        table.add_column("Path", style="cyan")
        table.add_column("Kind")
        table.add_column("Rendering")
        table.add_column("Complexity", justify="right")
        table.add_column("File", style="dim")
        for record in result.routes[:MAX_ROUTE_ROWS]:
            table.add_row(
                escape(str(record.path)),
                record.kind.value,
                "server" if record.is_server_rendered else "client",
                f"{record.complexity:.1f}",
                escape(record.file),
            )
        console.print(table)
        if len(result.routes) > MAX_ROUTE_ROWS:
            console.print(f"[dim]... and {len(result.routes) - MAX_ROUTE_ROWS} more[/dim]")

    metrics = Table(title="Metrics")
    metrics.add_column("Metric")
    metrics.add_column("Value", justify="right")
    for path, leaf in flatten(result.metrics):
        if isinstance(leaf, Scalar):
            value = f"{leaf.value:g}" if isinstance(leaf.value, float) else str(leaf.value)
        else:
            value = ", ".join(sorted(leaf.values)) or "-"
        metrics.add_row(escape(path), escape(value))
    console.print(metrics)

    if result.findings:
        console.print()
        console.print("[bold]Findings[/bold]")
        for finding in result.findings:
            style = _SEVERITY_STYLE.get(finding.severity, "white")
            where = f" [dim]{escape(finding.file)}[/dim]" if finding.file else ""
            console.print(
                f"  [{style}]{finding.severity.value.upper():7}[/{style}] "
                f"{escape(finding.message)}{where}"
            )

    if result.recommendations:
        console.print()
        console.print("[bold]Recommendations[/bold]")
        for rec in result.recommendations:
            console.print(f"  [green]>[/green] {escape(rec)}")

    changes = outcome.changes
    if changes is not None and not changes.is_empty:
        console.print()
        console.print(f"[bold]Changes since {escape(changes.previous_timestamp or 'last run')}[/bold]")
        for path, change in changes.metrics.items():
            if isinstance(change, MetricChange):
                style = _TREND_STYLE.get(change.trend, "white")
                console.print(
                    f"  [{style}]{escape(path)}: {change.previous:g} -> {change.current:g} "
                    f"({change.delta:+g})[/{style}]"
                )
            else:
                added = ", ".join(change.added)
                removed = ", ".join(change.removed)
                console.print(f"  {escape(path)}: +[{escape(added)}] -[{escape(removed)}]")
        if changes.new_findings:
            console.print(f"  [yellow]{len(changes.new_findings)} new findings[/yellow]")
        if changes.resolved_findings:
            console.print(f"  [green]{len(changes.resolved_findings)} resolved findings[/green]")

    if outcome.report_path is not None:
        console.print()
        console.print(f"[dim]Report written to {escape(str(outcome.report_path))}[/dim]")
