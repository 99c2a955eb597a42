"""Analysis commands: one analysis type, or all of them."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..analysis.engine import AnalysisEngine
from ..config import ANALYSIS_TYPES
from ..exceptions import RouteLensError
from ..report.json_report import build_report
from . import app
from ._common import configure_logging, console, render_outcome, resolve_config


def _check_type(value: str) -> str:
    if value not in ANALYSIS_TYPES:
        raise typer.BadParameter(f"expected one of: {', '.join(ANALYSIS_TYPES)}")
    return value


@app.command()
def analyze(
    analysis_type: str = typer.Argument(
        ...,
        help="Analysis to run: routes, data, performance or seo",
        callback=_check_type,
        metavar="TYPE",
    ),
    path: Path = typer.Argument(
        Path("."),
        help="Project root (directory holding package.json)",
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Ignore stored history results"),
    json_output: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="TOML config file"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Walk routing roots in parallel"),
    no_history: bool = typer.Option(False, "--no-history", help="Neither read nor write history"),
    no_report: bool = typer.Option(False, "--no-report", help="Do not write a JSON report file"),
    use_cache: bool = typer.Option(False, "--cache", help="Persist per-file classification facts"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
):
    """
    Run one analysis over a project.

    [bold cyan]Examples:[/bold cyan]

      routelens analyze routes

      routelens analyze performance ./web --force
    """
    try:
        settings = resolve_config(config, workers, no_history, no_report, use_cache, verbose, quiet)
        configure_logging(settings, json_output)
        outcome = AnalysisEngine(settings).run(path.resolve(), analysis_type, force=force)
    except RouteLensError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if json_output:
        typer.echo(json.dumps(build_report(outcome), indent=2))
    else:
        render_outcome(outcome)


@app.command("all")
def analyze_all(
    path: Path = typer.Argument(
        Path("."),
        help="Project root (directory holding package.json)",
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Ignore stored history results"),
    json_output: bool = typer.Option(False, "--json", help="Print the reports as JSON"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="TOML config file"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Walk routing roots in parallel"),
    no_history: bool = typer.Option(False, "--no-history", help="Neither read nor write history"),
    no_report: bool = typer.Option(False, "--no-report", help="Do not write JSON report files"),
    use_cache: bool = typer.Option(False, "--cache", help="Persist per-file classification facts"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
):
    """Run every analysis type, reading each file once."""
    try:
        settings = resolve_config(config, workers, no_history, no_report, use_cache, verbose, quiet)
        configure_logging(settings, json_output)
        outcomes = AnalysisEngine(settings).run_all(path.resolve(), force=force)
    except RouteLensError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if json_output:
        typer.echo(json.dumps({t: build_report(o) for t, o in outcomes.items()}, indent=2))
        return

    for index, outcome in enumerate(outcomes.values()):
        render_outcome(outcome, show_routes=index == 0)
