"""History maintenance commands."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..exceptions import RouteLensError
from ..history.store import HistoryStore
from . import app
from ._common import configure_logging, console, resolve_config


@app.command()
def prune(
    path: Path = typer.Argument(Path("."), help="Project root"),
    days: Optional[float] = typer.Option(
        None,
        "--days",
        "-d",
        min=0,
        help="Delete entries older than this (default: history_retention_days)",
    ),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="TOML config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Delete stored analysis results older than a number of days."""
    try:
        settings = resolve_config(config, verbose=verbose)
        configure_logging(settings)
    except RouteLensError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    history_dir = Path(settings.history_dir).expanduser()
    if not history_dir.is_absolute():
        history_dir = path.resolve() / history_dir
    store = HistoryStore(history_dir, settings.validity_hours, settings.default_validity_hours)

    max_age = days if days is not None else settings.history_retention_days
    removed = store.prune(max_age)
    console.print(f"[green]Removed {removed} history entries[/green] older than {max_age:g} days")
