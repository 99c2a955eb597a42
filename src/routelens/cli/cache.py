"""Classification cache management commands."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..cache import ClassificationCache
from ..exceptions import RouteLensError
from . import app
from ._common import console, resolve_config


def _open_cache(path: Path, config: Optional[Path]) -> ClassificationCache:
    try:
        settings = resolve_config(config)
    except RouteLensError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    cache_dir = Path(settings.cache_dir).expanduser()
    if not cache_dir.is_absolute():
        cache_dir = path.resolve() / cache_dir
    return ClassificationCache(cache_dir=str(cache_dir), ttl_hours=settings.cache_ttl_hours)


@app.command()
def cache_info(
    path: Path = typer.Argument(Path("."), help="Project root"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="TOML config file"),
):
    """Show classification cache information and statistics."""
    cache = _open_cache(path, config)
    try:
        stats = cache.stats()
    finally:
        cache.close()

    console.print("[bold cyan]routelens Cache Info[/bold cyan]")
    console.print()
    if "error" in stats:
        console.print(f"Status: [red]Unavailable[/red] ({escape(stats['error'])})")
        return
    console.print(f"Directory: [blue]{escape(str(stats.get('directory', 'N/A')))}[/blue]")
    console.print(f"Entries: [yellow]{stats.get('size', 0)}[/yellow]")
    console.print(f"Size: [yellow]{stats.get('volume', 0)} bytes[/yellow]")


@app.command()
def cache_clear(
    path: Path = typer.Argument(Path("."), help="Project root"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="TOML config file"),
):
    """Clear the classification cache."""
    cache = _open_cache(path, config)
    try:
        cache.clear()
    finally:
        cache.close()
    console.print("[green]Cache cleared successfully[/green]")
