"""CLI entry point — registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="routelens",
    help="routelens - Static analyzer for file-routed web applications",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """
    Inspect a Next.js-style routing tree and report route topology and quality signals.

    [bold cyan]Examples:[/bold cyan]

      routelens analyze routes

      routelens analyze seo ./my-app --json

      routelens all ./my-app --force
    """
    if version:
        console.print(f"[bold cyan]routelens[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(0)


# Import subcommands to register them
from .analyze import analyze as _analyze, analyze_all as _analyze_all  # noqa: F401, E402
from .cache import cache_clear as _cache_clear, cache_info as _cache_info  # noqa: F401, E402
from .history import prune as _prune  # noqa: F401, E402
