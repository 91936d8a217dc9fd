"""
Main CLI entry point for embedthumbs.
"""

from __future__ import annotations

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from embedthumbs import __version__
from embedthumbs.cli.commands.cache import app as cache_app
from embedthumbs.config.settings import settings

console = Console()

app = typer.Typer(
    name="embedthumbs",
    help="Local thumbnail cache for embedded media",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Add subcommands
app.add_typer(cache_app, name="cache", help="Thumbnail cache commands")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(
        Panel(
            f"[bold blue]embedthumbs[/bold blue] v{__version__}",
            title="Version",
            border_style="blue",
        )
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit"
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Override the configured log level (DEBUG, INFO, WARNING, ...)",
    ),
) -> None:
    """
    embedthumbs - Local thumbnail cache for embedded media.

    Inspect cached embed thumbnails, resolve the thumbnail of an embed in a
    document, and prune files that no document references any more.
    """
    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if version:
        console.print(f"embedthumbs v{__version__}")
        raise typer.Exit(code=0)

    if ctx.invoked_subcommand is None:
        console.print(
            "[yellow]Use 'embedthumbs --help' for available commands[/yellow]"
        )
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
