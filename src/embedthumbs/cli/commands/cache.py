"""
CLI commands for managing the thumbnail cache.

Provides ``embedthumbs cache status``, ``cache resolve`` and ``cache prune``
for inspecting cached thumbnails and removing files no document references.
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from embedthumbs.config.database import db_manager
from embedthumbs.config.settings import settings
from embedthumbs.models.thumbnail import PruneResult, ThumbnailData
from embedthumbs.services.thumbnail_cache import (
    ThumbnailCacheConfig,
    ThumbnailCacheService,
)

console = Console()

app = typer.Typer(
    name="cache",
    help="Manage the local thumbnail cache.",
    no_args_is_help=True,
)


def _build_cache_service() -> ThumbnailCacheService:
    """Build a ThumbnailCacheService from application settings."""
    return ThumbnailCacheService(config=ThumbnailCacheConfig.from_settings(settings))


def format_size(size_bytes: int) -> str:
    """Convert bytes to human-readable format."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"


@app.command(name="status")
def status() -> None:
    """
    Display cache statistics.

    Examples:
        embedthumbs cache status
    """
    try:
        asyncio.run(_status_async())
    except KeyboardInterrupt:
        console.print("\n[yellow]Status check interrupted by user[/yellow]")
        raise typer.Exit(code=130)


async def _status_async() -> None:
    """Async implementation of the cache status command."""
    service = _build_cache_service()
    stats = await service.get_stats()

    table = Table(title="Thumbnail Cache Status")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green", justify="right")

    table.add_row("Directory", str(service.cache_dir))
    table.add_row("Thumbnails", str(stats.file_count))
    table.add_row("Size", format_size(stats.total_size_bytes))
    table.add_row(
        "Oldest", stats.oldest_file.isoformat(sep=" ") if stats.oldest_file else "-"
    )
    table.add_row(
        "Newest", stats.newest_file.isoformat(sep=" ") if stats.newest_file else "-"
    )

    console.print(table)


@app.command(name="resolve")
def resolve(
    document_id: int = typer.Argument(..., help="Document id"),
    url: str = typer.Argument(..., help="Embed URL"),
) -> None:
    """
    Show the cached thumbnail for an embed in a document.

    Examples:
        embedthumbs cache resolve 42 https://youtu.be/dQw4w9WgXcQ
    """
    if document_id <= 0:
        console.print("[red]Error: document id must be a positive integer[/red]")
        raise typer.Exit(code=2)

    try:
        data = asyncio.run(_resolve_async(document_id=document_id, url=url))
    except KeyboardInterrupt:
        console.print("\n[yellow]Resolve interrupted by user[/yellow]")
        raise typer.Exit(code=130)

    if data.is_empty:
        console.print(f"[yellow]No cached thumbnail for {url}[/yellow]")
        raise typer.Exit(code=1)

    console.print(f"[green]Path:[/green] {data.path}")
    console.print(f"[green]URL:[/green]  {data.url}")


async def _resolve_async(*, document_id: int, url: str) -> ThumbnailData:
    service = _build_cache_service()
    data = ThumbnailData()
    try:
        await db_manager.create_tables()
        async for session in db_manager.get_session():
            data = await service.resolve(session, document_id, url)
    finally:
        await db_manager.close()
    return data


@app.command(name="prune")
def prune(
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Preview mode: list files without deleting",
    ),
) -> None:
    """
    Delete cached thumbnails that no document references.

    Examples:
        embedthumbs cache prune --dry-run
        embedthumbs cache prune
    """
    try:
        result = asyncio.run(_prune_async(dry_run=dry_run))
    except KeyboardInterrupt:
        console.print("\n[yellow]Prune interrupted by user[/yellow]")
        raise typer.Exit(code=130)

    if not result.deleted:
        console.print("[green]No unreferenced thumbnails found.[/green]")
        return

    table = Table(title="Unreferenced Thumbnails")
    table.add_column("File", style="cyan")
    for filename in result.deleted:
        table.add_row(filename)
    console.print(table)

    verb = "Would free" if dry_run else "Freed"
    console.print(
        f"{verb} {format_size(result.bytes_freed)} "
        f"({len(result.deleted)} files, {result.kept} still referenced)"
    )


async def _prune_async(*, dry_run: bool) -> PruneResult:
    service = _build_cache_service()
    result = PruneResult()
    try:
        await db_manager.create_tables()
        async for session in db_manager.get_session():
            result = await service.prune_unreferenced(session, dry_run=dry_run)
    finally:
        await db_manager.close()
    return result
