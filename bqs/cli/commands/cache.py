"""Cache management CLI commands."""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from bqs.cli.context import get_app_context
from bqs.cli.decorators import handle_errors
from bqs.core.validation import parse_table_reference
from bqs.utils.format import format_bytes


logger = logging.getLogger(__name__)
console = Console()

cache_app = typer.Typer(
    help="""Manage the local BigQuery metadata cache.

The cache stores table lists, schemas and metadata locally with per-kind
lifetimes, which keeps repeated lookups fast and avoids redundant bq calls.""",
    no_args_is_help=True,
)


@cache_app.command(name="stats")
@handle_errors
def cache_stats(ctx: typer.Context) -> None:
    """Show cache statistics."""
    app_ctx = get_app_context(ctx)
    with app_ctx.open_cache() as cache:
        stats = cache.stats()
        location = cache.cache_path

    table = Table(title="Cache Statistics", show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Location", str(location))
    table.add_row("Total entries", str(stats.total_entries))
    table.add_row("Valid entries", str(stats.valid_entries))
    table.add_row("Expired entries", str(stats.expired_entries))
    table.add_row("Database size", format_bytes(stats.size_bytes))
    if stats.total_entries > 0:
        table.add_row("Hit rate", f"{stats.valid_ratio:.1f}%")

    console.print(table)


@cache_app.command(name="clear")
@handle_errors
def cache_clear(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Force deletion without confirmation"),
    ] = False,
) -> None:
    """Remove all cached metadata; the next lookups go to BigQuery."""
    app_ctx = get_app_context(ctx)
    with app_ctx.open_cache() as cache:
        stats = cache.stats()
        if stats.total_entries == 0:
            console.print("[yellow]Cache is already empty[/yellow]")
            return

        if not force:
            confirm = typer.confirm(
                f"Clear {stats.total_entries} cache entries ({format_bytes(stats.size_bytes)})?"
            )
            if not confirm:
                console.print("[yellow]Cancelled[/yellow]")
                return

        cache.clear()
        logger.info("Cleared %d cache entries", stats.total_entries)

    console.print(f"[green]Cleared {stats.total_entries} cache entries[/green]")


@cache_app.command(name="cleanup")
@handle_errors
def cache_cleanup(ctx: typer.Context) -> None:
    """Remove expired cache entries to reclaim disk space."""
    app_ctx = get_app_context(ctx)
    with app_ctx.open_cache() as cache:
        size_before = cache.stats().size_bytes
        removed = cache.cleanup()
        size_after = cache.stats().size_bytes

    if removed > 0:
        console.print(f"[green]Removed {removed} expired cache entries[/green]")
        console.print(
            f"Cache size reduced by {format_bytes(max(size_before - size_after, 0))}"
        )
    else:
        console.print("[yellow]No expired entries to clean up[/yellow]")


@cache_app.command(name="invalidate")
@handle_errors
def cache_invalidate(
    ctx: typer.Context,
    target: Annotated[
        str,
        typer.Argument(help="project.dataset (table list) or project.dataset.table"),
    ],
) -> None:
    """Drop cached data for a dataset's table list or a single table."""
    ref = parse_table_reference(target)
    app_ctx = get_app_context(ctx)
    with app_ctx.open_cache() as cache:
        client = app_ctx.create_client(cache)
        client.invalidate_cache(ref.project, ref.dataset, ref.table or "")

    console.print(f"[green]Invalidated cached data for {ref}[/green]")


def register_cache_commands(app: typer.Typer) -> None:
    """Register cache commands with the main app.

    Args:
        app: The main Typer app
    """
    app.add_typer(cache_app, name="cache")
