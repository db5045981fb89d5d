"""Browse command: interactive or static dataset overview."""

import sys
from typing import Annotated

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from bqs.bigquery.client import BigQueryClient
from bqs.cli.context import get_app_context
from bqs.cli.decorators import handle_errors
from bqs.core.errors import ClassifiedError
from bqs.core.structlog_logger import get_struct_logger
from bqs.core.validation import TableRef, parse_table_reference
from bqs.tui.schema_tree import expandable_paths, flatten_schema, render_node_line
from bqs.utils.format import format_bytes, format_time, table_type_icon


logger = get_struct_logger(__name__)
console = Console()


def render_table_detail(client: BigQueryClient, ref: TableRef) -> None:
    """Print one table's metadata and its fully expanded schema."""
    metadata = client.get_table_metadata(
        ref.project, ref.dataset, ref.require_table()
    )

    console.print(f"📊 {ref} ({metadata.type})", highlight=False)
    console.print(
        f"📈 {metadata.num_rows} rows • 💾 {format_bytes(metadata.num_bytes)} • "
        f"🕒 Modified {format_time(metadata.last_modified_time)}",
        highlight=False,
    )
    console.print()

    if metadata.table_schema is None:
        return
    fields = metadata.table_schema.fields
    expanded = expandable_paths(fields)
    console.print("🌲 Schema:")
    for node in flatten_schema(fields, expanded):
        console.print(render_node_line(node, expanded), highlight=False)


def render_table_list(client: BigQueryClient, ref: TableRef, detailed: bool) -> None:
    """Print the tables of a dataset as a rounded table."""
    tables = client.list_tables(ref.project, ref.dataset)

    console.print(f"📊 {ref.project}.{ref.dataset}", highlight=False)
    console.print()

    if not tables:
        console.print("No tables found in this dataset")
        return

    table = Table(box=box.ROUNDED)
    table.add_column("")
    table.add_column("Table", style="cyan")
    table.add_column("Type")

    if detailed:
        console.print("🔄 Fetching detailed metadata for each table...")
        table.add_column("Rows", justify="right")
        table.add_column("Size", justify="right")
        table.add_column("Modified")
        for info in tables:
            icon = table_type_icon(info.type)
            try:
                metadata = client.get_table_metadata(ref.project, ref.dataset, info.name)
            except ClassifiedError as e:
                logger.warning("table_metadata_failed", table=info.name, error=str(e))
                table.add_row(
                    icon,
                    info.name,
                    info.type,
                    "Error",
                    "Error",
                    format_time(info.creation_time),
                )
                continue
            table.add_row(
                icon,
                info.name,
                info.type,
                str(metadata.num_rows),
                format_bytes(metadata.num_bytes),
                format_time(metadata.last_modified_time),
            )
    else:
        table.add_column("Created")
        for info in tables:
            table.add_row(
                table_type_icon(info.type),
                info.name,
                info.type,
                format_time(info.creation_time),
            )

    console.print(table)
    console.print()
    if detailed:
        console.print(f"💡 Detailed metadata fetched for {len(tables)} tables")
    else:
        console.print("💡 Use --detailed flag for size and row count information")
    console.print(
        f"Use 'bqs browse {ref.project}.{ref.dataset}.TABLE_NAME' to explore specific tables",
        highlight=False,
    )


def run_static_browse(client: BigQueryClient, ref: TableRef, detailed: bool) -> None:
    if ref.table:
        render_table_detail(client, ref)
    else:
        render_table_list(client, ref, detailed)


def run_interactive_browse(client: BigQueryClient, ref: TableRef) -> None:
    from bqs.tui.app import BrowserApp

    BrowserApp(client, ref.project, ref.dataset, ref.table).run()


@handle_errors
def browse(
    ctx: typer.Context,
    target: Annotated[
        str,
        typer.Argument(help="project.dataset or project.dataset.table"),
    ],
    detailed: Annotated[
        bool,
        typer.Option(
            "--detailed",
            "-d",
            help="Fetch size and row counts for each table (slower)",
        ),
    ] = False,
    static: Annotated[
        bool,
        typer.Option("--static", help="Print a static listing instead of the browser"),
    ] = False,
) -> None:
    """Browse a BigQuery dataset.

    \b
    Examples:
      bqs browse my-project.analytics          # Browse analytics dataset
      bqs browse -d my-project.analytics       # With row counts and sizes
      bqs browse my-project.analytics.table    # Deep dive into one table
    """
    ref = parse_table_reference(target)
    app_ctx = get_app_context(ctx)

    with app_ctx.open_cache() as cache:
        client = app_ctx.create_client(cache, check_available=True)
        if static or not sys.stdout.isatty():
            run_static_browse(client, ref, detailed)
            return

        try:
            run_interactive_browse(client, ref)
        except Exception as e:
            logger.warning("interactive_browse_failed", error=str(e))
            # The browser set the cancel event on exit; the fallback needs a fresh one
            run_static_browse(app_ctx.create_client(cache), ref, detailed)


def register_commands(app: typer.Typer) -> None:
    """Register the browse command with the main app."""
    app.command(name="browse")(browse)
