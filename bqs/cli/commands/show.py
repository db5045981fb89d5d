"""Show command: table, view and schema metadata."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any

import typer
from rich.console import Console

from bqs.bigquery.client import BigQueryClient
from bqs.bigquery.runner import build_show_args
from bqs.cli.context import get_app_context
from bqs.cli.decorators import handle_errors
from bqs.core.structlog_logger import get_struct_logger
from bqs.core.validation import TableRef, parse_table_reference


logger = get_struct_logger(__name__)
err_console = Console(stderr=True)


class OutputFormat(str, Enum):
    """Output formats understood by ``bq show``."""

    JSON = "json"
    PRETTYJSON = "prettyjson"
    PRETTY = "pretty"
    SPARSE = "sparse"
    CSV = "csv"


CACHED_FORMATS = {OutputFormat.JSON, OutputFormat.PRETTYJSON}


@dataclass
class ShowOptions:
    """Options of a single ``bqs show`` invocation."""

    schema_only: bool = False
    view: bool = False
    materialized_view: bool = False
    output_format: OutputFormat = OutputFormat.PRETTYJSON
    project: str | None = None
    quiet: bool = False
    no_cache: bool = False

    @property
    def uses_cache(self) -> bool:
        """JSON output of plain table/schema lookups is served from the cache.

        View and materialized view details, and the tabular formats, come
        straight from ``bq show``.
        """
        return (
            self.output_format in CACHED_FORMATS
            and not self.view
            and not self.materialized_view
        )


def render_json(payload: Any, output_format: OutputFormat) -> str:
    """Render a payload the way ``bq`` renders json/prettyjson."""
    if output_format == OutputFormat.PRETTYJSON:
        return json.dumps(payload, indent=2, ensure_ascii=False)
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def fetch_payload(client: BigQueryClient, ref: TableRef, options: ShowOptions) -> Any:
    """Fetch the JSON document ``bq show`` would print for these options."""
    table = ref.require_table()
    if options.schema_only:
        schema = client.get_schema(ref.project, ref.dataset, table)
        return [field.to_dict() for field in schema.fields]
    return client.get_table_metadata(ref.project, ref.dataset, table).to_dict()


@handle_errors
def show(
    ctx: typer.Context,
    target: Annotated[
        str,
        typer.Argument(help="project.dataset.table (or dataset.table with --project)"),
    ],
    schema_only: Annotated[
        bool, typer.Option("--schema", "-s", help="Show only the schema")
    ] = False,
    view: Annotated[
        bool,
        typer.Option(
            "--view", "-v", help="Show view-specific details including SQL definition"
        ),
    ] = False,
    materialized_view: Annotated[
        bool,
        typer.Option(
            "--materialized-view",
            help="Show materialized view details including refresh policies",
        ),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format", case_sensitive=False),
    ] = OutputFormat.PRETTYJSON,
    project: Annotated[
        str | None,
        typer.Option(
            "--project", "-p", help="Override project ID for cross-project access"
        ),
    ] = None,
    quiet: Annotated[
        bool, typer.Option("--quiet", "-q", help="Suppress status updates")
    ] = False,
    no_cache: Annotated[
        bool, typer.Option("--no-cache", help="Bypass cache and fetch fresh data")
    ] = False,
) -> None:
    """Show BigQuery table or view metadata.

    \b
    Examples:
      bqs show project.dataset.table              # Complete metadata (prettyjson)
      bqs show -s project.dataset.table           # Schema only
      bqs show -v project.dataset.view            # View with SQL definition
      bqs show -f json project.dataset.table      # Compact JSON format
      bqs show -s -f pretty project.dataset.table # Schema in table format
      bqs show -p other-project dataset.table     # Cross-project access
    """
    options = ShowOptions(
        schema_only=schema_only,
        view=view,
        materialized_view=materialized_view,
        output_format=output_format,
        project=project,
        quiet=quiet,
        no_cache=no_cache,
    )
    ref = parse_table_reference(
        target, require_table=True, project_override=options.project
    )
    table = ref.require_table()
    app_ctx = get_app_context(ctx)

    if not options.uses_cache:
        args = build_show_args(
            ref.project,
            ref.dataset,
            table,
            options.output_format.value,
            schema=options.schema_only,
            view=options.view,
            materialized_view=options.materialized_view,
            quiet=options.quiet,
        )
        returncode = app_ctx.create_runner(check_available=True).passthrough(args)
        if returncode != 0:
            raise typer.Exit(returncode)
        return

    def report_retry(attempt: int, error: BaseException) -> None:
        if not options.quiet:
            err_console.print(
                f"[yellow]Retrying ({attempt}):[/yellow] {error}", highlight=False
            )

    with app_ctx.open_cache() as cache:
        client = app_ctx.create_client(
            cache, on_retry=report_retry, check_available=True
        )
        if options.no_cache:
            client.invalidate_cache(ref.project, ref.dataset, table)
            logger.debug("cache_bypassed", table=str(ref))
        payload = fetch_payload(client, ref, options)

    typer.echo(render_json(payload, options.output_format))


def register_commands(app: typer.Typer) -> None:
    """Register the show command with the main app."""
    app.command(name="show")(show)
