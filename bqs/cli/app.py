"""Main CLI application for bqs."""

import logging
import sys
from importlib.metadata import PackageNotFoundError, version as package_version
from typing import Annotated

import typer

from bqs.cli.context import AppContext
from bqs.cli.decorators.error_handling import print_stack_trace_if_verbose
from bqs.config import create_settings
from bqs.core.logging import level_from_verbosity, setup_logging


__all__ = ["app", "main", "__version__", "setup_logging"]


try:
    __version__ = package_version("bqs")
except PackageNotFoundError:
    __version__ = "0.0.0"

logger = logging.getLogger(__name__)


app = typer.Typer(
    name="bqs",
    help=f"""bqs - BigQuery metadata browser v{__version__}

A faster front end for `bq show` / `bq ls` that caches table lists, schemas
and metadata locally and retries transient BigQuery failures.

Common workflows:
  • Show metadata:   bqs show my-project.dataset.table
  • Schema only:     bqs show -s my-project.dataset.table
  • Browse dataset:  bqs browse my-project.dataset
  • Cache status:    bqs cache stats""",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity (-v=INFO, -vv=DEBUG)",
        ),
    ] = 0,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging (equivalent to -vv)"),
    ] = False,
    log_file: Annotated[
        str | None, typer.Option("--log-file", help="Log to file (JSON lines)")
    ] = None,
    version: Annotated[
        bool, typer.Option("--version", help="Show version and exit")
    ] = False,
) -> None:
    """bqs - BigQuery metadata browser."""
    if version:
        print(f"bqs v{__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        print(ctx.get_help())
        raise typer.Exit()

    settings = create_settings()
    ctx.obj = AppContext(settings=settings, verbose=verbose, log_file=log_file)

    log_level = level_from_verbosity(verbose, debug, default=settings.log_level)
    setup_logging(log_level_name=log_level, log_file=log_file)


def main() -> int:
    """Main CLI entry point."""
    exit_code = 0

    try:
        from bqs.cli.commands import register_all_commands

        register_all_commands(app)

        app()

    except SystemExit as e:
        exit_code = e.code if isinstance(e.code, int) else 0

    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        print_stack_trace_if_verbose()
        exit_code = 1

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
