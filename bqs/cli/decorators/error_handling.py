"""Error handling decorators for CLI commands."""

import sys
import traceback
from collections.abc import Callable
from functools import wraps
from typing import Any

import typer
from rich.console import Console

from bqs.core.errors import ClassifiedError, OperationCancelledError
from bqs.core.structlog_logger import debug_enabled, get_struct_logger


__all__ = ["handle_errors", "print_stack_trace_if_verbose"]

logger = get_struct_logger(__name__)
err_console = Console(stderr=True)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to turn failures of a CLI command into exit status 1.

    Classified errors are shown through their user friendly message; anything
    else is logged as unexpected.

    Args:
        func: The function to decorate

    Returns:
        Decorated function with error handling
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except ClassifiedError as e:
            logger.debug("classified_error", **e.to_dict())
            err_console.print(f"[red]Error:[/red] {e.user_friendly_message()}", highlight=False)
            print_stack_trace_if_verbose()
            raise typer.Exit(1) from e
        except OperationCancelledError as e:
            err_console.print(f"[yellow]Cancelled:[/yellow] {e}", highlight=False)
            raise typer.Exit(1) from e
        except Exception as e:
            logger.error(
                "unexpected_error", error=str(e), exc_info=debug_enabled(__name__)
            )
            err_console.print(f"[red]Unexpected error:[/red] {e}", highlight=False)
            print_stack_trace_if_verbose()
            raise typer.Exit(1) from e

    return wrapper


def print_stack_trace_if_verbose() -> None:
    """Print stack trace if verbose/debug mode is enabled."""
    if any(arg in sys.argv for arg in ["-v", "-vv", "--verbose", "--debug"]):
        print("\nStack trace:", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
