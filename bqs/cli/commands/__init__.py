"""CLI command modules."""

import typer

from bqs.cli.commands.browse import register_commands as register_browse_commands
from bqs.cli.commands.cache import register_cache_commands
from bqs.cli.commands.show import register_commands as register_show_commands


def register_all_commands(app: typer.Typer) -> None:
    """Register all CLI commands with the main app.

    Safe to call more than once for the same app.

    Args:
        app: The main Typer app
    """
    if getattr(app, "_bqs_commands_registered", False):
        return

    register_show_commands(app)
    register_browse_commands(app)
    register_cache_commands(app)

    app._bqs_commands_registered = True  # type: ignore[attr-defined]
