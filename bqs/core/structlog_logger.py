"""structlog logger factories.

Events are named in snake_case and carry their details as key/value fields::

    logger = get_struct_logger(__name__)
    logger.debug("cache_miss", key=key, operation="get_schema")

For failures, attach the traceback only when debugging::

    logger.warning(
        "cache_write_failed", key=key, error=str(e), exc_info=debug_enabled(__name__)
    )
"""

import logging
from typing import Any

import structlog


def get_struct_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return the structlog logger for a module, usually ``__name__``."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def get_struct_logger_with_context(
    name: str, **context: Any
) -> structlog.stdlib.BoundLogger:
    """Return a module logger with ``context`` bound to every event."""
    return get_struct_logger(name).bind(**context)


def debug_enabled(name: str) -> bool:
    """Whether DEBUG records of the stdlib logger ``name`` would be emitted.

    Asks the stdlib logger directly, since structlog's default logger (used
    before ``setup_logging`` runs) has no ``isEnabledFor``.
    """
    return logging.getLogger(name).isEnabledFor(logging.DEBUG)
