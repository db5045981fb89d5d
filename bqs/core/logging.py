"""Logging configuration and setup for bqs.

structlog renders every record, including those emitted through plain
``logging`` loggers, so both logger styles used across the package end up in
the same handlers.
"""

import logging
import shutil
import sys
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any, TextIO

import structlog
from rich.console import Console
from rich.traceback import Traceback
from structlog.stdlib import BoundLogger
from structlog.typing import ExcInfo, Processor


# Third-party loggers that only matter when debugging bqs itself
NOISY_LOGGERS = [
    "asyncio",
    "markdown_it",
    "textual",
]

_DEBUG_TIME_FORMAT = "%H:%M:%S.%f"
_TIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def _trim_to_millis(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Cut the microsecond timestamp down to milliseconds."""
    stamp = event_dict.get("timestamp")
    if isinstance(stamp, str) and stamp[-7:-6] == ".":
        event_dict["timestamp"] = stamp[:-3]
    return event_dict


def _console_timestamp(log_level: int) -> list[Processor]:
    fmt = _DEBUG_TIME_FORMAT if log_level < logging.INFO else _TIME_FORMAT
    return [structlog.processors.TimeStamper(fmt=fmt), _trim_to_millis]


def _common_processors(log_level: int) -> list[Processor]:
    """Level, logger name and, when debugging, the call site."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]
    if log_level < logging.INFO:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            )
        )
    return processors


def configure_structlog(log_level: int = logging.WARNING) -> None:
    """Route structlog events into the stdlib handlers set up below."""
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        *_common_processors(log_level),
        *_console_timestamp(log_level),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        # Must stay last so each handler picks its own renderer
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def rich_traceback(sio: TextIO, exc_info: ExcInfo) -> None:
    """Render an exception with rich, hiding CLI framework frames."""
    width, _ = shutil.get_terminal_size((80, 24))
    sio.write("\n")
    Console(file=sio, color_system="truecolor").print(
        Traceback.from_exception(
            *exc_info,
            width=width,
            extra_lines=1,
            max_frames=5,
            suppress=["click", "typer", "textual"],
        )
    )


def _console_handler(log_level: int, json_logs: bool) -> logging.Handler:
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(exception_formatter=rich_traceback)
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[
                *_common_processors(log_level),
                structlog.dev.set_exc_info,
                *_console_timestamp(log_level),
            ],
            processor=renderer,
        )
    )
    return handler


def _file_handler(log_level: int, log_file: str) -> logging.Handler:
    """JSON lines file handler; the file is only created on first record."""
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_path, encoding="utf-8", delay=True)
    handler.setLevel(log_level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[
                *_common_processors(log_level),
                structlog.dev.set_exc_info,
                structlog.processors.TimeStamper(fmt="iso"),
            ],
            processor=structlog.processors.JSONRenderer(),
        )
    )
    return handler


def setup_logging(
    json_logs: bool = False,
    log_level_name: str = "WARNING",
    log_file: str | None = None,
) -> BoundLogger:
    """Setup logging for the whole application.

    Console output goes to stderr so that ``bqs show`` output on stdout stays
    machine readable. Calling this again replaces the previous handlers.

    Args:
        json_logs: Render console lines as JSON instead of the dev renderer
        log_level_name: Name of the root log level
        log_file: Optional path of a JSON log file

    Returns:
        A structlog logger instance
    """
    log_level = getattr(logging, log_level_name.upper(), logging.WARNING)

    configure_structlog(log_level=log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [_console_handler(log_level, json_logs)]
    if log_file:
        root_logger.addHandler(_file_handler(log_level, log_file))

    noisy_level = logging.DEBUG if log_level == logging.DEBUG else max(
        log_level, logging.WARNING
    )
    for name in NOISY_LOGGERS:
        noisy_logger = logging.getLogger(name)
        noisy_logger.handlers = []
        noisy_logger.propagate = True
        noisy_logger.setLevel(noisy_level)

    return structlog.get_logger()  # type: ignore[no-any-return]


def level_from_verbosity(verbose: int, debug: bool, default: str = "WARNING") -> str:
    """Map ``-v`` count and ``--debug`` to a log level name."""
    if debug or verbose >= 2:
        return "DEBUG"
    if verbose == 1:
        return "INFO"
    return default
