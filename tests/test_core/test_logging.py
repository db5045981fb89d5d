"""Tests for logging setup."""

import json
import logging
import sys
from collections.abc import Generator
from pathlib import Path

import pytest

from bqs.core.logging import NOISY_LOGGERS, level_from_verbosity, setup_logging
from bqs.core.structlog_logger import debug_enabled, get_struct_logger


@pytest.fixture(autouse=True)
def restore_root_logger() -> Generator[None, None, None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers = handlers
    root.setLevel(level)


class TestSetupLogging:
    def test_console_handler_on_stderr(self):
        setup_logging(log_level_name="INFO")

        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream is sys.stderr

    def test_repeated_setup_does_not_stack_handlers(self):
        setup_logging()
        setup_logging()

        assert len(logging.getLogger().handlers) == 1

    def test_unknown_level_falls_back_to_warning(self):
        setup_logging(log_level_name="chatty")

        assert logging.getLogger().level == logging.WARNING

    def test_noisy_loggers_quieted(self):
        setup_logging(log_level_name="INFO")

        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_json_file_handler(self, tmp_path: Path):
        log_file = tmp_path / "logs" / "bqs.jsonl"
        setup_logging(log_level_name="INFO", log_file=str(log_file))

        get_struct_logger("bqs.test").info("cache_miss", key="tables:p.d")
        logging.getLogger("bqs.test").warning("plain %s", "message")
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert lines[0]["event"] == "cache_miss"
        assert lines[0]["key"] == "tables:p.d"
        assert lines[0]["level"] == "info"
        assert lines[1]["event"] == "plain message"
        assert lines[1]["level"] == "warning"


class TestLevelFromVerbosity:
    @pytest.mark.parametrize(
        ("verbose", "debug", "expected"),
        [
            (0, False, "WARNING"),
            (1, False, "INFO"),
            (2, False, "DEBUG"),
            (3, False, "DEBUG"),
            (0, True, "DEBUG"),
        ],
    )
    def test_levels(self, verbose: int, debug: bool, expected: str):
        assert level_from_verbosity(verbose, debug) == expected

    def test_default_used_without_flags(self):
        assert level_from_verbosity(0, False, default="ERROR") == "ERROR"


class TestDebugEnabled:
    def test_follows_stdlib_level(self):
        setup_logging(log_level_name="WARNING")
        assert debug_enabled("bqs.bigquery.client") is False

        setup_logging(log_level_name="DEBUG")
        assert debug_enabled("bqs.bigquery.client") is True
