"""Core infrastructure: errors, retry, cache, validation and logging."""

from bqs.core.errors import (
    BqsError,
    ClassifiedError,
    ErrorKind,
    OperationCancelledError,
    RetryExhaustedError,
)
from bqs.core.logging import setup_logging


__all__ = [
    "BqsError",
    "ClassifiedError",
    "ErrorKind",
    "OperationCancelledError",
    "RetryExhaustedError",
    "setup_logging",
]
