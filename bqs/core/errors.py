"""Error types and classification for bqs.

Raw failures coming out of the ``bq`` subprocess or the cache layer are turned
into :class:`ClassifiedError` instances carrying a kind, retryability and a
suggested backoff. Callers dispatch on ``error.kind`` rather than on the
exception type.
"""

import subprocess
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Categories of classified errors."""

    NETWORK = "network"
    AUTH = "auth"
    PERMISSION = "permission"
    NOT_FOUND = "not_found"
    QUOTA = "quota"
    EXTERNAL_TOOL = "external_tool"
    CACHE = "cache"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


DEFAULT_RETRY_AFTER: dict[ErrorKind, float] = {
    ErrorKind.NETWORK: 2.0,
    ErrorKind.QUOTA: 30.0,
    ErrorKind.EXTERNAL_TOOL: 5.0,
}

_FRIENDLY_SUFFIXES: dict[ErrorKind, str] = {
    ErrorKind.NOT_FOUND: "verify the project, dataset, and table names",
    ErrorKind.PERMISSION: "contact your administrator",
    ErrorKind.QUOTA: "try again in a few moments",
    ErrorKind.NETWORK: "check your internet connection",
    ErrorKind.VALIDATION: "use format: project.dataset[.table]",
}


class BqsError(Exception):
    """Base exception for all bqs errors."""


class OperationCancelledError(BqsError):
    """Raised when a retry wait is interrupted by the caller's cancel signal."""


class RetryExhaustedError(BqsError):
    """Raised when an unclassified error survives every retry attempt."""

    def __init__(self, operation: str, attempts: int, last_error: BaseException):
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{operation} failed after {attempts} attempts: {last_error}")


class ClassifiedError(BqsError):
    """An error annotated with a kind, retryability and a backoff hint."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        underlying: BaseException | None = None,
        retryable: bool = False,
        retry_after: float | None = None,
        context: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.underlying = underlying
        self.retryable = retryable
        self._retry_after = retry_after
        self.context = context or {}

    @property
    def retry_after(self) -> float:
        """Seconds to wait before retrying, defaulting by kind."""
        if self._retry_after is not None and self._retry_after > 0:
            return self._retry_after
        return DEFAULT_RETRY_AFTER.get(self.kind, 1.0)

    def __str__(self) -> str:
        if self.context:
            parts = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({parts})"
        return self.message

    def __repr__(self) -> str:
        return (
            f"ClassifiedError(kind={self.kind.value!r}, message={self.message!r}, "
            f"retryable={self.retryable})"
        )

    def user_friendly_message(self) -> str:
        """Return the message with a kind-specific hint appended."""
        suffix = _FRIENDLY_SUFFIXES.get(self.kind)
        if suffix:
            return f"{self.message} - {suffix}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Structured representation for logging."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "retryable": self.retryable,
            "retry_after": self.retry_after,
            "context": dict(self.context),
        }


def clean_error_output(error_text: str) -> str:
    """Reduce raw ``bq`` output to its first meaningful line."""
    cleaned = error_text.strip()
    if cleaned.startswith("ERROR: "):
        cleaned = cleaned[len("ERROR: ") :]

    for line in cleaned.splitlines():
        line = line.strip()
        if line and not line.startswith("WARNING"):
            return line

    return cleaned


def _not_found_message(operation: str, project: str, dataset: str, table: str) -> str:
    if operation == "list_tables":
        return f"Dataset {project}.{dataset} not found or empty"
    if table:
        return f"Table {project}.{dataset}.{table} not found"
    return f"Dataset {project}.{dataset} not found"


def _decode(stream: str | bytes | None) -> str:
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace")
    return stream


def classify_bigquery_error(
    err: BaseException,
    operation: str,
    project: str,
    dataset: str,
    table: str = "",
) -> ClassifiedError:
    """Classify a failed ``bq`` invocation.

    Matching is ordered and case-insensitive; the first rule that matches wins.
    For a non-zero exit the captured stderr is part of the matched text, so a
    specific condition (permission, quota, ...) wins over the generic
    exit-status rule.

    Args:
        err: The raw exception raised by the fetch
        operation: ``list_tables``, ``get_schema`` or ``get_metadata``
        project: Project id of the request
        dataset: Dataset id of the request
        table: Table id of the request, if any

    Returns:
        The classified error, with the original preserved as ``underlying``
    """
    context = {"operation": operation, "project": project, "dataset": dataset}
    if table:
        context["table"] = table

    stderr = ""
    if isinstance(err, subprocess.CalledProcessError):
        stderr = _decode(err.stderr)
        error_text = f"exit status {err.returncode}: {stderr}"
    else:
        error_text = str(err)
    lower_error = error_text.lower()

    if "not found" in lower_error:
        return ClassifiedError(
            ErrorKind.NOT_FOUND,
            _not_found_message(operation, project, dataset, table),
            underlying=err,
            retryable=False,
            context=context,
        )

    if "permission denied" in lower_error or "access denied" in lower_error:
        return ClassifiedError(
            ErrorKind.PERMISSION,
            f"Access denied to {project}.{dataset} - check BigQuery permissions",
            underlying=err,
            retryable=False,
            context=context,
        )

    if "authentication" in lower_error or "credentials" in lower_error:
        return ClassifiedError(
            ErrorKind.AUTH,
            "Authentication failed - run 'gcloud auth login' or check service account credentials",
            underlying=err,
            retryable=False,
            context=context,
        )

    if "quota" in lower_error or "rate limit" in lower_error:
        return ClassifiedError(
            ErrorKind.QUOTA,
            "BigQuery quota exceeded - retrying with backoff",
            underlying=err,
            retryable=True,
            retry_after=30.0,
            context=context,
        )

    if (
        isinstance(err, subprocess.TimeoutExpired)
        or "timeout" in lower_error
        or "timed out" in lower_error
        or "deadline" in lower_error
    ):
        return ClassifiedError(
            ErrorKind.NETWORK,
            "BigQuery request timed out - retrying",
            underlying=err,
            retryable=True,
            retry_after=5.0,
            context=context,
        )

    if "connection" in lower_error or "network" in lower_error:
        return ClassifiedError(
            ErrorKind.NETWORK,
            "Network error connecting to BigQuery - retrying",
            underlying=err,
            retryable=True,
            retry_after=2.0,
            context=context,
        )

    if isinstance(err, subprocess.CalledProcessError):
        # Kept alongside the first rule: bq's exit behaviour for missing
        # resources is not pinned down.
        if "not found" in stderr.lower():
            return ClassifiedError(
                ErrorKind.NOT_FOUND,
                _not_found_message(operation, project, dataset, table),
                underlying=err,
                retryable=False,
                context=context,
            )
        return ClassifiedError(
            ErrorKind.EXTERNAL_TOOL,
            clean_error_output(stderr or error_text),
            underlying=err,
            retryable=True,
            context=context,
        )

    return ClassifiedError(
        ErrorKind.UNKNOWN,
        clean_error_output(error_text),
        underlying=err,
        retryable=True,
        context=context,
    )


def cache_error(err: BaseException, operation: str) -> ClassifiedError:
    """Wrap a cache-layer failure. Never retryable."""
    return ClassifiedError(
        ErrorKind.CACHE,
        f"Cache {operation} failed: {err}",
        underlying=err,
        retryable=False,
        context={"operation": operation},
    )


def validation_error(err: BaseException | str, input_value: str) -> ClassifiedError:
    """Wrap an input validation failure. Never retryable."""
    underlying = err if isinstance(err, BaseException) else ValueError(err)
    return ClassifiedError(
        ErrorKind.VALIDATION,
        f"Invalid input '{input_value}': {underlying}",
        underlying=underlying,
        retryable=False,
        context={"input": input_value},
    )


__all__ = [
    "BqsError",
    "ClassifiedError",
    "DEFAULT_RETRY_AFTER",
    "ErrorKind",
    "OperationCancelledError",
    "RetryExhaustedError",
    "cache_error",
    "classify_bigquery_error",
    "clean_error_output",
    "validation_error",
]
