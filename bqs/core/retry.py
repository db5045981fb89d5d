"""Retry execution with exponential backoff and classified-error awareness."""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from bqs.core.errors import (
    ClassifiedError,
    OperationCancelledError,
    RetryExhaustedError,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

RetryCallback = Callable[[int, BaseException], None]


@dataclass(frozen=True)
class RetryConfig:
    """Retry policy. Delays are in seconds."""

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def default(cls) -> "RetryConfig":
        """Policy for background, non-interactive fetches."""
        return cls(max_attempts=3, base_delay=1.0, max_delay=30.0, multiplier=2.0)

    @classmethod
    def quick(cls) -> "RetryConfig":
        """Policy for latency-sensitive interactive paths."""
        return cls(max_attempts=2, base_delay=0.5, max_delay=5.0, multiplier=2.0)

    def backoff(self, attempt: int) -> float:
        """Exponential delay after the given (1-based) attempt."""
        delay = self.base_delay * (self.multiplier ** (attempt - 1))
        return min(delay, self.max_delay)


def with_retry(
    fn: Callable[[], T],
    config: RetryConfig | None = None,
    operation: str = "operation",
    cancel_event: threading.Event | None = None,
    on_retry: RetryCallback | None = None,
) -> T:
    """Call ``fn`` until it succeeds or the policy gives up.

    Non-retryable classified errors are raised on first sight. A classified
    error's own ``retry_after`` takes precedence over the exponential backoff.
    Waits are done on ``cancel_event`` so setting it aborts the sequence with
    :class:`OperationCancelledError`.

    Args:
        fn: Zero-argument callable performing the operation
        config: Retry policy, ``RetryConfig.default()`` when omitted
        operation: Name used in log lines and exhaustion messages
        cancel_event: Event that interrupts backoff waits when set
        on_retry: Called with ``(attempt, previous_error)`` before each retry

    Returns:
        Whatever ``fn`` returns
    """
    config = config or RetryConfig.default()
    cancel_event = cancel_event or threading.Event()
    last_error: BaseException | None = None

    for attempt in range(1, config.max_attempts + 1):
        if attempt > 1 and on_retry is not None and last_error is not None:
            on_retry(attempt, last_error)

        try:
            return fn()
        except OperationCancelledError:
            raise
        except ClassifiedError as e:
            last_error = e
            if not e.retryable:
                logger.debug("%s failed with non-retryable %s error", operation, e.kind.value)
                raise
            delay = e.retry_after if e.retry_after > 0 else config.backoff(attempt)
        except Exception as e:
            last_error = e
            delay = config.backoff(attempt)

        if attempt >= config.max_attempts:
            break

        logger.debug(
            "%s attempt %d/%d failed: %s; retrying in %.2fs",
            operation,
            attempt,
            config.max_attempts,
            last_error,
            delay,
        )
        if cancel_event.wait(delay):
            raise OperationCancelledError(
                f"{operation} cancelled while waiting to retry"
            ) from last_error

    assert last_error is not None
    if isinstance(last_error, ClassifiedError):
        last_error.message = (
            f"{last_error.message} (failed after {config.max_attempts} attempts)"
        )
        raise last_error

    raise RetryExhaustedError(operation, config.max_attempts, last_error) from last_error


def with_quick_retry(
    fn: Callable[[], T],
    operation: str = "operation",
    cancel_event: threading.Event | None = None,
) -> T:
    """Retry ``fn`` with the quick (interactive) policy."""
    return with_retry(fn, RetryConfig.quick(), operation, cancel_event)


def with_default_retry(
    fn: Callable[[], T],
    operation: str = "operation",
    cancel_event: threading.Event | None = None,
) -> T:
    """Retry ``fn`` with the default policy."""
    return with_retry(fn, RetryConfig.default(), operation, cancel_event)


@dataclass
class RetryableOperation:
    """A named retryable operation that reports each retry to a callback."""

    name: str
    config: RetryConfig | None = None
    status_update: RetryCallback | None = None

    def execute(
        self, fn: Callable[[], T], cancel_event: threading.Event | None = None
    ) -> T:
        """Run ``fn`` under this operation's policy."""
        return with_retry(
            fn,
            config=self.config,
            operation=self.name,
            cancel_event=cancel_event,
            on_retry=self.status_update,
        )


__all__ = [
    "RetryCallback",
    "RetryConfig",
    "RetryableOperation",
    "with_default_retry",
    "with_quick_retry",
    "with_retry",
]
