"""Tests for the retry executor."""

import threading
import time

import pytest

from bqs.core.errors import (
    ClassifiedError,
    ErrorKind,
    OperationCancelledError,
    RetryExhaustedError,
)
from bqs.core.retry import (
    RetryableOperation,
    RetryConfig,
    with_quick_retry,
    with_retry,
)


class CountingOperation:
    """Callable failing with the given errors before returning ``result``."""

    def __init__(self, errors: list[BaseException], result: str = "ok") -> None:
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


class AlwaysFails:
    def __init__(self, make_error) -> None:
        self.make_error = make_error
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        raise self.make_error()


class TestRetryConfig:
    """Test RetryConfig presets and backoff."""

    def test_presets(self):
        assert RetryConfig.default() == RetryConfig(3, 1.0, 30.0, 2.0)
        assert RetryConfig.quick() == RetryConfig(2, 0.5, 5.0, 2.0)

    def test_backoff_is_exponential_and_capped(self):
        config = RetryConfig(max_attempts=10, base_delay=1.0, max_delay=5.0)

        assert [config.backoff(n) for n in range(1, 6)] == [1.0, 2.0, 4.0, 5.0, 5.0]

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryConfig(max_attempts=0)


class TestWithRetry:
    """Test with_retry."""

    def test_success_first_try(self, instant_event):
        op = CountingOperation([])

        assert with_retry(op, cancel_event=instant_event) == "ok"
        assert op.calls == 1
        assert instant_event.waits == []

    def test_non_retryable_invoked_once(self, instant_event):
        op = AlwaysFails(
            lambda: ClassifiedError(ErrorKind.AUTH, "no creds", retryable=False)
        )

        with pytest.raises(ClassifiedError) as exc_info:
            with_retry(op, RetryConfig(max_attempts=5), cancel_event=instant_event)

        assert op.calls == 1
        assert exc_info.value.message == "no creds"
        assert instant_event.waits == []

    def test_exhaustion_appends_attempt_count(self, instant_event):
        op = AlwaysFails(
            lambda: ClassifiedError(ErrorKind.EXTERNAL_TOOL, "bq broke", retryable=True)
        )

        with pytest.raises(ClassifiedError) as exc_info:
            with_retry(op, RetryConfig.default(), "get_schema", instant_event)

        assert op.calls == 3
        assert exc_info.value.message.endswith("(failed after 3 attempts)")
        # classified errors wait their own retry_after, never after the last attempt
        assert instant_event.waits == [5.0, 5.0]

    def test_unclassified_errors_use_exponential_backoff(self, instant_event):
        op = AlwaysFails(lambda: RuntimeError("flaky"))

        with pytest.raises(RetryExhaustedError) as exc_info:
            with_retry(op, RetryConfig.default(), "list_tables", instant_event)

        assert op.calls == 3
        assert instant_event.waits == [1.0, 2.0]
        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.last_error, RuntimeError)
        assert "list_tables failed after 3 attempts" in str(exc_info.value)

    def test_recovers_after_retryable_failures(self, instant_event):
        first = ClassifiedError(ErrorKind.NETWORK, "reset", retryable=True)
        second = ClassifiedError(ErrorKind.QUOTA, "busy", retryable=True)
        seen: list[tuple[int, BaseException]] = []
        op = CountingOperation([first, second], result="done")

        result = with_retry(
            op,
            RetryConfig.default(),
            cancel_event=instant_event,
            on_retry=lambda attempt, err: seen.append((attempt, err)),
        )

        assert result == "done"
        assert op.calls == 3
        assert seen == [(2, first), (3, second)]
        assert instant_event.waits == [2.0, 30.0]

    def test_cancellation_from_operation_propagates(self, instant_event):
        op = AlwaysFails(lambda: OperationCancelledError("stop"))

        with pytest.raises(OperationCancelledError):
            with_retry(op, RetryConfig(max_attempts=5), cancel_event=instant_event)

        assert op.calls == 1

    def test_cancellation_during_backoff(self):
        cancel = threading.Event()
        op = AlwaysFails(
            lambda: ClassifiedError(ErrorKind.QUOTA, "quota exceeded", retryable=True)
        )
        timer = threading.Timer(0.1, cancel.set)
        timer.start()

        started = time.monotonic()
        try:
            with pytest.raises(OperationCancelledError):
                with_retry(op, RetryConfig.default(), "get_metadata", cancel)
        finally:
            timer.cancel()
        elapsed = time.monotonic() - started

        assert elapsed < 5.0
        assert op.calls == 1

    def test_quick_retry_preset(self, instant_event):
        op = AlwaysFails(lambda: RuntimeError("flaky"))

        with pytest.raises(RetryExhaustedError):
            with_quick_retry(op, "list_tables", instant_event)

        assert op.calls == 2
        assert instant_event.waits == [0.5]


class TestRetryableOperation:
    """Test the status-callback wrapper."""

    def test_status_update_called_before_each_retry(self, instant_event):
        updates: list[int] = []
        operation = RetryableOperation(
            name="list_tables",
            config=RetryConfig.quick(),
            status_update=lambda attempt, err: updates.append(attempt),
        )
        op = AlwaysFails(
            lambda: ClassifiedError(ErrorKind.NETWORK, "reset", retryable=True)
        )

        with pytest.raises(ClassifiedError):
            operation.execute(op, cancel_event=instant_event)

        assert op.calls == 2
        assert updates == [2]
