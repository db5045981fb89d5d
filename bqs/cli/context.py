"""Per-invocation CLI state."""

import threading

import typer

from bqs.bigquery.client import BigQueryClient
from bqs.bigquery.runner import BqRunner
from bqs.config import BqsSettings, create_settings
from bqs.core.cache import DiskCacheManager, create_disk_cache
from bqs.core.errors import ClassifiedError, ErrorKind
from bqs.core.retry import RetryCallback


class AppContext:
    """Application context for storing shared state."""

    def __init__(
        self,
        settings: BqsSettings | None = None,
        verbose: int = 0,
        log_file: str | None = None,
    ):
        """Initialize AppContext.

        Args:
            settings: Resolved settings; read from the environment when omitted
            verbose: Verbosity level
            log_file: Path to log file
        """
        self.settings = settings or create_settings()
        self.verbose = verbose
        self.log_file = log_file

    def open_cache(self) -> DiskCacheManager:
        """Open the durable metadata cache. Use it as a context manager."""
        return create_disk_cache(
            cache_path=self.settings.cache_db_path,
            default_ttl_seconds=self.settings.cache_ttls.default,
            timeout=self.settings.cache_timeout,
        )

    def create_runner(self, check_available: bool = False) -> BqRunner:
        """Build the bq runner from settings.

        Raises:
            ClassifiedError: With kind EXTERNAL_TOOL when ``check_available``
                is set and the bq executable cannot be found
        """
        runner = BqRunner(
            bq_path=self.settings.bq_path,
            max_results=self.settings.max_results,
            timeout=self.settings.bq_timeout,
        )
        if check_available and not runner.is_available():
            raise ClassifiedError(
                ErrorKind.EXTERNAL_TOOL,
                f"bq command not found ({self.settings.bq_path}) - install the "
                "Google Cloud SDK or set BQS_BQ_PATH",
                retryable=False,
                context={"bq_path": self.settings.bq_path},
            )
        return runner

    def create_client(
        self,
        cache: DiskCacheManager,
        cancel_event: threading.Event | None = None,
        on_retry: RetryCallback | None = None,
        check_available: bool = False,
    ) -> BigQueryClient:
        """Build the metadata facade over an open cache."""
        return BigQueryClient(
            cache,
            runner=self.create_runner(check_available=check_available),
            ttls=self.settings.cache_ttls,
            cancel_event=cancel_event,
            on_retry=on_retry,
        )


def get_app_context(ctx: typer.Context) -> AppContext:
    """Return the context created by the main callback, creating one if absent."""
    if not isinstance(ctx.obj, AppContext):
        ctx.obj = AppContext()
    return ctx.obj
