"""Cached, retrying access to BigQuery metadata through ``bq``."""

import threading
from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from bqs.bigquery.models import Schema, SchemaField, TableInfo, TableMetadata
from bqs.bigquery.runner import BqRunner
from bqs.config.models import CacheTTLConfig
from bqs.core.cache import (
    CacheService,
    metadata_key,
    schema_key,
    table_list_key,
)
from bqs.core.errors import (
    ClassifiedError,
    OperationCancelledError,
    cache_error,
    classify_bigquery_error,
)
from bqs.core.retry import RetryCallback, RetryableOperation, RetryConfig
from bqs.core.structlog_logger import debug_enabled, get_struct_logger


logger = get_struct_logger(__name__)

T = TypeVar("T")

_TABLE_LIST_ADAPTER: TypeAdapter[list[TableInfo]] = TypeAdapter(list[TableInfo])
_SCHEMA_ADAPTER: TypeAdapter[Schema] = TypeAdapter(Schema)
_FIELDS_ADAPTER: TypeAdapter[list[SchemaField]] = TypeAdapter(list[SchemaField])
_METADATA_ADAPTER: TypeAdapter[TableMetadata] = TypeAdapter(TableMetadata)


class BigQueryClient:
    """Metadata fetch facade.

    Every read goes through the cache first. A miss runs the ``bq`` call under
    a retry policy, classifies failures and caches the parsed result with a
    per-kind TTL. Callers only ever see :class:`ClassifiedError` or
    :class:`OperationCancelledError`.
    """

    def __init__(
        self,
        cache: CacheService,
        runner: BqRunner | None = None,
        ttls: CacheTTLConfig | None = None,
        cancel_event: threading.Event | None = None,
        on_retry: RetryCallback | None = None,
    ) -> None:
        self.cache = cache
        self.runner = runner or BqRunner()
        self.ttls = ttls or CacheTTLConfig()
        self.cancel_event = cancel_event or threading.Event()
        self.on_retry = on_retry

    def list_tables(self, project: str, dataset: str) -> list[TableInfo]:
        """List the tables of a dataset (quick retry policy)."""

        def fetch() -> list[TableInfo]:
            output = self.runner.list_tables(project, dataset)
            return _TABLE_LIST_ADAPTER.validate_json(output or "[]")

        return self._cached_fetch(
            key=table_list_key(project, dataset),
            adapter=_TABLE_LIST_ADAPTER,
            fetch=fetch,
            ttl=self.ttls.table_list,
            retry_config=RetryConfig.quick(),
            operation="list_tables",
            context={"project": project, "dataset": dataset},
        )

    def get_schema(self, project: str, dataset: str, table: str) -> Schema:
        """Get a table's schema (default retry policy)."""

        def fetch() -> Schema:
            output = self.runner.show_schema(project, dataset, table)
            return Schema(fields=_FIELDS_ADAPTER.validate_json(output or "[]"))

        return self._cached_fetch(
            key=schema_key(project, dataset, table),
            adapter=_SCHEMA_ADAPTER,
            fetch=fetch,
            ttl=self.ttls.schema_,
            retry_config=RetryConfig.default(),
            operation="get_schema",
            context={"project": project, "dataset": dataset, "table": table},
        )

    def get_table_metadata(
        self, project: str, dataset: str, table: str
    ) -> TableMetadata:
        """Get complete table metadata (default retry policy)."""

        def fetch() -> TableMetadata:
            return _METADATA_ADAPTER.validate_json(
                self.runner.show_table(project, dataset, table)
            )

        return self._cached_fetch(
            key=metadata_key(project, dataset, table),
            adapter=_METADATA_ADAPTER,
            fetch=fetch,
            ttl=self.ttls.metadata,
            retry_config=RetryConfig.default(),
            operation="get_metadata",
            context={"project": project, "dataset": dataset, "table": table},
        )

    def is_table_metadata_cached(self, project: str, dataset: str, table: str) -> bool:
        """Whether fresh metadata for the table is cached. Never fetches."""
        try:
            return self.cache.exists(metadata_key(project, dataset, table))
        except ClassifiedError:
            return False

    def invalidate_cache(self, project: str, dataset: str = "", table: str = "") -> None:
        """Drop cached data for a table and/or a dataset's table list."""
        keys: list[str] = []
        if table:
            keys.extend(
                [
                    schema_key(project, dataset, table),
                    metadata_key(project, dataset, table),
                ]
            )
        if dataset:
            keys.append(table_list_key(project, dataset))

        for key in keys:
            try:
                self.cache.delete(key)
            except ClassifiedError:
                raise
            except Exception as e:
                raise cache_error(e, f"invalidate {key}") from e
            logger.debug("cache_invalidated", key=key)

    def _cached_fetch(
        self,
        key: str,
        adapter: TypeAdapter[T],
        fetch: Callable[[], T],
        ttl: float,
        retry_config: RetryConfig,
        operation: str,
        context: dict[str, str],
    ) -> T:
        cached = self._read_cached(key, adapter)
        if cached is not None:
            logger.debug("cache_hit", key=key)
            return cached

        logger.debug("cache_miss", key=key, operation=operation)

        def attempt() -> T:
            try:
                return fetch()
            except (ClassifiedError, OperationCancelledError):
                raise
            except Exception as e:
                raise classify_bigquery_error(
                    e,
                    operation,
                    context.get("project", ""),
                    context.get("dataset", ""),
                    context.get("table", ""),
                ) from e

        result = RetryableOperation(
            name=operation, config=retry_config, status_update=self.on_retry
        ).execute(attempt, cancel_event=self.cancel_event)

        self._write_cached(key, adapter, result, ttl)
        return result

    def _read_cached(self, key: str, adapter: TypeAdapter[T]) -> T | None:
        try:
            entry = self.cache.get(key)
        except ClassifiedError as e:
            logger.warning("cache_read_failed", key=key, error=str(e))
            return None
        if entry is None:
            return None

        try:
            return adapter.validate_json(entry.data)
        except ValidationError as e:
            logger.debug("cache_entry_unreadable", key=key, error=str(e))
            return None

    def _write_cached(
        self, key: str, adapter: TypeAdapter[Any], value: Any, ttl: float
    ) -> None:
        try:
            data = adapter.dump_json(value, by_alias=True, exclude_unset=True).decode(
                "utf-8"
            )
            self.cache.set(key, data, ttl=ttl)
        except Exception as e:
            logger.warning(
                "cache_write_failed",
                key=key,
                error=str(e),
                exc_info=debug_enabled(__name__),
            )


__all__ = ["BigQueryClient"]
