"""DiskCache-based cache manager implementation."""

import logging
import sqlite3
import time
from pathlib import Path
from types import TracebackType

import diskcache  # type: ignore[import-untyped]

from bqs.core.cache.models import CacheConfig, CacheEntry, CacheStats
from bqs.core.errors import cache_error, validation_error
from bqs.utils.xdg import get_cache_dir


logger = logging.getLogger(__name__)

_STORE_ERRORS = (diskcache.Timeout, sqlite3.Error, OSError)


class DiskCacheManager:
    """Durable cache backed by DiskCache.

    DiskCache keeps entries in SQLite and handles locking between threads
    and processes. Entries are written with a native expiry so stale rows are
    invisible to ``get``/``exists``; automatic culling is disabled, expired
    rows stay on disk until :meth:`cleanup` runs.
    """

    def __init__(self, config: CacheConfig | None = None) -> None:
        """Initialize DiskCache manager.

        Args:
            config: Cache configuration; the location defaults to the
                resolved bqs cache directory
        """
        self.config = config or CacheConfig()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        cache_path = (
            Path(self.config.cache_path)
            if self.config.cache_path is not None
            else get_cache_dir() / "metadata"
        )
        try:
            cache_path.mkdir(parents=True, exist_ok=True)
            self._cache = diskcache.Cache(
                directory=str(cache_path),
                timeout=self.config.timeout,
                eviction_policy="none",
                cull_limit=0,
            )
        except _STORE_ERRORS as e:
            raise cache_error(e, "open") from e

        self.cache_path = cache_path
        self._closed = False
        self.logger.debug("DiskCache initialized at %s", cache_path)

    def get(self, key: str) -> CacheEntry | None:
        """Retrieve a valid entry, or None on a miss."""
        try:
            record = self._cache.get(key, default=None, retry=True)
        except _STORE_ERRORS as e:
            self.logger.warning("Cache get error for key %s: %s", key, e)
            raise cache_error(e, "get") from e

        if record is None:
            self.logger.debug("Cache miss for key: %s", key)
            return None

        try:
            entry = CacheEntry.from_record(record)
        except (KeyError, TypeError, ValueError) as e:
            self.logger.debug("Unreadable cache record for key %s: %s", key, e)
            return None

        if entry.is_expired():
            self.logger.debug("Cache entry expired for key: %s", key)
            return None

        self.logger.debug("Cache hit for key: %s", key)
        return entry

    def set(
        self,
        key: str,
        data: str | bytes,
        ttl: float | None = None,
        etag: str | None = None,
    ) -> None:
        """Insert or replace an entry; committed before returning."""
        ttl_to_use = self.config.default_ttl_seconds if ttl is None else ttl
        if ttl_to_use <= 0:
            raise validation_error("ttl must be positive", str(ttl_to_use))

        now = time.time()
        entry = CacheEntry(
            key=key,
            data=data,
            created_at=now,
            expires_at=now + ttl_to_use,
            etag=etag,
        )
        try:
            self._cache.set(key, entry.to_record(), expire=ttl_to_use, retry=True)
        except _STORE_ERRORS as e:
            self.logger.warning("Cache set error for key %s: %s", key, e)
            raise cache_error(e, "set") from e

        self.logger.debug("Cached value for key: %s (TTL: %s)", key, ttl_to_use)

    def exists(self, key: str) -> bool:
        """Check for a valid entry without loading the payload."""
        try:
            return key in self._cache
        except _STORE_ERRORS as e:
            self.logger.warning("Cache exists error for key %s: %s", key, e)
            raise cache_error(e, "exists") from e

    def delete(self, key: str) -> None:
        """Remove an entry; absent keys are ignored."""
        try:
            existed = self._cache.delete(key, retry=True)
        except _STORE_ERRORS as e:
            self.logger.warning("Cache delete error for key %s: %s", key, e)
            raise cache_error(e, "delete") from e
        self.logger.debug("Deleted cache key: %s (existed: %s)", key, existed)

    def clear(self) -> None:
        """Remove all entries."""
        try:
            removed = self._cache.clear(retry=True)
        except _STORE_ERRORS as e:
            self.logger.warning("Cache clear error: %s", e)
            raise cache_error(e, "clear") from e
        self.logger.info("Cache cleared (%d entries)", removed)

    def cleanup(self) -> int:
        """Remove entries whose expiration time has passed."""
        try:
            removed: int = self._cache.expire(retry=True)
        except _STORE_ERRORS as e:
            self.logger.warning("Cache cleanup error: %s", e)
            raise cache_error(e, "cleanup") from e

        if removed > 0:
            self.logger.info("Removed %d expired cache entries", removed)
        return removed

    def stats(self) -> CacheStats:
        """Count entries and measure the on-disk footprint."""
        try:
            total = 0
            expired = 0
            # iterkeys also yields expired rows; membership honours expiry
            for key in self._cache.iterkeys():
                total += 1
                if key not in self._cache:
                    expired += 1
            size_bytes = int(self._cache.volume())
        except _STORE_ERRORS as e:
            self.logger.warning("Error getting cache stats: %s", e)
            raise cache_error(e, "stats") from e

        return CacheStats(
            total_entries=total,
            valid_entries=total - expired,
            expired_entries=expired,
            size_bytes=size_bytes,
        )

    def keys(self) -> list[str]:
        """List keys of valid entries."""
        try:
            return [key for key in self._cache.iterkeys() if key in self._cache]
        except _STORE_ERRORS as e:
            raise cache_error(e, "keys") from e

    def close(self) -> None:
        """Close the cache and release resources."""
        if self._closed:
            return
        self._closed = True
        try:
            self._cache.close()
            self.logger.debug("Cache closed")
        except _STORE_ERRORS as e:
            self.logger.warning("Error closing cache: %s", e)

    def __enter__(self) -> "DiskCacheManager":
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Context manager exit."""
        self.close()

    def __repr__(self) -> str:
        return f"DiskCacheManager(cache_path={str(self.cache_path)!r})"
