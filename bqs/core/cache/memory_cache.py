"""In-memory cache implementation."""

import logging
import threading
import time
from collections.abc import Callable
from types import TracebackType

from bqs.core.cache.models import CacheConfig, CacheEntry, CacheStats
from bqs.core.errors import validation_error


logger = logging.getLogger(__name__)


class MemoryCache:
    """In-memory cache implementation.

    Stores entries in a dict guarded by a lock. Data is lost when the process
    exits. The clock is injectable so expiry can be exercised without sleeping.
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize memory cache.

        Args:
            config: Cache configuration options
            clock: Source of the current time in epoch seconds
        """
        self.config = config or CacheConfig()
        self._clock = clock
        self._cache: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        logger.debug("Initialized memory cache")

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            entry = self._cache.get(key)
        if entry is None or entry.is_expired(self._clock()):
            return None
        return entry

    def set(
        self,
        key: str,
        data: str | bytes,
        ttl: float | None = None,
        etag: str | None = None,
    ) -> None:
        ttl_to_use = self.config.default_ttl_seconds if ttl is None else ttl
        if ttl_to_use <= 0:
            raise validation_error("ttl must be positive", str(ttl_to_use))

        now = self._clock()
        entry = CacheEntry(
            key=key,
            data=data,
            created_at=now,
            expires_at=now + ttl_to_use,
            etag=etag,
        )
        with self._lock:
            self._cache[key] = entry

        logger.debug("Cached entry %s in memory (ttl: %s)", key, ttl_to_use)

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> None:
        with self._lock:
            if self._cache.pop(key, None) is not None:
                logger.debug("Deleted cache entry from memory: %s", key)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
        logger.debug("Cleared memory cache")

    def cleanup(self) -> int:
        """Remove expired entries."""
        now = self._clock()
        with self._lock:
            expired_keys = [k for k, v in self._cache.items() if v.is_expired(now)]
            for key in expired_keys:
                del self._cache[key]

        logger.debug("Memory cache cleanup removed %d entries", len(expired_keys))
        return len(expired_keys)

    def stats(self) -> CacheStats:
        now = self._clock()
        with self._lock:
            entries = list(self._cache.values())

        expired = sum(1 for entry in entries if entry.is_expired(now))
        size_bytes = sum(
            len(e.data.encode("utf-8") if isinstance(e.data, str) else e.data)
            for e in entries
        )
        return CacheStats(
            total_entries=len(entries),
            valid_entries=len(entries) - expired,
            expired_entries=expired,
            size_bytes=size_bytes,
        )

    def keys(self) -> list[str]:
        """Get keys of valid entries (for debugging and management)."""
        now = self._clock()
        with self._lock:
            return [k for k, v in self._cache.items() if not v.is_expired(now)]

    def close(self) -> None:
        """Nothing to release; present for protocol compatibility."""

    def __enter__(self) -> "MemoryCache":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
