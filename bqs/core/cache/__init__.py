"""Metadata cache for bqs.

Provides the cache protocol, a durable DiskCache-backed store and an
in-memory store, plus the namespaced key helpers.
"""

from pathlib import Path

from bqs.core.cache.cache_manager import CacheService
from bqs.core.cache.diskcache_manager import DiskCacheManager
from bqs.core.cache.keys import metadata_key, schema_key, table_list_key
from bqs.core.cache.memory_cache import MemoryCache
from bqs.core.cache.models import CacheConfig, CacheEntry, CacheStats


def create_disk_cache(
    cache_path: Path | None = None,
    default_ttl_seconds: float = 900.0,
    timeout: float = 60.0,
) -> DiskCacheManager:
    """Create the durable cache.

    Args:
        cache_path: Directory for the cache database; resolved from
            ``BQS_CACHE_DIR`` / ``XDG_CACHE_HOME`` when None
        default_ttl_seconds: TTL used when ``set`` is called without one
        timeout: SQLite busy timeout in seconds

    Returns:
        Configured DiskCache manager
    """
    config = CacheConfig(
        cache_path=cache_path,
        default_ttl_seconds=default_ttl_seconds,
        timeout=timeout,
    )
    return DiskCacheManager(config)


def create_memory_cache(default_ttl_seconds: float = 900.0) -> MemoryCache:
    """Create an in-memory cache (tests, ``--no-cache`` style runs)."""
    return MemoryCache(CacheConfig(default_ttl_seconds=default_ttl_seconds))


__all__ = [
    "CacheConfig",
    "CacheEntry",
    "CacheService",
    "CacheStats",
    "DiskCacheManager",
    "MemoryCache",
    "create_disk_cache",
    "create_memory_cache",
    "metadata_key",
    "schema_key",
    "table_list_key",
]
