"""Cache service protocol."""

from types import TracebackType
from typing import Protocol, runtime_checkable

from bqs.core.cache.models import CacheEntry, CacheStats


@runtime_checkable
class CacheService(Protocol):
    """Contract shared by every cache backend.

    Backends are chosen at construction time; callers only depend on this
    protocol.
    """

    def get(self, key: str) -> CacheEntry | None:
        """Retrieve a valid entry.

        Args:
            key: Cache key to retrieve

        Returns:
            The entry, or None on a miss (absent or expired)

        Raises:
            ClassifiedError: With kind CACHE when the store itself fails
        """
        ...

    def set(
        self,
        key: str,
        data: str | bytes,
        ttl: float | None = None,
        etag: str | None = None,
    ) -> None:
        """Insert or replace an entry.

        Args:
            key: Cache key to store under
            data: Serialized payload
            ttl: Time-to-live in seconds, store default when None
            etag: Optional entity tag kept with the entry
        """
        ...

    def exists(self, key: str) -> bool:
        """Check whether a valid entry exists without loading its payload."""
        ...

    def delete(self, key: str) -> None:
        """Remove an entry. Deleting an absent key is not an error."""
        ...

    def clear(self) -> None:
        """Remove all entries."""
        ...

    def cleanup(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """
        ...

    def stats(self) -> CacheStats:
        """Compute aggregate statistics."""
        ...

    def close(self) -> None:
        """Release underlying resources."""
        ...

    def __enter__(self) -> "CacheService": ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...
