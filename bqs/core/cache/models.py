"""Cache data models and types."""

import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """One cached result."""

    key: str
    data: str | bytes
    created_at: float
    expires_at: float
    etag: str | None = None

    def is_expired(self, now: float | None = None) -> bool:
        """Check if the entry is past its expiration time."""
        current = time.time() if now is None else now
        return current >= self.expires_at

    @property
    def ttl_seconds(self) -> float:
        """Lifetime the entry was written with."""
        return self.expires_at - self.created_at

    def to_record(self) -> dict[str, Any]:
        """Plain-dict form used for persistence."""
        return asdict(self)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "CacheEntry":
        """Rebuild an entry from its persisted form."""
        return cls(
            key=record["key"],
            data=record["data"],
            created_at=float(record["created_at"]),
            expires_at=float(record["expires_at"]),
            etag=record.get("etag"),
        )


@dataclass
class CacheStats:
    """Point-in-time cache statistics."""

    total_entries: int
    valid_entries: int
    expired_entries: int
    size_bytes: int

    @property
    def valid_ratio(self) -> float:
        """Share of valid entries as a percentage."""
        if self.total_entries == 0:
            return 0.0
        return (self.valid_entries / self.total_entries) * 100.0


@dataclass
class CacheConfig:
    """Configuration for cache instances."""

    cache_path: Path | None = None
    default_ttl_seconds: float = 900.0
    timeout: float = 60.0
