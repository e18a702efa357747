"""
In-memory TTL cache for Stats API payloads.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from shared.logging import get_logger


DEFAULT_TTL_SECONDS = 300

MISSING = object()


@dataclass
class CacheEntry:
    """A cached payload and the moment it was stored."""

    key: str
    value: Any
    created_at: float
    ttl: float

    @property
    def expires_at(self) -> float:
        return self.created_at + self.ttl

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TTLCache:
    """Process-local key/value store with a fixed TTL per entry.

    Expiry is lazy: an expired entry is treated as absent on read and
    dropped at that point. There is no size bound and no lock; concurrent
    writers on the same key are last-write-wins.
    """

    def __init__(self, default_ttl: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self.logger = get_logger("gameday.cache")

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            # Only drop the entry we looked at; a concurrent set may have replaced it
            if self._entries.get(key) is entry:
                del self._entries[key]
            return None
        return entry

    def has(self, key: str) -> bool:
        """Whether a live entry exists for ``key``."""
        return self._live_entry(key) is not None

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for ``key`` or ``default``."""
        entry = self._live_entry(key)
        if entry is None:
            self._misses += 1
            return default
        self._hits += 1
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store ``value``; overwriting a key restarts its TTL clock."""
        entry_ttl = self.default_ttl if ttl is None else ttl
        if entry_ttl <= 0:
            raise ValueError("ttl must be positive")
        self._entries[key] = CacheEntry(key=key, value=value, created_at=self._clock(), ttl=entry_ttl)
        self.logger.debug("Cached value", key=key, ttl=entry_ttl)

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            self.logger.debug("Purged expired cache entries", count=len(expired))
        return len(expired)

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        now = self._clock()
        live = sum(1 for entry in self._entries.values() if not entry.is_expired(now))
        lookups = self._hits + self._misses
        return {
            "entries": live,
            "stored": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_ratio": round(self._hits / lookups, 4) if lookups else None,
            "default_ttl_seconds": self.default_ttl,
        }

    def __len__(self) -> int:
        return sum(1 for key in list(self._entries) if self._live_entry(key) is not None)
