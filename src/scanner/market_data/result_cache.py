"""In-process TTL cache bounding upstream call volume for repeated queries.

Owned by the pipeline instance (no module-level singleton). Stores each
value with its insertion time and TTL; an entry is inaccessible once
``now - inserted_at > ttl`` and is evicted lazily on the next read.

There is no locking: concurrent misses on the same key may
each trigger an upstream fetch, and the last write wins.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from scanner.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CacheEntry:
    """A cached value with its freshness window."""

    key: str
    value: Any
    inserted_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.inserted_at > self.ttl


class ResultCache:
    """Key-value cache with per-entry TTL.

    Args:
        default_ttl: TTL in seconds used when ``set`` is called without one.
        clock: Monotonic time source; injectable for tests.
    """

    def __init__(
        self,
        default_ttl: float = 120.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            logger.debug("cache_expired", key=key)
            return None
        logger.debug("cache_hit", key=key)
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""
        self._entries[key] = CacheEntry(
            key=key,
            value=value,
            inserted_at=self._clock(),
            ttl=self._default_ttl if ttl is None else ttl,
        )

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        now = self._clock()
        return sum(1 for e in self._entries.values() if not e.is_expired(now))
