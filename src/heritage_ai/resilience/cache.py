"""In-memory response cache with per-cache TTL and a bounded entry count."""

import asyncio
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import structlog

logger = structlog.get_logger()


@dataclass
class CacheEntry:
    """A cached value and when it was stored."""

    key: str
    value: Any
    stored_at: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        return now - self.stored_at < self.ttl


def fingerprint(endpoint: str, *parts: str) -> str:
    """Build a cache key from an endpoint name and normalized request parts.

    Parts are trimmed and lower-cased so that ``"Taj Mahal "`` and
    ``"taj mahal"`` share an entry. Each part is percent-encoded, so a ``:``
    inside a part cannot be read as a separator.
    """
    normalized = [quote(part.strip().lower(), safe=" ") for part in parts]
    return ":".join([endpoint, *normalized])


class ResponseCache:
    """TTL cache for upstream payloads.

    Expired entries are removed lazily on read, or in bulk through
    ``purge_expired``. When full, the oldest stored entry is evicted.
    """

    def __init__(
        self,
        name: str,
        ttl: float,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    async def get(self, key: str) -> Any | None:
        """Return the cached value for ``key``, or ``None`` if absent or expired."""
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None

            if not entry.is_valid(self._clock()):
                del self._entries[key]
                self._misses += 1
                logger.debug("Cache entry expired", cache=self.name, key=key)
                return None

            self._hits += 1
            return entry.value

    async def put(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""
        async with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(
                key=key, value=value, stored_at=self._clock(), ttl=self.ttl
            )
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted cache entry", cache=self.name, key=evicted)

    async def purge_expired(self) -> int:
        """Remove every expired entry and return how many were removed."""
        async with self._lock:
            now = self._clock()
            expired = [
                key for key, entry in self._entries.items() if not entry.is_valid(now)
            ]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.info("Purged expired cache entries", cache=self.name, count=len(expired))
        return len(expired)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        total = self._hits + self._misses
        return {
            "name": self.name,
            "entries": len(self._entries),
            "max_entries": self.max_entries,
            "ttl": self.ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self._hits / total if total else 0.0,
        }
