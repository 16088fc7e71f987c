"""In-process result cache."""

import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any, NamedTuple

from sitelens.core.interfaces import ICache
from sitelens.core.logging import get_logger

logger = get_logger("cache")

DEFAULT_MAX_ENTRIES = 1024


class CacheEntry(NamedTuple):
    value: Any
    expires_at: float | None


class MemoryCache(ICache):
    """Bounded in-memory cache for finished reports.

    Entries expire ``ttl`` seconds after being stored. When full, the entry
    stored longest ago is evicted first. Not shared between processes.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, entry: CacheEntry) -> bool:
        return entry.expires_at is not None and self._clock() >= entry.expires_at

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(entry):
            del self._entries[key]
            logger.debug("cache_entry_expired", key=key)
            return None
        return entry.value

    async def set(self, key: str, value: Any, ttl: int = 3600) -> None:
        """Store value; a ttl of 0 keeps it until evicted."""
        expires_at = self._clock() + ttl if ttl > 0 else None
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(value, expires_at)

        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("cache_entry_evicted", key=evicted)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def clear(self) -> None:
        self._entries.clear()

    async def cleanup_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        expired = [key for key, entry in self._entries.items() if self._expired(entry)]
        for key in expired:
            del self._entries[key]
        return len(expired)
