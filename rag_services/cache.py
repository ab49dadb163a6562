"""
Time-bounded answer cache
"""
import asyncio
import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Hashable, Optional, Tuple

logger = logging.getLogger(__name__)


class QueryCache:
    """TTL cache for generated answers, optionally bounded as an LRU.

    Entries expire ``ttl_seconds`` after insertion. Expiry is checked on
    read; ``purge_expired`` sweeps the rest. Only touched from the event
    loop, so no lock.
    """

    def __init__(
        self,
        ttl_seconds: float = 600,
        max_entries: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[Hashable, Tuple[float, Any]]" = OrderedDict()

    def _expired(self, inserted_at: float) -> bool:
        return self._clock() - inserted_at >= self.ttl

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        inserted_at, value = entry
        if self._expired(inserted_at):
            del self._entries[key]
            return None

        self._entries.move_to_end(key)
        return value

    def set(self, key: Hashable, value: Any) -> None:
        if key in self._entries:
            del self._entries[key]
        elif self.max_entries and len(self._entries) >= self.max_entries:
            self._entries.popitem(last=False)
        self._entries[key] = (self._clock(), value)

    def purge_expired(self) -> int:
        stale = [key for key, (inserted_at, _) in self._entries.items() if self._expired(inserted_at)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None


async def run_periodic_sweep(cache: QueryCache, interval_seconds: float) -> None:
    """Purge expired entries every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        purged = cache.purge_expired()
        if purged:
            logger.debug("Purged %d expired cached answers", purged)
