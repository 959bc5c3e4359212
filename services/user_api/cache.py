"""In-process TTL cache for the User API Service.

Serves the user count queries, which are the only cached reads. Entries
expire after a fixed TTL; the cache holds at most ``max_size`` keys and
evicts the oldest entry when full.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class CountCache:
    """Small time-indexed cache with get-or-compute semantics."""

    def __init__(
        self,
        ttl_seconds: float,
        max_size: int = 10,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Lifetime of an entry
            max_size: Maximum number of entries kept
            clock: Monotonic time source
        """
        self._ttl = ttl_seconds
        self._max_size = max_size
        self._clock = clock
        self._lock = asyncio.Lock()
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()
        # Bumped by invalidate/clear; a value computed across a bump is not stored
        self._generation = 0

    def __len__(self) -> int:
        return len(self._store)

    async def get_or_compute(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        """
        Return the cached value for key, computing and storing it on a miss.

        Args:
            key: Cache key
            factory: Coroutine function producing the value

        Returns:
            The cached or freshly computed value
        """
        async with self._lock:
            entry = self._store.get(key)
            if entry is not None and not entry.is_expired(self._clock()):
                logger.debug(f"cache: hit key={key}")
                return entry.value

            logger.debug(f"cache: miss key={key}")
            generation = self._generation
            value = await factory()
            if generation != self._generation:
                logger.debug(f"cache: discard stale value key={key}")
                return value
            self._store[key] = CacheEntry(value=value, expires_at=self._clock() + self._ttl)
            self._store.move_to_end(key)
            while len(self._store) > self._max_size:
                evicted, _ = self._store.popitem(last=False)
                logger.debug(f"cache: evict key={evicted}")
            return value

    def invalidate(self, key: str) -> None:
        """Drop a single key."""
        self._generation += 1
        if self._store.pop(key, None) is not None:
            logger.debug(f"cache: invalidate key={key}")

    def clear(self) -> None:
        """Drop every key."""
        logger.debug("cache: clear all keys")
        self._generation += 1
        self._store.clear()
