"""
Single-value async cache with a time-to-live.

Used by HHClient for the hh.ru area tree, which changes rarely and is
expensive to fetch. Stale reads are acceptable; only one refresh runs at a
time.
"""

import asyncio
import time
from typing import Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class TTLCache(Generic[T]):
    """
    Holds one value and refreshes it through a loader once it expires.

    Usage:
        cache = TTLCache(ttl_seconds=3600)
        areas = await cache.get_or_load(fetch_areas)
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._value: Optional[T] = None
        self._loaded_at: Optional[float] = None
        self._lock = asyncio.Lock()

    def _is_fresh(self) -> bool:
        return (
            self._loaded_at is not None
            and self._clock() - self._loaded_at < self.ttl_seconds
        )

    def peek(self) -> Optional[T]:
        """Return the cached value if still fresh, without loading."""
        return self._value if self._is_fresh() else None

    async def get_or_load(self, loader: Callable[[], Awaitable[T]]) -> T:
        """
        Return the cached value, calling loader when it is missing or expired.

        Loader exceptions propagate and leave the previous value untouched.
        """
        if self._is_fresh():
            return self._value

        async with self._lock:
            # Another waiter may have refreshed while we queued on the lock
            if self._is_fresh():
                return self._value
            value = await loader()
            self._value = value
            self._loaded_at = self._clock()
            return value

    def invalidate(self) -> None:
        self._value = None
        self._loaded_at = None
