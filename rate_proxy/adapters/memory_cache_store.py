"""
In-memory CacheStore for tests and local dev, no server required.

Only shared within one process.  The lock stands in for the atomicity a real
store gives increment(); the domain code never locks.
"""

import threading
import time
from typing import Any, Callable

from rate_proxy.domain.cache_store import CacheStore


class InMemoryCacheStore(CacheStore):
    """
    Test helpers:
        clock      injectable monotonic clock; pass a callable to move time
        keys()     live (non-expired) keys
        writes     list of (key, value, ttl) recorded by write()
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._store: dict[str, tuple[float, Any]] = {}
        self.writes: list[tuple[str, Any, float]] = []

    def _live(self, key: str) -> tuple[float, Any] | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        expires_at, _ = entry
        if self._clock() >= expires_at:
            self._store.pop(key, None)
            return None
        return entry

    def read(self, key: str) -> Any | None:
        with self._lock:
            entry = self._live(key)
            return entry[1] if entry else None

    def write(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            self._store[key] = (self._clock() + ttl, value)
            self.writes.append((key, value, ttl))

    def increment(self, key: str, amount: int, ttl: float) -> int | None:
        with self._lock:
            entry = self._live(key)
            if entry is None:
                expires_at, current = self._clock() + ttl, 0
            else:
                expires_at, current = entry
            new_value = int(current) + amount
            self._store[key] = (expires_at, new_value)
            return new_value

    def decrement(self, key: str, amount: int) -> None:
        with self._lock:
            entry = self._live(key)
            if entry is None:
                return
            expires_at, current = entry
            self._store[key] = (expires_at, int(current) - amount)

    def keys(self) -> list[str]:
        with self._lock:
            return [k for k in list(self._store) if self._live(k) is not None]
