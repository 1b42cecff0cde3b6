"""
CacheStore port: shared key-value store for cached rates and the quota counter.

Both the on-demand lookup and the batch refresh go through this interface.
It is the only shared mutable state between processes; increment() is the
only synchronization primitive the domain relies on.
"""

from abc import ABC, abstractmethod
from typing import Any


class CacheStore(ABC):
    """
    Port: key-value store with per-write TTL and atomic counters.

    Implementations must make increment() atomic across every process that
    shares the store, or set atomic_increment = False and return None from
    increment() to signal they cannot.
    """

    atomic_increment = True

    @abstractmethod
    def read(self, key: str) -> Any | None:
        """Return the stored value, or None if absent or expired."""
        ...

    @abstractmethod
    def write(self, key: str, value: Any, ttl: float) -> None:
        """Store value, replacing any previous one. The TTL restarts on every write."""
        ...

    @abstractmethod
    def increment(self, key: str, amount: int, ttl: float) -> int | None:
        """
        Atomically add amount to the counter at key and return the new value.

        An absent counter starts at 0 and gets the given TTL; an existing
        counter keeps its expiry.  Returns None when the store has no atomic
        increment.
        """
        ...

    @abstractmethod
    def decrement(self, key: str, amount: int) -> None:
        """Subtract amount from an existing counter. Best effort."""
        ...
