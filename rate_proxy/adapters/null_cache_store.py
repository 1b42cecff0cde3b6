from typing import Any

from rate_proxy.domain.cache_store import CacheStore


class NullCacheStore(CacheStore):
    """Adapter: stores nothing and has no atomic increment.

    Every read misses, and because there is no counter the daily budget
    cannot be enforced.  QuotaGuard.check() refuses a store like this before
    any upstream call, so a proxy wired to it serves nothing.
    """

    atomic_increment = False

    def read(self, key: str) -> Any | None:
        return None

    def write(self, key: str, value: Any, ttl: float) -> None:
        pass

    def increment(self, key: str, amount: int, ttl: float) -> int | None:
        return None

    def decrement(self, key: str, amount: int) -> None:
        pass
