"""Cache coverage and budget usage, for an external health endpoint."""

from rate_proxy.domain.cache_store import CacheStore
from rate_proxy.domain.catalog import CATALOG
from rate_proxy.quota import QuotaGuard


def cached_entries(store: CacheStore) -> int:
    return sum(1 for key in CATALOG if store.read(key.cache_key) is not None)


def snapshot(store: CacheStore, guard: QuotaGuard) -> dict:
    cached = cached_entries(store)
    total = len(CATALOG)
    return {
        "status": "ok",
        "cache": {
            "total_combinations": total,
            "cached_entries": cached,
            "coverage": f"{round(cached / total * 100, 1)}%",
        },
        "upstream_budget": {
            "calls_today": guard.usage(),
            "limit": guard.limit,
        },
    }
