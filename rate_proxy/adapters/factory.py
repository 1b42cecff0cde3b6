import os

from rate_proxy.domain.cache_store import CacheStore


def create_cache_store(backend: str | None = None, **options) -> CacheStore:
    """
    Factory: create the right CacheStore adapter based on config.

    The backend can be passed explicitly or read from the CACHE_BACKEND
    env var. Defaults to "memory".  Options:
        db_path    SQLite file (sqlite)
        redis_url  connection URL (redis)
    """
    backend = (backend or os.environ.get("CACHE_BACKEND", "memory")).lower()

    if backend == "memory":
        from .memory_cache_store import InMemoryCacheStore

        return InMemoryCacheStore()

    if backend == "sqlite":
        from .sqlite_cache_store import SqliteCacheStore

        db_path = options.get("db_path") or os.environ.get("CACHE_DB_PATH", "data/rate_cache.db")
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
        return SqliteCacheStore(db_path=db_path)

    if backend == "redis":
        from .redis_cache_store import RedisCacheStore

        return RedisCacheStore.from_url(options.get("redis_url") or os.environ["REDIS_URL"])

    if backend == "null":
        from .null_cache_store import NullCacheStore

        return NullCacheStore()

    raise ValueError(f"Unknown cache backend: {backend!r}")
