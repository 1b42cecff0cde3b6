"""
Runtime settings read from environment variables.

    RATE_API_URL        - pricing API base URL (default: http://localhost:8080)
    RATE_API_TOKEN      - pricing API token (required to build the real client)
    CACHE_BACKEND       - "memory", "sqlite", "redis" or "null" (default: memory)
    CACHE_DB_PATH       - SQLite path when CACHE_BACKEND=sqlite (default: data/rate_cache.db)
    REDIS_URL           - Redis URL when CACHE_BACKEND=redis
    QUOTA_LIMIT         - daily upstream call ceiling (default: 950)
    RATE_TTL            - seconds a cached rate stays fresh (default: 300)
    REFRESH_INTERVAL    - seconds between batch refreshes (default: 240)
    REFRESH_COOLDOWN    - seconds to wait after a failed cycle (default: 10)
    REFRESH_ATTEMPTS    - attempts per refresh cycle (default: 3)
    REFRESH_BACKOFF     - seconds between attempts (default: 20)
    SINGLE_TIMEOUT      - seconds for a single lookup call (default: 5)
    BATCH_TIMEOUT       - seconds for a batch call (default: 20)
"""

import os
from dataclasses import dataclass

from rate_proxy.adapters.rate_api_client import DEFAULT_BASE_URL
from rate_proxy.daemon import CRASH_COOLDOWN, REFRESH_INTERVAL
from rate_proxy.lookup import RATE_TTL, SINGLE_TIMEOUT
from rate_proxy.quota import LIMIT
from rate_proxy.refresh import BATCH_TIMEOUT, RETRY_ATTEMPTS, RETRY_BACKOFF


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_BASE_URL
    api_token: str = ""
    cache_backend: str = "memory"
    cache_db_path: str = "data/rate_cache.db"
    redis_url: str = "redis://localhost:6379/0"
    quota_limit: int = LIMIT
    rate_ttl: float = RATE_TTL
    refresh_interval: float = REFRESH_INTERVAL
    refresh_cooldown: float = CRASH_COOLDOWN
    refresh_attempts: int = RETRY_ATTEMPTS
    refresh_backoff: float = RETRY_BACKOFF
    single_timeout: float = SINGLE_TIMEOUT
    batch_timeout: float = BATCH_TIMEOUT

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> "Settings":
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            api_url=env.get("RATE_API_URL", defaults.api_url),
            api_token=env.get("RATE_API_TOKEN", defaults.api_token),
            cache_backend=env.get("CACHE_BACKEND", defaults.cache_backend).lower(),
            cache_db_path=env.get("CACHE_DB_PATH", defaults.cache_db_path),
            redis_url=env.get("REDIS_URL", defaults.redis_url),
            quota_limit=int(env.get("QUOTA_LIMIT", defaults.quota_limit)),
            rate_ttl=float(env.get("RATE_TTL", defaults.rate_ttl)),
            refresh_interval=float(env.get("REFRESH_INTERVAL", defaults.refresh_interval)),
            refresh_cooldown=float(env.get("REFRESH_COOLDOWN", defaults.refresh_cooldown)),
            refresh_attempts=int(env.get("REFRESH_ATTEMPTS", defaults.refresh_attempts)),
            refresh_backoff=float(env.get("REFRESH_BACKOFF", defaults.refresh_backoff)),
            single_timeout=float(env.get("SINGLE_TIMEOUT", defaults.single_timeout)),
            batch_timeout=float(env.get("BATCH_TIMEOUT", defaults.batch_timeout)),
        )
