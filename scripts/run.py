"""
Local process runner for the rate cache refresher.

Refreshes every catalog rate from the pricing API every REFRESH_INTERVAL
seconds, spending one unit of the shared daily budget per cycle.

Usage:
    source .env && python scripts/run.py

Environment variables: see rate_proxy/config.py.  RATE_API_TOKEN is
required; use CACHE_BACKEND=sqlite or redis so lookups served by other
processes see the refreshed rates.
"""

import asyncio
import logging
import os
import sys

# Make sure project root is on sys.path when run as a script
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rate_proxy.adapters.factory import create_cache_store
from rate_proxy.adapters.rate_api_client import RateApiClient
from rate_proxy.config import Settings
from rate_proxy.daemon import refresh_forever
from rate_proxy.quota import QuotaGuard
from rate_proxy.refresh import BatchRefresher

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-7s  %(name)s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
log = logging.getLogger(__name__)


def build_refresher(settings: Settings) -> BatchRefresher:
    if not settings.api_token:
        print("ERROR: environment variable 'RATE_API_TOKEN' is not set.", file=sys.stderr)
        sys.exit(1)

    if settings.cache_backend == "null":
        print("ERROR: CACHE_BACKEND=null cannot count upstream calls; use sqlite or redis.", file=sys.stderr)
        sys.exit(1)

    store = create_cache_store(
        settings.cache_backend,
        db_path=settings.cache_db_path,
        redis_url=settings.redis_url,
    )
    gateway = RateApiClient(token=settings.api_token, base_url=settings.api_url)
    guard = QuotaGuard(store, limit=settings.quota_limit)
    return BatchRefresher(
        store, gateway, guard,
        ttl=settings.rate_ttl,
        timeout=settings.batch_timeout,
    )


async def main() -> None:
    settings = Settings.from_env()
    refresher = build_refresher(settings)

    log.info(
        "Refresher started: backend=%s  interval=%.0fs  limit=%d",
        settings.cache_backend,
        settings.refresh_interval,
        settings.quota_limit,
    )

    await refresh_forever(
        refresher,
        interval=settings.refresh_interval,
        cooldown=settings.refresh_cooldown,
        attempts=settings.refresh_attempts,
        backoff=settings.refresh_backoff,
    )


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        log.info("Refresher stopped.")
