"""
One-shot rate lookup against the shared cache.

Usage:
    python scripts/lookup.py Summer FloatingPointResort SingletonRoom
    python scripts/lookup.py --health

Prints a JSON object and exits non-zero on failure.  Reads the same
environment variables as scripts/run.py.
"""

import argparse
import json
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rate_proxy import health
from rate_proxy.adapters.factory import create_cache_store
from rate_proxy.adapters.rate_api_client import RateApiClient
from rate_proxy.config import Settings
from rate_proxy.domain.catalog import parse_combination
from rate_proxy.domain.errors import PricingError
from rate_proxy.lookup import RateLookup
from rate_proxy.quota import QuotaGuard

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s  %(levelname)-7s  %(name)s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)


def main() -> int:
    parser = argparse.ArgumentParser(description="Look up one cached rate")
    parser.add_argument("period", nargs="?")
    parser.add_argument("hotel", nargs="?")
    parser.add_argument("room", nargs="?")
    parser.add_argument("--health", action="store_true", help="print cache coverage and budget usage")
    args = parser.parse_args()

    settings = Settings.from_env()
    store = create_cache_store(
        settings.cache_backend,
        db_path=settings.cache_db_path,
        redis_url=settings.redis_url,
    )
    guard = QuotaGuard(store, limit=settings.quota_limit)

    if args.health:
        print(json.dumps(health.snapshot(store, guard), indent=2))
        return 0

    gateway = RateApiClient(token=settings.api_token, base_url=settings.api_url)
    lookup = RateLookup(store, gateway, guard, ttl=settings.rate_ttl, timeout=settings.single_timeout)
    try:
        key = parse_combination(args.period, args.hotel, args.room)
        rate = lookup.fetch(key)
    except PricingError as exc:
        print(json.dumps({"error": str(exc), "status": exc.http_status}))
        return 1
    finally:
        gateway.close()

    print(json.dumps({"rate": rate}))
    return 0


if __name__ == "__main__":
    sys.exit(main())
