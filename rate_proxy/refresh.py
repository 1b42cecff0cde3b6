"""
Batch refresh: refill the whole catalog in one upstream round trip.

One refresh costs one unit of quota no matter how many combinations the
catalog holds.  Budget exhaustion at either gate ends the cycle quietly:
it clears at the next cycle or at day rollover, so retrying it now would
only burn attempts.  Anything else (a store that cannot count calls,
transport failures, upstream errors) propagates to refresh_with_retry()
and then to the scheduler.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Literal

from rate_proxy.adapters.ports import RateGateway
from rate_proxy.domain.cache_store import CacheStore
from rate_proxy.domain.catalog import CATALOG
from rate_proxy.domain.errors import QuotaExceeded, QuotaNotSupported, UpstreamUnavailable
from rate_proxy.domain.rates import classify, extract_rates
from rate_proxy.lookup import RATE_TTL
from rate_proxy.quota import QuotaGuard

log = logging.getLogger(__name__)

BATCH_TIMEOUT = 20.0
RETRY_ATTEMPTS = 3
RETRY_BACKOFF = 20.0


@dataclass
class RefreshReport:
    outcome: Literal[
        "refreshed",       # payload processed, possibly partially
        "quota_exceeded",  # budget spent before or after the upstream call
        "invalid_payload", # upstream answered with the wrong shape
    ]
    written: int = 0
    skipped: dict[str, int] = field(default_factory=dict)
    duration_ms: float = 0.0


class BatchRefresher:

    def __init__(
        self,
        store: CacheStore,
        gateway: RateGateway,
        guard: QuotaGuard,
        ttl: float = RATE_TTL,
        timeout: float = BATCH_TIMEOUT,
    ):
        self._store = store
        self._gateway = gateway
        self._guard = guard
        self._ttl = ttl
        self._timeout = timeout

    def run(self) -> RefreshReport:
        start = time.monotonic()
        log.info("event=refresh_start combinations=%d", len(CATALOG))

        try:
            self._guard.check()
        except QuotaNotSupported:
            raise
        except QuotaExceeded as exc:
            log.warning("event=quota_exceeded stage=preflight error=%s", exc)
            return RefreshReport("quota_exceeded")

        response = self._gateway.batch(CATALOG, timeout=self._timeout)
        if not response.success:
            message = response.error or "unknown_error"
            log.error("event=upstream_error error=%s", message)
            raise UpstreamUnavailable(f"Upstream API error: {message}")

        try:
            usage = self._guard.consume(1)
        except QuotaNotSupported:
            raise
        except QuotaExceeded as exc:
            log.warning("event=quota_exceeded stage=consume error=%s", exc)
            return RefreshReport("quota_exceeded")
        log.info("event=quota_consumed source=refresh usage=%d", usage)

        rates = extract_rates(response.payload)
        if rates is None:
            log.warning("event=invalid_payload type=%s", type(response.payload).__name__)
            return RefreshReport("invalid_payload")

        report = RefreshReport("refreshed")
        for entry in rates:
            outcome = classify(entry)
            if outcome.status != "valid":
                report.skipped[outcome.status] = report.skipped.get(outcome.status, 0) + 1
                continue
            self._store.write(outcome.key.cache_key, outcome.rate, self._ttl)
            report.written += 1

        report.duration_ms = round((time.monotonic() - start) * 1000, 1)
        log.info(
            "event=refresh_success cached_rates=%d skipped=%s duration_ms=%.1f",
            report.written, report.skipped or "{}", report.duration_ms,
        )
        return report


async def refresh_with_retry(
    refresher: BatchRefresher,
    attempts: int = RETRY_ATTEMPTS,
    backoff: float = RETRY_BACKOFF,
) -> RefreshReport:
    """
    Run one refresh, retrying crashes up to `attempts` times with a fixed
    backoff.  The refresh itself is blocking I/O and runs in a worker thread.
    The last exception is re-raised once attempts are used up.
    """
    for attempt in range(1, attempts + 1):
        try:
            return await asyncio.to_thread(refresher.run)
        except Exception as exc:
            log.error(
                "event=refresh_crash attempt=%d/%d error_class=%s error=%s",
                attempt, attempts, type(exc).__name__, exc,
            )
            if attempt >= attempts:
                raise
            await asyncio.sleep(backoff)
    raise RuntimeError("refresh_with_retry needs at least one attempt")
