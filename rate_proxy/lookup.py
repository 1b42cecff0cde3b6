"""
On-demand rate lookup: serve from cache, fill from upstream on a miss.

Flow for one already-validated combination:
  1. cache hit → return, no quota, no upstream call
  2. budget already spent (or uncountable) → fail fast, upstream untouched
  3. ask upstream for exactly this combination
  4. count the call against the budget (only after a successful answer)
  5. validate the matching tuple, cache it, return it

Every failure is raised as a PricingError subclass; nothing is retried here.
The cache is written only once a fully validated value is in hand.
"""

import logging

from rate_proxy.adapters.ports import RateGateway
from rate_proxy.domain.cache_store import CacheStore
from rate_proxy.domain.catalog import CombinationKey
from rate_proxy.domain.errors import (
    PricingError,
    QuotaExceeded,
    UpstreamContractViolation,
    UpstreamUnavailable,
)
from rate_proxy.domain.rates import extract_rates, normalize_rate
from rate_proxy.quota import QuotaGuard

log = logging.getLogger(__name__)

RATE_TTL = 5 * 60
SINGLE_TIMEOUT = 5.0


class RateLookup:

    def __init__(
        self,
        store: CacheStore,
        gateway: RateGateway,
        guard: QuotaGuard,
        ttl: float = RATE_TTL,
        timeout: float = SINGLE_TIMEOUT,
    ):
        self._store = store
        self._gateway = gateway
        self._guard = guard
        self._ttl = ttl
        self._timeout = timeout

    def fetch(self, key: CombinationKey) -> float:
        cached = self._store.read(key.cache_key)
        if cached is not None:
            log.debug("event=cache_hit key=%s", key.cache_key)
            return cached

        try:
            self._guard.check()
        except QuotaExceeded as exc:
            log.warning("event=quota_exhausted key=%s error=%s", key.cache_key, exc)
            raise

        try:
            response = self._gateway.single(key, timeout=self._timeout)
        except PricingError:
            raise
        except Exception as exc:
            log.error("event=upstream_crash key=%s error_class=%s error=%s",
                      key.cache_key, type(exc).__name__, exc)
            raise UpstreamUnavailable("Pricing service unavailable") from exc

        if not response.success:
            message = response.error or "unknown error"
            log.warning("event=upstream_error key=%s error=%s", key.cache_key, message)
            raise UpstreamUnavailable(f"Pricing service error: {message}")

        usage = self._guard.consume(1)
        log.info("event=quota_consumed source=lookup usage=%d", usage)

        rate = self._pick_rate(key, response.payload)
        self._store.write(key.cache_key, rate, self._ttl)
        log.info("event=cache_fill key=%s rate=%s", key.cache_key, rate)
        return rate

    def _pick_rate(self, key: CombinationKey, payload) -> float:
        rates = extract_rates(payload)
        if not rates:
            raise UpstreamContractViolation("Pricing service returned no rates")

        entry = next((r for r in rates if isinstance(r, dict) and key.matches(r)), None)
        if entry is None:
            raise UpstreamContractViolation(
                f"Pricing service returned no rates for {key.period}/{key.hotel}/{key.room}"
            )

        rate = normalize_rate(entry.get("rate"))
        if rate is None:
            raise UpstreamContractViolation(
                f"Pricing service returned invalid rate: {entry.get('rate')!r}"
            )
        return rate
