"""
Daily budget for upstream pricing calls.

The upstream allows roughly 1000 calls a day; we stop at LIMIT to keep
headroom.  The counter lives in the shared CacheStore under a key per UTC
date, so every process and both call paths draw from the same budget and
the count rolls over at midnight by switching keys.

consume() increments first and rolls back if the new value is over the
limit.  Concurrent callers can push the counter past LIMIT for a moment,
at most (callers - 1) counts, but each over-limit caller undoes its own
increment, so the counter settles at or below LIMIT.
"""

import logging
from datetime import date, datetime, timezone
from typing import Callable

from rate_proxy.domain.cache_store import CacheStore
from rate_proxy.domain.errors import QuotaExceeded, QuotaNotSupported

log = logging.getLogger(__name__)

LIMIT = 950
COUNTER_TTL = 24 * 60 * 60
_KEY_PREFIX = "pricing:upstream_calls"


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class QuotaGuard:

    def __init__(
        self,
        store: CacheStore,
        limit: int = LIMIT,
        today: Callable[[], date] = _utc_today,
    ):
        self._store = store
        self.limit = limit
        self._today = today

    def key_for_today(self) -> str:
        return f"{_KEY_PREFIX}:{self._today().isoformat()}"

    def usage(self) -> int:
        """Calls counted today; 0 before the first one."""
        return int(self._store.read(self.key_for_today()) or 0)

    def peek_exceeded(self) -> bool:
        """
        Cheap pre-flight gate. Not atomic: another caller may consume between
        this read and our own consume(), so never rely on it alone.
        """
        return self.usage() >= self.limit

    def check(self) -> None:
        """
        Pre-flight gate before an upstream call.

        Raises QuotaNotSupported when the store cannot count calls, and
        QuotaExceeded if today's budget is already spent.  Not atomic: another
        caller may consume between this read and our own consume().
        """
        if not self._store.atomic_increment:
            raise self._not_supported()
        current = self.usage()
        if current >= self.limit:
            raise QuotaExceeded(
                f"Upstream quota exhausted ({current}/{self.limit})", usage=current
            )

    def consume(self, amount: int = 1) -> int:
        """Count amount calls against today's budget and return the new total.

        Raises QuotaExceeded when the total would pass the limit (the counter
        is rolled back first), or QuotaNotSupported when the store cannot
        increment atomically.
        """
        key = self.key_for_today()
        new_value = self._store.increment(key, amount, COUNTER_TTL)

        if new_value is None:
            raise self._not_supported()

        if new_value > self.limit:
            try:
                self._store.decrement(key, amount)
            except Exception as exc:
                log.warning("event=quota_rollback_failed key=%s error=%s", key, exc)
            raise QuotaExceeded(
                f"Upstream quota exhausted ({new_value}/{self.limit})", usage=new_value
            )

        return new_value

    def _not_supported(self) -> QuotaNotSupported:
        return QuotaNotSupported(
            f"Cache store does not support atomic increment ({type(self._store).__name__})"
        )
