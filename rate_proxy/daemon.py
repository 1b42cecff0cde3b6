"""
Periodic refresh loop for the rate cache.

Kept apart from scripts/run.py so it can be imported and tested without
building real adapters from the environment.

Each deployed process runs its own loop against the same shared store;
the QuotaGuard is the only thing keeping their combined calls under budget.
"""

import asyncio
import logging

from rate_proxy.refresh import (
    RETRY_ATTEMPTS,
    RETRY_BACKOFF,
    BatchRefresher,
    RefreshReport,
    refresh_with_retry,
)

log = logging.getLogger(__name__)

REFRESH_INTERVAL = 4 * 60
CRASH_COOLDOWN = 10.0


async def run_cycle(
    refresher: BatchRefresher,
    attempts: int = RETRY_ATTEMPTS,
    backoff: float = RETRY_BACKOFF,
) -> RefreshReport | None:
    """
    One crash-isolated refresh cycle.

    Returns the report, or None if every attempt failed.  Never raises
    except for cancellation.
    """
    try:
        return await refresh_with_retry(refresher, attempts=attempts, backoff=backoff)
    except Exception as exc:
        log.error(
            "event=cycle_failed error_class=%s error=%s", type(exc).__name__, exc,
        )
        return None


async def refresh_forever(
    refresher: BatchRefresher,
    interval: float = REFRESH_INTERVAL,
    cooldown: float = CRASH_COOLDOWN,
    attempts: int = RETRY_ATTEMPTS,
    backoff: float = RETRY_BACKOFF,
    cycles: int | None = None,
) -> None:
    """
    Refresh the cache every `interval` seconds until cancelled.

    A failed cycle is logged and followed by a short `cooldown` instead of
    the full interval; the loop itself never stops on a cycle error.
    `cycles` bounds the number of iterations (tests).
    """
    done = 0
    while cycles is None or done < cycles:
        report = await run_cycle(refresher, attempts=attempts, backoff=backoff)
        done += 1
        if report is None:
            log.info("Cooling down %.0fs after failed cycle", cooldown)
            await asyncio.sleep(cooldown)
            continue
        log.debug("Sleeping %.0fs …", interval)
        await asyncio.sleep(interval)
