"""
QuotaGuard behaviour: lazy daily counter, increment-then-rollback, and the
bound it keeps under concurrent consumers.
"""

import threading
from datetime import date

import pytest

from rate_proxy.adapters.memory_cache_store import InMemoryCacheStore
from rate_proxy.adapters.null_cache_store import NullCacheStore
from rate_proxy.adapters.sqlite_cache_store import SqliteCacheStore
from rate_proxy.domain.errors import QuotaExceeded, QuotaNotSupported
from rate_proxy.quota import COUNTER_TTL, LIMIT, QuotaGuard
from tests.contracts.cache_store_contract import FakeClock


class FlakyDecrementStore(InMemoryCacheStore):
    """Store whose rollback always fails."""

    def decrement(self, key, amount):
        raise ConnectionError("store went away")


@pytest.fixture
def store():
    return InMemoryCacheStore()


@pytest.fixture
def guard(store):
    return QuotaGuard(store, today=lambda: date(2026, 10, 19))


def test_key_is_per_utc_date(guard):
    assert guard.key_for_today() == "pricing:upstream_calls:2026-10-19"


def test_first_call_returns_1(guard):
    assert guard.consume() == 1


def test_multiple_calls_increment(guard):
    guard.consume()
    guard.consume()
    assert guard.consume() == 3


def test_counter_expires_after_a_day():
    clock = FakeClock()
    store = InMemoryCacheStore(clock=clock)
    guard = QuotaGuard(store, today=lambda: date(2026, 10, 19))
    guard.consume()
    clock.advance(COUNTER_TTL - 1)
    assert guard.usage() == 1
    clock.advance(2)
    assert guard.usage() == 0


def test_usage_zero_before_first_call(guard):
    assert guard.usage() == 0
    assert not guard.peek_exceeded()


def test_exceeding_limit_raises(guard, store):
    store.write(guard.key_for_today(), LIMIT, ttl=COUNTER_TTL)
    with pytest.raises(QuotaExceeded) as exc_info:
        guard.consume()
    assert exc_info.value.usage == LIMIT + 1


def test_counter_rolled_back_after_exceeding(guard, store):
    store.write(guard.key_for_today(), LIMIT, ttl=COUNTER_TTL)
    with pytest.raises(QuotaExceeded):
        guard.consume()
    assert store.read(guard.key_for_today()) == LIMIT


@pytest.mark.parametrize("k", [0, 1, 5])
def test_exactly_k_calls_succeed_below_limit(guard, store, k):
    store.write(guard.key_for_today(), LIMIT - k, ttl=COUNTER_TTL)

    for _ in range(k):
        guard.consume()

    for _ in range(3):
        with pytest.raises(QuotaExceeded):
            guard.consume()
        assert store.read(guard.key_for_today()) == LIMIT


def test_consume_amount_rolled_back_in_full(guard, store):
    store.write(guard.key_for_today(), LIMIT - 2, ttl=COUNTER_TTL)
    with pytest.raises(QuotaExceeded):
        guard.consume(amount=5)
    assert store.read(guard.key_for_today()) == LIMIT - 2


def test_peek_exceeded_at_limit(guard, store):
    store.write(guard.key_for_today(), LIMIT - 1, ttl=COUNTER_TTL)
    assert not guard.peek_exceeded()
    guard.consume()
    assert guard.peek_exceeded()


def test_check_raises_when_spent(guard, store):
    store.write(guard.key_for_today(), LIMIT, ttl=COUNTER_TTL)
    with pytest.raises(QuotaExceeded, match="quota exhausted"):
        guard.check()


def test_store_without_atomic_increment():
    guard = QuotaGuard(NullCacheStore())
    with pytest.raises(QuotaNotSupported, match="NullCacheStore"):
        guard.consume()


def test_check_refuses_store_without_atomic_increment():
    guard = QuotaGuard(NullCacheStore())
    with pytest.raises(QuotaNotSupported, match="NullCacheStore"):
        guard.check()


def test_not_supported_is_a_quota_failure():
    assert issubclass(QuotaNotSupported, QuotaExceeded)


def test_failed_rollback_is_swallowed():
    store = FlakyDecrementStore()
    guard = QuotaGuard(store, limit=1)
    guard.consume()
    with pytest.raises(QuotaExceeded):
        guard.consume()


def test_day_rollover_starts_new_counter(store):
    today = {"value": date(2026, 10, 19)}
    guard = QuotaGuard(store, limit=2, today=lambda: today["value"])
    guard.consume()
    guard.consume()
    assert guard.peek_exceeded()

    today["value"] = date(2026, 10, 20)
    assert not guard.peek_exceeded()
    assert guard.consume() == 1


@pytest.fixture(params=["memory", "sqlite_file"])
def shared_store(request, tmp_path):
    """A store shared by many threads, as in a threaded lookup server."""
    if request.param == "memory":
        yield InMemoryCacheStore()
        return
    store = SqliteCacheStore(str(tmp_path / "cache.db"))
    yield store
    store.close()


def test_concurrent_consumers_never_leave_counter_above_limit(shared_store):
    guard = QuotaGuard(shared_store, limit=LIMIT, today=lambda: date(2026, 10, 19))
    shared_store.write(guard.key_for_today(), LIMIT - 50, ttl=COUNTER_TTL)

    successes = []
    failures = []
    errors = []
    barrier = threading.Barrier(40)

    def worker():
        barrier.wait()
        for _ in range(5):
            try:
                successes.append(guard.consume())
            except QuotaExceeded:
                failures.append(1)
            except Exception as exc:
                errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(40)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    final = shared_store.read(guard.key_for_today())
    assert errors == []
    assert len(successes) + len(failures) == 200
    assert len(successes) <= 50
    assert all(value <= LIMIT for value in successes)
    assert final == LIMIT - 50 + len(successes)
    assert final <= LIMIT
