"""
Redis adapter for CacheStore: the production store when several hosts share
one budget.

Rates are stored as JSON strings with SET ... EX.  The counter is created with
SET NX EX and bumped with INCRBY inside one MULTI, so the TTL is only applied
when the key is born and the increment stays atomic.
"""

import json
import logging
from typing import Any

import redis

from rate_proxy.domain.cache_store import CacheStore

log = logging.getLogger(__name__)


class RedisCacheStore(CacheStore):

    def __init__(self, client: "redis.Redis"):
        self._redis = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: float = 2.0) -> "RedisCacheStore":
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client)

    def read(self, key: str) -> Any | None:
        raw = self._redis.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def write(self, key: str, value: Any, ttl: float) -> None:
        self._redis.set(key, json.dumps(value), ex=max(1, int(ttl)))

    def increment(self, key: str, amount: int, ttl: float) -> int | None:
        with self._redis.pipeline(transaction=True) as pipe:
            pipe.set(key, 0, ex=max(1, int(ttl)), nx=True)
            pipe.incrby(key, amount)
            _, new_value = pipe.execute()
        return int(new_value)

    def decrement(self, key: str, amount: int) -> None:
        # DECRBY on a missing key would create a counter without TTL, so the
        # existence check and the DECRBY run under WATCH in one transaction.
        def _decrement(pipe: "redis.client.Pipeline") -> None:
            if not pipe.exists(key):
                log.debug("decrement skipped: key=%s absent", key)
                return
            pipe.multi()
            pipe.decrby(key, amount)

        self._redis.transaction(_decrement, key)
