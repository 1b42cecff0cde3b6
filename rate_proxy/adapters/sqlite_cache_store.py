"""
SQLite adapter for CacheStore.

Shares the cache and the quota counter between processes on one host.
Use ":memory:" for tests, a file path for production.

Every mutation is a single statement, so SQLite's write lock makes
increment() atomic across connections.  Within one process the connection
is shared by every thread and guarded by a lock: sqlite3 cannot commit
while another thread has a statement in progress.  Needs SQLite >= 3.35
(RETURNING).
"""

import json
import sqlite3
import threading
import time
from typing import Any, Callable

from rate_proxy.domain.cache_store import CacheStore

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache_entries (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    expires_at  REAL NOT NULL
);
"""

# Counters are kept as bare integers in `value` so SQL arithmetic works on them;
# json.loads() reads them back as int.
_INCREMENT = """
INSERT INTO cache_entries (key, value, expires_at) VALUES (:key, :amount, :expires_at)
ON CONFLICT (key) DO UPDATE SET
    value = CASE WHEN cache_entries.expires_at <= :now
                 THEN excluded.value
                 ELSE CAST(cache_entries.value AS INTEGER) + excluded.value END,
    expires_at = CASE WHEN cache_entries.expires_at <= :now
                      THEN excluded.expires_at
                      ELSE cache_entries.expires_at END
RETURNING value
"""


class SqliteCacheStore(CacheStore):

    def __init__(self, db_path: str = "rate_cache.db", clock: Callable[[], float] = time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(db_path, timeout=5.0, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)

    def read(self, key: str) -> Any | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM cache_entries WHERE key = ? AND expires_at > ?",
                (key, self._clock()),
            ).fetchone()
        if not row:
            return None
        return json.loads(row["value"])

    def write(self, key: str, value: Any, ttl: float) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO cache_entries (key, value, expires_at) VALUES (?, ?, ?)",
                (key, json.dumps(value), self._clock() + ttl),
            )

    def increment(self, key: str, amount: int, ttl: float) -> int | None:
        now = self._clock()
        with self._lock, self._conn:
            rows = self._conn.execute(
                _INCREMENT,
                {"key": key, "amount": amount, "expires_at": now + ttl, "now": now},
            ).fetchall()
        return int(rows[0]["value"])

    def decrement(self, key: str, amount: int) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                "UPDATE cache_entries SET value = CAST(value AS INTEGER) - ?"
                " WHERE key = ? AND expires_at > ?",
                (amount, key, self._clock()),
            )

    def close(self) -> None:
        with self._lock:
            self._conn.close()
