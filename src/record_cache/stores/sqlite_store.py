from __future__ import annotations

import hashlib
import json
import logging
import sqlite3
import threading
import time
from contextlib import contextmanager
from queue import Empty, Full, Queue
from typing import TYPE_CHECKING, Any

from record_cache.records import TTL_NEVER_EXPIRE, KeyPolicy, Record, RecordKey, RecordMetadata
from record_cache.status import StatusCode

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping, Sequence
    from pathlib import Path

    from record_cache.protocol import ScanCallback

logger = logging.getLogger(__name__)


class SqliteConnectionPool:
    """Thread-safe connection pool for SQLite."""

    def __init__(self, db_path: Path, max_connections: int = 5) -> None:
        self._db_path = db_path
        self._max_connections = max_connections
        self._pool: Queue[sqlite3.Connection] = Queue(maxsize=max_connections)
        self._schema_lock = threading.Lock()
        self._schema_initialized = False

    def _ensure_initialized(self, conn: sqlite3.Connection) -> None:
        if self._schema_initialized:
            return
        with self._schema_lock:
            if self._schema_initialized:
                return
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(
                "CREATE TABLE IF NOT EXISTS records ("
                "  namespace TEXT NOT NULL,"
                "  set_name TEXT NOT NULL,"
                "  digest BLOB NOT NULL,"
                "  user_key TEXT,"
                "  bins TEXT NOT NULL,"
                "  generation INTEGER NOT NULL,"
                "  expires_at REAL,"
                "  updated_at REAL NOT NULL,"
                "  PRIMARY KEY (namespace, set_name, digest)"
                ")"
            )
            conn.commit()
            self._schema_initialized = True

    def _create_connection(self) -> sqlite3.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA busy_timeout=5000")
        self._ensure_initialized(conn)
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Acquire a connection from the pool, returning it when done."""
        try:
            conn = self._pool.get_nowait()
        except Empty:
            conn = self._create_connection()

        try:
            yield conn
        finally:
            try:
                self._pool.put_nowait(conn)
            except Full:
                conn.close()

    def close_all(self) -> None:
        """Close every idle connection in the pool."""
        while True:
            try:
                conn = self._pool.get_nowait()
            except Empty:
                return
            conn.close()


class SqliteRecordStore:
    """Record store client backed by a local SQLite file.

    Records are addressed by (namespace, set, digest); the user key is only
    kept when written with ``KeyPolicy.SEND``. Bins are stored as JSON, so
    payloads must be JSON-serializable.
    """

    def __init__(self, db_path: Path, clock: Callable[[], float] = time.time) -> None:
        self._db_path = db_path
        self._clock = clock
        self._pool = SqliteConnectionPool(db_path)
        self._last_error = ""

    def _connect(self) -> sqlite3.Connection:
        return self._pool._create_connection()

    def init_key(self, namespace: str, set_name: str, key: str) -> RecordKey:
        return RecordKey(namespace, set_name, key, _digest(set_name, key))

    def get(self, key: RecordKey) -> tuple[int, Record]:
        try:
            with self._pool.connection() as conn:
                record = self._read(conn, key)
        except sqlite3.Error as e:
            return self._fail(e), Record(key)
        if record.metadata is None:
            return StatusCode.ERR_RECORD_NOT_FOUND, record
        return StatusCode.OK, record

    def get_many(self, keys: Sequence[RecordKey]) -> tuple[int, list[Record]]:
        try:
            with self._pool.connection() as conn:
                records = [self._read(conn, key) for key in keys]
        except sqlite3.Error as e:
            return self._fail(e), [Record(key) for key in keys]
        return StatusCode.OK, records

    def put(
        self,
        key: RecordKey,
        bins: Mapping[str, Any],
        ttl: int = 0,
        *,
        key_policy: KeyPolicy = KeyPolicy.DIGEST,
    ) -> int:
        now = self._clock()
        expires_at = now + ttl if ttl > 0 else None
        user_key = key.key if key_policy is KeyPolicy.SEND else None
        try:
            encoded = json.dumps(dict(bins))
        except (TypeError, ValueError) as e:
            self._last_error = f"Bins for key {key.key!r} are not JSON-serializable: {e}"
            return StatusCode.ERR_REQUEST_INVALID
        try:
            with self._pool.connection() as conn:
                conn.execute(
                    "INSERT INTO records (namespace, set_name, digest, user_key, bins, generation, expires_at, updated_at)"
                    " VALUES (?, ?, ?, ?, ?, 1, ?, ?)"
                    " ON CONFLICT (namespace, set_name, digest) DO UPDATE SET"
                    "  user_key = COALESCE(excluded.user_key, records.user_key),"
                    "  bins = excluded.bins,"
                    "  generation = CASE WHEN records.expires_at IS NOT NULL AND records.expires_at <= ?"
                    "    THEN 1 ELSE records.generation + 1 END,"
                    "  expires_at = excluded.expires_at,"
                    "  updated_at = excluded.updated_at",
                    (key.namespace, key.set_name, self._digest_of(key), user_key, encoded, expires_at, now, now),
                )
                conn.commit()
        except sqlite3.Error as e:
            return self._fail(e)
        return StatusCode.OK

    def remove(self, key: RecordKey) -> int:
        try:
            with self._pool.connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM records WHERE namespace = ? AND set_name = ? AND digest = ?"
                    " AND (expires_at IS NULL OR expires_at > ?)",
                    (key.namespace, key.set_name, self._digest_of(key), self._clock()),
                )
                conn.commit()
        except sqlite3.Error as e:
            return self._fail(e)
        if cursor.rowcount == 0:
            return StatusCode.ERR_RECORD_NOT_FOUND
        return StatusCode.OK

    def truncate(self, namespace: str, set_name: str, before_nanos: int = 0) -> int:
        cutoff = before_nanos / 1e9 if before_nanos > 0 else self._clock()
        try:
            with self._pool.connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM records WHERE namespace = ? AND set_name = ? AND updated_at <= ?",
                    (namespace, set_name, cutoff),
                )
                conn.commit()
        except sqlite3.Error as e:
            return self._fail(e)
        logger.debug("Truncated %d records from %s.%s", cursor.rowcount, namespace, set_name)
        return StatusCode.OK

    def scan(self, namespace: str, set_name: str, callback: ScanCallback) -> int:
        """Call callback once per live record in the set.

        Rows are read before the first callback so callbacks may write to the store.
        """
        now = self._clock()
        try:
            with self._pool.connection() as conn:
                rows = conn.execute(
                    "SELECT digest, user_key, bins, generation, expires_at FROM records"
                    " WHERE namespace = ? AND set_name = ? AND (expires_at IS NULL OR expires_at > ?)",
                    (namespace, set_name, now),
                ).fetchall()
        except sqlite3.Error as e:
            return self._fail(e)

        for digest, user_key, bins, generation, expires_at in rows:
            key = RecordKey(namespace, set_name, user_key, digest)
            callback(Record(key, RecordMetadata(_remaining_ttl(expires_at, now), generation), json.loads(bins)))
        return StatusCode.OK

    def error(self) -> str:
        return self._last_error

    def close(self) -> None:
        self._pool.close_all()

    def _read(self, conn: sqlite3.Connection, key: RecordKey) -> Record:
        now = self._clock()
        row = conn.execute(
            "SELECT bins, generation, expires_at FROM records WHERE namespace = ? AND set_name = ? AND digest = ?",
            (key.namespace, key.set_name, self._digest_of(key)),
        ).fetchone()
        if row is None:
            return Record(key)
        bins, generation, expires_at = row
        if expires_at is not None and now >= expires_at:
            conn.execute(
                "DELETE FROM records WHERE namespace = ? AND set_name = ? AND digest = ?",
                (key.namespace, key.set_name, self._digest_of(key)),
            )
            conn.commit()
            return Record(key)
        return Record(key, RecordMetadata(_remaining_ttl(expires_at, now), generation), json.loads(bins))

    def _digest_of(self, key: RecordKey) -> bytes:
        if key.digest is not None:
            return key.digest
        if key.key is None:
            raise ValueError("Record key has neither a user key nor a digest")
        return _digest(key.set_name, key.key)

    def _fail(self, error: sqlite3.Error) -> int:
        self._last_error = str(error)
        logger.warning("SQLite record store error: %s", error)
        return StatusCode.ERR_CLIENT


def _digest(set_name: str, key: str) -> bytes:
    return hashlib.blake2b(f"{set_name}\x00{key}".encode(), digest_size=20).digest()


def _remaining_ttl(expires_at: float | None, now: float) -> int:
    if expires_at is None:
        return TTL_NEVER_EXPIRE
    return max(0, int(expires_at - now))
