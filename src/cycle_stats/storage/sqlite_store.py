from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from queue import Empty, Full, Queue
from typing import TYPE_CHECKING

from cycle_stats.storage.protocol import StoreUnavailableError

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

logger = logging.getLogger(__name__)


class SqliteConnectionPool:
    """Thread-safe connection pool for SQLite."""

    def __init__(self, db_path: Path, max_connections: int = 5, busy_timeout_ms: int = 5000) -> None:
        self._db_path = db_path
        self._busy_timeout_ms = busy_timeout_ms
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
                "CREATE TABLE IF NOT EXISTS kv ("
                "  key TEXT PRIMARY KEY,"
                "  value TEXT NOT NULL"
                ")"
            )
            conn.commit()
            self._schema_initialized = True

    def _create_connection(self) -> sqlite3.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute(f"PRAGMA busy_timeout={int(self._busy_timeout_ms)}")
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

    def close(self) -> None:
        while True:
            try:
                self._pool.get_nowait().close()
            except Empty:
                return


class SqliteKeyValueStore:
    """String key-value store on a single SQLite table."""

    def __init__(self, db_path: str | Path, max_connections: int = 5, busy_timeout_ms: int = 5000) -> None:
        self._db_path = Path(db_path)
        self._pool = SqliteConnectionPool(self._db_path, max_connections, busy_timeout_ms)

    def get(self, key: str) -> str | None:
        try:
            with self._pool.connection() as conn:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"get {key}: {e}") from e
        return None if row is None else row[0]

    def set(self, key: str, value: str) -> None:
        try:
            with self._pool.connection() as conn:
                conn.execute("INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)", (key, value))
                conn.commit()
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"set {key}: {e}") from e

    def batch_write(self, items: Sequence[tuple[str, str]]) -> list[str]:
        if not items:
            return []
        try:
            with self._pool.connection() as conn, conn:
                conn.executemany("INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)", list(items))
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"batch of {len(items)}: {e}") from e
        logger.debug("Wrote batch of %d keys", len(items))
        return []

    def scan(self, pattern: str) -> list[str]:
        try:
            with self._pool.connection() as conn:
                rows = conn.execute("SELECT key FROM kv WHERE key GLOB ? ORDER BY key", (pattern,)).fetchall()
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"scan {pattern}: {e}") from e
        return [row[0] for row in rows]

    def close(self) -> None:
        self._pool.close()
