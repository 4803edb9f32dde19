from __future__ import annotations
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional, Tuple
import logging, os, sqlite3, threading

from request_analytics.errors import StoreClosedError, StoreError, StoreInitError

logger = logging.getLogger(__name__)

SCHEMA = """
-- Opaque auto-increment key, JSON-encoded request as the value
CREATE TABLE IF NOT EXISTS requests (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  value BLOB NOT NULL
);
"""

class Transaction:
    """Key/value view of the ``requests`` collection inside one SQLite transaction."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def put_many(self, values: Iterable[bytes]) -> int:
        cur = self._conn.executemany("INSERT INTO requests(value) VALUES (?)", ((v,) for v in values))
        return cur.rowcount

    def items(self) -> List[Tuple[int, bytes]]:
        rows = self._conn.execute("SELECT id, value FROM requests ORDER BY id ASC").fetchall()
        return [(int(k), bytes(v)) for k, v in rows]

    def delete_many(self, keys: Iterable[int]) -> int:
        cur = self._conn.executemany("DELETE FROM requests WHERE id = ?", ((k,) for k in keys))
        return cur.rowcount

    def count(self) -> int:
        return int(self._conn.execute("SELECT COUNT(*) FROM requests").fetchone()[0])

class RequestStore:
    """Embedded durable store for recorded requests.

    A single connection is shared between the event loop and worker threads;
    every access runs as one explicit transaction under ``_lock``.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._conn is None

    def open(self) -> None:
        if self._conn is not None:
            return
        try:
            os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
            conn = sqlite3.connect(self.db_path, timeout=30, isolation_level=None, check_same_thread=False)
        except (OSError, sqlite3.Error) as e:
            raise StoreInitError(f"cannot open analytics store at {self.db_path}: {e}") from e
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(SCHEMA)
        except sqlite3.Error as e:
            conn.close()
            raise StoreInitError(f"cannot create requests collection in {self.db_path}: {e}") from e
        self._conn = conn
        logger.info("opened analytics store %s", self.db_path)

    def close(self) -> None:
        with self._lock:
            conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            conn.close()
        except sqlite3.Error:
            logger.exception("error closing analytics store %s", self.db_path)
        else:
            logger.info("closed analytics store %s", self.db_path)

    @contextmanager
    def _transaction(self, begin: str) -> Iterator[Transaction]:
        with self._lock:
            conn = self._conn
            if conn is None:
                raise StoreClosedError(f"analytics store {self.db_path} is closed")
            try:
                conn.execute(begin)
                yield Transaction(conn)
                conn.execute("COMMIT")
            except sqlite3.Error as e:
                _rollback(conn)
                raise StoreError(str(e)) from e
            except BaseException:
                _rollback(conn)
                raise

    def update(self):
        """Read/write transaction; commits on success, rolls back everything on error."""
        return self._transaction("BEGIN IMMEDIATE")

    def view(self):
        return self._transaction("BEGIN")

def _rollback(conn: sqlite3.Connection) -> None:
    if conn.in_transaction:
        try:
            conn.execute("ROLLBACK")
        except sqlite3.Error:
            logger.exception("rollback failed")
