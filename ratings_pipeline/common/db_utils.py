"""
Database utility functions for transaction management and connection handling.

Connections come from a bounded ``ConnectionPool``. Each pooled connection
enforces a per-statement deadline and runs in autocommit mode, so every write
must happen inside ``transaction()``.
"""
import sqlite3
import logging
import threading
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Optional, Union

import sqlalchemy.exc
from sqlalchemy.pool import QueuePool

from ratings_pipeline.common.exceptions import (
    RatingsPipelineError,
    PoolTimeoutError,
    StatementTimeoutError,
)

logger = logging.getLogger(__name__)

# VM instructions between deadline checks
PROGRESS_HANDLER_STEPS = 1000


class TimedConnection(sqlite3.Connection):
    """
    SQLite connection that interrupts statements running past a deadline.

    The deadline is armed on every ``execute``/``executemany`` call and
    cleared when the call returns.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.statement_timeout: Optional[float] = None
        self._deadline: Optional[float] = None
        self.set_progress_handler(self._check_deadline, PROGRESS_HANDLER_STEPS)

    def _check_deadline(self):
        if self._deadline is not None and time.monotonic() > self._deadline:
            return 1
        return 0

    def _timed(self, method, sql, parameters):
        if not self.statement_timeout:
            return method(sql, parameters)

        self._deadline = time.monotonic() + self.statement_timeout
        try:
            return method(sql, parameters)
        except sqlite3.OperationalError as e:
            if 'interrupted' in str(e):
                raise StatementTimeoutError(
                    f"Statement exceeded {self.statement_timeout}s: {sql.strip()[:80]}"
                ) from e
            raise
        finally:
            self._deadline = None

    def execute(self, sql, parameters=()):
        return self._timed(super().execute, sql, parameters)

    def executemany(self, sql, parameters):
        return self._timed(super().executemany, sql, parameters)


class ConnectionPool:
    """
    Bounded pool of SQLite connections backed by SQLAlchemy's ``QueuePool``.

    Connections are opened lazily up to ``max_size``. When all of them are
    checked out, ``acquire`` blocks until one is released or the acquisition
    timeout passes. Callers get the raw ``TimedConnection``.
    """

    def __init__(self, db_path: Union[str, Path], max_size: int = 20,
                 acquire_timeout: float = 5.0, statement_timeout: float = 10.0,
                 busy_timeout: float = 5.0):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")

        self.db_path = str(db_path)
        self.max_size = max_size
        self.acquire_timeout = acquire_timeout
        self.statement_timeout = statement_timeout
        self.busy_timeout = busy_timeout

        self._pool = QueuePool(
            creator=self._connect,
            pool_size=max_size,
            max_overflow=0,
            timeout=acquire_timeout,
            reset_on_return='rollback',
        )
        # id(raw connection) -> pool proxy, for check-in
        self._checked_out: Dict[int, Any] = {}
        self._lock = threading.Lock()
        self._closed = False

    def _connect(self) -> TimedConnection:
        conn = sqlite3.connect(
            self.db_path,
            timeout=self.busy_timeout,
            isolation_level=None,
            check_same_thread=False,
            factory=TimedConnection,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("PRAGMA synchronous = NORMAL")
        result = conn.execute("PRAGMA journal_mode = WAL").fetchone()
        if not result or str(result[0]).upper() != 'WAL':
            logger.warning(f"Failed to enable WAL mode: {result}")
        conn.statement_timeout = self.statement_timeout
        logger.debug(f"Opened pooled connection to {self.db_path}")
        return conn

    def acquire(self) -> TimedConnection:
        """
        Check out a connection.

        Returns:
            An open connection in autocommit mode

        Raises:
            PoolTimeoutError: If no connection is free within acquire_timeout
        """
        if self._closed:
            raise RatingsPipelineError("Connection pool is closed")

        try:
            proxy = self._pool.connect()
        except sqlalchemy.exc.TimeoutError:
            raise PoolTimeoutError(
                f"No database connection available after {self.acquire_timeout}s "
                f"(pool size {self.max_size})"
            ) from None

        conn = proxy.dbapi_connection
        with self._lock:
            self._checked_out[id(conn)] = proxy
        return conn

    def release(self, conn: TimedConnection):
        """Return a connection to the pool, discarding any open transaction."""
        with self._lock:
            proxy = self._checked_out.pop(id(conn), None)
        if proxy is None:
            raise RatingsPipelineError("Connection does not belong to this pool")

        if conn.in_transaction:
            logger.warning("Connection released with an open transaction; rolling back")
            conn.execute("ROLLBACK")

        proxy.close()
        if self._closed:
            self._pool.dispose()

    @contextmanager
    def connection(self):
        """
        Context manager for a pooled connection.

        Usage:
            with pool.connection() as conn:
                conn.execute("SELECT 1")
        """
        conn = self.acquire()
        try:
            yield conn
        finally:
            self.release(conn)

    def close(self):
        """Close every idle connection. Checked-out connections close on release."""
        self._closed = True
        self._pool.dispose()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


@contextmanager
def transaction(conn: sqlite3.Connection):
    """
    Context manager for explicit transaction management.

    Usage:
        with transaction(conn):
            conn.execute("INSERT INTO table VALUES (?)", data)
            conn.execute("UPDATE table SET col = ?", value)

    The outermost call issues BEGIN IMMEDIATE and COMMIT or ROLLBACK. A call
    made while a transaction is already open uses a SAVEPOINT instead, so a
    failure rolls back only the inner block before the error propagates.
    """
    if conn.in_transaction:
        savepoint = f"sp_{uuid.uuid4().hex[:12]}"
        conn.execute(f"SAVEPOINT {savepoint}")
        logger.debug(f"Savepoint {savepoint} started")
        try:
            yield conn
        except BaseException:
            # An interrupted statement can abort the whole transaction
            if conn.in_transaction:
                conn.execute(f"ROLLBACK TO SAVEPOINT {savepoint}")
                conn.execute(f"RELEASE SAVEPOINT {savepoint}")
            logger.debug(f"Savepoint {savepoint} rolled back")
            raise
        conn.execute(f"RELEASE SAVEPOINT {savepoint}")
        return

    conn.execute("BEGIN IMMEDIATE")
    logger.debug("Transaction started")
    try:
        yield conn
    except BaseException as e:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        logger.error(f"Transaction rolled back due to error: {e}")
        raise
    conn.execute("COMMIT")
    logger.debug("Transaction committed")


def apply_schema(conn: sqlite3.Connection, schema_path: Union[str, Path]):
    """
    Execute a DDL script against the connection.

    Args:
        conn: Open connection outside any transaction
        schema_path: Path to a file of CREATE ... IF NOT EXISTS statements
    """
    with open(schema_path, 'r', encoding='utf-8') as f:
        conn.executescript(f.read())
