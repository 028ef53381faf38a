"""
Unit tests for the connection pool and transaction helpers.
"""

import tempfile
import threading
import unittest
from pathlib import Path

from ratings_pipeline.common.db_utils import ConnectionPool, transaction
from ratings_pipeline.common.exceptions import (
    PoolTimeoutError,
    RatingsPipelineError,
    StatementTimeoutError,
)


class TestTransaction(unittest.TestCase):
    """Test cases for transaction()."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.pool = ConnectionPool(Path(self.temp_dir.name) / 'test.db', max_size=2)
        with self.pool.connection() as conn:
            conn.execute('CREATE TABLE items (name TEXT PRIMARY KEY)')

    def tearDown(self):
        """Clean up test fixtures."""
        self.pool.close()
        self.temp_dir.cleanup()

    def _names(self, conn):
        return [row[0] for row in conn.execute('SELECT name FROM items ORDER BY name')]

    def test_commit_on_success(self):
        """Rows written inside the block are committed."""
        with self.pool.connection() as conn:
            with transaction(conn):
                conn.execute("INSERT INTO items VALUES ('a')")
            self.assertFalse(conn.in_transaction)

        with self.pool.connection() as conn:
            self.assertEqual(self._names(conn), ['a'])

    def test_rollback_on_error(self):
        """An exception rolls back every write and propagates."""
        with self.pool.connection() as conn:
            with self.assertRaises(RuntimeError):
                with transaction(conn):
                    conn.execute("INSERT INTO items VALUES ('a')")
                    raise RuntimeError('boom')

            self.assertFalse(conn.in_transaction)
            self.assertEqual(self._names(conn), [])

    def test_nested_block_uses_savepoint(self):
        """A failing inner block is undone without losing the outer writes."""
        with self.pool.connection() as conn:
            with transaction(conn):
                conn.execute("INSERT INTO items VALUES ('outer')")
                try:
                    with transaction(conn):
                        conn.execute("INSERT INTO items VALUES ('inner')")
                        raise ValueError('inner failure')
                except ValueError:
                    pass
                self.assertTrue(conn.in_transaction)

            self.assertEqual(self._names(conn), ['outer'])

    def test_inner_failure_can_abort_outer(self):
        """Re-raising an inner failure rolls back the outer transaction too."""
        with self.pool.connection() as conn:
            with self.assertRaises(ValueError):
                with transaction(conn):
                    conn.execute("INSERT INTO items VALUES ('outer')")
                    with transaction(conn):
                        conn.execute("INSERT INTO items VALUES ('inner')")
                        raise ValueError('inner failure')

            self.assertEqual(self._names(conn), [])


class TestConnectionPool(unittest.TestCase):
    """Test cases for ConnectionPool."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = Path(self.temp_dir.name) / 'pool.db'

    def tearDown(self):
        """Clean up test fixtures."""
        self.temp_dir.cleanup()

    def test_connections_are_reused(self):
        """A released connection is handed out again."""
        with ConnectionPool(self.db_path, max_size=1) as pool:
            with pool.connection() as first:
                pass
            with pool.connection() as second:
                self.assertIs(first, second)

    def test_foreign_keys_enabled(self):
        """Pooled connections enforce foreign keys."""
        with ConnectionPool(self.db_path, max_size=1) as pool:
            with pool.connection() as conn:
                self.assertEqual(conn.execute('PRAGMA foreign_keys').fetchone()[0], 1)

    def test_exhausted_pool_times_out(self):
        """Acquire raises PoolTimeoutError once the acquisition timeout passes."""
        with ConnectionPool(self.db_path, max_size=1, acquire_timeout=0.05) as pool:
            conn = pool.acquire()
            try:
                with self.assertRaises(PoolTimeoutError):
                    pool.acquire()
            finally:
                pool.release(conn)

    def test_exhausted_pool_blocks_until_release(self):
        """A waiting caller gets the connection another caller releases."""
        with ConnectionPool(self.db_path, max_size=1, acquire_timeout=5.0) as pool:
            conn = pool.acquire()
            releaser = threading.Timer(0.1, pool.release, args=(conn,))
            releaser.start()
            try:
                waited = pool.acquire()
                self.assertIs(waited, conn)
                pool.release(waited)
            finally:
                releaser.join()

    def test_release_rolls_back_open_transaction(self):
        """Work left uncommitted on a released connection is discarded."""
        with ConnectionPool(self.db_path, max_size=1) as pool:
            with pool.connection() as conn:
                conn.execute('CREATE TABLE items (name TEXT)')
            conn = pool.acquire()
            conn.execute('BEGIN')
            conn.execute("INSERT INTO items VALUES ('lost')")
            pool.release(conn)

            with pool.connection() as conn:
                self.assertFalse(conn.in_transaction)
                self.assertEqual(conn.execute('SELECT COUNT(*) FROM items').fetchone()[0], 0)

    def test_foreign_connection_is_rejected(self):
        """Releasing a connection the pool did not hand out is an error."""
        other_path = Path(self.temp_dir.name) / 'other.db'
        with ConnectionPool(self.db_path, max_size=1) as pool, \
                ConnectionPool(other_path, max_size=1) as other:
            conn = other.acquire()
            try:
                with self.assertRaises(RatingsPipelineError):
                    pool.release(conn)
            finally:
                other.release(conn)

    def test_closed_pool_refuses_acquire(self):
        pool = ConnectionPool(self.db_path, max_size=1)
        pool.close()
        with self.assertRaises(RatingsPipelineError):
            pool.acquire()

    def test_statement_timeout(self):
        """Statements running past the ceiling are interrupted."""
        with ConnectionPool(self.db_path, max_size=1, statement_timeout=0.05) as pool:
            with pool.connection() as conn:
                with self.assertRaises(StatementTimeoutError):
                    conn.execute('''
                        WITH RECURSIVE counter(x) AS (
                            SELECT 1 UNION ALL SELECT x + 1 FROM counter WHERE x < 500000000
                        )
                        SELECT COUNT(*) FROM counter
                    ''')

                # Connection stays usable afterwards
                self.assertEqual(conn.execute('SELECT 1').fetchone()[0], 1)


if __name__ == '__main__':
    unittest.main()
