"""
db/connection.py
----------------
The query executor shared by every repository.
Wraps a psycopg2 ThreadedConnectionPool and runs one parameterized
statement per call, returning rows as plain dicts.
"""

import threading
from typing import Any, Optional, Sequence

import psycopg2
from psycopg2 import pool, extras

from config import DATABASE_URL, DB_POOL_MAX, DB_POOL_MIN, SQL_ECHO
from utils.logger import get_logger

logger = get_logger(__name__)


class Database:
    """
    Executor backed by a PostgreSQL connection pool.

    The owner of the instance controls its lifecycle: call `open()` at
    process start and `close()` at shutdown. Repositories receive the
    instance in their constructor and only ever call `query()` /
    `query_one()`.
    """

    def __init__(
        self,
        dsn: str = DATABASE_URL,
        min_conn: int = DB_POOL_MIN,
        max_conn: int = DB_POOL_MAX,
        echo: bool = SQL_ECHO,
    ):
        self.dsn = dsn
        self.min_conn = min_conn
        self.max_conn = max_conn
        self.echo = echo
        self._pool: Optional[pool.ThreadedConnectionPool] = None
        self._slots: Optional[threading.BoundedSemaphore] = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def open(self) -> None:
        """
        Initialize the connection pool. Calling it twice is a no-op.

        Raises:
            psycopg2.OperationalError: If the database is unreachable.
        """
        if self._pool is not None:
            return
        try:
            self._pool = pool.ThreadedConnectionPool(self.min_conn, self.max_conn, self.dsn)
            self._slots = threading.BoundedSemaphore(self.max_conn)
            logger.info("Database connection pool initialized successfully.")
        except psycopg2.OperationalError as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise

    def close(self) -> None:
        """Close all connections in the pool."""
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None
            self._slots = None
            logger.info("Database connection pool closed.")

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict]:
        """
        Execute a single statement and return its rows.

        Args:
            sql: Query template using ``%s`` positional placeholders.
            params: Values bound to the placeholders, in order.

        Returns:
            List of rows as dicts keyed by column name. Statements without
            a result set return an empty list.

        Raises:
            RuntimeError: If `open()` has not been called.
            psycopg2.Error: Any database failure, re-raised unchanged
                after the transaction is rolled back.
        """
        if self._pool is None:
            raise RuntimeError("Database pool not initialized. Call open() first.")

        if self.echo:
            logger.info(f"SQL: {' '.join(sql.split())} | params={list(params)}")
        else:
            logger.debug(f"SQL: {' '.join(sql.split())} | params={list(params)}")

        db_pool, slots = self._pool, self._slots
        # Wait for a free connection instead of failing with PoolError
        with slots:
            conn = db_pool.getconn()
            try:
                with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                    cur.execute(sql, params or None)
                    rows = cur.fetchall() if cur.description is not None else []
                conn.commit()
                return [dict(r) for r in rows]
            except Exception as e:
                logger.error(f"Query failed: {e}")
                self._rollback(conn)
                raise
            finally:
                db_pool.putconn(conn, close=bool(conn.closed))

    @staticmethod
    def _rollback(conn) -> None:
        """Roll back a failed statement without masking the error that caused it."""
        if conn.closed:
            return
        try:
            conn.rollback()
        except psycopg2.Error as e:
            logger.error(f"Rollback failed: {e}")

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[dict]:
        """Execute a statement and return its first row, or None."""
        rows = self.query(sql, params)
        return rows[0] if rows else None
