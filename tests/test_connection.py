import logging
import threading
import time
from unittest.mock import MagicMock, patch

import psycopg2
import pytest
from psycopg2 import pool as pg_pool

from db.connection import Database
from db.init_db import SCHEMA_SQL, create_tables


@pytest.fixture
def mock_pool():
    with patch("db.connection.pool.ThreadedConnectionPool") as pool_cls:
        pool = pool_cls.return_value
        conn = pool.getconn.return_value
        conn.closed = 0
        cursor = conn.cursor.return_value.__enter__.return_value
        cursor.description = [("id",)]
        cursor.fetchall.return_value = [{"id": 1, "name": "Alice"}]
        yield pool_cls, pool, conn, cursor


def test_query_before_open_raises():
    with pytest.raises(RuntimeError):
        Database("postgresql://localhost/none").query("SELECT 1;")


def test_open_is_idempotent(mock_pool):
    pool_cls, *_ = mock_pool
    db = Database("postgresql://u:p@h:5432/lightbnb", min_conn=1, max_conn=3)

    db.open()
    db.open()

    pool_cls.assert_called_once_with(1, 3, "postgresql://u:p@h:5432/lightbnb")
    assert db.is_open


def test_open_propagates_operational_error():
    with patch("db.connection.pool.ThreadedConnectionPool", side_effect=psycopg2.OperationalError("down")):
        db = Database("postgresql://localhost/none")
        with pytest.raises(psycopg2.OperationalError):
            db.open()
        assert not db.is_open


def test_query_returns_dict_rows_and_commits(mock_pool):
    _, pool, conn, cursor = mock_pool
    db = Database("dsn")
    db.open()

    rows = db.query("SELECT * FROM users WHERE id = %s;", [1])

    assert rows == [{"id": 1, "name": "Alice"}]
    cursor.execute.assert_called_once_with("SELECT * FROM users WHERE id = %s;", [1])
    conn.commit.assert_called_once()
    pool.putconn.assert_called_once_with(conn, close=False)


def test_query_without_params_skips_interpolation(mock_pool):
    _, _, _, cursor = mock_pool
    db = Database("dsn")
    db.open()

    db.query("SELECT 1;")

    cursor.execute.assert_called_once_with("SELECT 1;", None)


def test_statement_without_result_set_returns_empty_list(mock_pool):
    _, _, _, cursor = mock_pool
    cursor.description = None
    db = Database("dsn")
    db.open()

    assert db.query("CREATE TABLE t (id INT);") == []
    cursor.fetchall.assert_not_called()


def test_query_error_rolls_back_and_propagates_unchanged(mock_pool):
    _, pool, conn, cursor = mock_pool
    error = psycopg2.ProgrammingError("syntax error at or near WHERE")
    cursor.execute.side_effect = error
    db = Database("dsn")
    db.open()

    with pytest.raises(psycopg2.ProgrammingError) as exc_info:
        db.query("SELECT * FROM WHERE;")

    assert exc_info.value is error
    conn.rollback.assert_called_once()
    conn.commit.assert_not_called()
    pool.putconn.assert_called_once_with(conn, close=False)


def test_query_one_returns_first_row_or_none(mock_pool):
    _, _, _, cursor = mock_pool
    db = Database("dsn")
    db.open()

    assert db.query_one("SELECT 1;") == {"id": 1, "name": "Alice"}
    cursor.fetchall.return_value = []
    assert db.query_one("SELECT 1;") is None


def test_close_releases_pool(mock_pool):
    _, pool, _, _ = mock_pool
    db = Database("dsn")
    db.open()

    db.close()
    db.close()

    pool.closeall.assert_called_once()
    assert not db.is_open


def test_create_tables_runs_schema():
    db = MagicMock()

    create_tables(db)

    db.query.assert_called_once_with(SCHEMA_SQL)
    assert "CREATE TABLE IF NOT EXISTS property_reviews" in SCHEMA_SQL


def test_lost_connection_error_is_not_masked_by_rollback(mock_pool):
    _, pool, conn, cursor = mock_pool
    error = psycopg2.OperationalError("server closed the connection unexpectedly")
    cursor.execute.side_effect = error
    conn.rollback.side_effect = psycopg2.InterfaceError("connection already closed")
    db = Database("dsn")
    db.open()

    with pytest.raises(psycopg2.OperationalError) as exc_info:
        db.query("SELECT 1;")

    assert exc_info.value is error
    pool.putconn.assert_called_once_with(conn, close=False)


def test_closed_connection_is_discarded_without_rollback(mock_pool):
    _, pool, conn, cursor = mock_pool
    error = psycopg2.OperationalError("server closed the connection unexpectedly")

    def drop_connection(*args):
        conn.closed = 2
        raise error

    cursor.execute.side_effect = drop_connection
    db = Database("dsn")
    db.open()

    with pytest.raises(psycopg2.OperationalError) as exc_info:
        db.query("SELECT 1;")

    assert exc_info.value is error
    conn.rollback.assert_not_called()
    pool.putconn.assert_called_once_with(conn, close=True)


class CountingPool:
    """Pool double that fails like psycopg2 when more than maxconn are borrowed."""

    def __init__(self, minconn, maxconn, dsn):
        self.maxconn = maxconn
        self.in_use = 0
        self.peak = 0
        self.lock = threading.Lock()

    def getconn(self):
        with self.lock:
            if self.in_use >= self.maxconn:
                raise pg_pool.PoolError("connection pool exhausted")
            self.in_use += 1
            self.peak = max(self.peak, self.in_use)
        conn = MagicMock()
        conn.closed = 0
        cursor = conn.cursor.return_value.__enter__.return_value
        cursor.execute.side_effect = lambda *args: time.sleep(0.05)
        cursor.description = [("?column?",)]
        cursor.fetchall.return_value = [{"?column?": 1}]
        return conn

    def putconn(self, conn, close=False):
        with self.lock:
            self.in_use -= 1

    def closeall(self):
        pass


def test_concurrent_queries_wait_for_a_free_connection():
    with patch("db.connection.pool.ThreadedConnectionPool", CountingPool):
        db = Database("dsn", min_conn=1, max_conn=2)
        db.open()
        results, errors = [], []

        def run():
            try:
                results.append(db.query("SELECT 1;"))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=run) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(results) == 5
        assert db._pool.peak <= 2
        db.close()


def test_echo_logs_sql_at_info(mock_pool, caplog):
    caplog.set_level(logging.INFO, logger="db.connection")
    db = Database("dsn", echo=True)
    db.open()

    db.query("SELECT *\n  FROM users WHERE id = %s;", [3])

    messages = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
    assert "SQL: SELECT * FROM users WHERE id = %s; | params=[3]" in messages


def test_sql_stays_at_debug_without_echo(mock_pool, caplog):
    caplog.set_level(logging.INFO, logger="db.connection")
    db = Database("dsn", echo=False)
    db.open()

    db.query("SELECT 1;")

    assert not any(r.getMessage().startswith("SQL:") for r in caplog.records)
