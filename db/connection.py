"""
db/connection.py
----------------
Manages the PostgreSQL connection pool.
Uses psycopg2's SimpleConnectionPool; repositories borrow a connection
per operation and always hand it back.
"""

from contextlib import contextmanager
from typing import Optional

import psycopg2
from psycopg2 import pool, extras

from config import DATABASE_URL
from utils.logger import get_logger

logger = get_logger(__name__)

_pool: pool.SimpleConnectionPool | None = None

# Let psycopg2 hand back uuid.UUID for UUID columns
extras.register_uuid()


def init_pool(min_conn: int = 1, max_conn: int = 5, dsn: Optional[str] = None) -> None:
    """
    Initialize the database connection pool.

    Args:
        min_conn: Minimum number of connections to keep open.
        max_conn: Maximum number of connections allowed.
        dsn: Connection string; defaults to DATABASE_URL.

    Raises:
        psycopg2.OperationalError: If the database is unreachable.
    """
    global _pool
    if _pool is not None:
        return
    try:
        _pool = pool.SimpleConnectionPool(min_conn, max_conn, dsn or DATABASE_URL)
        logger.info("Database connection pool initialized.")
    except psycopg2.OperationalError as e:
        logger.error(f"Failed to initialize database pool: {e}")
        raise


def get_connection():
    """
    Borrow a connection from the pool.

    Raises:
        RuntimeError: If the pool has not been initialized.
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")
    return _pool.getconn()


def release_connection(conn) -> None:
    """Return a borrowed connection to the pool."""
    if _pool is not None:
        _pool.putconn(conn)


@contextmanager
def transaction():
    """
    Borrow a connection for one unit of work.
    Commits on success, rolls back and re-raises on any error.
    """
    conn = get_connection()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        release_connection(conn)


def close_pool() -> None:
    """Close all connections in the pool."""
    global _pool
    if _pool is not None:
        _pool.closeall()
        _pool = None
        logger.info("Database connection pool closed.")
