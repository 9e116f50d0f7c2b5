from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool

from finance_ingest.config.settings import Settings
from finance_ingest.logging.logger import Log

_pool: ConnectionPool | None = None


def _conninfo(settings: Settings) -> str:
    return make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        dbname=settings.db_database,
        user=settings.db_username,
        password=settings.db_password,
    )


def init_pool(settings: Settings, max_size: int | None = None) -> None:
    """Initialize the global connection pool from settings.

    Sized for one connection per worker thread plus one for category lookups
    unless max_size is given.
    """
    global _pool  # noqa: PLW0603
    size = max_size if max_size is not None else max(2, settings.max_workers + 1)
    _pool = ConnectionPool(
        _conninfo(settings),
        min_size=1,
        max_size=size,
        name="finance-ingest",
        open=True,
    )
    Log.debug(
        "Connection pool opened",
        host=settings.db_host,
        database=settings.db_database,
        max_size=size,
    )


def close_pool() -> None:
    """Close the global connection pool."""
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Yield a connection from the pool. Caller manages commit/rollback."""
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    with _pool.connection() as conn:
        yield conn
