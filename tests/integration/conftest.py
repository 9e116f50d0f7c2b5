import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from finance_ingest.config.settings import Settings
from finance_ingest.database import connection
from finance_ingest.database.connection import close_pool, get_connection, init_pool

SCHEMA_PATH = Path(connection.__file__).with_name("schema.sql")


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "budget_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(SCHEMA_PATH.read_text(encoding="utf-8"))
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(
    integration_pool: None,
) -> Generator[list[tuple[str, int]], None, None]:
    cleanup: list[tuple[str, int]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table in ("transactions", "subcategories", "categories"):
                for cleanup_table, row_id in cleanup:
                    if cleanup_table == table:
                        cur.execute(f"DELETE FROM {table} WHERE id = %s", (row_id,))
        conn.commit()


@pytest.fixture
def seed_category(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, int]],
) -> tuple[int, int]:
    suffix = os.urandom(4).hex()
    with db_conn.cursor() as cur:
        cur.execute(
            "INSERT INTO categories (name, description) VALUES (%s, %s) RETURNING id",
            (f"Mat {suffix}", "Food and groceries"),
        )
        row = cur.fetchone()
        assert row is not None
        category_id = row[0]
        cur.execute(
            "INSERT INTO subcategories (name, category_id) VALUES (%s, %s) RETURNING id",
            (f"Livsmedel {suffix}", category_id),
        )
        row = cur.fetchone()
        assert row is not None
        subcategory_id = row[0]
    db_conn.commit()
    integration_cleanup.append(("categories", category_id))
    integration_cleanup.append(("subcategories", subcategory_id))
    return category_id, subcategory_id
