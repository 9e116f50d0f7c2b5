import json
from datetime import date
from decimal import Decimal
from typing import Any

import psycopg
import pytest
from psycopg.rows import dict_row

from finance_ingest.database.repositories.transaction_repository import TransactionRepository
from finance_ingest.pipeline.models import Transaction, TransactionSource

pytestmark = pytest.mark.integration


def _fetch(db_conn: psycopg.Connection[Any], transaction_id: int) -> dict[str, Any]:
    with db_conn.cursor(row_factory=dict_row) as cur:
        cur.execute("SELECT * FROM transactions WHERE id = %s", (transaction_id,))
        row = cur.fetchone()
    db_conn.commit()
    assert row is not None
    return row


class TestCreateTransaction:
    def test_inserts_row_and_returns_id(
        self,
        db_conn: psycopg.Connection[Any],
        integration_cleanup: list[tuple[str, int]],
    ) -> None:
        tx = Transaction(
            date=date(2023, 1, 5),
            amount=Decimal("-245.50"),
            description="ICA Supermarket",
            source=TransactionSource.CSV,
            raw_data={"ValueDate": "2023-01-05", "Balance": "10000,00"},
            reference="123",
        )

        transaction_id = TransactionRepository().create_transaction(tx)
        integration_cleanup.append(("transactions", transaction_id))

        row = _fetch(db_conn, transaction_id)
        assert row["amount"] == Decimal("-245.50")
        assert row["transaction_date"] == date(2023, 1, 5)
        assert row["source"] == "csv"
        assert row["reference"] == "123"
        assert row["raw_data"] == {"ValueDate": "2023-01-05", "Balance": "10000,00"}
        assert row["ai_analysis"] is None

    def test_stores_categories_and_analysis(
        self,
        db_conn: psycopg.Connection[Any],
        integration_cleanup: list[tuple[str, int]],
        seed_category: tuple[int, int],
    ) -> None:
        category_id, subcategory_id = seed_category
        analysis = {"category": "Mat", "category_id": category_id, "confidence": 0.9}
        tx = Transaction(
            date=date(2023, 1, 6),
            amount=Decimal("-54.50"),
            description="Coop",
            source=TransactionSource.PDF,
            raw_data={"amount": Decimal("-54.50")},
            category_id=category_id,
            subcategory_id=subcategory_id,
            ai_analysis=json.dumps(analysis),
        )

        transaction_id = TransactionRepository().create_transaction(tx)
        integration_cleanup.append(("transactions", transaction_id))

        row = _fetch(db_conn, transaction_id)
        assert row["category_id"] == category_id
        assert row["subcategory_id"] == subcategory_id
        assert row["ai_analysis"] == analysis
        assert row["raw_data"] == {"amount": "-54.50"}


class TestCategoryLookups:
    def test_get_category_and_subcategory(self, seed_category: tuple[int, int]) -> None:
        category_id, subcategory_id = seed_category
        repo = TransactionRepository()

        category = repo.get_category_by_id(category_id)
        subcategory = repo.get_subcategory_by_id(subcategory_id)

        assert category is not None
        assert category.name.startswith("Mat")
        assert subcategory is not None
        assert subcategory.category_id == category_id

    def test_missing_ids_return_none(self, integration_pool: None) -> None:
        repo = TransactionRepository()
        assert repo.get_category_by_id(-1) is None
        assert repo.get_subcategory_by_id(-1) is None

    def test_list_categories_groups_subcategories(self, seed_category: tuple[int, int]) -> None:
        category_id, subcategory_id = seed_category

        catalogue = dict(
            (category.id, subcategories)
            for category, subcategories in TransactionRepository().list_categories()
        )

        assert [sub.id for sub in catalogue[category_id]] == [subcategory_id]
