import json
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from finance_ingest.database.base import BaseTransactionStore
from finance_ingest.database.connection import get_connection
from finance_ingest.database.exceptions import StoreError, StoreWriteError
from finance_ingest.database.models import CategoryRecord, SubcategoryRecord
from finance_ingest.pipeline.models import Transaction


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


class TransactionRepository(BaseTransactionStore):
    """Database operations for the transactions and category tables."""

    def create_transaction(self, transaction: Transaction) -> int:
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO transactions
                        (transaction_date, amount, currency, description, reference,
                         source, category_id, subcategory_id, raw_data, ai_analysis,
                         imported_at)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                        RETURNING id
                        """,
                        (
                            transaction.date,
                            transaction.amount,
                            transaction.currency,
                            transaction.description,
                            transaction.reference,
                            transaction.source.value,
                            transaction.category_id,
                            transaction.subcategory_id,
                            Jsonb(transaction.raw_data, dumps=_dumps),
                            (
                                Jsonb(json.loads(transaction.ai_analysis))
                                if transaction.ai_analysis
                                else None
                            ),
                            transaction.imported_at,
                        ),
                    )
                    row = cur.fetchone()
                conn.commit()
        except psycopg.Error as exc:
            raise StoreWriteError(f"Failed to store transaction: {exc}") from exc

        if row is None:
            raise StoreWriteError("Insert returned no ID")
        return int(row[0])

    def get_category_by_id(self, category_id: int) -> CategoryRecord | None:
        row = self._fetch_one(
            "SELECT id, name, description FROM categories WHERE id = %s",
            (category_id,),
        )
        if row is None:
            return None
        return CategoryRecord(id=row["id"], name=row["name"], description=row["description"])

    def get_subcategory_by_id(self, subcategory_id: int) -> SubcategoryRecord | None:
        row = self._fetch_one(
            "SELECT id, name, category_id FROM subcategories WHERE id = %s",
            (subcategory_id,),
        )
        if row is None:
            return None
        return SubcategoryRecord(
            id=row["id"],
            name=row["name"],
            category_id=row["category_id"],
        )

    def list_categories(self) -> list[tuple[CategoryRecord, list[SubcategoryRecord]]]:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute("SELECT id, name, description FROM categories ORDER BY id")
                    category_rows = cur.fetchall()
                    cur.execute(
                        "SELECT id, name, category_id FROM subcategories ORDER BY id"
                    )
                    subcategory_rows = cur.fetchall()
        except psycopg.Error as exc:
            raise StoreError(f"Failed to list categories: {exc}") from exc

        by_category: dict[int, list[SubcategoryRecord]] = {}
        for row in subcategory_rows:
            if row["category_id"] is None:
                continue
            by_category.setdefault(row["category_id"], []).append(
                SubcategoryRecord(id=row["id"], name=row["name"], category_id=row["category_id"])
            )
        return [
            (
                CategoryRecord(id=row["id"], name=row["name"], description=row["description"]),
                by_category.get(row["id"], []),
            )
            for row in category_rows
        ]

    @staticmethod
    def _fetch_one(query: str, params: tuple[Any, ...]) -> dict[str, Any] | None:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(query, params)
                    return cur.fetchone()
        except psycopg.Error as exc:
            raise StoreError(f"Store lookup failed: {exc}") from exc
