"""Merges AI category assignments onto transactions.

Categorization is enrichment: a failed AI call leaves transactions
uncategorized but never stops them from being stored.
"""

import json
from dataclasses import asdict, replace

from finance_ingest.ai.exceptions import AIServiceError
from finance_ingest.ai.models import AnalysisOptions, CategoryAssignment
from finance_ingest.ai.service import AIService
from finance_ingest.logging.logger import Log
from finance_ingest.normalization.coercion import to_positive_int
from finance_ingest.pipeline.cancellation import CancellationToken
from finance_ingest.pipeline.models import DiagnosticKind, Diagnostics, Transaction


class Categorizer:
    """Applies raw-data category hints and AI assignments to transactions."""

    def __init__(self, ai_service: AIService | None) -> None:
        self._ai_service = ai_service

    def apply_raw_hints(self, transaction: Transaction) -> Transaction:
        """Set category IDs pre-resolved in the record's raw data, if positive."""
        category_id = to_positive_int(transaction.raw_data.get("category_id"))
        subcategory_id = to_positive_int(transaction.raw_data.get("subcategory_id"))
        if category_id is None and subcategory_id is None:
            return transaction
        Log.debug(
            "Setting category IDs from raw data",
            description=transaction.description,
            category_id=category_id,
            subcategory_id=subcategory_id,
        )
        return replace(
            transaction,
            category_id=category_id if category_id is not None else transaction.category_id,
            subcategory_id=(
                subcategory_id if subcategory_id is not None else transaction.subcategory_id
            ),
        )

    def categorize(
        self,
        transactions: list[Transaction],
        options: AnalysisOptions,
        diagnostics: Diagnostics | None = None,
        token: CancellationToken | None = None,
    ) -> list[Transaction]:
        """Categorize all transactions in one batch call.

        On failure the input is returned unchanged. Assignments are merged by
        index; transactions beyond the returned assignments stay as they are.
        """
        if not transactions or self._ai_service is None:
            return list(transactions)

        Log.info(
            "Analyzing transactions for categorization",
            transaction_count=len(transactions),
            document_type=options.document_type,
        )
        try:
            assignments = self._ai_service.batch_analyze_transactions(
                transactions, options, token
            )
        except AIServiceError as exc:
            Log.error(f"Failed to analyze transactions: {exc}")
            if diagnostics is not None:
                diagnostics.add(
                    DiagnosticKind.CATEGORIZATION_FAILED,
                    str(exc),
                    transaction_count=len(transactions),
                )
            return list(transactions)

        merged = [
            merge_assignment(tx, assignment)
            for tx, assignment in zip(transactions, assignments)
        ]
        return merged + list(transactions[len(merged):])

    def categorize_one(
        self,
        transaction: Transaction,
        options: AnalysisOptions,
        diagnostics: Diagnostics | None = None,
        token: CancellationToken | None = None,
    ) -> Transaction:
        """Categorize a single transaction; on failure return it unchanged."""
        if self._ai_service is None:
            return transaction
        try:
            assignment = self._ai_service.analyze_transaction(transaction, options, token)
        except AIServiceError as exc:
            Log.error(
                f"Failed to analyze transaction: {exc}",
                description=transaction.description,
            )
            if diagnostics is not None:
                diagnostics.add(
                    DiagnosticKind.CATEGORIZATION_FAILED,
                    str(exc),
                    description=transaction.description,
                )
            return transaction
        return merge_assignment(transaction, assignment)

    def categorize_each(
        self,
        transactions: list[Transaction],
        options: AnalysisOptions,
        diagnostics: Diagnostics | None = None,
        token: CancellationToken | None = None,
    ) -> list[Transaction]:
        """Categorize transactions one call at a time, isolating each failure."""
        results = []
        for transaction in transactions:
            if token is not None:
                token.raise_if_cancelled()
            results.append(self.categorize_one(transaction, options, diagnostics, token))
        return results


def merge_assignment(transaction: Transaction, assignment: CategoryAssignment) -> Transaction:
    """Overlay an assignment. Only positive IDs replace existing ones."""
    category_id = to_positive_int(assignment.category_id)
    subcategory_id = to_positive_int(assignment.subcategory_id)
    if category_id is not None:
        Log.debug(
            "Setting category ID from AI analysis",
            description=transaction.description,
            category_id=category_id,
            category=assignment.category,
        )
    if subcategory_id is not None:
        Log.debug(
            "Setting subcategory ID from AI analysis",
            description=transaction.description,
            subcategory_id=subcategory_id,
            subcategory=assignment.subcategory,
        )
    return replace(
        transaction,
        category=assignment.category or transaction.category,
        subcategory=assignment.subcategory or transaction.subcategory,
        category_id=category_id if category_id is not None else transaction.category_id,
        subcategory_id=(
            subcategory_id if subcategory_id is not None else transaction.subcategory_id
        ),
        ai_analysis=json.dumps(asdict(assignment), ensure_ascii=False),
    )
