"""Turns AI extraction output into canonical transactions.

The extraction either carries an itemized list of field maps or only the
aggregate fields of the whole document. Each item (or the aggregate) becomes
a Candidate through explicit per-field alias resolution; candidates that
would violate the Transaction invariants are dropped with a warning instead
of aborting the rest of the document.
"""

from dataclasses import asdict, dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, ClassVar

from finance_ingest.ai.models import ExtractionResult
from finance_ingest.logging.logger import Log
from finance_ingest.normalization.coercion import first_present, to_date, to_decimal, to_text
from finance_ingest.pipeline.models import (
    DiagnosticKind,
    Diagnostics,
    Transaction,
    TransactionSource,
)

_ZERO = Decimal("0")


@dataclass(frozen=True)
class Candidate:
    """A record resolved from one field map, not yet validated."""

    index: int
    description: str
    amount: Decimal
    date: date | None
    raw_date: object
    category: str
    subcategory: str
    raw_data: dict[str, Any] = field(default_factory=dict)


class NormalizationEngine:
    """Builds Transactions from an ExtractionResult. Never raises on bad input."""

    DESCRIPTION_KEYS: ClassVar[tuple[str, ...]] = ("description", "beskrivning")
    AMOUNT_KEYS: ClassVar[tuple[str, ...]] = ("amount", "belopp")
    DATE_KEYS: ClassVar[tuple[str, ...]] = ("date", "datum")
    CATEGORY_KEYS: ClassVar[tuple[str, ...]] = ("category", "kategori")
    SUBCATEGORY_KEYS: ClassVar[tuple[str, ...]] = ("subcategory", "underkategori")

    def __init__(self, source: TransactionSource = TransactionSource.PDF) -> None:
        self._source = source

    def normalize(
        self,
        extraction: ExtractionResult | None,
        diagnostics: Diagnostics | None = None,
    ) -> list[Transaction]:
        if extraction is None:
            return []

        if extraction.transactions:
            Log.debug(f"Normalizing {len(extraction.transactions)} itemized records")
            candidates = [
                self._resolve(item, index, extraction)
                for index, item in enumerate(extraction.transactions)
            ]
        else:
            Log.debug("No line items in extraction, using aggregate fields")
            candidates = [self._resolve(self._aggregate_fields(extraction), 0, extraction)]

        transactions: list[Transaction] = []
        for candidate in candidates:
            if candidate is None:
                continue
            reason = self._rejection_reason(candidate)
            if reason is not None:
                field_name, value = reason
                Log.warning(
                    f"Dropping extracted record: invalid {field_name}",
                    index=candidate.index,
                    value=value,
                )
                if diagnostics is not None:
                    diagnostics.add(
                        DiagnosticKind.CANDIDATE_DROPPED,
                        f"invalid {field_name}",
                        index=candidate.index,
                        field=field_name,
                        value=value,
                    )
                continue
            transactions.append(self._materialize(candidate))

        Log.info(
            f"Normalization complete: {len(transactions)} of {len(candidates)} "
            "records kept"
        )
        return transactions

    def _resolve(
        self,
        item: Any,
        index: int,
        extraction: ExtractionResult,
    ) -> Candidate | None:
        if not isinstance(item, dict):
            Log.warning("Skipping extracted record that is not an object", index=index)
            return None
        raw_date = self._resolve_date_value(item, extraction)
        return Candidate(
            index=index,
            description=self._resolve_description(item),
            amount=self._resolve_amount(item, index),
            date=to_date(raw_date),
            raw_date=raw_date,
            category=to_text(first_present(item, self.CATEGORY_KEYS)[1]),
            subcategory=to_text(first_present(item, self.SUBCATEGORY_KEYS)[1]),
            raw_data=item,
        )

    def _resolve_description(self, item: dict[str, Any]) -> str:
        return to_text(first_present(item, self.DESCRIPTION_KEYS)[1])

    def _resolve_amount(self, item: dict[str, Any], index: int) -> Decimal:
        key, value = first_present(item, self.AMOUNT_KEYS)
        if key is None:
            return _ZERO
        amount = to_decimal(value)
        if amount is None:
            Log.warning(
                "Could not parse amount, treating as missing",
                index=index,
                field=key,
                value=value,
            )
            return _ZERO
        return amount

    def _resolve_date_value(self, item: dict[str, Any], extraction: ExtractionResult) -> object:
        _, value = first_present(item, self.DATE_KEYS)
        return extraction.date if value is None else value

    @staticmethod
    def _rejection_reason(candidate: Candidate) -> tuple[str, object] | None:
        if not candidate.description:
            return "description", candidate.description
        if candidate.amount == _ZERO:
            return "amount", str(candidate.amount)
        if candidate.date is None:
            return "date", candidate.raw_date
        return None

    def _materialize(self, candidate: Candidate) -> Transaction:
        return Transaction(
            date=candidate.date,  # type: ignore[arg-type]
            amount=candidate.amount,
            description=candidate.description,
            source=self._source,
            raw_data=candidate.raw_data,
            category=candidate.category or None,
            subcategory=candidate.subcategory or None,
        )

    @staticmethod
    def _aggregate_fields(extraction: ExtractionResult) -> dict[str, Any]:
        fields = asdict(extraction)
        fields.pop("transactions")
        fields.pop("content")
        return fields


def normalize(
    extraction: ExtractionResult | None,
    diagnostics: Diagnostics | None = None,
) -> list[Transaction]:
    """Normalize with the default PDF-sourced engine."""
    return NormalizationEngine().normalize(extraction, diagnostics)
