from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any


class TransactionSource(str, Enum):
    """Document format a transaction was read from."""

    PDF = "pdf"
    CSV = "csv"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Transaction:
    """Canonical, validated financial transaction.

    A retained transaction never has a zero amount and always has a real
    calendar date; candidates violating either are dropped before a
    Transaction is built.
    """

    date: date
    amount: Decimal
    description: str
    source: TransactionSource
    raw_data: dict[str, Any] = field(default_factory=dict)
    imported_at: datetime = field(default_factory=_utcnow)
    category: str | None = None
    subcategory: str | None = None
    category_id: int | None = None
    subcategory_id: int | None = None
    reference: str = ""
    currency: str = "SEK"
    ai_analysis: str | None = None


class DiagnosticKind(str, Enum):
    ROW_SKIPPED = "row_skipped"
    CANDIDATE_DROPPED = "candidate_dropped"
    CATEGORIZATION_FAILED = "categorization_failed"
    STORE_WRITE_FAILED = "store_write_failed"


@dataclass(frozen=True)
class Diagnostic:
    """A recoverable problem that was logged and skipped."""

    kind: DiagnosticKind
    message: str
    details: dict[str, Any] = field(default_factory=dict)


class Diagnostics:
    """Collects recoverable problems for one file."""

    def __init__(self) -> None:
        self._entries: list[Diagnostic] = []

    def add(self, kind: DiagnosticKind, message: str, **details: Any) -> None:
        self._entries.append(Diagnostic(kind=kind, message=message, details=details))

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self._entries if d.kind is kind]

    def snapshot(self) -> tuple[Diagnostic, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class ProcessOptions:
    """Runtime options for one invocation."""

    document_type: str = "bill"
    transaction_insights: str = ""
    category_insights: str = ""

    @property
    def runtime_insights(self) -> str:
        return f"{self.transaction_insights}\n{self.category_insights}".strip()


@dataclass(frozen=True)
class ProcessingResult:
    """Outcome of processing one file.

    transactions_found counts extracted transactions; transactions_stored
    counts the ones the store accepted.
    """

    file_path: str
    transactions_found: int = 0
    transactions_stored: int = 0
    error: Exception | None = None
    warnings: tuple[Diagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None
