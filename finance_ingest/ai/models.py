from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

DOC_TYPE_BILL = "bill"
DOC_TYPE_RECEIPT = "receipt"
DOC_TYPE_BANK_STATEMENT = "bank_statement"
DOCUMENT_TYPES = frozenset({DOC_TYPE_BILL, DOC_TYPE_RECEIPT, DOC_TYPE_BANK_STATEMENT})


@dataclass(frozen=True)
class Document:
    """A document submitted for AI extraction."""

    content: bytes
    type: str = DOC_TYPE_BILL
    insights: str = ""


@dataclass(frozen=True)
class CategoryOption:
    """A category the provider may assign, with its allowed subcategories."""

    id: int
    name: str
    subcategories: tuple[tuple[int, str], ...] = ()


@dataclass(frozen=True)
class AnalysisOptions:
    """Options for transaction categorization."""

    document_type: str = DOC_TYPE_BILL
    runtime_insights: str = ""
    categories: tuple[CategoryOption, ...] = ()


@dataclass(frozen=True)
class ExtractionResult:
    """Output of AI document extraction.

    When transactions is non-empty it takes precedence over the aggregate
    date/amount/description fields.
    """

    date: str = ""
    amount: Decimal = Decimal("0")
    currency: str = "SEK"
    description: str = ""
    category: str = ""
    subcategory: str = ""
    transactions: list[dict[str, Any]] = field(default_factory=list)
    content: str = ""


@dataclass(frozen=True)
class CategoryAssignment:
    """Category chosen by the provider for one transaction."""

    category: str = ""
    subcategory: str = ""
    category_id: int = 0
    subcategory_id: int = 0
    confidence: float = 0.0
