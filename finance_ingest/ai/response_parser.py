"""Turns raw provider text into ExtractionResult / CategoryAssignment values."""

import json
from decimal import Decimal
from typing import Any

from finance_ingest.ai.exceptions import AIServiceError
from finance_ingest.ai.models import CategoryAssignment, ExtractionResult
from finance_ingest.logging.logger import Log
from finance_ingest.normalization.coercion import (
    first_present,
    to_decimal,
    to_float,
    to_int,
    to_text,
)

DEFAULT_CURRENCY = "SEK"


def extract_json_content(raw: str) -> str:
    """Strip code fences and any prose before the first JSON bracket."""
    cleaned = raw.strip()
    fence = cleaned.find("```")
    if fence != -1:
        cleaned = cleaned[fence + 3:]
        if cleaned.startswith("json"):
            cleaned = cleaned[4:]
        closing = cleaned.find("```")
        if closing != -1:
            cleaned = cleaned[:closing]
        cleaned = cleaned.strip()

    if cleaned and cleaned[0] not in "[{":
        starts = [i for i in (cleaned.find("["), cleaned.find("{")) if i != -1]
        if starts:
            cleaned = cleaned[min(starts):]
    return cleaned


def parse_json(raw: str, error_cls: type[AIServiceError] = AIServiceError) -> Any:
    """Parse provider output; floats become Decimal so amounts stay exact."""
    cleaned = extract_json_content(raw)
    try:
        return json.loads(cleaned, parse_float=Decimal)
    except json.JSONDecodeError as exc:
        raise error_cls(f"Invalid JSON response: {exc}") from exc


def build_extraction(parsed: Any, content: str = "") -> ExtractionResult:
    """Build an ExtractionResult from either an item array or a single object.

    An array is itemized: its first item also seeds the aggregate fields. An
    object is aggregate, optionally carrying line items under "transactions".
    """
    if isinstance(parsed, list):
        items = [item for item in parsed if isinstance(item, dict)]
        if len(items) != len(parsed):
            Log.warning(
                "Ignoring non-object entries in extraction array",
                ignored=len(parsed) - len(items),
            )
        head = items[0] if items else {}
        return _aggregate(head, items, content)

    if isinstance(parsed, dict):
        raw_items = parsed.get("transactions")
        items = list(raw_items) if isinstance(raw_items, list) else []
        return _aggregate(parsed, items, content)

    raise AIServiceError("JSON response must be an object or an array")


def build_assignments(parsed: Any) -> list[CategoryAssignment]:
    """Build assignments from a bare array or an {"assignments": [...]} object."""
    if isinstance(parsed, dict):
        parsed = parsed.get("assignments")
    if not isinstance(parsed, list):
        raise AIServiceError("Categorization response must contain a list of assignments")
    return [_assignment(item) for item in parsed]


def _aggregate(
    data: dict[str, Any],
    items: list[Any],
    content: str,
) -> ExtractionResult:
    _, amount = first_present(data, ("amount", "belopp"))
    currency = to_text(first_present(data, ("currency", "valuta"))[1])
    return ExtractionResult(
        date=to_text(first_present(data, ("date", "datum"))[1]),
        amount=to_decimal(amount) or Decimal("0"),
        currency=currency or DEFAULT_CURRENCY,
        description=to_text(first_present(data, ("description", "beskrivning"))[1]),
        category=to_text(first_present(data, ("category", "kategori"))[1]),
        subcategory=to_text(first_present(data, ("subcategory", "underkategori"))[1]),
        transactions=items,
        content=content,
    )


def _assignment(item: Any) -> CategoryAssignment:
    if not isinstance(item, dict):
        return CategoryAssignment()
    return CategoryAssignment(
        category=to_text(first_present(item, ("category", "kategori"))[1]),
        subcategory=to_text(first_present(item, ("subcategory", "underkategori"))[1]),
        category_id=to_int(item.get("category_id")) or 0,
        subcategory_id=to_int(item.get("subcategory_id")) or 0,
        confidence=min(1.0, max(0.0, to_float(item.get("confidence")))),
    )
