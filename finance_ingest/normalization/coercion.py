"""Lenient value coercion for AI-produced field maps.

Every helper returns None (or an empty string) instead of raising, callers
decide whether a missing value is fatal for the record.
"""

import re
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

DATE_FORMAT = "%Y-%m-%d"
DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def first_present(data: Mapping[str, Any], keys: Sequence[str]) -> tuple[str | None, Any]:
    """Return (key, value) for the first key whose value is not None or blank."""
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return key, value
    return None, None


def to_text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    return ""


def to_decimal(value: Any) -> Decimal | None:
    """Read numbers, integers and decimal strings. Comma decimals are accepted."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip().replace(" ", "").replace("\xa0", "")
        if "," in text and "." not in text:
            text = text.replace(",", ".", 1)
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    return result if result.is_finite() else None


def to_date(value: Any) -> date | None:
    """Parse the fixed YYYY-MM-DD format; anything else is None."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not DATE_PATTERN.fullmatch(text):
        return None
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        return None


def to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        number = to_decimal(value)
        if number is None or number != number.to_integral_value():
            return None
        return int(number)
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("+-").isdigit():
            return int(text)
    return None


def to_positive_int(value: Any) -> int | None:
    number = to_int(value)
    if number is None or number <= 0:
        return None
    return number


def to_float(value: Any) -> float:
    number = to_decimal(value)
    return float(number) if number is not None else 0.0
