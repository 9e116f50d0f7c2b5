from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class StatementLine:
    """One parsed row of a bank statement, before it becomes a Transaction."""

    line: int
    date: date
    amount: Decimal
    description: str
    reference: str = ""
    raw_data: dict[str, Any] = field(default_factory=dict)
