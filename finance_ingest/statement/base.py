from abc import ABC, abstractmethod
from typing import TextIO

from finance_ingest.pipeline.models import Diagnostics
from finance_ingest.statement.models import StatementLine


class BaseStatementParser(ABC):
    """Contract for all bank statement format adapters."""

    @abstractmethod
    def parse(
        self,
        reader: TextIO,
        diagnostics: Diagnostics | None = None,
    ) -> list[StatementLine]:
        """Parse a statement into lines in input order.

        Malformed rows are logged, recorded in diagnostics and skipped.

        Raises:
            HeaderMismatchError: if the header does not match the schema.
            NoTransactionsFoundError: if no row could be parsed.
        """
