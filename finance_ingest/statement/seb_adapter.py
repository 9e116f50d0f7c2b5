"""Adapter for SEB bank statement exports (semicolon-separated CSV).

Header (exact order expected):
Bokföringsdatum;Valutadatum;Verifikationsnummer;Text;Belopp;Saldo
"""

import csv
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import ClassVar, TextIO

from finance_ingest.logging.logger import Log
from finance_ingest.pipeline.models import DiagnosticKind, Diagnostics
from finance_ingest.statement.base import BaseStatementParser
from finance_ingest.statement.exceptions import (
    HeaderMismatchError,
    NoTransactionsFoundError,
    RowParseError,
)
from finance_ingest.statement.models import StatementLine

_BOM = "\ufeff"


class SebCsvParser(BaseStatementParser):
    """Parses SEB CSV exports with a fixed six-column layout."""

    EXPECTED_HEADER: ClassVar[tuple[str, ...]] = (
        "Bokföringsdatum",
        "Valutadatum",
        "Verifikationsnummer",
        "Text",
        "Belopp",
        "Saldo",
    )
    DATE_FORMAT: ClassVar[str] = "%Y-%m-%d"
    DATE_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

    BOOKING_DATE = 0
    VALUE_DATE = 1
    REFERENCE = 2
    DESCRIPTION = 3
    AMOUNT = 4
    BALANCE = 5

    def __init__(self, delimiter: str = ";") -> None:
        self._delimiter = delimiter

    def parse(
        self,
        reader: TextIO,
        diagnostics: Diagnostics | None = None,
    ) -> list[StatementLine]:
        rows = csv.reader(reader, delimiter=self._delimiter, skipinitialspace=True)
        header = next(rows, None)
        if header is None:
            raise HeaderMismatchError("Statement is empty, expected a header row")
        self._validate_header(header)
        Log.info("Header validated successfully", header=header)

        lines: list[StatementLine] = []
        for line_number, record in enumerate(rows, start=1):
            if not any(cell.strip() for cell in record):
                continue
            try:
                line = self._parse_record(record, line_number)
            except RowParseError as exc:
                Log.warning(
                    "Failed to parse statement row, skipping",
                    line=line_number,
                    error=str(exc),
                    raw_data=record,
                )
                if diagnostics is not None:
                    diagnostics.add(
                        DiagnosticKind.ROW_SKIPPED,
                        str(exc),
                        line=line_number,
                        record=list(record),
                    )
                continue
            lines.append(line)

        if not lines:
            Log.warning("No transactions were found in the statement")
            raise NoTransactionsFoundError("No valid transactions found in statement")

        Log.info(f"Parsed {len(lines)} statement rows")
        return lines

    def _validate_header(self, header: list[str]) -> None:
        expected = self.EXPECTED_HEADER
        if len(header) != len(expected):
            raise HeaderMismatchError(
                f"Invalid number of columns: got {len(header)}, want {len(expected)}"
            )
        columns = [header[0].removeprefix(_BOM), *header[1:]]
        for index, (got, want) in enumerate(zip(columns, expected), start=1):
            if got != want:
                raise HeaderMismatchError(
                    f"Invalid header at column {index}: got {got!r}, want {want!r}"
                )

    def _parse_record(self, record: list[str], line: int) -> StatementLine:
        if len(record) != len(self.EXPECTED_HEADER):
            raise RowParseError(
                f"invalid number of fields: got {len(record)}, "
                f"want {len(self.EXPECTED_HEADER)}",
                line,
            )
        booking_date = self._parse_date(record[self.BOOKING_DATE], line)
        amount = self._parse_amount(record[self.AMOUNT], line)
        return StatementLine(
            line=line,
            date=booking_date,
            amount=amount,
            description=record[self.DESCRIPTION].strip(),
            reference=record[self.REFERENCE].strip(),
            raw_data={
                "ValueDate": record[self.VALUE_DATE],
                "Balance": record[self.BALANCE],
            },
        )

    def _parse_date(self, raw: str, line: int) -> date:
        text = raw.strip()
        if not self.DATE_PATTERN.fullmatch(text):
            raise RowParseError(f"invalid date format {raw!r}", line)
        try:
            return datetime.strptime(text, self.DATE_FORMAT).date()
        except ValueError as exc:
            raise RowParseError(f"invalid date format {raw!r}", line) from exc

    @staticmethod
    def _parse_amount(raw: str, line: int) -> Decimal:
        normalized = raw.strip().replace(" ", "").replace("\xa0", "").replace(",", ".", 1)
        try:
            amount = Decimal(normalized)
        except InvalidOperation as exc:
            raise RowParseError(f"invalid amount format {raw!r}", line) from exc
        if not amount.is_finite():
            raise RowParseError(f"invalid amount format {raw!r}", line)
        return amount
