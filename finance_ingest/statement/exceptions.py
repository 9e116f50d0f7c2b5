class StatementError(Exception):
    """Base exception for bank statement parsing errors."""


class HeaderMismatchError(StatementError):
    """Raised when the header does not match the expected column schema."""


class NoTransactionsFoundError(StatementError):
    """Raised when a statement contains no parseable transaction rows."""


class RowParseError(StatementError):
    """Raised for a single malformed row. The row is skipped, not the file."""

    def __init__(self, message: str, line: int) -> None:
        super().__init__(f"line {line}: {message}")
        self.line = line
