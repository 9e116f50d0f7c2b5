class StoreError(Exception):
    """Base exception for transaction store operations."""


class StoreWriteError(StoreError):
    """Raised when a transaction cannot be persisted."""
