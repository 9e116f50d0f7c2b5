from abc import ABC, abstractmethod

from finance_ingest.database.models import CategoryRecord, SubcategoryRecord
from finance_ingest.pipeline.models import Transaction


class BaseTransactionStore(ABC):
    """Contract for transaction persistence."""

    @abstractmethod
    def create_transaction(self, transaction: Transaction) -> int:
        """Persist a transaction and return its new ID.

        Raises:
            StoreWriteError: if the transaction cannot be stored.
        """

    @abstractmethod
    def get_category_by_id(self, category_id: int) -> CategoryRecord | None:
        """Return the category, or None when it does not exist."""

    @abstractmethod
    def get_subcategory_by_id(self, subcategory_id: int) -> SubcategoryRecord | None:
        """Return the subcategory, or None when it does not exist."""

    @abstractmethod
    def list_categories(self) -> list[tuple[CategoryRecord, list[SubcategoryRecord]]]:
        """Return every category with its linked subcategories, ordered by ID."""
