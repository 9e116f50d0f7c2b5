from dataclasses import dataclass


@dataclass
class CategoryRecord:
    """Represents a row from the categories table."""

    id: int
    name: str
    description: str = ""


@dataclass
class SubcategoryRecord:
    """Represents a row from the subcategories table."""

    id: int
    name: str
    category_id: int | None = None
