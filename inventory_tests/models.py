"""Data shapes shared by the oracle, the seeder and the journeys.

Product records are persisted by the application as camelCase JSON. Prices
are carried as :class:`~decimal.Decimal` once parsed so that aggregate values
never pick up binary floating point error.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Dict, Literal, Optional

# Fixed category enumeration of the application
CATEGORIES = ("Electronics", "Accessories", "Software", "Hardware")

# Passthrough sentinel used by the category filter dropdown
ALL_CATEGORIES = "all"

SortField = Literal["name", "price", "stock"]

# Applied by the product form when the threshold is left empty
DEFAULT_LOW_STOCK_THRESHOLD = 5


def to_decimal(value: Any) -> Decimal:
    """Convert a JSON number (or numeric string) to an exact Decimal.

    Floats go through ``str`` first so 29.99 becomes Decimal("29.99") rather
    than the full binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _json_number(value: Decimal) -> int | float:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


@dataclass
class Product:
    """A product exactly as the application stores it."""

    id: str
    sku: str
    name: str
    category: str
    price: Decimal
    stock: int
    low_stock_threshold: int
    created_at: str
    updated_at: str
    description: str = ""
    image_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        return cls(
            id=str(data["id"]),
            sku=data["sku"],
            name=data["name"],
            category=data["category"],
            price=to_decimal(data["price"]),
            stock=int(data["stock"]),
            low_stock_threshold=int(data["lowStockThreshold"]),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
            description=data.get("description", ""),
            image_url=data.get("imageUrl"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "description": self.description,
            "price": _json_number(self.price),
            "stock": self.stock,
            "category": self.category,
            "lowStockThreshold": self.low_stock_threshold,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.image_url is not None:
            data["imageUrl"] = self.image_url
        return data

    def as_fixture(self) -> "TestProductData":
        """The user-entered fields, comparable with the fixture that created it."""
        return TestProductData(
            sku=self.sku,
            name=self.name,
            category=self.category,
            price=self.price,
            stock=self.stock,
            low_stock_threshold=self.low_stock_threshold,
            description=self.description,
        )


@dataclass
class TestProductData:
    """Fixture record: a product minus its surrogate id and timestamps."""

    __test__ = False  # keep pytest from collecting this as a test class

    sku: str
    name: str
    category: str
    price: Decimal
    stock: int
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    description: str = ""

    def __post_init__(self) -> None:
        self.price = to_decimal(self.price)
        if self.category not in CATEGORIES:
            raise ValueError(f"Invalid category: {self.category!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TestProductData":
        return cls(
            sku=data["sku"],
            name=data["name"],
            category=data["category"],
            price=to_decimal(data["price"]),
            stock=int(data["stock"]),
            low_stock_threshold=int(data.get("lowStockThreshold", DEFAULT_LOW_STOCK_THRESHOLD)),
            description=data.get("description", ""),
        )

    def to_product(self, product_id: str, timestamp: str) -> Product:
        return Product(
            id=product_id,
            sku=self.sku,
            name=self.name,
            category=self.category,
            price=self.price,
            stock=self.stock,
            low_stock_threshold=self.low_stock_threshold,
            created_at=timestamp,
            updated_at=timestamp,
            description=self.description,
        )


@dataclass(frozen=True)
class DashboardStats:
    """Derived dashboard snapshot. Recomputed on demand, never persisted."""

    total_products: int
    low_stock_items: int
    total_value: Decimal


@dataclass
class FilterOptions:
    """Products page controls; ``None`` means the control is untouched."""

    search_term: Optional[str] = None
    category: Optional[str] = None
    sort_by: Optional[SortField] = None


@dataclass
class ProductFormInput:
    """Raw values a user types into the product form (any may be missing)."""

    sku: str = ""
    name: str = ""
    category: str = CATEGORIES[0]
    price: Optional[Decimal] = None
    stock: Optional[int] = None
    low_stock_threshold: Optional[int] = None
    description: str = ""

    @classmethod
    def from_fixture(cls, fixture: TestProductData) -> "ProductFormInput":
        return cls(
            sku=fixture.sku,
            name=fixture.name,
            category=fixture.category,
            price=fixture.price,
            stock=fixture.stock,
            low_stock_threshold=fixture.low_stock_threshold,
            description=fixture.description,
        )

    def after_typing(self, update: "ProductFormInput") -> "ProductFormInput":
        """Form state after typing ``update`` into a form holding these values.

        Empty text fields and ``None`` numbers in ``update`` were not typed and
        keep their current value.
        """
        changes: Dict[str, Any] = {}
        for name in ("sku", "name", "description", "category"):
            if getattr(update, name):
                changes[name] = getattr(update, name)
        for name in ("price", "stock", "low_stock_threshold"):
            if getattr(update, name) is not None:
                changes[name] = getattr(update, name)
        return replace(self, **changes)
