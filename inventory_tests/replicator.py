"""Pure re-implementations of the application's business rules.

These functions are the ground truth every UI observation is checked against.
They mirror the inventory application's own logic:

- products page: search on name or SKU (case-insensitive substring), exact
  category match with an ``"all"`` passthrough, then a stable sort on name,
  price or stock
- dashboard: product count, low-stock count (``stock <= lowStockThreshold``)
  and total value ``sum(price * stock)``
- inventory page: an adjustment is rejected when ``stock + delta < 0``;
  status is "Low Stock" up to the threshold, "Medium" up to twice the
  threshold, "In Stock" above that
- product form: required-field and range messages

If the application changes any of these rules, this module changes with it.
Nothing here mutates its inputs.
"""
from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple

from pyuca import Collator

from inventory_tests.models import (
    ALL_CATEGORIES,
    DashboardStats,
    FilterOptions,
    Product,
    ProductFormInput,
    SortField,
)

STATUS_LOW = "Low Stock"
STATUS_MEDIUM = "Medium"
STATUS_IN_STOCK = "In Stock"


def filter_by_search(products: Sequence[Product], term: str) -> List[Product]:
    if term == "":
        return list(products)
    needle = term.lower()
    return [p for p in products if needle in p.name.lower() or needle in p.sku.lower()]


def filter_by_category(products: Sequence[Product], category: str) -> List[Product]:
    if category == ALL_CATEGORIES:
        return list(products)
    return [p for p in products if p.category == category]


@lru_cache(maxsize=1)
def _collator() -> Collator:
    return Collator()


def _name_collation_key(name: str) -> Tuple[int, ...]:
    # Default Unicode collation order, the one String.localeCompare follows.
    return _collator().sort_key(name)


def sort_products(products: Sequence[Product], sort_by: SortField) -> List[Product]:
    """Return a new, stably sorted list."""
    if sort_by == "name":
        return sorted(products, key=lambda p: _name_collation_key(p.name))
    if sort_by == "price":
        return sorted(products, key=lambda p: p.price)
    if sort_by == "stock":
        return sorted(products, key=lambda p: p.stock)
    raise ValueError(f"Unknown sort field: {sort_by!r}")


def apply_filters(products: Sequence[Product], options: FilterOptions) -> List[Product]:
    """Search, then category, then sort. Absent options are skipped."""
    result = list(products)
    if options.search_term:
        result = filter_by_search(result, options.search_term)
    if options.category:
        result = filter_by_category(result, options.category)
    if options.sort_by:
        result = sort_products(result, options.sort_by)
    return result


def low_stock_of(products: Sequence[Product]) -> List[Product]:
    return [p for p in products if p.stock <= p.low_stock_threshold]


def compute_stats(products: Sequence[Product]) -> DashboardStats:
    total_value = sum((p.price * p.stock for p in products), Decimal(0))
    return DashboardStats(
        total_products=len(products),
        low_stock_items=len(low_stock_of(products)),
        total_value=total_value,
    )


def is_adjustment_legal(current_stock: int, delta: int) -> bool:
    return current_stock + delta >= 0


def expected_stock_after(current_stock: int, delta: int) -> int:
    return current_stock + delta


def stock_status(product: Product) -> str:
    """Status label of the inventory table's Status column."""
    if product.stock <= product.low_stock_threshold:
        return STATUS_LOW
    if product.stock <= product.low_stock_threshold * 2:
        return STATUS_MEDIUM
    return STATUS_IN_STOCK


def validate_product_form(form: ProductFormInput) -> Dict[str, str]:
    """Messages the product form shows on save, keyed by field name.

    An empty dict means the form would be accepted.
    """
    errors: Dict[str, str] = {}
    if not form.sku.strip():
        errors["sku"] = "SKU is required"
    if not form.name.strip():
        errors["name"] = "Name is required"

    price: Optional[Decimal] = form.price
    if price is None:
        errors["price"] = "Price is required"
    elif price <= 0:
        errors["price"] = "Price must be greater than 0"

    if form.stock is None:
        errors["stock"] = "Stock is required"
    elif form.stock < 0:
        errors["stock"] = "Stock cannot be negative"
    return errors
