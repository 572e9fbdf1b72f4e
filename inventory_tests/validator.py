"""Dual-source validation: data-derived expectation vs. what the UI shows.

Every check follows the same protocol:

1. read the store and compute the expected value with the replicator
2. drive the UI to the screen that should show it
3. read the observed value from the page
4. compare, rendering the *expected* value through :mod:`display` so that no
   business value or formatted literal is ever hard-coded

The UI renders from ``localStorage`` after navigation, so observations are
polled briefly until they settle before being compared.
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar

import anyio

from inventory_tests import replicator
from inventory_tests.display import (
    alert_count_token,
    count_token,
    currency_token,
    format_count,
    format_currency,
    format_low_stock_alert,
    format_price,
    format_stock,
)
from inventory_tests.exceptions import ExpectedVsObservedMismatch
from inventory_tests.models import DashboardStats, FilterOptions, Product
from inventory_tests.pages import InventoryApp
from inventory_tests.storage import ProductStore, find_by_id

logger = logging.getLogger(__name__)

T = TypeVar("T")
E = TypeVar("E")

SETTLE_TIMEOUT = 5.0


def assert_matches(label: str, expected: Any, observed: Any) -> None:
    if expected != observed:
        logger.error(f"Mismatch on {label}: expected {expected!r}, observed {observed!r}")
        raise ExpectedVsObservedMismatch(label, expected, observed)
    logger.debug(f"{label}: {observed!r} as expected")


async def observe_settled(
    observe: Callable[[], Awaitable[T]],
    expected: T,
    timeout: Optional[float] = None,
    interval: float = 0.2,
) -> T:
    """Poll ``observe`` until it returns ``expected`` or ``timeout`` elapses.

    ``timeout`` defaults to ``SETTLE_TIMEOUT``. Returns the last observation
    either way; deciding pass/fail is the caller's job.
    """
    deadline = anyio.current_time() + (SETTLE_TIMEOUT if timeout is None else timeout)
    observed = await observe()
    while observed != expected and anyio.current_time() < deadline:
        await anyio.sleep(interval)
        observed = await observe()
    return observed


async def dual_source_check(
    label: str,
    store: ProductStore,
    compute: Callable[[List[Product]], E],
    observe: Callable[[], Awaitable[Any]],
    *,
    reach: Optional[Callable[[], Awaitable[None]]] = None,
    render: Optional[Callable[[E], Any]] = None,
    settle_timeout: Optional[float] = None,
) -> E:
    """Run one expected-vs-observed check and return the expected value."""
    expected = compute(await store.read_all())
    if reach is not None:
        await reach()
    wanted = render(expected) if render is not None else expected
    observed = await observe_settled(observe, wanted, timeout=settle_timeout)
    assert_matches(label, wanted, observed)
    return expected


def _token_of(read_text: Callable[[], Awaitable[str]], extract: Callable[[str], str]):
    async def _observe() -> Optional[str]:
        try:
            return extract(await read_text())
        except ValueError:
            return None
    return _observe


async def verify_dashboard(store: ProductStore, app: InventoryApp, navigate: bool = True) -> DashboardStats:
    """Check all three dashboard cards against the stored products."""
    dashboard = app.dashboard
    await dual_source_check(
        "dashboard total products",
        store,
        lambda products: replicator.compute_stats(products).total_products,
        _token_of(dashboard.total_products_text, count_token),
        reach=dashboard.goto if navigate else None,
        render=format_count,
    )
    await dual_source_check(
        "dashboard low stock items",
        store,
        lambda products: replicator.compute_stats(products).low_stock_items,
        _token_of(dashboard.low_stock_text, count_token),
        render=format_count,
    )
    await dual_source_check(
        "dashboard total value",
        store,
        lambda products: replicator.compute_stats(products).total_value,
        _token_of(dashboard.total_value_text, currency_token),
        render=format_currency,
    )
    return await store.expected_stats()


async def verify_product_listing(
    store: ProductStore,
    app: InventoryApp,
    options: FilterOptions,
) -> List[Product]:
    """Apply ``options`` on the products page and check the rendered rows.

    Row order is compared only when a sort is requested; otherwise the set of
    rows must match.
    """
    products_page = app.products

    async def reach() -> None:
        await products_page.goto()
        if options.search_term:
            await products_page.search(options.search_term)
        if options.category:
            await products_page.filter_category(options.category)
        if options.sort_by:
            await products_page.sort_by(options.sort_by)

    if options.sort_by:
        def render(expected: Sequence[Product]) -> List[str]:
            return [p.id for p in expected]
        observe = products_page.visible_product_ids
    else:
        def render(expected: Sequence[Product]) -> List[str]:
            return sorted(p.id for p in expected)

        async def observe() -> List[str]:
            return sorted(await products_page.visible_product_ids())

    return await dual_source_check(
        f"product listing for {options}",
        store,
        lambda products: replicator.apply_filters(products, options),
        observe,
        reach=reach,
        render=render,
    )


def _lookup(product_id: str) -> Callable[[List[Product]], Product]:
    def lookup(products: List[Product]) -> Product:
        product = find_by_id(products, product_id)
        if product is None:
            raise ExpectedVsObservedMismatch(f"product {product_id} in store", "present", "absent")
        return product
    return lookup


async def verify_inventory_row(
    store: ProductStore,
    app: InventoryApp,
    product_id: str,
    navigate: bool = True,
) -> Product:
    """Check the stock level and status label of one inventory row."""
    inventory = app.inventory
    product = await dual_source_check(
        f"stock of {product_id}",
        store,
        _lookup(product_id),
        lambda: inventory.stock_text(product_id),
        reach=inventory.goto if navigate else None,
        render=lambda p: format_stock(p.stock),
    )
    await dual_source_check(
        f"status of {product_id}",
        store,
        _lookup(product_id),
        lambda: inventory.status_text(product_id),
        render=replicator.stock_status,
    )
    return product


async def verify_low_stock_alert(
    store: ProductStore,
    app: InventoryApp,
    navigate: bool = True,
) -> List[Product]:
    """Check the inventory page's low-stock alert and the badge of every low row.

    The alert announces how many products are at or below their threshold and
    is hidden when there are none.
    """
    inventory = app.inventory
    await dual_source_check(
        "low stock alert count",
        store,
        lambda products: len(replicator.low_stock_of(products)),
        _token_of(inventory.low_stock_alert_text, alert_count_token),
        reach=inventory.goto if navigate else None,
        render=format_low_stock_alert,
    )
    low = await store.expected_low_stock()
    for product in low:
        await dual_source_check(
            f"low stock badge of {product.id}",
            store,
            _lookup(product.id),
            lambda pid=product.id: inventory.low_stock_badge_text(pid),
            render=replicator.stock_status,
        )
    return low


async def verify_product_row(store: ProductStore, app: InventoryApp, product_id: str) -> Product:
    """Check every cell of one products-table row against the stored product."""
    products_page = app.products
    renderers: Dict[str, Callable[[Product], str]] = {
        "sku": lambda p: p.sku,
        "name": lambda p: p.name,
        "category": lambda p: p.category,
        "price": lambda p: format_price(p.price),
        "stock": lambda p: format_stock(p.stock),
    }
    product = _lookup(product_id)(await store.read_all())
    await products_page.goto()
    await products_page.search(product.sku)
    for column, render in renderers.items():
        await dual_source_check(
            f"{column} of product row {product_id}",
            store,
            _lookup(product_id),
            lambda column=column: products_page.row_text(product_id, column),
            render=render,
        )
    return product
