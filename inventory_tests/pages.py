"""Page wrappers for the inventory application's screens.

These are the UI collaborator the oracle drives and reads from. They locate
elements by ``data-testid`` and return raw rendered text; they hold no
business rules.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from inventory_tests.browser import Browser, testid, testid_prefix
from inventory_tests.display import first_successful
from inventory_tests.models import ProductFormInput, TestProductData

PRODUCT_ROW_PREFIX = "product-row-"
INVENTORY_ROW_PREFIX = "inventory-row-"
PRODUCT_ROW_COLUMNS = ("sku", "name", "category", "price", "stock")


class LoginPage:
    def __init__(self, browser: Browser) -> None:
        self.browser = browser

    async def goto(self) -> None:
        await self.browser.goto("/login")

    async def login(self, email: str, password: str) -> None:
        await self.browser.fill(testid("email-input"), email)
        await self.browser.fill(testid("password-input"), password)
        await self.browser.click(testid("login-button"))
        await self.browser.wait_for_url("/dashboard")


class Navbar:
    def __init__(self, browser: Browser) -> None:
        self.browser = browser

    async def user_name(self) -> str:
        return await self.browser.text(testid("user-name"))

    async def logout(self) -> None:
        await self.browser.click(testid("logout-button"))
        await self.browser.wait_for_url("/login")


class DashboardPage:
    def __init__(self, browser: Browser) -> None:
        self.browser = browser

    async def goto(self) -> None:
        await self.browser.goto("/dashboard")
        await self.browser.wait_for(testid("stat-total-products"))

    async def total_products_text(self) -> str:
        return await self.browser.text(testid("stat-total-products"))

    async def low_stock_text(self) -> str:
        return await self.browser.text(testid("stat-low-stock"))

    async def total_value_text(self) -> str:
        return await self.browser.text(testid("stat-total-value"))


class ProductsPage:
    def __init__(self, browser: Browser) -> None:
        self.browser = browser

    async def goto(self) -> None:
        await self.browser.goto("/products")
        await self.browser.wait_for(testid("products-table"), state="attached")

    async def search(self, term: str) -> None:
        await self.browser.fill(testid("search-input"), term)

    async def filter_category(self, category: str) -> None:
        await self.browser.select(testid("category-filter"), category)

    async def sort_by(self, field: str) -> None:
        await self.browser.select(testid("sort-select"), field)

    async def visible_product_ids(self) -> List[str]:
        """Ids of the rendered rows, top to bottom."""
        testids = await self.browser.attributes_of_all(testid_prefix(PRODUCT_ROW_PREFIX), "data-testid")
        return [value[len(PRODUCT_ROW_PREFIX):] for value in testids]

    async def row_text(self, product_id: str, column: str) -> str:
        """Text of one cell of a product row (``sku``, ``name``, ``category``, ``price`` or ``stock``)."""
        index = PRODUCT_ROW_COLUMNS.index(column) + 1
        return await self.browser.text(f"{testid(PRODUCT_ROW_PREFIX + product_id)} td:nth-child({index})")

    async def delete_product(self, product_id: str) -> None:
        await self.browser.click(testid(f"delete-product-{product_id}"))
        await self.browser.wait_for(testid("delete-modal"))
        await self.browser.click(testid("confirm-delete-button"))
        await self.browser.wait_for(testid("delete-modal"), state="hidden")


class ProductFormPage:
    def __init__(self, browser: Browser) -> None:
        self.browser = browser

    async def goto_new(self) -> None:
        await self.browser.goto("/products/new")

    async def goto_edit(self, product_id: str) -> None:
        await self.browser.goto(f"/products/{product_id}")
        await self.browser.wait_for(testid("product-form"))

    async def fill_form(self, form: ProductFormInput) -> None:
        """Fill the provided fields; empty/missing values are left alone."""
        if form.sku:
            await self.browser.fill(testid("sku-input"), form.sku)
        if form.name:
            await self.browser.fill(testid("name-input"), form.name)
        if form.description:
            await self.browser.fill(testid("description-input"), form.description)
        if form.category:
            await self.browser.select(testid("category-input"), form.category)
        if form.price is not None:
            await self.browser.fill(testid("price-input"), str(form.price))
        if form.stock is not None:
            await self.browser.fill(testid("stock-input"), str(form.stock))
        if form.low_stock_threshold is not None:
            await self.browser.fill(testid("threshold-input"), str(form.low_stock_threshold))

    async def save(self) -> None:
        await self.browser.click(testid("save-button"))

    async def wait_until_saved(self) -> None:
        await self.browser.wait_for_url("/products")

    async def create_product(self, fixture: TestProductData) -> None:
        await self.goto_new()
        await self.fill_form(ProductFormInput.from_fixture(fixture))
        await self.save()
        await self.wait_until_saved()

    async def edit_product(self, product_id: str, update: ProductFormInput) -> None:
        """Open the edit form of ``product_id``, type ``update`` and save."""
        await self.goto_edit(product_id)
        await self.fill_form(update)
        await self.save()
        await self.wait_until_saved()

    async def field_error(self, field: str) -> str:
        """Validation message under ``field``, or "" when none is shown.

        The create form renders a bare ``p.text-red-500`` next to the input;
        the edit form renders a ``<field>-error`` test id.
        """

        async def by_testid() -> Optional[str]:
            selector = testid(f"{field}-error")
            if await self.browser.is_visible(selector):
                return await self.browser.text(selector)
            return None

        async def by_sibling() -> Optional[str]:
            selector = f'xpath=//*[@data-testid="{field}-input"]/../p[contains(@class, "text-red-500")]'
            if await self.browser.is_visible(selector):
                return await self.browser.text(selector)
            return None

        return await first_successful([by_testid, by_sibling], default="")


class InventoryPage:
    def __init__(self, browser: Browser) -> None:
        self.browser = browser

    async def goto(self) -> None:
        await self.browser.goto("/inventory")
        await self.browser.wait_for(testid("inventory-table"))

    async def _open_adjustment(self, product_id: str, delta: int) -> None:
        await self.browser.click(testid(f"adjust-stock-{product_id}"))
        await self.browser.wait_for(testid("adjust-stock-modal"))
        await self.browser.fill(testid("adjustment-input"), str(delta))
        await self.browser.click(testid("confirm-adjust-button"))

    async def adjust_stock(self, product_id: str, delta: int) -> None:
        await self._open_adjustment(product_id, delta)
        await self.browser.wait_for(testid("adjust-stock-modal"), state="hidden")

    async def attempt_rejected_adjustment(self, product_id: str, delta: int) -> str:
        """Submit an adjustment the app should refuse; return its error text."""
        await self._open_adjustment(product_id, delta)
        await self.browser.wait_for(testid("adjustment-error"))
        message = await self.browser.text(testid("adjustment-error"))
        await self.browser.click(testid("cancel-adjust-button"))
        await self.browser.wait_for(testid("adjust-stock-modal"), state="hidden")
        return message

    async def stock_text(self, product_id: str) -> str:
        return await self.browser.text(f"{testid(INVENTORY_ROW_PREFIX + product_id)} td:nth-child(3)")

    async def status_text(self, product_id: str) -> str:
        return await self.browser.text(f"{testid(INVENTORY_ROW_PREFIX + product_id)} td:nth-child(4)")

    async def _text_if_visible(self, selector: str) -> str:
        if await self.browser.is_visible(selector):
            return await self.browser.text(selector)
        return ""

    async def low_stock_alert_text(self) -> str:
        """Text of the low-stock alert banner, or "" when it is hidden."""
        return await self._text_if_visible(testid("low-stock-alert"))

    async def low_stock_badge_text(self, product_id: str) -> str:
        return await self._text_if_visible(testid(f"low-stock-badge-{product_id}"))


@dataclass
class InventoryApp:
    """All screens of one browser session."""

    login: LoginPage
    navbar: Navbar
    dashboard: DashboardPage
    products: ProductsPage
    form: ProductFormPage
    inventory: InventoryPage

    @classmethod
    def for_browser(cls, browser: Browser) -> "InventoryApp":
        return cls(
            login=LoginPage(browser),
            navbar=Navbar(browser),
            dashboard=DashboardPage(browser),
            products=ProductsPage(browser),
            form=ProductFormPage(browser),
            inventory=InventoryPage(browser),
        )
