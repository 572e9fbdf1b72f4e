"""Thin wrapper around direct Playwright for ergonomic assertions."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from playwright.async_api import Page, TimeoutError as PlaywrightTimeout

from inventory_tests.config import settings


def testid(name: str) -> str:
    """CSS selector for a ``data-testid`` attribute."""
    return f'[data-testid="{name}"]'


def testid_prefix(prefix: str) -> str:
    return f'[data-testid^="{prefix}"]'


@dataclass
class ToolError(Exception):
    """Raised when a browser operation fails."""

    name: str
    payload: Dict[str, Any]
    message: str

    def __str__(self) -> str:  # pragma: no cover - human readable helper
        return f"{self.name} failed ({self.message}) with payload={self.payload}"


class Browser:
    """Convenience wrapper over direct Playwright with ergonomic API."""

    def __init__(self, page: Page) -> None:
        self._page = page
        self.current_url: str | None = None

    @property
    def page(self) -> Page:
        return self._page

    async def reset(self) -> Dict[str, Any]:
        """Navigate to about:blank (reset state)."""
        await self._page.goto("about:blank")
        self.current_url = self._page.url
        return {"url": self.current_url}

    async def goto(self, url: str, wait_until: str = "domcontentloaded") -> Dict[str, Any]:
        """Navigate to URL (absolute or relative to the configured base URL)."""
        try:
            response = await self._page.goto(settings.url(url), wait_until=wait_until)
            self.current_url = self._page.url
            return {"url": self.current_url, "status": response.status if response else None}
        except PlaywrightTimeout as exc:
            raise ToolError(name="goto", payload={"url": url, "wait_until": wait_until}, message=str(exc))

    async def wait_for_url(self, path: str) -> str:
        """Wait until the page URL ends with ``path``."""
        try:
            await self._page.wait_for_url(f"**{path}")
            self.current_url = self._page.url
            return self.current_url
        except PlaywrightTimeout as exc:
            raise ToolError(name="wait_for_url", payload={"path": path}, message=str(exc))

    async def fill(self, selector: str, value: str) -> Dict[str, Any]:
        """Fill input field (focus first, webkit drops keystrokes otherwise)."""
        try:
            await self._page.focus(selector)
            await self._page.fill(selector, value)
            return {"selector": selector, "value": value}
        except Exception as exc:
            raise ToolError(name="fill", payload={"selector": selector, "value": value}, message=str(exc))

    async def click(self, selector: str) -> Dict[str, Any]:
        """Click element."""
        try:
            await self._page.click(selector)
            self.current_url = self._page.url
            return {"selector": selector, "url": self.current_url}
        except Exception as exc:
            raise ToolError(name="click", payload={"selector": selector}, message=str(exc))

    async def select(self, selector: str, value: str) -> Dict[str, Any]:
        """Select option in select element."""
        try:
            await self._page.select_option(selector, value)
            return {"selector": selector, "value": value}
        except Exception as exc:
            raise ToolError(name="select", payload={"selector": selector, "value": value}, message=str(exc))

    async def text(self, selector: str) -> str:
        """Get text content of element."""
        try:
            text = await self._page.text_content(selector, timeout=5000)
            return (text or "").strip()
        except Exception as exc:
            raise ToolError(name="text", payload={"selector": selector}, message=str(exc))

    async def is_visible(self, selector: str) -> bool:
        try:
            return await self._page.is_visible(selector)
        except Exception as exc:
            raise ToolError(name="is_visible", payload={"selector": selector}, message=str(exc))

    async def wait_for(self, selector: str, state: str = "visible") -> None:
        """Wait for an element to reach ``state`` (visible, hidden, attached)."""
        try:
            await self._page.wait_for_selector(selector, state=state)
        except PlaywrightTimeout as exc:
            raise ToolError(name="wait_for", payload={"selector": selector, "state": state}, message=str(exc))

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """Execute JavaScript in the page context."""
        try:
            return await self._page.evaluate(script, arg)
        except Exception as exc:
            raise ToolError(name="evaluate", payload={"script": script}, message=str(exc))

    async def attributes_of_all(self, selector: str, attribute: str) -> List[str]:
        """Attribute value of every element matching selector, in DOM order."""
        try:
            return await self._page.eval_on_selector_all(
                selector,
                "(els, attr) => els.map(el => el.getAttribute(attr) || '')",
                attribute,
            )
        except Exception as exc:
            raise ToolError(name="attributes_of_all", payload={"selector": selector, "attribute": attribute}, message=str(exc))

