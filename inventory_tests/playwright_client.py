"""
Direct Playwright Client
========================

Launches Playwright in-process and hands out one isolated browser context per
client. Each context has its own ``localStorage``, so every journey sees a
private copy of the inventory application's product store.

Usage:
    async with PlaywrightClient() as client:
        await client.page.goto("/dashboard")
"""

import logging
import os
from typing import Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright

logger = logging.getLogger(__name__)


class PlaywrightClient:
    """
    Direct Playwright client with full API access (no server required).

    Example:
        async with PlaywrightClient(base_url="http://localhost:3000") as client:
            await client.page.goto("/login")
    """

    def __init__(
        self,
        browser_type: str = "chromium",
        headless: Optional[bool] = None,
        timeout: int = 30000,
        base_url: Optional[str] = None,
    ):
        """
        Initialize Playwright client.

        Args:
            browser_type: Browser to use (chromium, firefox, webkit)
            headless: Run in headless mode (None = read PLAYWRIGHT_HEADLESS)
            timeout: Default timeout in milliseconds
            base_url: Base URL for relative navigation inside the context
        """
        self.browser_type = browser_type
        if headless is not None:
            self.headless = headless
        else:
            self.headless = os.getenv("PLAYWRIGHT_HEADLESS", "true").lower() == "true"
        self.timeout = timeout
        self.base_url = base_url

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def connect(self):
        """Launch the browser and open a fresh context with one page."""
        self._playwright = await async_playwright().start()

        if self.browser_type == "firefox":
            launcher = self._playwright.firefox
        elif self.browser_type == "webkit":
            launcher = self._playwright.webkit
        else:
            launcher = self._playwright.chromium
        self._browser = await launcher.launch(headless=self.headless)

        if self.base_url:
            self._context = await self._browser.new_context(base_url=self.base_url)
        else:
            self._context = await self._browser.new_context()
        self._context.set_default_timeout(self.timeout)

        self._page = await self._context.new_page()
        logger.debug(f"Launched {self.browser_type} (headless={self.headless})")

    async def close(self):
        """Close all connections and cleanup resources."""
        if self._page:
            await self._page.close()
            self._page = None

        if self._context:
            await self._context.close()
            self._context = None

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    @property
    def context(self) -> BrowserContext:
        """Get the default context."""
        if not self._context:
            raise RuntimeError("Client not connected")
        return self._context

    @property
    def page(self) -> Page:
        """Get the default page."""
        if not self._page:
            raise RuntimeError("Client not connected or page not created")
        return self._page
