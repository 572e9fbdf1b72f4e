import pytest
import pytest_asyncio

from inventory_tests.browser import Browser
from inventory_tests.config import ROLE_ELEVATED, ROLE_STANDARD, settings
from inventory_tests.orchestrator import JourneyContext
from inventory_tests.pages import InventoryApp
from inventory_tests.playwright_client import PlaywrightClient
from inventory_tests.seeder import FixtureSeeder
from inventory_tests.storage import BrowserLocalStorage, ProductStore


@pytest.fixture(autouse=True)
def require_live_application():
    """Live journeys need a running application at INVENTORY_BASE_URL."""
    if not settings.live_app_configured:
        pytest.skip("INVENTORY_BASE_URL is not set; start the application and export it")


@pytest_asyncio.fixture()
async def playwright_client():
    """Create a Playwright client with a fresh, isolated browser context."""
    async with PlaywrightClient(
        headless=settings.playwright_headless,
        timeout=settings.playwright_timeout_ms,
        base_url=settings.url(""),
    ) as client:
        yield client


@pytest_asyncio.fixture()
async def browser(playwright_client):
    """Create a Browser instance with the Playwright page."""
    browser = Browser(playwright_client.page)
    await browser.reset()
    return browser


@pytest.fixture
def app(browser):
    return InventoryApp.for_browser(browser)


@pytest.fixture
def store(browser):
    """The application's product store inside this browser context."""
    return ProductStore(BrowserLocalStorage(browser))


@pytest.fixture
def seeder(store):
    return FixtureSeeder(store)


@pytest.fixture
def journey_context(store, app, seeder):
    return JourneyContext(store=store, app=app, seeder=seeder)


@pytest.fixture
def elevated():
    return settings.actor(ROLE_ELEVATED)


@pytest.fixture
def standard():
    return settings.actor(ROLE_STANDARD)
