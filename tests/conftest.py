import itertools
from decimal import Decimal

import pytest

from fake_app import FakeApplication
from inventory_tests.config import ROLE_ELEVATED, ROLE_STANDARD, settings
from inventory_tests.models import Product, TestProductData
from inventory_tests.orchestrator import JourneyContext
from inventory_tests.seeder import FixtureSeeder, IdGenerator
from inventory_tests.storage import InMemoryStorage, ProductStore

TEST_STORAGE_KEY = "test_products"
FIXED_TIMESTAMP = "2024-06-01T00:00:00.000Z"


def make_product(
    product_id: str = "1",
    sku: str = "SKU-1",
    name: str = "Widget",
    category: str = "Electronics",
    price: str = "10.00",
    stock: int = 10,
    low_stock_threshold: int = 5,
) -> Product:
    return Product(
        id=product_id,
        sku=sku,
        name=name,
        category=category,
        price=Decimal(price),
        stock=stock,
        low_stock_threshold=low_stock_threshold,
        created_at=FIXED_TIMESTAMP,
        updated_at=FIXED_TIMESTAMP,
    )


def make_fixture(sku: str = "FIX-1", **overrides) -> TestProductData:
    values = dict(
        sku=sku,
        name=f"Fixture {sku}",
        category="Hardware",
        price=Decimal("2.00"),
        stock=10,
        low_stock_threshold=5,
    )
    values.update(overrides)
    return TestProductData(**values)


@pytest.fixture
def backend():
    return InMemoryStorage()


@pytest.fixture
def store(backend):
    return ProductStore(backend, key=TEST_STORAGE_KEY)


@pytest.fixture
def id_generator():
    """Ids far below any wall-clock millisecond value."""
    counter = itertools.count(1000)
    return IdGenerator(clock_ms=lambda: next(counter))


@pytest.fixture
def seeder(store, id_generator):
    return FixtureSeeder(store, id_generator=id_generator, now=lambda: FIXED_TIMESTAMP)


@pytest.fixture
def fake_app(store):
    return FakeApplication(store)


@pytest.fixture
def app(fake_app):
    return fake_app.pages()


@pytest.fixture
def elevated():
    return settings.actor(ROLE_ELEVATED)


@pytest.fixture
def standard():
    return settings.actor(ROLE_STANDARD)


@pytest.fixture
def journey_context(store, app, seeder):
    return JourneyContext(store=store, app=app, seeder=seeder)


@pytest.fixture(autouse=True)
def fast_settle(monkeypatch):
    """The fake application renders synchronously; don't wait long for mismatches."""
    monkeypatch.setattr("inventory_tests.validator.SETTLE_TIMEOUT", 0.05)
