"""
Property-based tests for the oracle using Hypothesis.

Properties that must ALWAYS hold:
  - Seeding the same fixtures twice leaves the collection as one call did
  - Search and category filters commute in result count
  - Total value is additive over disjoint product lists
  - An adjustment is legal exactly when stock stays non-negative
  - A journey that creates, adjusts and deletes one product ends where it began
"""
import itertools
import string
from decimal import Decimal

import anyio
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from fake_app import FakeApplication
from inventory_tests import replicator
from inventory_tests.config import ROLE_ELEVATED
from inventory_tests.config import settings as inventory_settings
from inventory_tests.models import CATEGORIES, Product, TestProductData
from inventory_tests.orchestrator import (
    Journey,
    JourneyContext,
    adjust_stock,
    delete_product,
    login_as,
    open_dashboard,
    seed_products,
    verify_inventory,
)
from inventory_tests.seeder import FixtureSeeder, IdGenerator
from inventory_tests.storage import InMemoryStorage, ProductStore

PROPERTY_SETTINGS = settings(
    max_examples=50,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)


# -----------------------------------------------------------------------
# Strategies
# -----------------------------------------------------------------------
prices = st.decimals(
    min_value=Decimal("0.01"),
    max_value=Decimal("99999.99"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
stocks = st.integers(min_value=0, max_value=10_000)
thresholds = st.integers(min_value=0, max_value=100)
categories = st.sampled_from(CATEGORIES)
words = st.text(alphabet=string.ascii_letters + string.digits + " -", min_size=1, max_size=12)
skus = st.text(alphabet="ABC123", min_size=1, max_size=3)


@st.composite
def fixture_strategy(draw):
    return TestProductData(
        sku=draw(skus),
        name=draw(words),
        category=draw(categories),
        price=draw(prices),
        stock=draw(stocks),
        low_stock_threshold=draw(thresholds),
    )


@st.composite
def product_lists(draw, max_size=12):
    fixtures = draw(st.lists(fixture_strategy(), max_size=max_size))
    return [f.to_product(str(i + 1), "2024-01-01T00:00:00.000Z") for i, f in enumerate(fixtures)]


@st.composite
def legal_adjustments(draw, start):
    """Deltas that never drive stock below zero when applied in order."""
    stock = start
    deltas = []
    for raw in draw(st.lists(st.integers(min_value=-50, max_value=50), min_size=1, max_size=4)):
        delta = max(raw, -stock)
        deltas.append(delta)
        stock += delta
    return deltas


def _new_store():
    return ProductStore(InMemoryStorage(), key="property_products")


def _new_seeder(store):
    counter = itertools.count(1000)
    return FixtureSeeder(store, id_generator=IdGenerator(clock_ms=lambda: next(counter)), now=lambda: "T")


# -----------------------------------------------------------------------
# Properties
# -----------------------------------------------------------------------
@PROPERTY_SETTINGS
@given(fixtures=st.lists(fixture_strategy(), max_size=8))
def test_seeding_is_idempotent(fixtures):
    async def scenario():
        store = _new_store()
        await store.write_all([])
        seeder = _new_seeder(store)
        await seeder.ensure_exist(fixtures)
        once = dict(store.backend.items)
        second = await seeder.ensure_exist(fixtures)
        return once, second, dict(store.backend.items), await store.read_all()

    once, second, twice, products = anyio.run(scenario)
    assert second == []
    assert twice == once
    assert len({p.sku for p in products}) == len(products) == len({f.sku for f in fixtures})


@PROPERTY_SETTINGS
@given(products=product_lists(), term=st.text(alphabet="abc1 -", max_size=2), category=st.sampled_from(CATEGORIES + ("all",)))
def test_search_and_category_commute_in_count(products, term, category):
    search_first = replicator.filter_by_category(replicator.filter_by_search(products, term), category)
    category_first = replicator.filter_by_search(replicator.filter_by_category(products, category), term)
    assert len(search_first) == len(category_first)


@PROPERTY_SETTINGS
@given(left=product_lists(), right=product_lists())
def test_total_value_is_additive(left, right):
    combined = left + [
        Product(**{**vars(p), "id": f"r{p.id}"}) for p in right
    ]
    assert (
        replicator.compute_stats(combined).total_value
        == replicator.compute_stats(left).total_value + replicator.compute_stats(right).total_value
    )


@PROPERTY_SETTINGS
@given(products=product_lists())
def test_stats_are_consistent_with_their_parts(products):
    stats = replicator.compute_stats(products)
    assert stats.total_products == len(products)
    assert stats.low_stock_items == len(replicator.low_stock_of(products))
    assert 0 <= stats.low_stock_items <= stats.total_products


@PROPERTY_SETTINGS
@given(products=product_lists(), field=st.sampled_from(["name", "price", "stock"]))
def test_sorting_is_a_permutation(products, field):
    ordered = replicator.sort_products(products, field)
    assert sorted(p.id for p in ordered) == sorted(p.id for p in products)


@PROPERTY_SETTINGS
@given(stock=stocks, delta=st.integers(min_value=-20_000, max_value=20_000))
def test_adjustment_legality(stock, delta):
    assert replicator.is_adjustment_legal(stock, delta) == (stock + delta >= 0)


def test_adjustment_legality_boundary():
    assert replicator.is_adjustment_legal(5, -5) is True
    assert replicator.is_adjustment_legal(5, -6) is False
    assert replicator.is_adjustment_legal(0, -1) is False


@st.composite
def lifecycle_plans(draw):
    fixture = draw(fixture_strategy())
    return fixture, draw(legal_adjustments(fixture.stock))


@settings(max_examples=25, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(plan=lifecycle_plans())
def test_full_circle_after_create_adjust_delete(plan):
    fixture, deltas = plan
    unique = TestProductData(**{**vars(fixture), "sku": f"FULL-{fixture.sku}"})
    actor = inventory_settings.actor(ROLE_ELEVATED)

    journey = (
        Journey("property full circle")
        .prepare("log in", login_as(actor))
        .prepare("open dashboard", open_dashboard())
        .act("seed", seed_products([unique], key="p"))
    )
    for i, delta in enumerate(deltas):
        journey.act(f"adjust {i}", adjust_stock("p", delta))
        journey.verify(f"check {i}", verify_inventory("p"))
    journey.act("delete", delete_product("p"))

    async def scenario():
        store = _new_store()
        ctx = JourneyContext(store=store, app=FakeApplication(store).pages(), seeder=_new_seeder(store))
        return await journey.run(ctx)

    result = anyio.run(scenario)
    assert result.final == result.baseline


def test_concrete_threshold_scenario():
    """Seed A1 (stock 10, threshold 5), drop by 6, refuse a further -10."""

    async def scenario():
        store = _new_store()
        await store.write_all([])
        seeder = _new_seeder(store)
        await seeder.ensure_exist([
            TestProductData(sku="A1", name="A1", category="Hardware", price=Decimal("2.00"), stock=10, low_stock_threshold=5)
        ])
        products = await store.read_all()
        assert len(products) == 1
        assert replicator.compute_stats(products).low_stock_items == 0

        product = products[0]
        assert replicator.is_adjustment_legal(product.stock, -6)
        product.stock = replicator.expected_stock_after(product.stock, -6)
        await store.write_all([product])
        products = await store.read_all()
        assert products[0].stock == 4
        assert replicator.compute_stats(products).low_stock_items == 1

        assert not replicator.is_adjustment_legal(products[0].stock, -10)
        assert (await store.read_all())[0].stock == 4

    anyio.run(scenario)
