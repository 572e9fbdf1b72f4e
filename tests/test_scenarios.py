"""The business journeys, run end to end against the fake application."""
import pytest

from fake_app import CREATE_DROPS_THRESHOLD, FakeApplication
from inventory_tests.exceptions import ExpectedVsObservedMismatch, IllegalAdjustmentAttempted
from inventory_tests.models import ProductFormInput
from inventory_tests.orchestrator import JourneyContext
from inventory_tests.scenarios import (
    catalog_fixtures,
    filter_cases,
    form_validation_recovery,
    journey_fixture,
    multi_user_collaboration,
    product_lifecycle,
    search_and_filter,
    stock_threshold_cycle,
)


def test_journey_data_loads():
    assert journey_fixture("lifecycle").sku == "E2E-LIFE-001"
    assert len({f.sku for f in catalog_fixtures()}) == len(catalog_fixtures())
    assert any(case.sort_by for case in filter_cases())


def test_typing_only_overwrites_typed_fields():
    current = ProductFormInput(sku="A", name="B")
    merged = current.after_typing(ProductFormInput(category="", stock=3))
    assert merged == ProductFormInput(sku="A", name="B", stock=3)


@pytest.mark.asyncio
async def test_product_lifecycle(journey_context, elevated):
    result = await product_lifecycle(elevated, journey_fixture("lifecycle")).run(journey_context)
    assert result.baseline == result.final
    assert "delete product" in result.completed_steps


@pytest.mark.asyncio
async def test_multi_user_collaboration(journey_context, elevated, standard):
    journey = multi_user_collaboration(elevated, standard, journey_fixture("multiUser"))
    result = await journey.run(journey_context)
    assert result.baseline == result.final
    assert journey_context.actor == standard


@pytest.mark.asyncio
async def test_stock_threshold_cycle(journey_context, elevated):
    result = await stock_threshold_cycle(elevated, journey_fixture("threshold")).run(journey_context)
    assert result.baseline == result.final


@pytest.mark.asyncio
async def test_stock_threshold_cycle_rejects_overdrawn_seed(journey_context, elevated):
    journey = stock_threshold_cycle(elevated, journey_fixture("threshold"), drop=-11)
    with pytest.raises(IllegalAdjustmentAttempted):
        await journey.run(journey_context)


@pytest.mark.asyncio
async def test_search_and_filter(journey_context, elevated):
    journey = search_and_filter(elevated, catalog_fixtures(), filter_cases())
    result = await journey.run(journey_context)
    assert result.baseline.total_products == 3 + len(catalog_fixtures())


@pytest.mark.asyncio
async def test_search_and_filter_can_share_an_already_seeded_catalog(journey_context, elevated):
    journey = search_and_filter(elevated, catalog_fixtures(), filter_cases())
    await journey.run(journey_context)
    again = await search_and_filter(elevated, catalog_fixtures(), filter_cases()).run(journey_context)
    assert again.baseline.total_products == 3 + len(catalog_fixtures())


@pytest.mark.asyncio
async def test_form_validation_recovery(journey_context, elevated):
    result = await form_validation_recovery(elevated, journey_fixture("errorRecovery")).run(journey_context)
    assert result.baseline == result.final
    assert journey_context.values["form"] == ProductFormInput.from_fixture(journey_fixture("errorRecovery"))


@pytest.mark.asyncio
async def test_lifecycle_catches_a_dropped_threshold(store, seeder, elevated):
    app = FakeApplication(store, defects=[CREATE_DROPS_THRESHOLD]).pages()
    ctx = JourneyContext(store=store, app=app, seeder=seeder)
    with pytest.raises(ExpectedVsObservedMismatch):
        await product_lifecycle(elevated, journey_fixture("lifecycle")).run(ctx)
