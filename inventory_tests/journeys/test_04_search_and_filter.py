"""
Journey 04: Search and Filter

A shared catalog is seeded into the store, then every search/category/sort
combination rendered by the products page is checked against the same
filters applied to the stored data.
"""
import pytest

from inventory_tests.scenarios import catalog_fixtures, filter_cases, search_and_filter

pytestmark = pytest.mark.journey


@pytest.mark.asyncio
async def test_listing_matches_store_for_every_filter(journey_context, elevated):
    journey = search_and_filter(elevated, catalog_fixtures(), filter_cases())
    result = await journey.run(journey_context)
    assert result.baseline.total_products >= len(catalog_fixtures())
