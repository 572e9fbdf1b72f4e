"""
Journey 03: Stock Threshold Transitions

A seeded product (stock 10, threshold 5) is pushed below its threshold by a
legal adjustment, then an overdraw is refused and the stock stays put. The
inventory page's low-stock alert and badges are checked before and after
the drop.
"""
import pytest

from inventory_tests.scenarios import journey_fixture, stock_threshold_cycle

pytestmark = pytest.mark.journey


@pytest.mark.asyncio
async def test_threshold_crossing_and_rejected_overdraw(journey_context, elevated):
    result = await stock_threshold_cycle(elevated, journey_fixture("threshold")).run(journey_context)
    assert result.final == result.baseline
