"""
Journey 05: Form Validation Recovery

1. Submit an empty product form; every required field shows its message
2. Fix SKU and name; only price and stock still complain
3. Complete the form; the product is created and findable
4. Delete it; the system is back at the baseline
"""
import pytest

from inventory_tests.scenarios import form_validation_recovery, journey_fixture

pytestmark = pytest.mark.journey


@pytest.mark.asyncio
async def test_form_validation_recovery(journey_context, standard):
    result = await form_validation_recovery(standard, journey_fixture("errorRecovery")).run(journey_context)
    assert result.final == result.baseline
