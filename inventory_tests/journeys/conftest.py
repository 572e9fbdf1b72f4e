"""
Fixtures for journey-based testing.

Every journey runs in its own browser context (see ``inventory_tests/conftest.py``),
so each one starts from the application's initial product set and nothing
leaks between them.
"""
import logging

import pytest


@pytest.fixture(autouse=True)
def journey_logging(caplog):
    """Keep step-level log lines of the oracle in the failure report."""
    caplog.set_level(logging.DEBUG, logger="inventory_tests")
    yield
