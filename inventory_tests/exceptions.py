"""Failures raised by the oracle layer.

None of these are retried or downgraded to warnings: a silent oracle failure
would hide (or invent) an application defect.
"""
from __future__ import annotations

from typing import Any


class OracleError(Exception):
    """Base class for oracle-layer failures."""


class MissingStoreError(OracleError):
    """The persisted product collection has never been initialised."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(
            f"No products found in storage under key {key!r}. "
            f"Load the application at least once before reading its store."
        )


class ExpectedVsObservedMismatch(OracleError, AssertionError):
    """A data-derived expectation disagrees with what the UI shows."""

    def __init__(self, label: str, expected: Any, observed: Any) -> None:
        self.label = label
        self.expected = expected
        self.observed = observed
        super().__init__(f"{label}: expected {expected!r}, observed {observed!r}")


class IllegalAdjustmentAttempted(OracleError):
    """A journey tried to apply a delta that would drive stock negative."""

    def __init__(self, product_id: str, current_stock: int, delta: int) -> None:
        self.product_id = product_id
        self.current_stock = current_stock
        self.delta = delta
        super().__init__(
            f"Adjustment {delta:+d} on product {product_id} would leave stock at "
            f"{current_stock + delta} (current {current_stock})"
        )
