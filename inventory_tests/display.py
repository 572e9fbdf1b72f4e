"""How the application renders numbers, and how to read them back.

Every assumption about on-screen formatting lives here, so a rendering change
in the application is a one-line edit:

- counts and stock levels: plain integers, no thousands separators
- dashboard total value: ``toLocaleString("en-US")`` with two fraction
  digits, i.e. ``$`` + thousands separators; ties round away from zero on
  the decimal value (``1.005`` -> ``$1.01``)
- product row prices: ``"$" + price.toFixed(2)``, no separators; ``toFixed``
  rounds the binary double, so ``1.005`` (stored as ``1.00499...``) renders
  as ``$1.00``
- low-stock alert: "<n> products are running low on stock", hidden when
  nothing is low
"""
from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from inventory_tests.browser import ToolError

T = TypeVar("T")

_CENTS = Decimal("0.01")
_INT_RE = re.compile(r"-?\d+")
_CURRENCY_RE = re.compile(r"\$[0-9,]+(?:\.\d+)?")
_ALERT_RE = re.compile(r"(\d+)\s+products?\b")


def format_count(value: int) -> str:
    return str(value)


def format_stock(value: int) -> str:
    return str(value)


def format_currency(value: Decimal) -> str:
    """Dollar amount as the dashboard shows it, e.g. ``$24,759.27``."""
    return f"${value.quantize(_CENTS, rounding=ROUND_HALF_UP):,.2f}"


def format_price(value: Decimal) -> str:
    """Unit price as a product row shows it, e.g. ``$1299.99``."""
    exact = Decimal(float(value))
    return f"${exact.quantize(_CENTS, rounding=ROUND_HALF_UP)}"


def format_low_stock_alert(count: int) -> str:
    """Count the low-stock alert announces; ``""`` when the alert is hidden."""
    return format_count(count) if count else ""


def count_token(text: str) -> str:
    """Rendered integer inside a card's text ("Total Products5" -> "5")."""
    match = _INT_RE.search(text)
    if not match:
        raise ValueError(f"No number in {text!r}")
    return match.group()


def currency_token(text: str) -> str:
    """Rendered dollar amount inside a text ("Total Value$1,234.50" -> "$1,234.50")."""
    match = _CURRENCY_RE.search(text)
    if not match:
        raise ValueError(f"No dollar amount in {text!r}")
    return match.group()


def alert_count_token(text: str) -> str:
    """Count inside the low-stock alert ("3 products are running low" -> "3").

    An empty text means the alert is hidden and yields ``""``.
    """
    if not text.strip():
        return ""
    match = _ALERT_RE.search(text)
    if not match:
        raise ValueError(f"No product count in {text!r}")
    return match.group(1)


async def first_successful(
    strategies: Sequence[Callable[[], Awaitable[Optional[T]]]],
    default: T,
) -> T:
    """Try extraction strategies in order; the first non-None result wins.

    A strategy that raises :class:`ToolError` counts as "not found here".
    Any other exception propagates.
    """
    for strategy in strategies:
        try:
            result = await strategy()
        except ToolError:
            continue
        if result is not None:
            return result
    return default
