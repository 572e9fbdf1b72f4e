"""Persistence accessor for the application's product collection.

The application keeps every product in one JSON array stored under a fixed
key in the browser's ``localStorage``. This module is the only code that
touches that key. Every read goes back to the substrate: there is no cache,
because the UI under test may have rewritten the collection since the last
call.

The substrate is injected (:class:`StorageBackend`) so the oracle can be
exercised against :class:`InMemoryStorage` without a browser.
"""
from __future__ import annotations

import abc
import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from inventory_tests import replicator
from inventory_tests.browser import Browser
from inventory_tests.config import settings
from inventory_tests.exceptions import MissingStoreError
from inventory_tests.models import DashboardStats, FilterOptions, Product

logger = logging.getLogger(__name__)

RawRecord = Dict[str, Any]


class StorageBackend(abc.ABC):
    """Key/value substrate holding serialized strings."""

    @abc.abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """Return the stored string, or ``None`` if the key was never set."""

    @abc.abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """Overwrite the value stored under ``key``."""


class InMemoryStorage(StorageBackend):
    """Dictionary-backed substrate used by unit tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.items: Dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


class BrowserLocalStorage(StorageBackend):
    """``window.localStorage`` of the page driven by ``browser``.

    The page must be on the application's origin, otherwise it reads a
    different origin's storage.
    """

    def __init__(self, browser: Browser) -> None:
        self._browser = browser

    async def get_item(self, key: str) -> Optional[str]:
        return await self._browser.evaluate("key => window.localStorage.getItem(key)", key)

    async def set_item(self, key: str, value: str) -> None:
        await self._browser.evaluate(
            "([key, value]) => window.localStorage.setItem(key, value)", [key, value]
        )


def find_by_id(products: Sequence[Product], product_id: str) -> Optional[Product]:
    for product in products:
        if product.id == product_id:
            return product
    return None


class ProductStore:
    """Reads and writes the canonical product collection."""

    def __init__(self, backend: StorageBackend, key: Optional[str] = None) -> None:
        self.backend = backend
        self.key = key or settings.storage_key

    async def read_raw(self) -> List[RawRecord]:
        """Deserialize the collection without interpreting the records.

        Raises:
            MissingStoreError: the key has never been written
            json.JSONDecodeError: the stored value is not JSON
            TypeError: the stored value is JSON but not an array
        """
        payload = await self.backend.get_item(self.key)
        if payload is None:
            raise MissingStoreError(self.key)
        records = json.loads(payload)
        if not isinstance(records, list):
            raise TypeError(
                f"Expected a JSON array under {self.key!r}, got {type(records).__name__}"
            )
        logger.debug(f"Read {len(records)} products from {self.key}")
        return records

    async def read_all(self) -> List[Product]:
        return [Product.from_dict(record) for record in await self.read_raw()]

    async def read_one(self, product_id: str) -> Optional[Product]:
        return find_by_id(await self.read_all(), product_id)

    async def write_all(self, records: Sequence[Union[Product, RawRecord]]) -> None:
        """Replace the whole collection."""
        serializable = [r.to_dict() if isinstance(r, Product) else r for r in records]
        await self.backend.set_item(self.key, json.dumps(serializable))
        logger.debug(f"Wrote {len(serializable)} products to {self.key}")

    async def clear_all(self) -> None:
        """Overwrite the collection with an empty list (teardown only)."""
        await self.write_all([])
        logger.info(f"Cleared all products under {self.key}")

    # ---- composites of read + replicator ----------------------------------------
    async def expected_stats(self) -> DashboardStats:
        return replicator.compute_stats(await self.read_all())

    async def expected_filtered(self, options: FilterOptions) -> List[Product]:
        return replicator.apply_filters(await self.read_all(), options)

    async def expected_low_stock(self) -> List[Product]:
        return replicator.low_stock_of(await self.read_all())
