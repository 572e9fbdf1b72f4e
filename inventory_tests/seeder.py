"""Bulk fixture seeding straight into the product store.

Seeding through the product form takes seconds per product; writing the
collection directly takes milliseconds. Fixtures are deduplicated by SKU, so
several journeys can ask for the same baseline products and share them.

The read-modify-write below is not guarded against a concurrent writer. Each
browser context has a private store driven by a single journey, so nothing
else writes to it while a seed is in progress.
"""
from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable, List, Sequence, Set

from inventory_tests.models import TestProductData
from inventory_tests.storage import ProductStore

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class IdGenerator:
    """Monotonic decimal-string ids derived from a millisecond clock.

    Each id is ``max(now_ms, last + 1)``, so ids issued within the same
    millisecond (or after the clock steps back) stay unique and increasing.
    """

    def __init__(self, clock_ms: Callable[[], int] | None = None) -> None:
        self._clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            self._last = max(self._clock_ms(), self._last + 1)
            return str(self._last)


class FixtureSeeder:
    """Adds fixture products to a :class:`ProductStore`, skipping known SKUs."""

    def __init__(
        self,
        store: ProductStore,
        id_generator: IdGenerator | None = None,
        now: Callable[[], str] = _utc_now_iso,
    ) -> None:
        self.store = store
        self.id_generator = id_generator or IdGenerator()
        self._now = now

    async def ensure_exist(self, fixtures: Sequence[TestProductData]) -> List[str]:
        """Insert every fixture whose SKU is not already stored.

        Existing records are written back untouched. A SKU repeated inside
        ``fixtures`` is inserted once. New ids never repeat an id already in
        the store.

        Returns:
            Ids of the inserted products only, in fixture order.
        """
        records = await self.store.read_raw()
        known_skus = {record.get("sku") for record in records}
        taken_ids = {str(record.get("id")) for record in records}
        timestamp = self._now()

        inserted: List[str] = []
        for fixture in fixtures:
            if fixture.sku in known_skus:
                logger.debug(f"Fixture {fixture.sku} already present, skipping")
                continue
            product = fixture.to_product(self._fresh_id(taken_ids), timestamp)
            records.append(product.to_dict())
            known_skus.add(fixture.sku)
            taken_ids.add(product.id)
            inserted.append(product.id)

        if inserted:
            await self.store.write_all(records)
        logger.info(
            f"Seeded {len(inserted)} of {len(fixtures)} fixtures "
            f"({len(fixtures) - len(inserted)} already present)"
        )
        return inserted

    def _fresh_id(self, taken: Set[str]) -> str:
        """Next generated id that no stored product already carries.

        The application also derives ids from a millisecond clock.
        """
        product_id = self.id_generator.next_id()
        while product_id in taken:
            logger.debug(f"Id {product_id} already in use, drawing another")
            product_id = self.id_generator.next_id()
        return product_id

    async def clear_all(self) -> None:
        await self.store.clear_all()
