"""Stateful multi-step journeys with a full-circle check.

A journey runs strictly in sequence::

    prepare* -> BaselineCapture -> (act | verify)* -> FinalVerify

``prepare`` steps run before the baseline exists (log in, open the dashboard
so the application initialises its store, seed shared baseline data); what
they leave behind is part of the baseline. The baseline is the dashboard
snapshot computed from the store; after the last step the snapshot is
recomputed and must equal the baseline, and the dashboard must show it.
The first failing step aborts the journey; nothing after it runs, including
cleanup steps.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Set

import anyio

from inventory_tests import replicator
from inventory_tests.config import ActorProfile, settings
from inventory_tests.exceptions import ExpectedVsObservedMismatch, IllegalAdjustmentAttempted
from inventory_tests.models import DashboardStats, FilterOptions, Product, ProductFormInput, TestProductData
from inventory_tests.pages import InventoryApp
from inventory_tests.seeder import FixtureSeeder
from inventory_tests.storage import ProductStore
from inventory_tests.validator import (
    assert_matches,
    verify_dashboard,
    verify_inventory_row,
    verify_low_stock_alert,
    verify_product_listing,
    verify_product_row,
)

logger = logging.getLogger(__name__)

PREPARE = "prepare"
ACT = "act"
VERIFY = "verify"


@dataclass
class JourneyContext:
    """Everything the steps of one journey share."""

    store: ProductStore
    app: InventoryApp
    seeder: FixtureSeeder
    values: Dict[str, Any] = field(default_factory=dict)
    actor: Optional[ActorProfile] = None
    baseline: Optional[DashboardStats] = None


StepAction = Callable[[JourneyContext], Awaitable[Any]]


@dataclass
class Step:
    name: str
    kind: str
    action: StepAction


@dataclass
class JourneyResult:
    name: str
    baseline: DashboardStats
    final: DashboardStats
    completed_steps: List[str]


class Journey:
    """An ordered business scenario.

    Example:
        journey = (
            Journey("lifecycle")
            .prepare("log in", login_as(admin))
            .act("create product", create_product(fixture, "pid"))
            .verify("product listed", verify_listing(FilterOptions(search_term=fixture.sku)))
            .act("delete product", delete_product("pid"))
        )
        await journey.run(ctx)
    """

    def __init__(self, name: str, timeout: Optional[float] = None, verify_final_in_ui: bool = True) -> None:
        self.name = name
        self.timeout = timeout
        self.verify_final_in_ui = verify_final_in_ui
        self.steps: List[Step] = []

    def _add(self, kind: str, name: str, action: StepAction) -> "Journey":
        if kind == PREPARE and any(step.kind != PREPARE for step in self.steps):
            raise ValueError(f"Preparation step {name!r} added after the baseline")
        self.steps.append(Step(name=name, kind=kind, action=action))
        return self

    def prepare(self, name: str, action: StepAction) -> "Journey":
        return self._add(PREPARE, name, action)

    def act(self, name: str, action: StepAction) -> "Journey":
        return self._add(ACT, name, action)

    def verify(self, name: str, action: StepAction) -> "Journey":
        return self._add(VERIFY, name, action)

    async def run(self, ctx: JourneyContext) -> JourneyResult:
        timeout = self.timeout if self.timeout is not None else settings.scenario_timeout
        logger.info(f"Journey '{self.name}' started ({len(self.steps)} steps, timeout {timeout:.0f}s)")
        try:
            with anyio.fail_after(timeout):
                result = await self._run_steps(ctx)
        except TimeoutError:
            logger.error(f"Journey '{self.name}' exceeded {timeout:.0f}s")
            raise
        logger.info(f"Journey '{self.name}' completed, system back at {result.final}")
        return result

    async def _run_steps(self, ctx: JourneyContext) -> JourneyResult:
        completed: List[str] = []
        preparation = [s for s in self.steps if s.kind == PREPARE]
        business = [s for s in self.steps if s.kind != PREPARE]

        for step in preparation:
            await self._run_step(step, ctx, completed)

        ctx.baseline = await ctx.store.expected_stats()
        logger.info(f"Baseline captured: {ctx.baseline}")
        completed.append("baseline capture")

        for step in business:
            await self._run_step(step, ctx, completed)

        final = await ctx.store.expected_stats()
        assert_matches(f"journey '{self.name}' full-circle snapshot", ctx.baseline, final)
        if self.verify_final_in_ui:
            await verify_dashboard(ctx.store, ctx.app)
        completed.append("final verify")
        return JourneyResult(name=self.name, baseline=ctx.baseline, final=final, completed_steps=completed)

    async def _run_step(self, step: Step, ctx: JourneyContext, completed: List[str]) -> None:
        index = len(completed) + 1
        logger.debug(f"[{self.name}] step {index} ({step.kind}): {step.name}")
        try:
            await step.action(ctx)
        except Exception as exc:
            logger.error(f"Journey '{self.name}' failed at step {index} '{step.name}': {exc}")
            raise
        completed.append(step.name)


# ============================================================================
# Step factories
# ============================================================================

async def _require_product(ctx: JourneyContext, product_id: str) -> Product:
    product = await ctx.store.read_one(product_id)
    if product is None:
        raise ExpectedVsObservedMismatch(f"product {product_id} in store", "present", "absent")
    return product


async def _ids_with_sku(store: ProductStore, sku: str) -> List[str]:
    return [p.id for p in await store.read_all() if p.sku == sku]


def login_as(actor: ActorProfile) -> StepAction:
    """Log in from the login page and check the navbar shows the actor."""
    async def _step(ctx: JourneyContext) -> None:
        await ctx.app.login.goto()
        await ctx.app.login.login(actor.email, actor.password)
        assert_matches("signed-in user name", actor.display_name, await ctx.app.navbar.user_name())
        ctx.actor = actor
    return _step


def switch_actor(actor: ActorProfile) -> StepAction:
    """End the current session and start one as ``actor``."""
    async def _step(ctx: JourneyContext) -> None:
        await ctx.app.navbar.logout()
        await ctx.app.login.login(actor.email, actor.password)
        assert_matches("signed-in user name", actor.display_name, await ctx.app.navbar.user_name())
        logger.info(f"Switched actor {ctx.actor.role if ctx.actor else None} -> {actor.role}")
        ctx.actor = actor
    return _step


def seed_products(fixtures: Sequence[TestProductData], key: Optional[str] = None) -> StepAction:
    """Insert fixtures through the seeder.

    With ``key``, the fixture must be new and its id is stored under ``key``
    (single fixture) for later steps. Without ``key``, already present SKUs
    are simply skipped (shared baseline data).
    """
    async def _step(ctx: JourneyContext) -> None:
        inserted = await ctx.seeder.ensure_exist(fixtures)
        if key is None:
            return
        if len(fixtures) != 1 or len(inserted) != 1:
            raise ValueError(
                f"Keyed seeding needs exactly one new fixture, got {len(fixtures)} "
                f"fixtures and {len(inserted)} inserted (SKU already present?)"
            )
        ctx.values[key] = inserted[0]
        ctx.values[f"{key}:sku"] = fixtures[0].sku
    return _step


def open_dashboard() -> StepAction:
    async def _step(ctx: JourneyContext) -> None:
        await ctx.app.dashboard.goto()
    return _step


def create_product(fixture: TestProductData, key: str) -> StepAction:
    """Create ``fixture`` through the product form and remember its new id."""
    async def _step(ctx: JourneyContext) -> None:
        before = set(await _ids_with_sku(ctx.store, fixture.sku))
        await ctx.app.form.create_product(fixture)
        await remember_created(ctx, fixture.sku, key, before)
        product = await _require_product(ctx, ctx.values[key])
        assert_matches(f"stored fields of {fixture.sku}", fixture, product.as_fixture())
    return _step


async def remember_created(ctx: JourneyContext, sku: str, key: str, existing_ids: Set[str]) -> None:
    created = [pid for pid in await _ids_with_sku(ctx.store, sku) if pid not in existing_ids]
    assert_matches(f"new products with SKU {sku}", 1, len(created))
    ctx.values[key] = created[0]
    ctx.values[f"{key}:sku"] = sku
    logger.info(f"Created product {created[0]} ({sku})")


def adjust_stock(key: str, delta: int) -> StepAction:
    """Apply a legal stock adjustment through the inventory page."""
    async def _step(ctx: JourneyContext) -> None:
        product_id = ctx.values[key]
        product = await _require_product(ctx, product_id)
        if not replicator.is_adjustment_legal(product.stock, delta):
            raise IllegalAdjustmentAttempted(product_id, product.stock, delta)
        await ctx.app.inventory.goto()
        await ctx.app.inventory.adjust_stock(product_id, delta)
        ctx.values[f"{key}:expected_stock"] = replicator.expected_stock_after(product.stock, delta)
    return _step


def expect_rejected_adjustment(key: str, delta: int) -> StepAction:
    """Submit an adjustment the application must refuse; stock must not move."""
    async def _step(ctx: JourneyContext) -> None:
        product_id = ctx.values[key]
        product = await _require_product(ctx, product_id)
        if replicator.is_adjustment_legal(product.stock, delta):
            raise ValueError(f"Adjustment {delta:+d} on stock {product.stock} is legal; nothing to reject")
        await ctx.app.inventory.goto()
        message = await ctx.app.inventory.attempt_rejected_adjustment(product_id, delta)
        if not message:
            raise ExpectedVsObservedMismatch("adjustment error message", "a rejection message", message)
        ctx.values[f"{key}:expected_stock"] = product.stock
    return _step


def verify_inventory(key: str) -> StepAction:
    """Stored stock equals the expected stock, and the inventory row agrees."""
    async def _step(ctx: JourneyContext) -> None:
        product_id = ctx.values[key]
        expected_stock = ctx.values.get(f"{key}:expected_stock")
        if expected_stock is not None:
            product = await _require_product(ctx, product_id)
            assert_matches(f"stored stock of {product_id}", expected_stock, product.stock)
        await verify_inventory_row(ctx.store, ctx.app, product_id)
    return _step


def verify_dashboard_stats() -> StepAction:
    async def _step(ctx: JourneyContext) -> None:
        await verify_dashboard(ctx.store, ctx.app)
    return _step


def verify_listing(options: FilterOptions) -> StepAction:
    async def _step(ctx: JourneyContext) -> None:
        await verify_product_listing(ctx.store, ctx.app, options)
    return _step


def verify_findable(key: str) -> StepAction:
    """Searching the product's SKU shows exactly the stored product."""
    async def _step(ctx: JourneyContext) -> None:
        sku = ctx.values[f"{key}:sku"]
        listed = await verify_product_listing(ctx.store, ctx.app, FilterOptions(search_term=sku))
        listed_ids = [p.id for p in listed]
        assert_matches(f"product {ctx.values[key]} listed for {sku}", True, ctx.values[key] in listed_ids)
    return _step


def verify_low_stock_alerts() -> StepAction:
    async def _step(ctx: JourneyContext) -> None:
        await verify_low_stock_alert(ctx.store, ctx.app)
    return _step


def edit_product(key: str, update: ProductFormInput) -> StepAction:
    """Change the product through its edit form; ``update`` holds only the typed fields."""
    async def _step(ctx: JourneyContext) -> None:
        product_id = ctx.values[key]
        product = await _require_product(ctx, product_id)
        expected = ProductFormInput.from_fixture(product.as_fixture()).after_typing(update)
        errors = replicator.validate_product_form(expected)
        if errors:
            raise ValueError(f"Edit of {product_id} would be rejected: {errors}")
        await ctx.app.form.edit_product(product_id, update)
        ctx.values[f"{key}:edited"] = expected
        ctx.values[f"{key}:sku"] = expected.sku
        ctx.values[f"{key}:expected_stock"] = expected.stock
        logger.info(f"Edited product {product_id} ({expected.sku})")
    return _step


def verify_edited(key: str) -> StepAction:
    """The edited record kept its id, stores the edited fields, and its row shows them."""
    async def _step(ctx: JourneyContext) -> None:
        product_id = ctx.values[key]
        product = await _require_product(ctx, product_id)
        stored = ProductFormInput.from_fixture(product.as_fixture())
        assert_matches(f"stored fields of {product_id} after edit", ctx.values[f"{key}:edited"], stored)
        await verify_product_row(ctx.store, ctx.app, product_id)
    return _step


def delete_product(key: str) -> StepAction:
    async def _step(ctx: JourneyContext) -> None:
        product_id = ctx.values[key]
        product = await _require_product(ctx, product_id)
        await ctx.app.products.goto()
        await ctx.app.products.search(product.sku)
        await ctx.app.products.delete_product(product_id)
        logger.info(f"Deleted product {product_id} ({product.sku})")
    return _step


def verify_deleted(key: str) -> StepAction:
    """Gone from the store, and the SKU search matches the store again."""
    async def _step(ctx: JourneyContext) -> None:
        product_id = ctx.values[key]
        remaining = await ctx.store.read_one(product_id)
        assert_matches(f"product {product_id} in store after delete", None, remaining)
        await verify_product_listing(ctx.store, ctx.app, FilterOptions(search_term=ctx.values[f"{key}:sku"]))
    return _step


def verify_product_count_delta(delta: int) -> StepAction:
    """Stored product count moved by ``delta`` relative to the baseline."""
    async def _step(ctx: JourneyContext) -> None:
        stats = await ctx.store.expected_stats()
        assert_matches("product count vs baseline", ctx.baseline.total_products + delta, stats.total_products)
    return _step
