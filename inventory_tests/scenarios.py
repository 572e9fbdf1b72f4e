"""Business journeys of the inventory application.

Each builder returns a :class:`~inventory_tests.orchestrator.Journey`; the
caller supplies the :class:`~inventory_tests.orchestrator.JourneyContext`
(store, pages, seeder) for one isolated browser context.

Journey data lives in ``data/journeys.json``.
"""
from __future__ import annotations

import json
from dataclasses import replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from inventory_tests import replicator
from inventory_tests.config import ActorProfile
from inventory_tests.models import FilterOptions, ProductFormInput, TestProductData, to_decimal
from inventory_tests.orchestrator import (
    Journey,
    JourneyContext,
    StepAction,
    adjust_stock,
    create_product,
    delete_product,
    edit_product,
    expect_rejected_adjustment,
    login_as,
    open_dashboard,
    remember_created,
    seed_products,
    switch_actor,
    verify_dashboard_stats,
    verify_deleted,
    verify_edited,
    verify_findable,
    verify_inventory,
    verify_listing,
    verify_low_stock_alerts,
    verify_product_count_delta,
)
from inventory_tests.validator import assert_matches

DATA_FILE = Path(__file__).parent / "data" / "journeys.json"

FORM_FIELDS = ("sku", "name", "price", "stock")


@lru_cache(maxsize=1)
def _journey_data() -> Dict[str, Any]:
    with open(DATA_FILE, "r", encoding="utf-8") as f:
        return json.load(f)


def journey_fixture(name: str) -> TestProductData:
    """Single fixture product by journey name (lifecycle, multiUser, ...)."""
    return TestProductData.from_dict(_journey_data()[name])


def journey_edit(name: str) -> ProductFormInput:
    """Fields a journey types into an edit form; everything else is left alone."""
    data = _journey_data()[name]
    return ProductFormInput(
        sku=data.get("sku", ""),
        name=data.get("name", ""),
        category=data.get("category", ""),
        price=to_decimal(data["price"]) if "price" in data else None,
        stock=data.get("stock"),
        low_stock_threshold=data.get("lowStockThreshold"),
        description=data.get("description", ""),
    )


def catalog_fixtures() -> List[TestProductData]:
    return [TestProductData.from_dict(item) for item in _journey_data()["catalog"]]


def filter_cases() -> List[FilterOptions]:
    return [
        FilterOptions(
            search_term=case.get("searchTerm"),
            category=case.get("category"),
            sort_by=case.get("sortBy"),
        )
        for case in _journey_data()["filters"]
    ]


def product_lifecycle(
    actor: ActorProfile,
    fixture: TestProductData,
    adjustment: int = 25,
    edit: Optional[ProductFormInput] = None,
) -> Journey:
    """Create -> adjust -> edit -> check dashboard -> delete -> back to the start."""
    edit = edit if edit is not None else journey_edit("lifecycleEdit")
    return (
        Journey("product lifecycle")
        .prepare("log in", login_as(actor))
        .prepare("open dashboard", open_dashboard())
        .act("create product via form", create_product(fixture, "product"))
        .verify("product listed", verify_findable("product"))
        .verify("one more product", verify_product_count_delta(1))
        .act(f"adjust stock by {adjustment:+d}", adjust_stock("product", adjustment))
        .verify("inventory row updated", verify_inventory("product"))
        .act("edit product via form", edit_product("product", edit))
        .verify("edited fields stored and shown", verify_edited("product"))
        .verify("dashboard reflects changes", verify_dashboard_stats())
        .act("delete product", delete_product("product"))
        .verify("product gone", verify_deleted("product"))
    )


def multi_user_collaboration(
    creator: ActorProfile,
    collaborator: ActorProfile,
    fixture: TestProductData,
    adjustment: int = -10,
) -> Journey:
    """One actor creates a product; another finds, adjusts and deletes it."""
    return (
        Journey("multi-user collaboration")
        .prepare(f"{creator.role} logs in", login_as(creator))
        .prepare("open dashboard", open_dashboard())
        .act(f"{creator.role} creates product", create_product(fixture, "product"))
        .verify("product listed for creator", verify_findable("product"))
        .verify("dashboard counts the new product", verify_dashboard_stats())
        .verify("one more product", verify_product_count_delta(1))
        .act(f"switch to {collaborator.role}", switch_actor(collaborator))
        .verify(f"{collaborator.role} finds the same product", verify_findable("product"))
        .act(f"{collaborator.role} adjusts stock by {adjustment:+d}", adjust_stock("product", adjustment))
        .verify("inventory row updated", verify_inventory("product"))
        .act(f"{collaborator.role} deletes product", delete_product("product"))
        .verify("product gone", verify_deleted("product"))
    )


def stock_threshold_cycle(
    actor: ActorProfile,
    fixture: TestProductData,
    drop: int = -6,
    rejected: int = -10,
) -> Journey:
    """Seed a product, push it under its threshold, refuse an overdraw, remove it."""
    return (
        Journey("stock threshold cycle")
        .prepare("log in", login_as(actor))
        .prepare("open dashboard", open_dashboard())
        .act("seed product", seed_products([fixture], key="product"))
        .verify("dashboard counts the seeded product", verify_dashboard_stats())
        .verify("seeded inventory row", verify_inventory("product"))
        .verify("low stock alert before drop", verify_low_stock_alerts())
        .act(f"adjust stock by {drop:+d}", adjust_stock("product", drop))
        .verify("inventory row after drop", verify_inventory("product"))
        .verify("dashboard low stock after drop", verify_dashboard_stats())
        .verify("low stock alert after drop", verify_low_stock_alerts())
        .act(f"attempt {rejected:+d}", expect_rejected_adjustment("product", rejected))
        .verify("stock unchanged after rejection", verify_inventory("product"))
        .act("delete product", delete_product("product"))
        .verify("product gone", verify_deleted("product"))
    )


def search_and_filter(
    actor: ActorProfile,
    catalog: Sequence[TestProductData],
    cases: Sequence[FilterOptions],
) -> Journey:
    """Seed a shared catalog, then check every filter combination."""
    journey = (
        Journey("search and filter")
        .prepare("log in", login_as(actor))
        .prepare("open dashboard", open_dashboard())
        .prepare("seed catalog", seed_products(catalog))
    )
    for options in cases:
        journey.verify(f"listing for {options}", verify_listing(options))
    return journey


# ============================================================================
# Form validation recovery
# ============================================================================

def open_product_form() -> StepAction:
    async def _step(ctx: JourneyContext) -> None:
        await ctx.app.form.goto_new()
        ctx.values["form"] = ProductFormInput()
    return _step


def submit_form(update: ProductFormInput) -> StepAction:
    async def _step(ctx: JourneyContext) -> None:
        await ctx.app.form.fill_form(update)
        ctx.values["form"] = ctx.values["form"].after_typing(update)
        await ctx.app.form.save()
    return _step


def verify_form_errors() -> StepAction:
    """Each field shows exactly the message the validation rules predict."""
    async def _step(ctx: JourneyContext) -> None:
        expected = replicator.validate_product_form(ctx.values["form"])
        for field in FORM_FIELDS:
            observed = await ctx.app.form.field_error(field)
            assert_matches(f"{field} validation message", expected.get(field, ""), observed)
    return _step


def submit_valid_form(update: ProductFormInput, sku: str, key: str) -> StepAction:
    """Final save; the form must be valid and the product must be created."""
    async def _step(ctx: JourneyContext) -> None:
        form = ctx.values["form"].after_typing(update)
        errors = replicator.validate_product_form(form)
        if errors:
            raise ValueError(f"Form is still invalid: {errors}")
        before = {p.id for p in await ctx.store.read_all() if p.sku == sku}
        await ctx.app.form.fill_form(update)
        await ctx.app.form.save()
        await ctx.app.form.wait_until_saved()
        ctx.values["form"] = form
        await remember_created(ctx, sku, key, before)
    return _step


def form_validation_recovery(actor: ActorProfile, fixture: TestProductData) -> Journey:
    """Empty submit -> partial fix -> complete fix -> product exists -> delete."""
    complete = ProductFormInput.from_fixture(fixture)
    partial = ProductFormInput(sku=complete.sku, name=complete.name, category="")
    rest = replace(complete, sku="", name="")
    return (
        Journey("form validation recovery")
        .prepare("log in", login_as(actor))
        .prepare("open dashboard", open_dashboard())
        .act("open new product form", open_product_form())
        .act("submit empty form", submit_form(ProductFormInput(category="")))
        .verify("all required field errors", verify_form_errors())
        .act("fill sku and name", submit_form(partial))
        .verify("remaining field errors", verify_form_errors())
        .act("complete the form", submit_valid_form(rest, fixture.sku, "product"))
        .verify("product listed", verify_findable("product"))
        .act("delete product", delete_product("product"))
        .verify("product gone", verify_deleted("product"))
    )
