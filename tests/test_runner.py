"""
Tests for the bulk price updater.
"""

import asyncio
from decimal import Decimal

import pytest

from price_editor.catalog import Product
from price_editor.pricing import (
    BulkOutcome,
    BulkUpdateError,
    BulkUpdateRun,
    EditRule,
    InvalidPayloadError,
    PriceChange,
    RunState,
    UpdateStatus,
    apply_price_changes,
    preview_bulk_update,
    run_bulk_update,
)
from price_editor.shopify import MutationResult, ShopifyTransportError


INCREASE_10_PERCENT = EditRule(mode="percent", direction="increase", magnitude="10")


def product(n, price="10.00", variant=True):
    return Product(
        id=f"gid://shopify/Product/{n}",
        title=f"Product {n}",
        variant_id=f"gid://shopify/ProductVariant/{n}" if variant else None,
        price=Decimal(price) if price is not None else None,
    )


class FakeMutator:
    """Records calls; fails or stalls for chosen variants."""

    def __init__(self, fail=(), raise_for=(), stall=(), delay=0.0):
        self.calls = []
        self.fail = set(fail)
        self.raise_for = set(raise_for)
        self.stall = set(stall)
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, variant_id, new_price, product_id=None):
        self.calls.append((variant_id, new_price, product_id))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if variant_id in self.stall:
                await asyncio.sleep(10)
            if self.delay:
                await asyncio.sleep(self.delay)
            if variant_id in self.raise_for:
                raise ShopifyTransportError("Request error: connection reset")
            if variant_id in self.fail:
                return MutationResult(variant_id=variant_id, errors=["Price must be positive"])
            return MutationResult(variant_id=variant_id, price=new_price)
        finally:
            self.in_flight -= 1


class TestRunBulkUpdate:
    """Tests for run_bulk_update."""

    def test_empty_input_makes_no_calls(self):
        mutate = FakeMutator()

        report = asyncio.run(run_bulk_update([], INCREASE_10_PERCENT, mutate))

        assert report.results == []
        assert report.outcome == BulkOutcome.EMPTY
        assert mutate.calls == []

    def test_all_succeed(self):
        mutate = FakeMutator()
        products = [product(1, "19.99"), product(2, "5.00")]

        report = asyncio.run(run_bulk_update(products, INCREASE_10_PERCENT, mutate))

        assert report.outcome == BulkOutcome.SUCCESS
        prices = {r.product_id: r.requested_price for r in report.results}
        assert prices == {
            "gid://shopify/Product/1": "21.99",
            "gid://shopify/Product/2": "5.50",
        }

    def test_passes_two_decimal_price_and_product_id(self):
        mutate = FakeMutator()

        asyncio.run(run_bulk_update([product(7, "19.99")], INCREASE_10_PERCENT, mutate))

        assert mutate.calls == [
            ("gid://shopify/ProductVariant/7", "21.99", "gid://shopify/Product/7")
        ]

    def test_one_failure_does_not_affect_others(self):
        mutate = FakeMutator(fail={"gid://shopify/ProductVariant/2"})
        products = [product(1), product(2), product(3)]

        report = asyncio.run(run_bulk_update(products, INCREASE_10_PERCENT, mutate))

        assert len(report.results) == 3
        statuses = {r.product_id: r.status for r in report.results}
        assert statuses == {
            "gid://shopify/Product/1": UpdateStatus.OK,
            "gid://shopify/Product/2": UpdateStatus.FAILED,
            "gid://shopify/Product/3": UpdateStatus.OK,
        }
        failed = [r for r in report.results if not r.success][0]
        assert failed.error_detail == "Price must be positive"
        assert report.outcome == BulkOutcome.PARTIAL

    def test_transport_error_is_recorded(self):
        mutate = FakeMutator(raise_for={"gid://shopify/ProductVariant/1"})

        report = asyncio.run(
            run_bulk_update([product(1), product(2)], INCREASE_10_PERCENT, mutate)
        )

        results = {r.product_id: r for r in report.results}
        assert results["gid://shopify/Product/1"].status == UpdateStatus.FAILED
        assert "connection reset" in results["gid://shopify/Product/1"].error_detail
        assert results["gid://shopify/Product/2"].status == UpdateStatus.OK

    def test_unexpected_error_is_recorded(self):
        async def broken(variant_id, new_price, product_id=None):
            raise KeyError("data")

        report = asyncio.run(run_bulk_update([product(1)], INCREASE_10_PERCENT, broken))

        assert report.outcome == BulkOutcome.FAILED
        assert report.results[0].error_detail.startswith("Unexpected error")

    def test_timeout_marks_failed(self):
        mutate = FakeMutator(stall={"gid://shopify/ProductVariant/2"})
        products = [product(1), product(2), product(3)]

        report = asyncio.run(
            run_bulk_update(products, INCREASE_10_PERCENT, mutate, timeout=0.05)
        )

        assert len(report.results) == 3
        results = {r.product_id: r for r in report.results}
        assert results["gid://shopify/Product/2"].status == UpdateStatus.FAILED
        assert results["gid://shopify/Product/2"].error_detail == "timeout"
        assert results["gid://shopify/Product/1"].success
        assert results["gid://shopify/Product/3"].success

    def test_products_without_variant_are_skipped(self):
        mutate = FakeMutator()
        products = [product(1), product(2, variant=False), product(3, price=None)]

        report = asyncio.run(run_bulk_update(products, INCREASE_10_PERCENT, mutate))

        assert [r.product_id for r in report.results] == ["gid://shopify/Product/1"]
        assert report.skipped == ["gid://shopify/Product/2", "gid://shopify/Product/3"]
        assert len(mutate.calls) == 1

    def test_concurrency_is_bounded(self):
        mutate = FakeMutator(delay=0.01)
        products = [product(n) for n in range(12)]

        report = asyncio.run(
            run_bulk_update(products, INCREASE_10_PERCENT, mutate, max_concurrent=3)
        )

        assert len(report.results) == 12
        assert mutate.max_in_flight <= 3

    def test_one_result_per_product(self):
        mutate = FakeMutator(fail={"gid://shopify/ProductVariant/4"})
        products = [product(n) for n in range(20)]

        report = asyncio.run(
            run_bulk_update(products, INCREASE_10_PERCENT, mutate, max_concurrent=4)
        )

        ids = [r.product_id for r in report.results]
        assert sorted(ids) == sorted(p.id for p in products)
        assert [r.product_id for r in report.sorted_results()] == sorted(ids)

    def test_repeated_product_updated_once(self):
        mutate = FakeMutator()
        p = product(1)

        report = asyncio.run(run_bulk_update([p, p, product(2), p], INCREASE_10_PERCENT, mutate))

        assert sorted(r.product_id for r in report.results) == [p.id, product(2).id]
        assert sorted(c[0] for c in mutate.calls) == [
            "gid://shopify/ProductVariant/1",
            "gid://shopify/ProductVariant/2",
        ]
        assert report.skipped == []

    def test_decrease_clamps_before_dispatch(self):
        mutate = FakeMutator()
        edit = EditRule(mode="amount", direction="decrease", magnitude="10")

        report = asyncio.run(run_bulk_update([product(1, "5.00")], edit, mutate))

        assert report.results[0].requested_price == "0.00"

    def test_non_list_products_rejected(self):
        mutate = FakeMutator()

        with pytest.raises(InvalidPayloadError):
            asyncio.run(run_bulk_update("not a list", INCREASE_10_PERCENT, mutate))
        assert mutate.calls == []

    def test_invalid_rule_rejected(self):
        with pytest.raises(InvalidPayloadError):
            asyncio.run(run_bulk_update([product(1)], {"mode": "percent"}, FakeMutator()))


class TestBulkUpdateRun:
    """Tests for the run lifecycle."""

    def test_state_moves_to_completed(self):
        run = BulkUpdateRun(FakeMutator())
        assert run.state == RunState.IDLE

        asyncio.run(run.run([PriceChange("p1", "v1", Decimal("1.00"))]))

        assert run.state == RunState.COMPLETED

    def test_run_is_single_shot(self):
        run = BulkUpdateRun(FakeMutator())
        asyncio.run(run.run([]))

        with pytest.raises(BulkUpdateError):
            asyncio.run(run.run([]))

    def test_zero_concurrency_rejected(self):
        with pytest.raises(InvalidPayloadError):
            BulkUpdateRun(FakeMutator(), max_concurrent=0)


class TestApplyPriceChanges:
    """Tests for explicit price dispatch."""

    def test_formats_explicit_prices(self):
        mutate = FakeMutator()
        changes = [PriceChange("p1", "v1", Decimal("12.5"))]

        report = asyncio.run(apply_price_changes(changes, mutate))

        assert mutate.calls == [("v1", "12.50", "p1")]
        assert report.outcome == BulkOutcome.SUCCESS

    def test_last_price_wins_for_repeated_product(self):
        mutate = FakeMutator()
        changes = [
            PriceChange("p1", "v1", Decimal("1.00")),
            PriceChange("p1", "v1", Decimal("2.00")),
        ]

        report = asyncio.run(apply_price_changes(changes, mutate))

        assert mutate.calls == [("v1", "2.00", "p1")]
        assert len(report.results) == 1


class TestPreview:
    """Tests for preview_bulk_update."""

    def test_preview_does_not_mutate(self):
        previews = preview_bulk_update(
            [product(1, "19.99"), product(2, variant=False)], INCREASE_10_PERCENT
        )

        assert previews[0].current_price == "19.99"
        assert previews[0].new_price == "21.99"
        assert previews[0].eligible
        assert not previews[1].eligible

    def test_preview_without_price(self):
        previews = preview_bulk_update([product(1, price=None)], INCREASE_10_PERCENT)

        assert previews[0].current_price is None
        assert not previews[0].eligible
