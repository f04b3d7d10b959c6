"""
Bulk price updater: compute new prices and fan out one mutation per product.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence

from ..catalog.models import Product
from ..shopify import ShopifyClientError, MutationResult
from .rules import EditRule, compute_new_price, format_price

logger = logging.getLogger(__name__)

TIMEOUT_DETAIL = "timeout"

# mutate(variant_id, new_price, product_id) -> MutationResult
PriceMutation = Callable[[str, str, Optional[str]], Awaitable[MutationResult]]


class BulkUpdateError(Exception):
    """Error raised by the bulk updater before any dispatch."""
    pass


class InvalidPayloadError(BulkUpdateError):
    """Structurally invalid input; nothing was sent to the API."""
    pass


class UpdateStatus(str, Enum):
    """Per-product result status."""
    OK = "ok"
    FAILED = "failed"


class BulkOutcome(str, Enum):
    """Overall result of a run."""
    EMPTY = "empty"
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


class RunState(str, Enum):
    """Lifecycle of a single bulk run."""
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class PriceChange:
    """A price to write to one variant."""
    product_id: str
    variant_id: str
    new_price: Decimal


@dataclass
class UpdateResult:
    """Result of updating one product."""
    product_id: str
    variant_id: str
    requested_price: str
    status: UpdateStatus
    error_detail: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == UpdateStatus.OK


@dataclass
class PricePreview:
    """Proposed change for one product, shown before a run."""
    product_id: str
    title: str
    variant_id: Optional[str]
    current_price: Optional[str]
    new_price: Optional[str]

    @property
    def eligible(self) -> bool:
        return self.variant_id is not None and self.new_price is not None


@dataclass
class BulkUpdateReport:
    """Aggregated results of a bulk run."""
    results: List[UpdateResult] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def error_count(self) -> int:
        return len(self.results) - self.success_count

    @property
    def outcome(self) -> BulkOutcome:
        if not self.results:
            return BulkOutcome.EMPTY
        if self.error_count == 0:
            return BulkOutcome.SUCCESS
        if self.success_count == 0:
            return BulkOutcome.FAILED
        return BulkOutcome.PARTIAL

    def sorted_results(self) -> List[UpdateResult]:
        """Results ordered by product id."""
        return sorted(self.results, key=lambda r: r.product_id)


class BulkUpdateRun:
    """
    A single-shot dispatch of price changes.

    Calls run concurrently up to ``max_concurrent``; each one is bounded by
    ``timeout`` seconds. A failure is recorded on that product's result and
    never stops the other calls.
    """

    def __init__(
        self,
        mutate: PriceMutation,
        max_concurrent: int = 5,
        timeout: float = 30.0,
    ):
        if max_concurrent < 1:
            raise InvalidPayloadError("max_concurrent must be at least 1")
        self.mutate = mutate
        self.max_concurrent = max_concurrent
        self.timeout = timeout
        self.state = RunState.IDLE
        self.report = BulkUpdateReport()

    async def _dispatch(
        self,
        change: PriceChange,
        semaphore: asyncio.Semaphore,
        total: int,
    ) -> None:
        price = format_price(change.new_price)

        async with semaphore:
            try:
                result = await asyncio.wait_for(
                    self.mutate(change.variant_id, price, change.product_id),
                    timeout=self.timeout,
                )
                if result.errors:
                    detail = "; ".join(result.errors)
                    status = UpdateStatus.FAILED
                    logger.warning(f"Failed to update {change.product_id}: {detail}")
                else:
                    detail = None
                    status = UpdateStatus.OK
            except asyncio.TimeoutError:
                detail = TIMEOUT_DETAIL
                status = UpdateStatus.FAILED
                logger.error(
                    f"Timed out updating {change.product_id} after {self.timeout}s"
                )
            except ShopifyClientError as e:
                detail = str(e)
                status = UpdateStatus.FAILED
                logger.error(f"Error updating {change.product_id}: {e}")
            except Exception as e:
                detail = f"Unexpected error: {e}"
                status = UpdateStatus.FAILED
                logger.exception(f"Unexpected error updating {change.product_id}")

        self.report.results.append(UpdateResult(
            product_id=change.product_id,
            variant_id=change.variant_id,
            requested_price=price,
            status=status,
            error_detail=detail,
        ))

        processed = len(self.report.results)
        if processed % 100 == 0 or processed == total:
            logger.info(f"Progress: {processed}/{total} products ({int(processed/total*100)}%)")

    async def run(self, changes: Sequence[PriceChange]) -> BulkUpdateReport:
        """Dispatch every change and wait for all of them to settle."""
        if self.state != RunState.IDLE:
            raise BulkUpdateError(f"Run already {self.state.value}")

        self.state = RunState.IN_PROGRESS
        semaphore = asyncio.Semaphore(self.max_concurrent)
        total = len(changes)

        try:
            if changes:
                logger.info(
                    f"Applying {total} price updates "
                    f"(max {self.max_concurrent} concurrent)"
                )
                await asyncio.gather(
                    *(self._dispatch(c, semaphore, total) for c in changes)
                )
        finally:
            self.state = RunState.COMPLETED

        logger.info(
            f"Bulk update complete: {self.report.success_count} succeeded, "
            f"{self.report.error_count} failed, {len(self.report.skipped)} skipped"
        )
        return self.report


def _check_products(products) -> None:
    if not isinstance(products, (list, tuple)):
        raise InvalidPayloadError("products must be a list")
    for product in products:
        if not isinstance(product, Product):
            raise InvalidPayloadError(f"Not a product: {product!r}")


def plan_price_changes(
    products: Sequence[Product],
    rule: EditRule,
) -> tuple:
    """
    Split products into price changes and skipped product ids.

    Products without a variant or a parseable price are skipped. Repeated
    products keep their first occurrence.
    """
    _check_products(products)
    if not isinstance(rule, EditRule):
        raise InvalidPayloadError("rule must be an EditRule")

    changes: List[PriceChange] = []
    skipped: List[str] = []
    seen = set()

    for product in products:
        # A product selected twice is updated once
        if product.id in seen:
            logger.info(f"Ignoring duplicate selection of {product.id}")
            continue
        seen.add(product.id)

        if product.variant_id is None or product.price is None:
            skipped.append(product.id)
            continue
        changes.append(PriceChange(
            product_id=product.id,
            variant_id=product.variant_id,
            new_price=compute_new_price(product.price, rule),
        ))

    return changes, skipped


def preview_bulk_update(
    products: Sequence[Product],
    rule: EditRule,
) -> List[PricePreview]:
    """Compute the proposed prices without calling the API."""
    _check_products(products)
    if not isinstance(rule, EditRule):
        raise InvalidPayloadError("rule must be an EditRule")

    previews = []
    for product in products:
        current = new = None
        if product.price is not None:
            current = format_price(product.price)
            new = format_price(compute_new_price(product.price, rule))
        previews.append(PricePreview(
            product_id=product.id,
            title=product.title,
            variant_id=product.variant_id,
            current_price=current,
            new_price=new,
        ))
    return previews


async def apply_price_changes(
    changes: Sequence[PriceChange],
    mutate: PriceMutation,
    max_concurrent: int = 5,
    timeout: float = 30.0,
) -> BulkUpdateReport:
    """
    Dispatch explicit price changes with bounded concurrency.

    When a product appears more than once, the last price given for it is
    the one written.
    """
    if not isinstance(changes, (list, tuple)):
        raise InvalidPayloadError("changes must be a list")

    latest = {}
    for change in changes:
        latest[change.product_id] = change
    if len(latest) < len(changes):
        logger.info(f"Collapsed {len(changes) - len(latest)} repeated price changes")

    run = BulkUpdateRun(mutate, max_concurrent=max_concurrent, timeout=timeout)
    return await run.run(list(latest.values()))


async def run_bulk_update(
    products: Sequence[Product],
    rule: EditRule,
    mutate: PriceMutation,
    max_concurrent: int = 5,
    timeout: float = 30.0,
) -> BulkUpdateReport:
    """
    Apply an edit rule to every selected product.

    Args:
        products: Selected products (may be empty)
        rule: Edit rule to apply
        mutate: Price mutation collaborator
        max_concurrent: Maximum mutations in flight
        timeout: Seconds allowed per mutation

    Returns:
        BulkUpdateReport with one result per product that has a variant,
        in completion order

    Raises:
        InvalidPayloadError: If products or rule are malformed
    """
    changes, skipped = plan_price_changes(products, rule)

    if skipped:
        logger.info(f"Skipping {len(skipped)} products without a variant or price")

    run = BulkUpdateRun(mutate, max_concurrent=max_concurrent, timeout=timeout)
    run.report.skipped.extend(skipped)
    return await run.run(changes)
