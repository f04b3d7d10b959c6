"""
Bulk price edit API - preview and apply a rule to selected products.
"""

import logging

from fastapi import APIRouter, Depends

from ..config import settings
from ..dependencies import get_price_mutator, get_shopify_client, require_auth
from ..pricing import preview_bulk_update, run_bulk_update
from ..shopify import ShopifyClient, ShopifyPriceMutator, fetch_products_by_ids
from .schemas import BulkEditRequest, PreviewOut, report_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bulk-edit", dependencies=[Depends(require_auth)])


@router.post("/preview")
async def preview(
    body: BulkEditRequest,
    client: ShopifyClient = Depends(get_shopify_client),
):
    """Show current and proposed prices without changing anything."""
    products = await fetch_products_by_ids(client, body.product_ids) if body.product_ids else []
    previews = preview_bulk_update(products, body.rule)

    return {
        "products": [PreviewOut.from_preview(p).model_dump(by_alias=True) for p in previews]
    }


@router.post("")
async def apply(
    body: BulkEditRequest,
    client: ShopifyClient = Depends(get_shopify_client),
    mutate: ShopifyPriceMutator = Depends(get_price_mutator),
):
    """Apply the rule to a fresh snapshot of the selected products."""
    products = await fetch_products_by_ids(client, body.product_ids) if body.product_ids else []

    logger.info(
        f"Bulk edit: {body.rule.direction.value} by {body.rule.magnitude} "
        f"({body.rule.mode.value}) on {len(products)} products"
    )

    report = await run_bulk_update(
        products,
        body.rule,
        mutate,
        max_concurrent=settings.max_concurrent_updates,
        timeout=settings.mutation_timeout_seconds,
    )
    return report_to_dict(report)
