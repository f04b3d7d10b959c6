"""
Explicit price update API.

Accepts ``{products: [{id, newPrice}]}`` or ``{variantId, newPrice}``.
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..config import settings
from ..dependencies import get_price_mutator, get_shopify_client, require_auth
from ..pricing import PriceChange, apply_price_changes
from ..shopify import (
    ShopifyClient,
    ShopifyPriceMutator,
    resolve_first_variant,
    resolve_variant_product,
)
from .schemas import ProductPriceIn, UpdatePriceRequest, report_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", dependencies=[Depends(require_auth)])


async def resolve_changes(
    client: ShopifyClient,
    entries: List[ProductPriceIn],
    max_concurrent: int,
) -> tuple:
    """
    Look up the first variant of each product.

    A product listed more than once keeps its last price and is looked up
    once.

    Returns:
        (changes, skipped product ids)
    """
    by_id = {}
    for entry in entries:
        by_id[entry.id] = entry
    entries = list(by_id.values())

    semaphore = asyncio.Semaphore(max_concurrent)

    async def resolve(entry: ProductPriceIn) -> Optional[PriceChange]:
        async with semaphore:
            variant_id = await resolve_first_variant(client, entry.id)
        if variant_id is None:
            return None
        return PriceChange(product_id=entry.id, variant_id=variant_id, new_price=entry.new_price)

    resolved = await asyncio.gather(*(resolve(e) for e in entries))

    changes = [c for c in resolved if c is not None]
    skipped = [e.id for e, c in zip(entries, resolved) if c is None]
    return changes, skipped


@router.post("/update-price")
async def update_price(
    request: Request,
    client: ShopifyClient = Depends(get_shopify_client),
    mutate: ShopifyPriceMutator = Depends(get_price_mutator),
):
    """Write explicit prices to one variant or to each product's first variant."""
    try:
        body = UpdatePriceRequest.model_validate(await request.json())
    except (ValidationError, ValueError) as e:
        logger.warning(f"Rejected update-price payload: {e}")
        return JSONResponse({"error": "Invalid payload"}, status_code=400)

    if body.products is not None:
        changes, skipped = await resolve_changes(
            client, body.products, settings.max_concurrent_updates
        )
        if skipped:
            logger.info(f"Skipping {len(skipped)} products without a variant")
    else:
        product_id = body.product_id or await resolve_variant_product(client, body.variant_id)
        if product_id is None:
            changes, skipped = [], [body.variant_id]
            logger.info(f"Variant not found: {body.variant_id}")
        else:
            changes = [PriceChange(
                product_id=product_id,
                variant_id=body.variant_id,
                new_price=body.new_price,
            )]
            skipped = []

    report = await apply_price_changes(
        changes,
        mutate,
        max_concurrent=settings.max_concurrent_updates,
        timeout=settings.mutation_timeout_seconds,
    )
    report.skipped.extend(skipped)
    return report_to_dict(report)
