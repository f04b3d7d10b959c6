"""
Single-variant price mutation for Shopify products.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .catalog import resolve_variant_product
from .client import ShopifyClient
from .mutations import PRODUCT_VARIANTS_BULK_UPDATE

logger = logging.getLogger(__name__)


@dataclass
class MutationResult:
    """Outcome of one price mutation."""

    variant_id: str
    price: Optional[str] = None
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class ShopifyPriceMutator:
    """
    Price mutation collaborator backed by productVariantsBulkUpdate.

    Called as ``await mutator(variant_id, new_price, product_id)``.
    Transport failures propagate as ShopifyClientError; field-level
    userErrors come back in MutationResult.errors.
    """

    def __init__(self, client: ShopifyClient):
        self.client = client

    async def __call__(
        self,
        variant_id: str,
        new_price: str,
        product_id: Optional[str] = None,
    ) -> MutationResult:
        if product_id is None:
            product_id = await resolve_variant_product(self.client, variant_id)
            if product_id is None:
                return MutationResult(
                    variant_id=variant_id,
                    errors=[f"Variant not found: {variant_id}"],
                )

        data = await self.client.execute(
            PRODUCT_VARIANTS_BULK_UPDATE,
            variables={
                "productId": product_id,
                "variants": [{"id": variant_id, "price": new_price}],
            },
        )

        result = data.get("productVariantsBulkUpdate") or {}
        user_errors = result.get("userErrors") or []

        if user_errors:
            messages = [e.get("message", str(e)) for e in user_errors]
            logger.warning(f"Failed to update {variant_id}: {messages}")
            return MutationResult(variant_id=variant_id, errors=messages)

        committed = (result.get("productVariants") or [{}])[0]
        logger.debug(f"Updated {variant_id} to {committed.get('price', new_price)}")
        return MutationResult(
            variant_id=committed.get("id", variant_id),
            price=committed.get("price", new_price),
        )
