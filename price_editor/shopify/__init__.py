"""
Shopify API module.
"""

from price_editor.shopify.client import (
    ShopifyClient,
    ShopifyClientError,
    ShopifyAuthError,
    ShopifyRateLimitError,
    ShopifyTransportError,
)
from price_editor.shopify.catalog import (
    fetch_products_page,
    fetch_all_products,
    fetch_products_by_ids,
    resolve_first_variant,
    resolve_variant_product,
)
from price_editor.shopify.mutations import PRODUCT_VARIANTS_BULK_UPDATE
from price_editor.shopify.price_update import MutationResult, ShopifyPriceMutator

__all__ = [
    "ShopifyClient",
    "ShopifyClientError",
    "ShopifyAuthError",
    "ShopifyRateLimitError",
    "ShopifyTransportError",
    "fetch_products_page",
    "fetch_all_products",
    "fetch_products_by_ids",
    "resolve_first_variant",
    "resolve_variant_product",
    "PRODUCT_VARIANTS_BULK_UPDATE",
    "MutationResult",
    "ShopifyPriceMutator",
]
