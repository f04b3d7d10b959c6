"""
Catalog reads against the Shopify Admin API.
"""

import logging
from typing import List, Optional

from ..catalog import CatalogPage, Product, parse_product_node
from .client import ShopifyClient
from .queries import (
    PRODUCT_FIRST_VARIANT_QUERY,
    PRODUCTS_BY_IDS_QUERY,
    PRODUCTS_PAGE_QUERY,
    VARIANT_PRODUCT_QUERY,
)

logger = logging.getLogger(__name__)

# Admin API connection limit
MAX_PAGE_SIZE = 250


async def fetch_products_page(
    client: ShopifyClient,
    first: int = 50,
    after: Optional[str] = None,
    search: Optional[str] = None,
) -> CatalogPage:
    """
    Fetch one page of products.

    Args:
        client: ShopifyClient instance
        first: Page size (capped at 250)
        after: Cursor returned by the previous page
        search: Optional Shopify search syntax (e.g., "status:active")

    Returns:
        CatalogPage with products and pagination info
    """
    variables = {"first": max(1, min(first, MAX_PAGE_SIZE))}
    if after:
        variables["after"] = after
    if search:
        variables["query"] = search

    data = await client.execute(PRODUCTS_PAGE_QUERY, variables=variables)
    connection = data.get("products") or {}
    page_info = connection.get("pageInfo") or {}

    return CatalogPage(
        products=[parse_product_node(node) for node in connection.get("nodes") or []],
        has_next_page=bool(page_info.get("hasNextPage")),
        end_cursor=page_info.get("endCursor"),
    )


async def fetch_all_products(
    client: ShopifyClient,
    page_size: int = 50,
    search: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Product]:
    """
    Fetch every product by following cursors.

    Args:
        client: ShopifyClient instance
        page_size: Products per request
        search: Optional Shopify search syntax
        limit: Stop after this many products

    Returns:
        List of products in catalog order
    """
    products: List[Product] = []
    cursor: Optional[str] = None

    while True:
        page = await fetch_products_page(client, page_size, cursor, search)
        products.extend(page.products)

        if limit is not None and len(products) >= limit:
            products = products[:limit]
            break
        if not page.has_next_page or not page.end_cursor:
            break
        cursor = page.end_cursor

    logger.info(f"Fetched {len(products)} products")
    return products


async def fetch_products_by_ids(
    client: ShopifyClient,
    product_ids: List[str],
) -> List[Product]:
    """
    Fetch a fresh snapshot of specific products.

    Unknown ids are dropped and repeated ids are fetched once. Requests are
    chunked to the API's page limit.

    Args:
        client: ShopifyClient instance
        product_ids: Shopify product GIDs

    Returns:
        Products in the order the API returned them
    """
    products: List[Product] = []
    product_ids = list(dict.fromkeys(product_ids))

    for start in range(0, len(product_ids), MAX_PAGE_SIZE):
        chunk = product_ids[start:start + MAX_PAGE_SIZE]
        data = await client.execute(PRODUCTS_BY_IDS_QUERY, variables={"ids": chunk})
        for node in data.get("nodes") or []:
            if node and node.get("id"):
                products.append(parse_product_node(node))

    missing = len(product_ids) - len(products)
    if missing > 0:
        logger.warning(f"{missing} requested products were not found")

    return products


async def resolve_first_variant(
    client: ShopifyClient,
    product_id: str,
) -> Optional[str]:
    """Return the id of a product's first variant, or None."""
    data = await client.execute(
        PRODUCT_FIRST_VARIANT_QUERY, variables={"id": product_id}
    )
    product = data.get("product")
    if not product:
        return None
    nodes = (product.get("variants") or {}).get("nodes") or []
    return nodes[0].get("id") if nodes else None


async def resolve_variant_product(
    client: ShopifyClient,
    variant_id: str,
) -> Optional[str]:
    """Return the parent product id of a variant, or None."""
    data = await client.execute(
        VARIANT_PRODUCT_QUERY, variables={"id": variant_id}
    )
    variant = data.get("productVariant")
    if not variant:
        return None
    return (variant.get("product") or {}).get("id")
