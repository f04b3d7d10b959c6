"""
Filtering and sorting of the in-memory product list.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Union

from .models import Product, ProductFilter, ProductStatus, SortKey


def parse_price(value: Union[str, int, Decimal, None]) -> Optional[Decimal]:
    """
    Parse a Shopify price value into a Decimal.

    Args:
        value: Price as returned by the API (e.g., "29.99")

    Returns:
        Decimal price, or None if missing or malformed
    """
    if value is None:
        return None

    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None

    if not price.is_finite():
        return None
    return price


def matches_filter(product: Product, product_filter: ProductFilter) -> bool:
    """Check a single product against every active filter."""
    if product_filter.query:
        if product_filter.query.lower() not in product.title.lower():
            return False

    if product_filter.tag and product_filter.tag not in product.tags:
        return False

    if product_filter.product_type and product.product_type != product_filter.product_type:
        return False

    if product_filter.vendor:
        vendor = (product.vendor or "").lower()
        if product_filter.vendor.lower() not in vendor:
            return False

    if product_filter.statuses and product.status not in product_filter.statuses:
        return False

    return True


def filter_products(
    products: Iterable[Product],
    product_filter: ProductFilter
) -> List[Product]:
    """Return the products matching the filter, in their original order."""
    return [p for p in products if matches_filter(p, product_filter)]


def sort_products(products: Iterable[Product], sort: SortKey) -> List[Product]:
    """
    Sort products for display.

    Title sorts are case-insensitive. Price sorts always put products
    without a price last, whichever the direction.
    """
    products = list(products)

    if sort in (SortKey.TITLE_ASC, SortKey.TITLE_DESC):
        return sorted(
            products,
            key=lambda p: p.title.casefold(),
            reverse=sort == SortKey.TITLE_DESC
        )

    priced = [p for p in products if p.price is not None]
    unpriced = [p for p in products if p.price is None]
    priced.sort(key=lambda p: p.price, reverse=sort == SortKey.PRICE_DESC)
    return priced + unpriced


def _first_node(connection: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """First node of a GraphQL connection (supports both nodes and edges)."""
    if not connection:
        return None
    nodes = connection.get("nodes")
    if nodes:
        return nodes[0]
    edges = connection.get("edges")
    if edges:
        return edges[0].get("node")
    return None


def parse_product_node(node: Dict[str, Any]) -> Product:
    """
    Map a GraphQL product node onto a Product.

    Args:
        node: Product node with variants(first: 1) and images(first: 1)

    Returns:
        Parsed Product (variant_id is None if the product has no variant)
    """
    variant = _first_node(node.get("variants")) or {}
    image = _first_node(node.get("images")) or {}

    status = node.get("status")
    try:
        status = ProductStatus(status) if status else None
    except ValueError:
        status = None

    return Product(
        id=node["id"],
        title=node.get("title") or "",
        variant_id=variant.get("id"),
        price=parse_price(variant.get("price")),
        status=status,
        vendor=node.get("vendor"),
        product_type=node.get("productType"),
        tags=node.get("tags") or [],
        total_inventory=node.get("totalInventory"),
        image_url=image.get("url") or image.get("originalSrc"),
        image_alt=image.get("altText"),
    )
