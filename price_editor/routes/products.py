"""
Product listing API.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..catalog import ProductFilter, ProductStatus, SortKey, filter_products, sort_products
from ..dependencies import get_shopify_client, require_auth
from ..shopify import ShopifyClient, fetch_products_page
from .schemas import ProductOut

router = APIRouter(prefix="/api/products", dependencies=[Depends(require_auth)])


@router.get("")
async def list_products(
    first: int = Query(50, ge=1, le=250),
    after: Optional[str] = Query(None),
    query: str = Query(""),
    tag: str = Query(""),
    product_type: str = Query(""),
    vendor: str = Query(""),
    status: List[ProductStatus] = Query([]),
    sort: SortKey = Query(SortKey.TITLE_ASC),
    client: ShopifyClient = Depends(get_shopify_client),
):
    """
    List one page of products, filtered and sorted in memory.

    Pagination follows the Admin API cursor; filters apply to the page
    that was fetched.
    """
    page = await fetch_products_page(client, first=first, after=after)

    product_filter = ProductFilter(
        query=query,
        tag=tag,
        product_type=product_type,
        vendor=vendor,
        statuses=set(status),
    )
    products = sort_products(filter_products(page.products, product_filter), sort)

    return {
        "products": [ProductOut.from_product(p).model_dump(by_alias=True) for p in products],
        "pageInfo": {
            "hasNextPage": page.has_next_page,
            "endCursor": page.end_cursor,
        },
    }
