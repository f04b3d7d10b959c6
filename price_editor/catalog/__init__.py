"""
Catalog package - product snapshot models and listing helpers.
"""

from .models import CatalogPage, Product, ProductFilter, ProductStatus, SortKey
from .filters import filter_products, sort_products, parse_product_node, parse_price

__all__ = [
    "CatalogPage",
    "Product",
    "ProductFilter",
    "ProductStatus",
    "SortKey",
    "filter_products",
    "sort_products",
    "parse_product_node",
    "parse_price",
]
