"""
Pydantic models for the product catalog snapshot.
Products are held in memory only for the duration of an edit.
"""

from decimal import Decimal
from enum import Enum
from typing import List, Optional, Set

from pydantic import BaseModel, Field


class ProductStatus(str, Enum):
    """Shopify product status values."""
    ACTIVE = "ACTIVE"
    DRAFT = "DRAFT"
    ARCHIVED = "ARCHIVED"


class SortKey(str, Enum):
    """Supported listing sort orders."""
    TITLE_ASC = "title asc"
    TITLE_DESC = "title desc"
    PRICE_ASC = "price asc"
    PRICE_DESC = "price desc"


class Product(BaseModel):
    """A product projected onto its first (price-bearing) variant."""
    id: str  # Shopify product GID
    title: str = ""
    variant_id: Optional[str] = None  # None when the product has no variant
    price: Optional[Decimal] = None
    status: Optional[ProductStatus] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    total_inventory: Optional[int] = None
    image_url: Optional[str] = None
    image_alt: Optional[str] = None


class CatalogPage(BaseModel):
    """One page of the catalog query."""
    products: List[Product] = Field(default_factory=list)
    has_next_page: bool = False
    end_cursor: Optional[str] = None


class ProductFilter(BaseModel):
    """In-memory listing filter. Empty fields match everything."""
    query: str = ""
    tag: str = ""
    product_type: str = ""
    vendor: str = ""
    statuses: Set[ProductStatus] = Field(default_factory=set)
