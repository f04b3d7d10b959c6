"""
Request and response bodies for the JSON API.
Field names follow the Admin API's camelCase on the wire.
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..catalog import Product
from ..pricing import BulkUpdateReport, EditRule, PricePreview, UpdateResult, format_price


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ProductOut(CamelModel):
    id: str
    title: str
    variant_id: Optional[str] = Field(None, alias="variantId")
    price: Optional[str] = None
    status: Optional[str] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = Field(None, alias="productType")
    tags: List[str] = Field(default_factory=list)
    inventory: Optional[int] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")

    @classmethod
    def from_product(cls, product: Product) -> "ProductOut":
        return cls(
            id=product.id,
            title=product.title,
            variant_id=product.variant_id,
            price=format_price(product.price) if product.price is not None else None,
            status=product.status.value if product.status else None,
            vendor=product.vendor,
            product_type=product.product_type,
            tags=product.tags,
            inventory=product.total_inventory,
            image_url=product.image_url,
        )


class BulkEditRequest(CamelModel):
    product_ids: List[str] = Field(..., alias="productIds")
    rule: EditRule


class PreviewOut(CamelModel):
    product_id: str = Field(..., alias="productId")
    title: str
    variant_id: Optional[str] = Field(None, alias="variantId")
    current_price: Optional[str] = Field(None, alias="currentPrice")
    new_price: Optional[str] = Field(None, alias="newPrice")
    eligible: bool

    @classmethod
    def from_preview(cls, preview: PricePreview) -> "PreviewOut":
        return cls(
            product_id=preview.product_id,
            title=preview.title,
            variant_id=preview.variant_id,
            current_price=preview.current_price,
            new_price=preview.new_price,
            eligible=preview.eligible,
        )


class UpdateResultOut(CamelModel):
    product_id: str = Field(..., alias="productId")
    variant_id: str = Field(..., alias="variantId")
    requested_price: str = Field(..., alias="requestedPrice")
    status: str
    error_detail: Optional[str] = Field(None, alias="errorDetail")

    @classmethod
    def from_result(cls, result: UpdateResult) -> "UpdateResultOut":
        return cls(
            product_id=result.product_id,
            variant_id=result.variant_id,
            requested_price=result.requested_price,
            status=result.status.value,
            error_detail=result.error_detail,
        )


def report_to_dict(report: BulkUpdateReport) -> dict:
    """Serialize a run report. ``success`` is true only if nothing failed."""
    return {
        "success": report.error_count == 0,
        "outcome": report.outcome.value,
        "updated": report.success_count,
        "failed": report.error_count,
        "skipped": report.skipped,
        "results": [
            UpdateResultOut.from_result(r).model_dump(by_alias=True)
            for r in report.sorted_results()
        ],
    }


class ProductPriceIn(CamelModel):
    id: str = Field(..., min_length=1)
    new_price: Decimal = Field(..., alias="newPrice", ge=0)


class UpdatePriceRequest(CamelModel):
    """Either a list of products or a single variant."""
    products: Optional[List[ProductPriceIn]] = None
    variant_id: Optional[str] = Field(None, alias="variantId")
    product_id: Optional[str] = Field(None, alias="productId")
    new_price: Optional[Decimal] = Field(None, alias="newPrice", ge=0)

    @model_validator(mode="after")
    def check_shape(self) -> "UpdatePriceRequest":
        if self.products is not None:
            return self
        if not self.variant_id:
            raise ValueError("variantId is required")
        if self.new_price is None:
            raise ValueError("newPrice is required")
        return self
