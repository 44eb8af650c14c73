from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.products import MAX_STOCK

ProductStatus = Literal["draft", "active", "inactive", "discontinued", "publish"]


def _unique_tags(value):
    if value is None:
        return value
    seen = []
    for tag in value:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class ProductCreate(BaseModel):
    sku: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=3, max_length=255)
    description: Optional[str] = None
    status: ProductStatus = "draft"
    # Opening balance only, later movements go through purchases
    in_stock: int = Field(default=0, ge=0, le=MAX_STOCK)
    sale_stock: int = Field(default=0, ge=0, le=MAX_STOCK)
    tags: list[str] = []
    catalog_id: Optional[int] = None
    category_id: Optional[int] = None
    sub_category_id: Optional[int] = None
    brand_id: Optional[int] = None
    vehicle_type_id: Optional[int] = None
    website_ids: list[int] = []

    @field_validator('sku')
    @classmethod
    def validate_sku(cls, value):
        value = value.strip()
        if not value:
            raise ValueError('SKU cannot be empty')
        return value

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, value):
        return _unique_tags(value)


class ProductUpdate(BaseModel):
    """Partial update. Explicit nulls detach a parent, omitted fields are left alone."""
    name: Optional[str] = Field(default=None, min_length=3, max_length=255)
    description: Optional[str] = None
    status: Optional[ProductStatus] = None
    sale_stock: Optional[int] = Field(default=None, ge=0, le=MAX_STOCK)
    tags: Optional[list[str]] = None
    catalog_id: Optional[int] = None
    category_id: Optional[int] = None
    sub_category_id: Optional[int] = None
    brand_id: Optional[int] = None
    vehicle_type_id: Optional[int] = None
    website_ids: Optional[list[int]] = None
    # Version the client last read; a stale value is rejected
    version: Optional[int] = None

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, value):
        return _unique_tags(value)


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sku: str
    name: str
    slug: Optional[str]
    description: Optional[str]
    status: str
    version: int
    in_stock: int
    sale_stock: int
    tags: list[str]
    catalog_id: Optional[int]
    category_id: Optional[int]
    sub_category_id: Optional[int]
    brand_id: Optional[int]
    vehicle_type_id: Optional[int]
    website_ids: list[int]
    user_id: int
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InventoryChangeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    purchase_id: Optional[int]
    change_amount: int
    stock_after: int
    reason: str
    created_at: Optional[datetime] = None
