"""
Product schemas

Known product attributes are typed fields; anything else a catalogue carries
goes into the explicit ``attributes`` overflow map.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pydantic import Field

from shopsearch.schemas.base import BaseSchema


class ProductStatus(str, enum.Enum):
    """Product lifecycle status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    DELETED = "deleted"


class ProductFields(BaseSchema):
    """Descriptive attributes shared by products and create requests."""

    name: str = ""
    category: str = ""
    description: str = ""
    price: float = 0.0
    currency: str = ""
    brand: str = ""
    color: str = ""
    size: str = ""
    material: str = ""
    style: str = ""
    gender: str = ""
    occasion: str = ""
    image_urls: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    attributes: dict[str, Any] = Field(
        default_factory=dict, description="Extra attributes outside the known schema"
    )


class Product(ProductFields):
    """Product as stored (denormalized) in vector-store payloads."""

    id: str = ""
    status: ProductStatus = ProductStatus.ACTIVE
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def apply_update(self, update: ProductUpdate) -> Product:
        """Return a copy with every field set on ``update`` applied."""
        changes = update.model_dump(exclude_unset=True, exclude_none=True)
        changes["updated_at"] = datetime.now(timezone.utc)
        return self.model_copy(update=changes)


class ProductCreate(ProductFields):
    """Create request: name, category and currency are required."""

    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    currency: str = Field(min_length=1)
    price: float = Field(default=0.0, ge=0)

    def to_product(self) -> Product:
        now = datetime.now(timezone.utc)
        return Product(
            **self.model_dump(),
            id=str(uuid4()),
            status=ProductStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )


class ProductUpdate(BaseSchema):
    """Partial update; unset fields keep their stored value."""

    name: str | None = None
    category: str | None = None
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    currency: str | None = None
    brand: str | None = None
    color: str | None = None
    size: str | None = None
    material: str | None = None
    style: str | None = None
    gender: str | None = None
    occasion: str | None = None
    image_urls: list[str] | None = None
    tags: list[str] | None = None
    attributes: dict[str, Any] | None = None
    status: ProductStatus | None = None


class ProductVariant(BaseSchema):
    """One generated description of a product and its embedding."""

    id: str
    product_id: str
    text: str
    vector: list[float]
    generated_at: datetime


class ProductWriteResponse(BaseSchema):
    product_id: str
    name: str
    variants_count: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProductDeleteResponse(BaseSchema):
    product_id: str
    deleted_at: datetime


class BatchImportRequest(BaseSchema):
    products: list[ProductCreate] = Field(min_length=1)


class BatchImportError(BaseSchema):
    index: int
    product: str
    error: str


class BatchImportResponse(BaseSchema):
    total: int
    success: int = 0
    failed: int = 0
    errors: list[BatchImportError] = Field(default_factory=list)
    process_id: str


class VariantRegenerateRequest(BaseSchema):
    variant_count: int = 5


class VariantRegenerateResponse(BaseSchema):
    product_id: str
    variant_count: int
    variants_count: int
    regenerated_at: datetime
