"""Product, variant and shipping class schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import Field

from .base import BaseSchema, JSONAPICollectionResponse, JSONAPIResponse, MoneyAmount


# Products

class ProductVariantAttributes(BaseSchema):
    """Attributes for a product variant."""

    product_id: UUID
    name: str
    sku: Optional[str] = None
    price: MoneyAmount
    stock: int = 0
    attributes: Dict[str, Any] = Field(default_factory=dict)
    is_default: bool = False
    created_at: Optional[datetime] = None


class ProductVariantResource(BaseSchema):
    type: str = Field("product_variant", description="Resource type")
    id: UUID
    attributes: ProductVariantAttributes


class ProductAttributes(BaseSchema):
    """Attributes for product resource."""

    tenant_id: UUID
    name: str
    slug: str
    price: MoneyAmount
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    status: str
    has_variants: bool = False
    variants: List[ProductVariantResource] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductResource(BaseSchema):
    type: str = Field("product", description="Resource type")
    id: UUID
    attributes: ProductAttributes


class ProductInput(BaseSchema):
    """Writable product fields. All optional so the same shape serves updates."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    price: Optional[Decimal] = None
    description: Optional[str] = None
    images: Optional[List[str]] = None
    status: Optional[str] = None


class ProductData(BaseSchema):
    type: str = Field("product", description="Resource type")
    attributes: ProductInput


class ProductWriteRequest(BaseSchema):
    """Request schema for creating or updating a product."""

    data: ProductData


class ProductResponse(JSONAPIResponse):
    data: ProductResource


class ProductCollectionResponse(JSONAPICollectionResponse):
    data: List[ProductResource]


class ProductVariantInput(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    sku: Optional[str] = Field(None, max_length=100)
    price: Optional[Decimal] = None
    stock: Optional[int] = None
    # Object or JSON text; validated by the catalog service
    attributes: Optional[Any] = None
    is_default: Optional[bool] = None


class ProductVariantData(BaseSchema):
    type: str = Field("product_variant", description="Resource type")
    attributes: ProductVariantInput


class ProductVariantWriteRequest(BaseSchema):
    data: ProductVariantData


class ProductVariantResponse(JSONAPIResponse):
    data: ProductVariantResource


class ProductVariantCollectionResponse(JSONAPICollectionResponse):
    data: List[ProductVariantResource]


# Shipping classes

class ShippingClassAttributes(BaseSchema):
    tenant_id: UUID
    name: str
    fee: MoneyAmount
    location: str
    is_default: bool = False


class ShippingClassResource(BaseSchema):
    type: str = Field("shipping_class", description="Resource type")
    id: UUID
    attributes: ShippingClassAttributes


class ShippingClassInput(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    fee: Optional[Decimal] = None
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    is_default: Optional[bool] = None


class ShippingClassData(BaseSchema):
    type: str = Field("shipping_class", description="Resource type")
    attributes: ShippingClassInput


class ShippingClassWriteRequest(BaseSchema):
    data: ShippingClassData


class ShippingClassResponse(JSONAPIResponse):
    data: ShippingClassResource


class ShippingClassCollectionResponse(JSONAPICollectionResponse):
    data: List[ShippingClassResource]
