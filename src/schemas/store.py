"""Store settings, custom domain and public storefront schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from .base import BaseSchema, JSONAPICollectionResponse, JSONAPIResponse
from .catalog import ProductResource, ShippingClassResource


class StoreSettingsAttributes(BaseSchema):
    """Attributes for store settings."""

    tenant_id: UUID
    fb_pixel_id: Optional[str] = None
    gtm_id: Optional[str] = None
    store_logo: Optional[str] = None
    primary_color: Optional[str] = None
    whatsapp_number: Optional[str] = None
    contact_email: Optional[str] = None


class StoreSettingsResource(BaseSchema):
    type: str = Field("store_settings", description="Resource type")
    id: UUID
    attributes: StoreSettingsAttributes


class StoreSettingsInput(BaseSchema):
    fb_pixel_id: Optional[str] = Field(None, max_length=100)
    gtm_id: Optional[str] = Field(None, max_length=100)
    store_logo: Optional[str] = Field(None, max_length=1024)
    primary_color: Optional[str] = None
    whatsapp_number: Optional[str] = Field(None, max_length=32)
    contact_email: Optional[str] = Field(None, max_length=255)

    @field_validator("primary_color")
    @classmethod
    def validate_color_format(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not v.startswith("#") or len(v) != 7:
            raise ValueError("Color must be a valid hex color (e.g., #ffffff)")
        return v.lower()


class StoreSettingsData(BaseSchema):
    type: str = Field("store_settings", description="Resource type")
    attributes: StoreSettingsInput


class StoreSettingsUpdateRequest(BaseSchema):
    data: StoreSettingsData


class StoreSettingsResponse(JSONAPIResponse):
    data: Optional[StoreSettingsResource] = None


# Domains

class DomainAttributes(BaseSchema):
    tenant_id: UUID
    domain: str
    verified: bool
    created_at: Optional[datetime] = None
    tenant_name: Optional[str] = None
    tenant_slug: Optional[str] = None


class DomainResource(BaseSchema):
    type: str = Field("domain", description="Resource type")
    id: UUID
    attributes: DomainAttributes


class DomainInput(BaseSchema):
    domain: str = Field(description="Hostname, e.g. shop.example.com")


class DomainData(BaseSchema):
    type: str = Field("domain", description="Resource type")
    attributes: DomainInput


class DomainCreateRequest(BaseSchema):
    data: DomainData


class DomainResponse(JSONAPIResponse):
    data: DomainResource


class DomainCollectionResponse(JSONAPICollectionResponse):
    data: List[DomainResource]


# Public storefront

class StorefrontTenant(BaseSchema):
    id: UUID
    name: str
    slug: str


class StorefrontSettings(BaseSchema):
    """Settings safe to expose publicly. Tracking ids are blank unless the plan allows them."""

    fb_pixel_id: Optional[str] = None
    gtm_id: Optional[str] = None
    store_logo: Optional[str] = None
    primary_color: Optional[str] = None
    whatsapp_number: Optional[str] = None


class StorefrontProductMeta(BaseSchema):
    tenant: StorefrontTenant
    shipping_classes: List[ShippingClassResource]
    settings: StorefrontSettings


class StorefrontProductResponse(JSONAPIResponse):
    data: ProductResource
    meta: StorefrontProductMeta
