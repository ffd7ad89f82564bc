"""Platform administration schemas: plans, tenants, platform stats."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from .base import BaseSchema, JSONAPICollectionResponse, JSONAPIResponse, MoneyAmount


class PlanAttributes(BaseSchema):
    """Attributes for a subscription plan."""

    code: Optional[str] = None
    name: str
    product_limit: int
    allow_custom_domain: bool
    allow_tracking: bool
    price: MoneyAmount
    is_active: bool
    created_at: Optional[datetime] = None


class PlanResource(BaseSchema):
    type: str = Field("plan", description="Resource type")
    id: UUID
    attributes: PlanAttributes


class PlanInput(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    product_limit: Optional[int] = None
    allow_custom_domain: Optional[bool] = None
    allow_tracking: Optional[bool] = None
    price: Optional[Decimal] = None
    is_active: Optional[bool] = None


class PlanData(BaseSchema):
    type: str = Field("plan", description="Resource type")
    attributes: PlanInput


class PlanWriteRequest(BaseSchema):
    data: PlanData


class PlanResponse(JSONAPIResponse):
    data: PlanResource


class PlanCollectionResponse(JSONAPICollectionResponse):
    data: List[PlanResource]


class TenantAttributes(BaseSchema):
    name: str
    slug: str
    status: str
    plan_id: Optional[UUID] = None
    plan_name: Optional[str] = None
    product_count: Optional[int] = None
    order_count: Optional[int] = None
    created_at: Optional[datetime] = None


class TenantResource(BaseSchema):
    type: str = Field("tenant", description="Resource type")
    id: UUID
    attributes: TenantAttributes


class TenantResponse(JSONAPIResponse):
    data: TenantResource


class TenantCollectionResponse(JSONAPICollectionResponse):
    data: List[TenantResource]


class TenantStatusAttributes(BaseSchema):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        valid_statuses = {"active", "suspended", "pending"}
        if v not in valid_statuses:
            raise ValueError(f"Status must be one of: {valid_statuses}")
        return v


class TenantStatusData(BaseSchema):
    type: str = Field("tenant", description="Resource type")
    attributes: TenantStatusAttributes


class TenantStatusUpdateRequest(BaseSchema):
    data: TenantStatusData


class TenantPlanAttributes(BaseSchema):
    plan_id: UUID


class TenantPlanData(BaseSchema):
    type: str = Field("tenant", description="Resource type")
    attributes: TenantPlanAttributes


class TenantPlanUpdateRequest(BaseSchema):
    data: TenantPlanData


class PlatformStatsAttributes(BaseSchema):
    total_tenants: int
    active_tenants: int
    total_orders: int
    total_revenue: MoneyAmount


class PlatformStatsResource(BaseSchema):
    type: str = Field("platform_stats", description="Resource type")
    id: str
    attributes: PlatformStatsAttributes


class PlatformStatsResponse(BaseSchema):
    data: PlatformStatsResource
