"""Order, checkout and status update schemas."""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import Field

from .base import BaseSchema, JSONAPICollectionResponse, JSONAPIResponse, MoneyAmount


class OrderAttributes(BaseSchema):
    """Attributes for an order ledger entry."""

    tenant_id: UUID
    order_number: str = Field(description="Last 8 id characters, upper-cased")
    product_id: UUID
    variant_id: Optional[UUID] = None
    shipping_class_id: Optional[UUID] = None
    customer_name: str
    phone: str
    address: str
    quantity: int
    subtotal: MoneyAmount
    shipping_fee: MoneyAmount
    total: MoneyAmount
    status: str
    created_at: datetime


class OrderResource(BaseSchema):
    type: str = Field("order", description="Resource type")
    id: UUID
    attributes: OrderAttributes


class OrderResponse(JSONAPIResponse):
    data: OrderResource


class OrderCollectionResponse(JSONAPICollectionResponse):
    data: List[OrderResource]


class CheckoutAttributes(BaseSchema):
    """
    Storefront checkout form.

    Fields are loosely typed here; the order service validates them in a fixed
    order after the store has been resolved.
    """

    product_id: Optional[str] = None
    variant_id: Optional[str] = None
    shipping_class_id: Optional[str] = None
    customer_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    quantity: Any = 1


class CheckoutData(BaseSchema):
    type: str = Field("order", description="Resource type")
    attributes: CheckoutAttributes


class CheckoutRequest(BaseSchema):
    """Request schema for placing an order."""

    data: CheckoutData


class OrderStatusAttributes(BaseSchema):
    status: str = Field(description="new, confirmed, shipped, delivered or cancelled")


class OrderStatusData(BaseSchema):
    type: str = Field("order", description="Resource type")
    attributes: OrderStatusAttributes


class OrderStatusUpdateRequest(BaseSchema):
    data: OrderStatusData


class BulkOrderStatusAttributes(BaseSchema):
    order_ids: List[str] = Field(min_length=1, description="Orders to update")
    status: str


class BulkOrderStatusData(BaseSchema):
    type: str = Field("order_status_batch", description="Resource type")
    attributes: BulkOrderStatusAttributes


class BulkOrderStatusUpdateRequest(BaseSchema):
    """All listed orders change status, or none do."""

    data: BulkOrderStatusData


class BulkOrderStatusMeta(BaseSchema):
    updated: int
    status: str


class BulkOrderStatusUpdateResponse(BaseSchema):
    meta: BulkOrderStatusMeta
