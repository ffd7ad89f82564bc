"""Order ledger endpoints for the signed-in store."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import get_current_tenant
from src.core.database import get_db_session
from src.models.tenant import Tenant
from src.schemas.base import resource
from src.schemas.order import (
    BulkOrderStatusUpdateRequest,
    BulkOrderStatusUpdateResponse,
    OrderCollectionResponse,
    OrderResponse,
    OrderStatusUpdateRequest,
)
from src.services.order_service import OrderService

router = APIRouter()


def get_order_service(session: AsyncSession = Depends(get_db_session)) -> OrderService:
    """Get order service instance."""
    return OrderService(session)


@router.get("", response_model=OrderCollectionResponse)
async def list_orders(
    status: Optional[str] = Query(None, description="Only orders with this status"),
    tenant: Tenant = Depends(get_current_tenant),
    orders: OrderService = Depends(get_order_service),
):
    """List the store's orders, newest first."""
    results = await orders.list_orders(tenant.id, status=status)
    return OrderCollectionResponse(
        data=[resource("order", order) for order in results],
        meta={"total": len(results)},
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    tenant: Tenant = Depends(get_current_tenant),
    orders: OrderService = Depends(get_order_service),
):
    order = await orders.get_order(tenant.id, order_id)
    return OrderResponse(data=resource("order", order))


@router.patch("/bulk-status", response_model=BulkOrderStatusUpdateResponse)
async def bulk_update_status(
    request: BulkOrderStatusUpdateRequest,
    tenant: Tenant = Depends(get_current_tenant),
    orders: OrderService = Depends(get_order_service),
):
    """
    Move several orders to one status.

    Every id must belong to the store; otherwise the request fails with 404 and
    no order changes.
    """
    attributes = request.data.attributes
    updated = await orders.bulk_update_status(tenant.id, attributes.order_ids, attributes.status)
    return BulkOrderStatusUpdateResponse(meta={"updated": updated, "status": attributes.status})


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: UUID,
    request: OrderStatusUpdateRequest,
    tenant: Tenant = Depends(get_current_tenant),
    orders: OrderService = Depends(get_order_service),
):
    """Change one order's status. 404 for orders of other stores, 409 for disallowed transitions."""
    order = await orders.update_status(tenant.id, order_id, request.data.attributes.status)
    return OrderResponse(data=resource("order", order))
