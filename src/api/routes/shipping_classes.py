"""Shipping class API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import get_current_tenant
from src.core.database import get_db_session
from src.models.tenant import Tenant
from src.schemas.base import resource
from src.schemas.catalog import (
    ShippingClassCollectionResponse,
    ShippingClassResponse,
    ShippingClassWriteRequest,
)
from src.services.catalog_service import ShippingService

router = APIRouter()


def get_shipping_service(
    tenant: Tenant = Depends(get_current_tenant),
    session: AsyncSession = Depends(get_db_session),
) -> ShippingService:
    """Get shipping service instance."""
    return ShippingService(session, tenant.id)


@router.get("", response_model=ShippingClassCollectionResponse)
async def list_shipping_classes(shipping: ShippingService = Depends(get_shipping_service)):
    shipping_classes = await shipping.list_shipping_classes()
    return ShippingClassCollectionResponse(
        data=[resource("shipping_class", shipping_class) for shipping_class in shipping_classes]
    )


@router.post("", response_model=ShippingClassResponse, status_code=status.HTTP_201_CREATED)
async def create_shipping_class(
    request: ShippingClassWriteRequest,
    shipping: ShippingService = Depends(get_shipping_service),
):
    shipping_class = await shipping.create_shipping_class(request.data.attributes.model_dump(exclude_unset=True))
    return ShippingClassResponse(data=resource("shipping_class", shipping_class))


@router.patch("/{shipping_class_id}", response_model=ShippingClassResponse)
async def update_shipping_class(
    shipping_class_id: UUID,
    request: ShippingClassWriteRequest,
    shipping: ShippingService = Depends(get_shipping_service),
):
    shipping_class = await shipping.update_shipping_class(
        shipping_class_id, request.data.attributes.model_dump(exclude_unset=True)
    )
    return ShippingClassResponse(data=resource("shipping_class", shipping_class))


@router.delete("/{shipping_class_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shipping_class(
    shipping_class_id: UUID,
    shipping: ShippingService = Depends(get_shipping_service),
):
    await shipping.delete_shipping_class(shipping_class_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
