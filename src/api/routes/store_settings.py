"""Store settings endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import get_current_tenant
from src.core.database import get_db_session
from src.models.tenant import Tenant
from src.schemas.base import resource
from src.schemas.store import StoreSettingsResponse, StoreSettingsUpdateRequest
from src.services.catalog_service import StoreSettingsService

router = APIRouter()


def get_settings_service(
    tenant: Tenant = Depends(get_current_tenant),
    session: AsyncSession = Depends(get_db_session),
) -> StoreSettingsService:
    """Get store settings service instance."""
    return StoreSettingsService(session, tenant)


@router.get("", response_model=StoreSettingsResponse)
async def get_store_settings(service: StoreSettingsService = Depends(get_settings_service)):
    store_settings = await service.get_settings()
    return StoreSettingsResponse(data=resource("store_settings", store_settings) if store_settings else None)


@router.patch("", response_model=StoreSettingsResponse)
async def update_store_settings(
    request: StoreSettingsUpdateRequest,
    service: StoreSettingsService = Depends(get_settings_service),
):
    """Create or update settings. Tracking ids need a plan with tracking enabled."""
    store_settings = await service.upsert_settings(request.data.attributes.model_dump(exclude_unset=True))
    return StoreSettingsResponse(data=resource("store_settings", store_settings))
