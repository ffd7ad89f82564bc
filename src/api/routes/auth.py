"""Authentication API endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import get_current_user_id
from src.core.database import get_db_session
from src.middleware.auth import create_access_token
from src.models.tenant import Tenant
from src.models.user import User
from src.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    SessionResponse,
    SlugAvailabilityResponse,
    UserResponse,
)
from src.schemas.base import resource
from src.services.tenant_service import TenantService

logger = logging.getLogger(__name__)
router = APIRouter()


def get_tenant_service(session: AsyncSession = Depends(get_db_session)) -> TenantService:
    """Get tenant service instance."""
    return TenantService(session)


def issue_session(user: User, tenant: Optional[Tenant]) -> SessionResponse:
    token = create_access_token({
        "sub": str(user.id),
        "tenant_id": str(user.tenant_id) if user.tenant_id else None,
        "role": user.role,
    })
    return SessionResponse(
        data=resource("user", user),
        meta={"access_token": token, "tenant_slug": tenant.slug if tenant else None},
    )


@router.post("/auth/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    tenant_service: TenantService = Depends(get_tenant_service),
):
    """
    Open a new store.

    Creates the tenant on the default plan together with its owner, store
    settings and default shipping classes, and returns a token.
    """
    user, tenant = await tenant_service.register(request.data.attributes.model_dump())
    return issue_session(user, tenant)


@router.post("/auth/login", response_model=SessionResponse)
async def login(
    request: LoginRequest,
    tenant_service: TenantService = Depends(get_tenant_service),
):
    """Exchange email and password for a token."""
    credentials = request.data.attributes
    user = await tenant_service.authenticate(credentials.email, credentials.password)
    tenant = await tenant_service.get_tenant(user.tenant_id) if user.tenant_id else None
    logger.info(f"User {user.id} logged in")
    return issue_session(user, tenant)


@router.post("/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout():
    """Tokens are stateless; clients discard theirs."""
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/auth/me", response_model=UserResponse)
async def me(
    user_id: str = Depends(get_current_user_id),
    tenant_service: TenantService = Depends(get_tenant_service),
):
    """Current user and, for store owners, their store."""
    user = await tenant_service.get_user(user_id)
    tenant = await tenant_service.get_tenant(user.tenant_id) if user.tenant_id else None
    meta = None
    if tenant:
        meta = {"tenant": {"id": str(tenant.id), "name": tenant.name, "slug": tenant.slug, "status": tenant.status}}
    return UserResponse(data=resource("user", user), meta=meta)


@router.get("/tenants/check-slug", response_model=SlugAvailabilityResponse)
async def check_slug(
    slug: str = Query(..., min_length=1, description="Proposed store slug"),
    tenant_service: TenantService = Depends(get_tenant_service),
):
    """Whether a store slug is free."""
    available = await tenant_service.is_slug_available(slug)
    return SlugAvailabilityResponse(slug=slug, available=available)
