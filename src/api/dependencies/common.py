"""Common FastAPI dependencies."""

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import get_db_session
from src.models.tenant import Tenant
from src.services.notifications import NotificationDispatcher, get_notification_dispatcher
from src.services.tenant_service import TenantService


def get_current_user_id(request: Request) -> str:
    """Get current user ID from request."""
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise HTTPException(
            status_code=401,
            detail={
                "message": "Not authenticated",
                "code": "AUTHENTICATION_REQUIRED"
            }
        )
    return user_id


async def get_current_tenant(
    request: Request,
    session: AsyncSession = Depends(get_db_session)
) -> Tenant:
    """Load the signed-in user's tenant, plan and settings."""
    get_current_user_id(request)
    tenant_id = getattr(request.state, "tenant_id", None)
    tenant = await TenantService(session).get_tenant(tenant_id) if tenant_id else None
    if tenant is None:
        raise HTTPException(
            status_code=401,
            detail={
                "message": "No store is associated with this account",
                "code": "TENANT_REQUIRED"
            }
        )
    return tenant


def require_admin(request: Request) -> str:
    """Dependency to require the platform admin role."""
    user_id = get_current_user_id(request)
    if getattr(request.state, "user_role", None) != "admin":
        raise HTTPException(
            status_code=403,
            detail={
                "message": "Admin access required",
                "code": "INSUFFICIENT_PERMISSIONS"
            }
        )
    return user_id


def get_notifier() -> NotificationDispatcher:
    return get_notification_dispatcher()
