"""Health check and system endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import get_db_session
from src.core.settings import get_settings
from src.schemas.base import HealthCheckResponse
from src.services.notifications import get_notification_dispatcher

router = APIRouter()
settings = get_settings()

SERVICE_NAME = "storefront-ledger-service"
SERVICE_VERSION = "1.0.0"


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(session: AsyncSession = Depends(get_db_session)):
    """
    Service health check endpoint.

    Checks database connectivity and the notification backend. A missing SES
    client only degrades the service; orders are still accepted.
    """
    health_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc),
        "version": SERVICE_VERSION,
        "environment": settings.environment,
        "dependencies": {}
    }

    overall_status = "healthy"

    # Check database connectivity
    try:
        result = await session.execute(text("SELECT 1 as health_check"))
        row = result.fetchone()
        if row and row[0] == 1:
            health_data["dependencies"]["database"] = {
                "status": "healthy",
                "details": "Connection successful"
            }
        else:
            raise RuntimeError("Unexpected database response")
    except Exception as e:
        health_data["dependencies"]["database"] = {
            "status": "unhealthy",
            "error": str(e),
            "details": "Database connection failed"
        }
        overall_status = "unhealthy"

    # Check notification backend
    dispatcher = get_notification_dispatcher()
    if dispatcher.backend == "ses" and not dispatcher.ses_client:
        health_data["dependencies"]["notifications"] = {
            "status": "degraded",
            "type": "ses",
            "details": "SES not properly configured"
        }
        if overall_status == "healthy":
            overall_status = "degraded"
    else:
        health_data["dependencies"]["notifications"] = {
            "status": "healthy",
            "type": dispatcher.backend,
            "details": f"{dispatcher.backend} notification backend active"
        }

    health_data["status"] = overall_status

    if overall_status == "unhealthy":
        raise HTTPException(
            status_code=503,
            detail={"message": "Service unhealthy", "code": "SERVICE_UNHEALTHY"}
        )

    return HealthCheckResponse(**health_data)


@router.get("/version")
async def version_info():
    """Get service version information."""
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "environment": settings.environment,
        "api_version": "v1",
    }
