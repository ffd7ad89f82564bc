"""Analytics and dashboard endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import get_current_tenant
from src.core.database import get_db_session
from src.models.tenant import Tenant
from src.schemas.analytics import AnalyticsAttributes, AnalyticsResponse, DashboardStatsResponse
from src.services.analytics_service import AnalyticsPeriod, AnalyticsService

router = APIRouter()


def get_analytics_service(session: AsyncSession = Depends(get_db_session)) -> AnalyticsService:
    """Get analytics service instance."""
    return AnalyticsService(session)


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    period: str = Query(AnalyticsPeriod.LAST_30_DAYS.value, description="7d, 30d, 90d or all"),
    tenant: Tenant = Depends(get_current_tenant),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    """
    Sales analytics for the store.

    Sales trend, revenue trend and top products count every order; the status
    breakdown and conversion rate only credit delivered orders.
    """
    report = await analytics.get_analytics(tenant.id, period)
    return AnalyticsResponse(data={
        "type": "analytics",
        "id": f"{tenant.id}:{report.period}",
        "attributes": AnalyticsAttributes.model_validate(report),
    })


@router.get("/dashboard/stats", response_model=DashboardStatsResponse)
async def dashboard_stats(
    tenant: Tenant = Depends(get_current_tenant),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    stats = await analytics.get_order_stats(tenant.id)
    return DashboardStatsResponse(data={
        "type": "dashboard_stats",
        "id": str(tenant.id),
        "attributes": {
            "total_products": stats.total_products,
            "total_orders": stats.total_orders,
            "new_orders": stats.new_orders,
            "total_revenue": stats.total_revenue,
        },
    })
