"""Platform administration endpoints. Every route requires the admin role."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import require_admin
from src.core.database import get_db_session
from src.models.tenant import Tenant
from src.schemas.admin import (
    PlanCollectionResponse,
    PlanResponse,
    PlanWriteRequest,
    PlatformStatsResponse,
    TenantCollectionResponse,
    TenantPlanUpdateRequest,
    TenantResponse,
    TenantStatusUpdateRequest,
)
from src.schemas.base import resource
from src.schemas.store import DomainCollectionResponse, DomainResponse
from src.services.analytics_service import AnalyticsService
from src.services.plan_service import PlanService
from src.services.tenant_service import AdminService

router = APIRouter(dependencies=[Depends(require_admin)])


def get_admin_service(session: AsyncSession = Depends(get_db_session)) -> AdminService:
    """Get admin service instance."""
    return AdminService(session)


def get_plan_service(session: AsyncSession = Depends(get_db_session)) -> PlanService:
    """Get plan service instance."""
    return PlanService(session)


def tenant_resource(tenant: Tenant, **counts) -> dict:
    return resource("tenant", tenant, plan_name=tenant.plan.name if tenant.plan else None, **counts)


@router.get("/stats", response_model=PlatformStatsResponse)
async def platform_stats(session: AsyncSession = Depends(get_db_session)):
    """Tenant counts, order count and delivered revenue across the platform."""
    stats = await AnalyticsService(session).get_platform_stats()
    return PlatformStatsResponse(data={
        "type": "platform_stats",
        "id": "platform",
        "attributes": {
            "total_tenants": stats.total_tenants,
            "active_tenants": stats.active_tenants,
            "total_orders": stats.total_orders,
            "total_revenue": stats.total_revenue,
        },
    })


# Tenants

@router.get("/tenants", response_model=TenantCollectionResponse)
async def list_tenants(admin: AdminService = Depends(get_admin_service)):
    summaries = await admin.list_tenants()
    return TenantCollectionResponse(data=[
        tenant_resource(summary.tenant, product_count=summary.product_count, order_count=summary.order_count)
        for summary in summaries
    ])


@router.patch("/tenants/{tenant_id}/status", response_model=TenantResponse)
async def update_tenant_status(
    tenant_id: UUID,
    request: TenantStatusUpdateRequest,
    admin: AdminService = Depends(get_admin_service),
):
    """Suspending a tenant hides its storefront immediately."""
    tenant = await admin.set_tenant_status(tenant_id, request.data.attributes.status)
    return TenantResponse(data=tenant_resource(tenant))


@router.patch("/tenants/{tenant_id}/plan", response_model=TenantResponse)
async def update_tenant_plan(
    tenant_id: UUID,
    request: TenantPlanUpdateRequest,
    admin: AdminService = Depends(get_admin_service),
):
    """Applies from the next limit check; existing products are kept."""
    tenant = await admin.set_tenant_plan(tenant_id, request.data.attributes.plan_id)
    return TenantResponse(data=tenant_resource(tenant))


@router.delete("/tenants/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tenant(tenant_id: UUID, admin: AdminService = Depends(get_admin_service)):
    """Delete a tenant with all its orders, products, shipping classes, settings, domains and users."""
    await admin.delete_tenant(tenant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Plans

@router.get("/plans", response_model=PlanCollectionResponse)
async def list_plans(
    active_only: bool = Query(False, description="Only plans open to new tenants"),
    plans: PlanService = Depends(get_plan_service),
):
    results = await plans.list_plans(active_only=active_only)
    return PlanCollectionResponse(data=[resource("plan", plan) for plan in results])


@router.post("/plans", response_model=PlanResponse, status_code=status.HTTP_201_CREATED)
async def create_plan(request: PlanWriteRequest, plans: PlanService = Depends(get_plan_service)):
    plan = await plans.create_plan(request.data.attributes.model_dump(exclude_unset=True))
    return PlanResponse(data=resource("plan", plan))


@router.patch("/plans/{plan_id}", response_model=PlanResponse)
async def update_plan(
    plan_id: UUID,
    request: PlanWriteRequest,
    plans: PlanService = Depends(get_plan_service),
):
    plan = await plans.update_plan(plan_id, request.data.attributes.model_dump(exclude_unset=True))
    return PlanResponse(data=resource("plan", plan))


@router.delete("/plans/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_plan(plan_id: UUID, plans: PlanService = Depends(get_plan_service)):
    await plans.delete_plan(plan_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Domains

@router.get("/domains", response_model=DomainCollectionResponse)
async def list_domains(admin: AdminService = Depends(get_admin_service)):
    mappings = await admin.list_domains()
    return DomainCollectionResponse(data=[
        resource(
            "domain",
            mapping,
            tenant_name=tenant.name if tenant else None,
            tenant_slug=tenant.slug if tenant else None,
        )
        for mapping, tenant in mappings
    ])


@router.patch("/domains/{domain_id}/verify", response_model=DomainResponse)
async def verify_domain(domain_id: UUID, admin: AdminService = Depends(get_admin_service)):
    mapping = await admin.set_domain_verified(domain_id, True)
    return DomainResponse(data=resource("domain", mapping))


@router.patch("/domains/{domain_id}/unverify", response_model=DomainResponse)
async def unverify_domain(domain_id: UUID, admin: AdminService = Depends(get_admin_service)):
    mapping = await admin.set_domain_verified(domain_id, False)
    return DomainResponse(data=resource("domain", mapping))


@router.delete("/domains/{domain_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_domain(domain_id: UUID, admin: AdminService = Depends(get_admin_service)):
    await admin.delete_domain(domain_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
