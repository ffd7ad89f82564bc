"""Custom domain endpoints for the signed-in store."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import get_current_tenant
from src.core.database import get_db_session
from src.models.tenant import Tenant
from src.schemas.base import resource
from src.schemas.store import DomainCollectionResponse, DomainCreateRequest, DomainResponse
from src.services.catalog_service import DomainService

router = APIRouter()


def get_domain_service(
    tenant: Tenant = Depends(get_current_tenant),
    session: AsyncSession = Depends(get_db_session),
) -> DomainService:
    """Get domain service instance."""
    return DomainService(session, tenant)


@router.get("", response_model=DomainCollectionResponse)
async def list_domains(domains: DomainService = Depends(get_domain_service)):
    mappings = await domains.list_domains()
    return DomainCollectionResponse(data=[resource("domain", mapping) for mapping in mappings])


@router.post("", response_model=DomainResponse, status_code=status.HTTP_201_CREATED)
async def add_domain(
    request: DomainCreateRequest,
    domains: DomainService = Depends(get_domain_service),
):
    """Map a hostname to the store. Requires a plan with custom domains."""
    mapping = await domains.add_domain(request.data.attributes.domain)
    return DomainResponse(data=resource("domain", mapping))


@router.delete("/{domain_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_domain(domain_id: UUID, domains: DomainService = Depends(get_domain_service)):
    await domains.delete_domain(domain_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{domain_id}/verify", response_model=DomainResponse)
async def request_verification(domain_id: UUID, domains: DomainService = Depends(get_domain_service)):
    """Ask the platform to verify DNS for a domain. Verification itself is done by an admin."""
    mapping = await domains.request_verification(domain_id)
    return DomainResponse(
        data=resource("domain", mapping),
        meta={"message": "Verification requested. An administrator will confirm the DNS records."},
    )
