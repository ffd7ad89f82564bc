"""Product and variant API endpoints for the signed-in store."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import get_current_tenant
from src.core.database import get_db_session
from src.models.product import Product
from src.models.tenant import Tenant
from src.schemas.base import resource
from src.schemas.catalog import (
    ProductCollectionResponse,
    ProductResponse,
    ProductVariantCollectionResponse,
    ProductVariantResponse,
    ProductVariantWriteRequest,
    ProductWriteRequest,
)
from src.services.catalog_service import CatalogService

router = APIRouter()


def get_catalog_service(
    tenant: Tenant = Depends(get_current_tenant),
    session: AsyncSession = Depends(get_db_session),
) -> CatalogService:
    """Get catalog service instance."""
    return CatalogService(session, tenant)


def product_resource(product: Product) -> dict:
    return resource(
        "product",
        product,
        variants=[resource("product_variant", variant) for variant in product.variants],
    )


@router.get("", response_model=ProductCollectionResponse)
async def list_products(catalog: CatalogService = Depends(get_catalog_service)):
    """List the store's products, newest first."""
    products = await catalog.list_products()
    return ProductCollectionResponse(
        data=[product_resource(product) for product in products],
        meta={"total": len(products)},
    )


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    request: ProductWriteRequest,
    catalog: CatalogService = Depends(get_catalog_service),
):
    """
    Create a product.

    Rejected with 403 once the store holds as many products as its plan allows.
    """
    product = await catalog.create_product(request.data.attributes.model_dump(exclude_unset=True))
    return ProductResponse(data=product_resource(product))


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: UUID, catalog: CatalogService = Depends(get_catalog_service)):
    product = await catalog.get_product(product_id)
    return ProductResponse(data=product_resource(product))


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: UUID,
    request: ProductWriteRequest,
    catalog: CatalogService = Depends(get_catalog_service),
):
    product = await catalog.update_product(product_id, request.data.attributes.model_dump(exclude_unset=True))
    return ProductResponse(data=product_resource(product))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: UUID, catalog: CatalogService = Depends(get_catalog_service)):
    await catalog.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Variants

@router.get("/{product_id}/variants", response_model=ProductVariantCollectionResponse)
async def list_variants(product_id: UUID, catalog: CatalogService = Depends(get_catalog_service)):
    """Default variant first, then newest."""
    variants = await catalog.list_variants(product_id)
    return ProductVariantCollectionResponse(data=[resource("product_variant", variant) for variant in variants])


@router.post("/{product_id}/variants", response_model=ProductVariantResponse, status_code=status.HTTP_201_CREATED)
async def create_variant(
    product_id: UUID,
    request: ProductVariantWriteRequest,
    catalog: CatalogService = Depends(get_catalog_service),
):
    variant = await catalog.create_variant(product_id, request.data.attributes.model_dump(exclude_unset=True))
    return ProductVariantResponse(data=resource("product_variant", variant))


@router.patch("/{product_id}/variants/{variant_id}", response_model=ProductVariantResponse)
async def update_variant(
    product_id: UUID,
    variant_id: UUID,
    request: ProductVariantWriteRequest,
    catalog: CatalogService = Depends(get_catalog_service),
):
    variant = await catalog.update_variant(
        product_id, variant_id, request.data.attributes.model_dump(exclude_unset=True)
    )
    return ProductVariantResponse(data=resource("product_variant", variant))


@router.delete("/{product_id}/variants/{variant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_variant(
    product_id: UUID,
    variant_id: UUID,
    catalog: CatalogService = Depends(get_catalog_service),
):
    await catalog.delete_variant(product_id, variant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
