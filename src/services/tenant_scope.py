"""Tenant isolation boundary.

Every id lookup for products, variants, orders, shipping classes and domain
mappings goes through :class:`TenantScope`: the row is fetched by id and its
owning tenant compared with the caller's before it is returned. A foreign row is
reported exactly like a missing one.
"""

import logging
import uuid
from typing import Optional, Type, TypeVar, Union

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.domain_mapping import DomainMapping
from src.models.order import Order
from src.models.product import Product, ProductVariant
from src.models.shipping_class import ShippingClass
from src.models.tenant import Tenant
from src.services.business_rules import NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")
IdLike = Union[str, uuid.UUID]


def as_uuid(value: IdLike) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class TenantScope:
    """Ownership-checked data access for one authenticated tenant."""

    def __init__(self, db_session: AsyncSession, tenant_id: IdLike):
        self.db = db_session
        self.tenant_id = as_uuid(tenant_id)

    async def _get_owned(self, model: Type[T], entity_id: IdLike, resource: str) -> T:
        key = as_uuid(entity_id)
        entity = await self.db.get(model, key) if key else None
        if entity is None or not entity.is_owned_by(self.tenant_id):
            if entity is not None:
                logger.warning(
                    f"Cross-tenant {resource.lower()} lookup {key} by tenant {self.tenant_id}"
                )
            raise NotFoundError(resource)
        return entity

    async def find_owned(self, model: Type[T], entity_id: IdLike) -> Optional[T]:
        """Like the getters below, but returns None instead of raising."""
        key = as_uuid(entity_id)
        entity = await self.db.get(model, key) if key else None
        if entity is None or not entity.is_owned_by(self.tenant_id):
            return None
        return entity

    async def get_product(self, product_id: IdLike) -> Product:
        return await self._get_owned(Product, product_id, "Product")

    async def get_order(self, order_id: IdLike) -> Order:
        return await self._get_owned(Order, order_id, "Order")

    async def get_shipping_class(self, shipping_class_id: IdLike) -> ShippingClass:
        return await self._get_owned(ShippingClass, shipping_class_id, "Shipping class")

    async def get_domain(self, domain_id: IdLike) -> DomainMapping:
        return await self._get_owned(DomainMapping, domain_id, "Domain")

    async def get_variant(self, product_id: IdLike, variant_id: IdLike) -> ProductVariant:
        """Variant of one of this tenant's products."""
        product = await self.get_product(product_id)
        key = as_uuid(variant_id)
        variant = await self.db.get(ProductVariant, key) if key else None
        if variant is None or variant.product_id != product.id:
            raise NotFoundError("Variant")
        return variant


class StorefrontScope:
    """Public, unauthenticated reads scoped by store slug.

    Only ``active`` tenants are visible, and only their ``active`` products.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def resolve_tenant(self, store_slug: str) -> Tenant:
        result = await self.db.execute(select(Tenant).where(Tenant.slug == store_slug))
        tenant = result.scalar_one_or_none()
        if tenant is None or not tenant.is_active:
            raise NotFoundError("Store")
        return tenant

    async def get_product_by_slug(self, tenant: Tenant, product_slug: str) -> Product:
        result = await self.db.execute(
            select(Product).where(and_(Product.tenant_id == tenant.id, Product.slug == product_slug))
        )
        product = result.scalar_one_or_none()
        if product is None or not product.is_active:
            raise NotFoundError("Product")
        return product

    async def get_product(self, tenant: Tenant, product_id: IdLike) -> Product:
        scope = TenantScope(self.db, tenant.id)
        product = await scope.find_owned(Product, product_id)
        if product is None or not product.is_active:
            raise NotFoundError("Product")
        return product
