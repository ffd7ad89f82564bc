"""Tenant-scoped catalog, shipping, settings and domain management."""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.domain_mapping import DomainMapping
from src.models.product import PRODUCT_STATUSES, Product, ProductVariant
from src.models.shipping_class import ShippingClass
from src.models.store_settings import TRACKING_FIELDS, StoreSettings
from src.models.tenant import Tenant
from src.services.business_rules import InvalidInputError
from src.services.plan_service import PlanGovernor
from src.services.tenant_scope import TenantScope
from src.utils.money import InvalidMoneyError, Money
from src.utils.validators import AttributeMapValidator, DomainValidator, EmailValidator, SlugValidator

logger = logging.getLogger(__name__)


def parse_amount(value: Any, field: str) -> Money:
    """Parse a non-negative money field from a form."""
    try:
        amount = Money.parse(value)
    except InvalidMoneyError as e:
        raise InvalidInputError(str(e), code=f"INVALID_{field.upper()}")
    if amount.is_negative:
        raise InvalidInputError(f"{field.replace('_', ' ').capitalize()} cannot be negative", code=f"INVALID_{field.upper()}")
    return amount


class CatalogService:
    """Products and variants. Creation is gated by the tenant's plan."""

    PRODUCT_FIELDS = ("name", "slug", "price", "description", "images", "status", "has_variants")
    VARIANT_FIELDS = ("name", "sku", "price", "stock", "attributes", "is_default")

    def __init__(self, db_session: AsyncSession, tenant: Tenant):
        self.db = db_session
        self.tenant = tenant
        self.scope = TenantScope(db_session, tenant.id)
        self.governor = PlanGovernor(db_session)

    def _clean_product(self, data: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = {key: value for key, value in data.items() if key in self.PRODUCT_FIELDS}
        if "slug" in cleaned:
            errors = SlugValidator.validate(cleaned["slug"])
            if errors:
                raise InvalidInputError(errors[0].message, errors=errors, code=errors[0].code)
        if "price" in cleaned:
            cleaned["price"] = parse_amount(cleaned["price"], "price").to_decimal()
        if "status" in cleaned and cleaned["status"] not in PRODUCT_STATUSES:
            raise InvalidInputError(f"Status must be one of: {', '.join(PRODUCT_STATUSES)}", code="INVALID_PRODUCT_STATUS")
        if "images" in cleaned:
            images = cleaned["images"] or []
            if not isinstance(images, list) or not all(isinstance(image, str) for image in images):
                raise InvalidInputError("Images must be a list of references", code="INVALID_IMAGES")
            cleaned["images"] = list(images)
        return cleaned

    async def _ensure_slug_free(self, slug: str, exclude_id: Optional[uuid.UUID] = None) -> None:
        query = select(Product.id).where(and_(Product.tenant_id == self.tenant.id, Product.slug == slug))
        if exclude_id:
            query = query.where(Product.id != exclude_id)
        if (await self.db.execute(query)).first() is not None:
            raise InvalidInputError("A product with this slug already exists", code="SLUG_TAKEN")

    async def list_products(self) -> List[Product]:
        result = await self.db.execute(
            select(Product).where(Product.tenant_id == self.tenant.id).order_by(Product.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_product(self, product_id: uuid.UUID) -> Product:
        return await self.scope.get_product(product_id)

    async def create_product(self, data: Dict[str, Any]) -> Product:
        cleaned = self._clean_product(data)
        for required in ("name", "slug", "price"):
            if cleaned.get(required) in (None, ""):
                raise InvalidInputError(f"{required.capitalize()} is required", code=f"{required.upper()}_REQUIRED")

        # Limit check and insert share one unit of work
        await self.governor.ensure_can_create_product(self.tenant)
        await self._ensure_slug_free(cleaned["slug"])

        product = Product(tenant_id=self.tenant.id, **cleaned)
        self.db.add(product)
        await self._commit("A product with this slug already exists", "SLUG_TAKEN")
        await self.db.refresh(product)
        logger.info(f"Created product {product.id} for tenant {self.tenant.id}")
        return product

    async def update_product(self, product_id: uuid.UUID, data: Dict[str, Any]) -> Product:
        product = await self.scope.get_product(product_id)
        cleaned = self._clean_product(data)
        if "slug" in cleaned:
            await self._ensure_slug_free(cleaned["slug"], exclude_id=product.id)
        product.update_from_dict(cleaned)
        await self._commit("A product with this slug already exists", "SLUG_TAKEN")
        await self.db.refresh(product)
        return product

    async def delete_product(self, product_id: uuid.UUID) -> None:
        product = await self.scope.get_product(product_id)
        await self.db.delete(product)
        await self._commit("Product has orders and cannot be deleted; archive it instead", "PRODUCT_IN_USE")
        logger.info(f"Deleted product {product_id} for tenant {self.tenant.id}")

    # Variants

    def _clean_variant(self, data: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = {key: value for key, value in data.items() if key in self.VARIANT_FIELDS}
        if "price" in cleaned:
            cleaned["price"] = parse_amount(cleaned["price"], "price").to_decimal()
        if "stock" in cleaned and (cleaned["stock"] is None or cleaned["stock"] < 0):
            raise InvalidInputError("Stock cannot be negative", code="INVALID_STOCK")
        if "attributes" in cleaned:
            try:
                cleaned["attributes"] = AttributeMapValidator.coerce(cleaned["attributes"])
            except ValueError as e:
                raise InvalidInputError(str(e), code="INVALID_ATTRIBUTES")
        return cleaned

    async def list_variants(self, product_id: uuid.UUID) -> List[ProductVariant]:
        product = await self.scope.get_product(product_id)
        return list(product.variants)

    async def create_variant(self, product_id: uuid.UUID, data: Dict[str, Any]) -> ProductVariant:
        product = await self.scope.get_product(product_id)
        cleaned = self._clean_variant(data)
        if not cleaned.get("name"):
            raise InvalidInputError("Name is required", code="NAME_REQUIRED")
        if "price" not in cleaned:
            cleaned["price"] = product.price

        variant = ProductVariant(**cleaned)
        product.variants.append(variant)
        product.has_variants = True
        await self.db.commit()
        await self.db.refresh(variant)
        return variant

    async def update_variant(self, product_id: uuid.UUID, variant_id: uuid.UUID, data: Dict[str, Any]) -> ProductVariant:
        variant = await self.scope.get_variant(product_id, variant_id)
        variant.update_from_dict(self._clean_variant(data))
        await self.db.commit()
        await self.db.refresh(variant)
        return variant

    async def delete_variant(self, product_id: uuid.UUID, variant_id: uuid.UUID) -> None:
        variant = await self.scope.get_variant(product_id, variant_id)
        product = await self.scope.get_product(product_id)
        product.variants.remove(variant)
        product.has_variants = bool(product.variants)
        await self.db.commit()

    async def _commit(self, conflict_message: str, conflict_code: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Integrity error for tenant {self.tenant.id}: {e}")
            raise InvalidInputError(conflict_message, code=conflict_code)


class ShippingService:
    """Tenant shipping classes."""

    FIELDS = ("name", "fee", "location", "is_default")

    def __init__(self, db_session: AsyncSession, tenant_id: uuid.UUID):
        self.db = db_session
        self.tenant_id = tenant_id
        self.scope = TenantScope(db_session, tenant_id)

    def _clean(self, data: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = {key: value for key, value in data.items() if key in self.FIELDS}
        if "fee" in cleaned:
            cleaned["fee"] = parse_amount(cleaned["fee"], "fee").to_decimal()
        return cleaned

    async def list_shipping_classes(self) -> List[ShippingClass]:
        """Default-marked classes first, then by name."""
        result = await self.db.execute(
            select(ShippingClass)
            .where(ShippingClass.tenant_id == self.tenant_id)
            .order_by(ShippingClass.is_default.desc(), ShippingClass.name)
        )
        return list(result.scalars().all())

    async def create_shipping_class(self, data: Dict[str, Any]) -> ShippingClass:
        cleaned = self._clean(data)
        for required in ("name", "fee", "location"):
            if cleaned.get(required) in (None, ""):
                raise InvalidInputError(f"{required.capitalize()} is required", code=f"{required.upper()}_REQUIRED")
        shipping_class = ShippingClass(tenant_id=self.tenant_id, **cleaned)
        self.db.add(shipping_class)
        await self.db.commit()
        await self.db.refresh(shipping_class)
        return shipping_class

    async def update_shipping_class(self, shipping_class_id: uuid.UUID, data: Dict[str, Any]) -> ShippingClass:
        shipping_class = await self.scope.get_shipping_class(shipping_class_id)
        shipping_class.update_from_dict(self._clean(data))
        await self.db.commit()
        await self.db.refresh(shipping_class)
        return shipping_class

    async def delete_shipping_class(self, shipping_class_id: uuid.UUID) -> None:
        shipping_class = await self.scope.get_shipping_class(shipping_class_id)
        await self.db.delete(shipping_class)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise InvalidInputError("Shipping class is used by existing orders", code="SHIPPING_CLASS_IN_USE")


class StoreSettingsService:
    """Per-tenant settings; tracking ids depend on the plan."""

    FIELDS = ("fb_pixel_id", "gtm_id", "store_logo", "primary_color", "whatsapp_number", "contact_email")

    def __init__(self, db_session: AsyncSession, tenant: Tenant):
        self.db = db_session
        self.tenant = tenant
        self.governor = PlanGovernor(db_session)

    async def get_settings(self) -> Optional[StoreSettings]:
        result = await self.db.execute(select(StoreSettings).where(StoreSettings.tenant_id == self.tenant.id))
        return result.scalar_one_or_none()

    async def upsert_settings(self, data: Dict[str, Any]) -> StoreSettings:
        cleaned = {key: value for key, value in data.items() if key in self.FIELDS}

        if any(cleaned.get(field) for field in TRACKING_FIELDS):
            self.governor.ensure_can_use_tracking(self.tenant)

        contact_email = cleaned.get("contact_email")
        if contact_email and not EmailValidator.is_valid(contact_email):
            raise InvalidInputError("Invalid email address", code="INVALID_EMAIL")

        store_settings = await self.get_settings()
        if store_settings is None:
            store_settings = StoreSettings(tenant_id=self.tenant.id)
            self.db.add(store_settings)
        store_settings.update_from_dict(cleaned)
        await self.db.commit()
        await self.db.refresh(store_settings)
        return store_settings


class DomainService:
    """Custom domains, available on plans that allow them."""

    def __init__(self, db_session: AsyncSession, tenant: Tenant):
        self.db = db_session
        self.tenant = tenant
        self.scope = TenantScope(db_session, tenant.id)
        self.governor = PlanGovernor(db_session)

    async def list_domains(self) -> List[DomainMapping]:
        result = await self.db.execute(
            select(DomainMapping).where(DomainMapping.tenant_id == self.tenant.id).order_by(DomainMapping.created_at)
        )
        return list(result.scalars().all())

    async def add_domain(self, domain: str) -> DomainMapping:
        self.governor.ensure_can_use_custom_domain(self.tenant)

        errors = DomainValidator.validate(domain)
        if errors:
            raise InvalidInputError(errors[0].message, errors=errors, code=errors[0].code)
        hostname = DomainValidator.normalize(domain)

        existing = await self.db.execute(select(DomainMapping.id).where(DomainMapping.domain == hostname))
        if existing.first() is not None:
            raise InvalidInputError("This domain is already registered", code="DOMAIN_TAKEN")

        mapping = DomainMapping(tenant_id=self.tenant.id, domain=hostname, verified=False)
        self.db.add(mapping)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise InvalidInputError("This domain is already registered", code="DOMAIN_TAKEN")
        await self.db.refresh(mapping)
        logger.info(f"Tenant {self.tenant.id} added domain {hostname}")
        return mapping

    async def delete_domain(self, domain_id: uuid.UUID) -> None:
        mapping = await self.scope.get_domain(domain_id)
        await self.db.delete(mapping)
        await self.db.commit()

    async def request_verification(self, domain_id: uuid.UUID) -> DomainMapping:
        mapping = await self.scope.get_domain(domain_id)
        logger.info(f"Verification requested for domain {mapping.domain} (tenant {self.tenant.id})")
        return mapping
