"""Tenant onboarding, authentication and platform administration."""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.settings import get_settings
from src.middleware.auth import get_password_hash, verify_password
from src.models.domain_mapping import DomainMapping
from src.models.order import Order
from src.models.plan import Plan
from src.models.product import Product, ProductVariant
from src.models.shipping_class import ShippingClass
from src.models.store_settings import StoreSettings
from src.models.tenant import TENANT_STATUSES, Tenant
from src.models.user import User
from src.services.business_rules import AuthenticationError, InvalidInputError, NotFoundError
from src.services.plan_service import PlanGovernor
from src.services.tenant_scope import as_uuid
from src.utils.money import Money
from src.utils.validators import EmailValidator, SlugValidator, ValidationError

logger = logging.getLogger(__name__)
settings = get_settings()

MIN_PASSWORD_LENGTH = 8
MIN_STORE_NAME_LENGTH = 2


class TenantService:
    """Registration, login and the signed-in user's identity."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    @staticmethod
    def validate_registration(data: Dict[str, Any]) -> List[ValidationError]:
        errors: List[ValidationError] = []
        if not EmailValidator.is_valid(data.get("email")):
            errors.append(ValidationError(field="email", code="INVALID_EMAIL", message="Invalid email address"))
        if len(data.get("password") or "") < MIN_PASSWORD_LENGTH:
            errors.append(ValidationError(
                field="password",
                code="PASSWORD_TOO_SHORT",
                message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            ))
        if len((data.get("store_name") or "").strip()) < MIN_STORE_NAME_LENGTH:
            errors.append(ValidationError(
                field="store_name",
                code="STORE_NAME_TOO_SHORT",
                message=f"Store name must be at least {MIN_STORE_NAME_LENGTH} characters",
            ))
        errors.extend(SlugValidator.validate(data.get("store_slug"), field="store_slug"))
        return errors

    async def is_slug_available(self, slug: str) -> bool:
        result = await self.db.execute(select(Tenant.id).where(Tenant.slug == slug))
        return result.first() is None

    async def _email_taken(self, email: str) -> bool:
        result = await self.db.execute(select(User.id).where(User.email == email))
        return result.first() is not None

    async def register(self, data: Dict[str, Any]) -> Tuple[User, Tenant]:
        """
        Create a store and its owner.

        The tenant starts on the default plan (created on first use) with store
        settings and the configured default shipping classes, all in one commit.
        """
        errors = self.validate_registration(data)
        if errors:
            raise InvalidInputError(errors[0].message, errors=errors, code=errors[0].code)

        email = data["email"].strip().lower()
        slug = data["store_slug"]
        if await self._email_taken(email):
            raise InvalidInputError("Email already registered", code="EMAIL_TAKEN")
        if not await self.is_slug_available(slug):
            raise InvalidInputError("Store URL is already taken", code="SLUG_TAKEN")

        plan = await PlanGovernor(self.db).ensure_default_plan()

        tenant = Tenant(id=uuid.uuid4(), name=data["store_name"].strip(), slug=slug, plan_id=plan.id, status="active")
        self.db.add(tenant)
        await self.db.flush()
        user = User(email=email, password_hash=get_password_hash(data["password"]), role="tenant", tenant_id=tenant.id)
        self.db.add(user)
        self.db.add(StoreSettings(tenant_id=tenant.id, primary_color=settings.default_primary_color))
        for shipping in settings.default_shipping_classes:
            self.db.add(ShippingClass(
                tenant_id=tenant.id,
                name=shipping["name"],
                location=shipping["location"],
                fee=Money.parse(shipping["fee"]).to_decimal(),
                is_default=shipping.get("is_default", False),
            ))

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Registration conflict for {email}: {e}")
            raise InvalidInputError("Email or store URL is already taken", code="REGISTRATION_CONFLICT")

        await self.db.refresh(tenant)
        logger.info(f"Registered tenant {tenant.id} ({tenant.slug}) on plan {plan.id}")
        return user, tenant

    async def authenticate(self, email: str, password: str) -> User:
        result = await self.db.execute(select(User).where(User.email == (email or "").strip().lower()))
        user = result.scalar_one_or_none()
        if user is None or not verify_password(password or "", user.password_hash):
            logger.warning(f"Failed login for {email}")
            raise AuthenticationError("Invalid email or password", code="INVALID_CREDENTIALS")
        return user

    async def get_user(self, user_id: Any) -> User:
        key = as_uuid(user_id)
        user = await self.db.get(User, key) if key else None
        if user is None:
            raise AuthenticationError("Not authenticated", code="AUTHENTICATION_REQUIRED")
        return user

    async def get_tenant(self, tenant_id: Any) -> Optional[Tenant]:
        key = as_uuid(tenant_id)
        return await self.db.get(Tenant, key) if key else None

    async def ensure_admin(self, email: str, password: str) -> User:
        """Create a platform administrator, or reset the password of an existing one."""
        email = email.strip().lower()
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(email=email, role="admin", tenant_id=None)
            self.db.add(user)
        elif user.role != "admin":
            raise InvalidInputError("Email belongs to a store owner", code="EMAIL_TAKEN")
        user.password_hash = get_password_hash(password)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(f"Admin user ready: {email}")
        return user


@dataclass
class TenantSummary:
    tenant: Tenant
    product_count: int
    order_count: int


class AdminService:
    """Platform-wide operations. Callers must be admins."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def _get_tenant(self, tenant_id: Any) -> Tenant:
        key = as_uuid(tenant_id)
        tenant = await self.db.get(Tenant, key) if key else None
        if tenant is None:
            raise NotFoundError("Tenant")
        return tenant

    async def list_tenants(self) -> List[TenantSummary]:
        tenants = (await self.db.execute(select(Tenant).order_by(Tenant.created_at.desc()))).scalars().all()
        product_counts = dict((await self.db.execute(
            select(Product.tenant_id, func.count()).group_by(Product.tenant_id)
        )).all())
        order_counts = dict((await self.db.execute(
            select(Order.tenant_id, func.count()).group_by(Order.tenant_id)
        )).all())
        return [
            TenantSummary(
                tenant=tenant,
                product_count=product_counts.get(tenant.id, 0),
                order_count=order_counts.get(tenant.id, 0),
            )
            for tenant in tenants
        ]

    async def set_tenant_status(self, tenant_id: Any, status: str) -> Tenant:
        if status not in TENANT_STATUSES:
            raise InvalidInputError(f"Status must be one of: {', '.join(TENANT_STATUSES)}", code="INVALID_TENANT_STATUS")
        tenant = await self._get_tenant(tenant_id)
        tenant.status = status
        await self.db.commit()
        await self.db.refresh(tenant)
        logger.info(f"Tenant {tenant.id} status set to {status}")
        return tenant

    async def set_tenant_plan(self, tenant_id: Any, plan_id: Any) -> Tenant:
        """Reassign a plan. Existing data above the new limits is left alone."""
        tenant = await self._get_tenant(tenant_id)
        key = as_uuid(plan_id)
        plan = await self.db.get(Plan, key) if key else None
        if plan is None:
            raise NotFoundError("Plan")
        tenant.plan_id = plan.id
        await self.db.commit()
        await self.db.refresh(tenant, attribute_names=["plan", "plan_id"])
        logger.info(f"Tenant {tenant.id} moved to plan {plan.id}")
        return tenant

    async def delete_tenant(self, tenant_id: Any) -> None:
        """
        Delete a tenant and everything it owns.

        Dependents go first: orders, variants and products, shipping classes,
        settings, domains, users, then the tenant row. One transaction.
        """
        tenant = await self._get_tenant(tenant_id)
        owned_products = select(Product.id).where(Product.tenant_id == tenant.id)

        await self.db.execute(delete(Order).where(Order.tenant_id == tenant.id))
        await self.db.execute(delete(ProductVariant).where(ProductVariant.product_id.in_(owned_products)))
        await self.db.execute(delete(Product).where(Product.tenant_id == tenant.id))
        await self.db.execute(delete(ShippingClass).where(ShippingClass.tenant_id == tenant.id))
        await self.db.execute(delete(StoreSettings).where(StoreSettings.tenant_id == tenant.id))
        await self.db.execute(delete(DomainMapping).where(DomainMapping.tenant_id == tenant.id))
        await self.db.execute(delete(User).where(User.tenant_id == tenant.id))
        await self.db.execute(delete(Tenant).where(Tenant.id == tenant.id))
        await self.db.commit()
        self.db.expunge_all()
        logger.info(f"Deleted tenant {tenant_id} and all owned data")

    # Domains

    async def list_domains(self) -> List[Tuple[DomainMapping, Optional[Tenant]]]:
        result = await self.db.execute(
            select(DomainMapping, Tenant)
            .outerjoin(Tenant, Tenant.id == DomainMapping.tenant_id)
            .order_by(DomainMapping.created_at.desc())
        )
        return [(mapping, tenant) for mapping, tenant in result.all()]

    async def _get_domain(self, domain_id: Any) -> DomainMapping:
        key = as_uuid(domain_id)
        mapping = await self.db.get(DomainMapping, key) if key else None
        if mapping is None:
            raise NotFoundError("Domain")
        return mapping

    async def set_domain_verified(self, domain_id: Any, verified: bool) -> DomainMapping:
        mapping = await self._get_domain(domain_id)
        mapping.verified = verified
        await self.db.commit()
        await self.db.refresh(mapping)
        logger.info(f"Domain {mapping.domain} verified={verified}")
        return mapping

    async def delete_domain(self, domain_id: Any) -> None:
        mapping = await self._get_domain(domain_id)
        await self.db.delete(mapping)
        await self.db.commit()
