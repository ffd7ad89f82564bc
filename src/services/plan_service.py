"""Plan resource governor and plan administration.

Limits are evaluated against the tenant's *current* plan at the moment an
action is attempted; reassigning a plan never touches existing data.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.settings import get_settings
from src.models.plan import Plan
from src.models.product import Product
from src.models.tenant import Tenant
from src.services.business_rules import (
    ForbiddenError,
    InvalidInputError,
    LimitExceededError,
    NotFoundError,
)
from src.utils.money import InvalidMoneyError, Money

logger = logging.getLogger(__name__)
settings = get_settings()


class PlanGovernor:
    """Checks plan limits and feature flags before writes reach persistence."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    @staticmethod
    def product_limit(plan: Optional[Plan]) -> int:
        # Tenants without a plan get the free-tier ceiling
        if plan is None or plan.product_limit is None:
            return settings.default_plan_product_limit
        return plan.product_limit

    async def count_products(self, tenant_id: uuid.UUID) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Product).where(Product.tenant_id == tenant_id)
        )
        return result.scalar_one()

    async def can_create_product(self, tenant: Tenant) -> bool:
        return await self.count_products(tenant.id) < self.product_limit(tenant.plan)

    async def ensure_can_create_product(self, tenant: Tenant) -> None:
        """Raise LimitExceededError when the tenant is at its product ceiling.

        Must be called in the same unit of work as the insert it guards.
        """
        limit = self.product_limit(tenant.plan)
        if await self.count_products(tenant.id) >= limit:
            logger.warning(f"Product limit {limit} reached for tenant {tenant.id}")
            raise LimitExceededError(
                f"Product limit reached ({limit}). Please upgrade your plan.",
                limit=limit,
            )

    @staticmethod
    def can_use_custom_domain(tenant: Tenant) -> bool:
        return bool(tenant.plan and tenant.plan.allow_custom_domain)

    @staticmethod
    def can_use_tracking(tenant: Tenant) -> bool:
        return bool(tenant.plan and tenant.plan.allow_tracking)

    def ensure_can_use_custom_domain(self, tenant: Tenant) -> None:
        if not self.can_use_custom_domain(tenant):
            raise ForbiddenError("Your plan does not support custom domains. Please upgrade.")

    def ensure_can_use_tracking(self, tenant: Tenant) -> None:
        if not self.can_use_tracking(tenant):
            raise ForbiddenError("Your plan does not support tracking pixels. Please upgrade.")

    async def ensure_default_plan(self) -> Plan:
        """
        Return the plan new tenants start on, creating the free tier if no
        active plan exists.

        Idempotent: the bootstrap plan has a unique ``code``, so a concurrent
        creator loses on the constraint and re-reads the winner's row.
        """
        result = await self.db.execute(
            select(Plan).where(Plan.is_active.is_(True)).order_by(Plan.price, Plan.created_at).limit(1)
        )
        plan = result.scalar_one_or_none()
        if plan is not None:
            return plan

        result = await self.db.execute(select(Plan).where(Plan.code == settings.default_plan_code))
        plan = result.scalar_one_or_none()
        if plan is not None:
            return plan

        plan = Plan(
            code=settings.default_plan_code,
            name=settings.default_plan_name,
            product_limit=settings.default_plan_product_limit,
            allow_custom_domain=settings.default_plan_allow_custom_domain,
            allow_tracking=settings.default_plan_allow_tracking,
            price=settings.default_plan_price,
            is_active=True,
        )
        self.db.add(plan)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            result = await self.db.execute(select(Plan).where(Plan.code == settings.default_plan_code))
            plan = result.scalar_one()
            logger.info(f"Default plan created concurrently, reusing {plan.id}")
            return plan

        logger.info(f"Created default plan {plan.id}")
        return plan


class PlanService:
    """Administrative plan CRUD."""

    EDITABLE_FIELDS = ("name", "product_limit", "allow_custom_domain", "allow_tracking", "price", "is_active")

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def list_plans(self, active_only: bool = False) -> List[Plan]:
        query = select(Plan).order_by(Plan.price, Plan.created_at)
        if active_only:
            query = query.where(Plan.is_active.is_(True))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_plan(self, plan_id: uuid.UUID) -> Plan:
        plan = await self.db.get(Plan, plan_id)
        if plan is None:
            raise NotFoundError("Plan")
        return plan

    def _clean(self, data: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = {key: value for key, value in data.items() if key in self.EDITABLE_FIELDS}
        if "price" in cleaned and cleaned["price"] is not None:
            try:
                price = Money.parse(cleaned["price"])
            except InvalidMoneyError as e:
                raise InvalidInputError(str(e), code="INVALID_PRICE")
            if price.is_negative:
                raise InvalidInputError("Price cannot be negative", code="INVALID_PRICE")
            cleaned["price"] = price.to_decimal()
        if "product_limit" in cleaned and cleaned["product_limit"] is not None and cleaned["product_limit"] < 0:
            raise InvalidInputError("Product limit cannot be negative", code="INVALID_PRODUCT_LIMIT")
        return cleaned

    async def create_plan(self, data: Dict[str, Any]) -> Plan:
        plan = Plan(**self._clean(data))
        self.db.add(plan)
        await self.db.commit()
        await self.db.refresh(plan)
        logger.info(f"Created plan {plan.id} ({plan.name})")
        return plan

    async def update_plan(self, plan_id: uuid.UUID, data: Dict[str, Any]) -> Plan:
        plan = await self.get_plan(plan_id)
        plan.update_from_dict(self._clean(data))
        await self.db.commit()
        await self.db.refresh(plan)
        return plan

    async def delete_plan(self, plan_id: uuid.UUID) -> None:
        plan = await self.get_plan(plan_id)
        in_use = await self.db.execute(
            select(func.count()).select_from(Tenant).where(Tenant.plan_id == plan.id)
        )
        if in_use.scalar_one() > 0:
            raise InvalidInputError("Plan is assigned to tenants and cannot be deleted", code="PLAN_IN_USE")
        await self.db.delete(plan)
        await self.db.commit()
