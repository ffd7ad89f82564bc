"""Order ledger: checkout pricing, order persistence and status changes."""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.settings import get_settings
from src.models.order import Order, OrderStatus
from src.models.product import Product, ProductVariant
from src.models.shipping_class import ShippingClass
from src.models.store_settings import StoreSettings
from src.models.tenant import Tenant
from src.services.business_rules import (
    CheckoutRules,
    InvalidInputError,
    NotFoundError,
    OrderStatusRules,
)
from src.services.notifications import NotificationDispatcher, OrderSummary
from src.services.tenant_scope import StorefrontScope, TenantScope, as_uuid
from src.utils.money import Money
from src.utils.validators import PhoneValidator

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class OrderPricing:
    """The three amounts persisted on an order."""
    subtotal: Money
    shipping_fee: Money
    total: Money


def price_order(unit_price: Money, quantity: int, shipping_fee: Money) -> OrderPricing:
    """subtotal = unit_price x quantity; total = subtotal + shipping_fee."""
    max_quantity = CheckoutRules.MAX_QUANTITY
    if isinstance(quantity, bool) or not isinstance(quantity, int) or not 1 <= quantity <= max_quantity:
        raise InvalidInputError(f"Quantity must be between 1 and {max_quantity}", code="INVALID_QUANTITY")
    subtotal = unit_price * quantity
    total = subtotal + shipping_fee
    if not total.fits_column():
        raise InvalidInputError("Order total is too large", code="ORDER_TOTAL_TOO_LARGE")
    return OrderPricing(subtotal=subtotal, shipping_fee=shipping_fee, total=total)


class OrderService:
    """
    Places storefront orders and manages their status.

    Checkout runs a fail-fast sequence: store, field formats, product, shipping
    option, optional variant, pricing, insert. The seller notification is fired
    after commit and cannot affect the result.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        notifier: Optional[NotificationDispatcher] = None,
        status_rules: Optional[OrderStatusRules] = None,
        checkout_rules: Optional[CheckoutRules] = None,
    ):
        self.db = db_session
        self.notifier = notifier
        self.status_rules = status_rules or OrderStatusRules(strict=settings.strict_order_transitions)
        self.checkout_rules = checkout_rules or CheckoutRules(min_address_length=settings.min_address_length)

    # Checkout

    async def place_order(self, store_slug: str, checkout: Dict[str, Any]) -> Order:
        """Validate, price and persist one checkout."""
        storefront = StorefrontScope(self.db)
        tenant = await storefront.resolve_tenant(store_slug)

        self.checkout_rules.ensure_valid(checkout)

        product = await storefront.get_product(tenant, checkout.get("product_id"))

        scope = TenantScope(self.db, tenant.id)
        shipping_class = await scope.find_owned(ShippingClass, checkout.get("shipping_class_id"))
        if shipping_class is None:
            logger.warning(f"Rejected shipping option {checkout.get('shipping_class_id')} for store {store_slug}")
            raise InvalidInputError("Invalid shipping option", code="INVALID_SHIPPING_OPTION")

        variant = await self._resolve_variant(product, checkout.get("variant_id"))
        unit_price = Money.parse(variant.price if variant else product.price)
        pricing = price_order(unit_price, checkout["quantity"], Money.parse(shipping_class.fee))

        order = Order(
            tenant_id=tenant.id,
            product_id=product.id,
            variant_id=variant.id if variant else None,
            shipping_class_id=shipping_class.id,
            customer_name=checkout["customer_name"].strip(),
            phone=PhoneValidator.to_e164(checkout["phone"]),
            address=checkout["address"].strip(),
            quantity=checkout["quantity"],
            subtotal=pricing.subtotal.to_decimal(),
            shipping_fee=pricing.shipping_fee.to_decimal(),
            total=pricing.total.to_decimal(),
            status=OrderStatus.NEW.value,
        )
        self.db.add(order)
        await self.db.commit()
        await self.db.refresh(order)

        logger.info(f"Order {order.id} placed for tenant {tenant.id}: total {pricing.total}")

        self._notify_seller(tenant, order, product, variant, shipping_class, pricing)
        return order

    async def _resolve_variant(self, product: Product, variant_id: Any) -> Optional[ProductVariant]:
        if variant_id in (None, ""):
            return None
        key = as_uuid(variant_id)
        variant = await self.db.get(ProductVariant, key) if key else None
        if variant is None or variant.product_id != product.id:
            raise InvalidInputError("Invalid product variant", code="INVALID_VARIANT")
        return variant

    def _notify_seller(
        self,
        tenant: Tenant,
        order: Order,
        product: Product,
        variant: Optional[ProductVariant],
        shipping_class: ShippingClass,
        pricing: OrderPricing,
    ) -> None:
        store_settings: Optional[StoreSettings] = tenant.settings
        if self.notifier is None or not store_settings or not store_settings.contact_email:
            return
        self.notifier.notify_new_order(OrderSummary(
            tenant_email=store_settings.contact_email,
            tenant_name=tenant.name,
            order_number=order.order_number,
            customer_name=order.customer_name,
            customer_phone=order.phone,
            customer_address=order.address,
            product_name=product.name,
            variant_name=variant.name if variant else None,
            quantity=order.quantity,
            subtotal=pricing.subtotal.to_fixed2(),
            shipping_fee=pricing.shipping_fee.to_fixed2(),
            total=pricing.total.to_fixed2(),
            shipping_location=shipping_class.location,
        ))

    # Dashboard

    async def list_orders(self, tenant_id: uuid.UUID, status: Optional[str] = None) -> List[Order]:
        query = select(Order).where(Order.tenant_id == tenant_id)
        if status:
            query = query.where(Order.status == self.status_rules.parse_status(status).value)
        result = await self.db.execute(query.order_by(Order.created_at.desc()))
        return list(result.scalars().all())

    async def get_order(self, tenant_id: uuid.UUID, order_id: uuid.UUID) -> Order:
        return await TenantScope(self.db, tenant_id).get_order(order_id)

    async def update_status(self, tenant_id: uuid.UUID, order_id: uuid.UUID, new_status: str) -> Order:
        """Change one order's status; the caller's tenant must own it."""
        order = await TenantScope(self.db, tenant_id).get_order(order_id)
        target = self.status_rules.parse_status(new_status)
        self.status_rules.ensure_allowed(order.status, target.value)

        previous = order.status
        order.status = target.value
        await self.db.commit()
        await self.db.refresh(order)
        logger.info(f"Order {order.id} status {previous} -> {order.status}")
        return order

    async def bulk_update_status(self, tenant_id: uuid.UUID, order_ids: Iterable[Any], new_status: str) -> int:
        """
        Apply one status to a set of orders, all or nothing.

        Ownership of the whole set is verified first; any id that is missing or
        owned by another tenant fails the batch before anything is written. The
        write itself is a single tenant-scoped UPDATE.
        """
        target = self.status_rules.parse_status(new_status)

        ids = []
        for raw_id in order_ids:
            key = as_uuid(raw_id)
            if key is None:
                raise NotFoundError("Order")
            if key not in ids:
                ids.append(key)
        if not ids:
            raise InvalidInputError("At least one order id is required", code="EMPTY_ORDER_BATCH")

        scope_filter = and_(Order.tenant_id == tenant_id, Order.id.in_(ids))
        result = await self.db.execute(select(Order.id, Order.status).where(scope_filter))
        owned = result.all()
        if len(owned) != len(ids):
            logger.warning(
                f"Bulk status update rejected for tenant {tenant_id}: {len(ids) - len(owned)} of {len(ids)} orders not owned"
            )
            raise NotFoundError("Order")

        for _, current in owned:
            self.status_rules.ensure_allowed(current, target.value)

        result = await self.db.execute(
            update(Order)
            .where(scope_filter)
            .values(status=target.value)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.commit()
        logger.info(f"Bulk status update for tenant {tenant_id}: {result.rowcount} orders -> {target.value}")
        return result.rowcount
