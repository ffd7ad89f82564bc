"""Order ledger model."""

from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)

from src.core.database import Base
from .base import IdentifierMixin, SerializableMixin, TenantOwnedMixin, utcnow


class OrderStatus(str, Enum):
    """Order lifecycle labels."""
    NEW = "new"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


ORDER_STATUSES = tuple(status.value for status in OrderStatus)


class Order(Base, IdentifierMixin, TenantOwnedMixin, SerializableMixin):
    """
    A cash-on-delivery order placed on a tenant's storefront.

    Amounts are priced once at checkout and stored verbatim. Later catalog or
    shipping changes never reprice an existing order; ``status`` is the only
    column that changes after insert.
    """

    __tablename__ = "orders"

    product_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("products.id"),
        nullable=False,
        comment="Ordered product"
    )
    variant_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("product_variants.id", ondelete="SET NULL"),
        nullable=True,
        comment="Ordered variant, if any"
    )
    shipping_class_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("shipping_classes.id"),
        nullable=False,
        comment="Shipping option chosen at checkout"
    )

    customer_name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False, comment="E.164 phone number")
    address = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    subtotal = Column(Numeric(10, 2), nullable=False, comment="unit price x quantity")
    shipping_fee = Column(Numeric(10, 2), nullable=False, comment="Fee copied from the shipping class")
    total = Column(Numeric(10, 2), nullable=False, comment="subtotal + shipping_fee")

    status = Column(String(20), nullable=False, default=OrderStatus.NEW.value)
    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        comment="Order placement timestamp"
    )

    __table_args__ = (
        CheckConstraint("quantity > 0", name="valid_order_quantity"),
        CheckConstraint(
            "status IN ('new', 'confirmed', 'shipped', 'delivered', 'cancelled')",
            name="valid_order_status"
        ),
        Index("idx_orders_tenant_created", "tenant_id", "created_at"),
        Index("idx_orders_tenant_status", "tenant_id", "status"),
    )

    @property
    def order_number(self) -> str:
        """Short human-facing reference: last eight characters of the id."""
        return self.id.hex[-8:].upper()

    def to_dict(self):
        data = super().to_dict()
        data["order_number"] = self.order_number
        return data

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, status='{self.status}', total={self.total})>"
