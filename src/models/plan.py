"""Subscription plan model."""

from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Column, Integer, Numeric, String

from src.core.database import Base
from .base import IdentifierMixin, SerializableMixin, TimestampMixin


class Plan(Base, IdentifierMixin, TimestampMixin, SerializableMixin):
    """
    A named bundle of limits and feature flags applied to tenants.

    ``code`` is only set on system-managed plans (the bootstrap free tier); the
    unique constraint on it keeps the "ensure default plan" step idempotent even
    when two registrations race.
    """

    __tablename__ = "plans"

    code = Column(
        String(50),
        unique=True,
        nullable=True,
        comment="Stable code for system-managed plans"
    )
    name = Column(
        String(100),
        nullable=False,
        comment="Display name"
    )
    product_limit = Column(
        Integer,
        nullable=False,
        default=5,
        comment="Maximum number of products a tenant may own"
    )
    allow_custom_domain = Column(
        Boolean,
        nullable=False,
        default=False,
        comment="Whether custom domains may be registered"
    )
    allow_tracking = Column(
        Boolean,
        nullable=False,
        default=True,
        comment="Whether tracking pixel/tag ids are honored"
    )
    price = Column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
        comment="Monthly price"
    )
    is_active = Column(
        Boolean,
        nullable=False,
        default=True,
        comment="Inactive plans are not offered at registration"
    )

    __table_args__ = (
        CheckConstraint("product_limit >= 0", name="valid_plan_product_limit"),
        CheckConstraint("price >= 0", name="valid_plan_price"),
    )

    def __repr__(self) -> str:
        return f"<Plan(id={self.id}, name='{self.name}', product_limit={self.product_limit})>"
