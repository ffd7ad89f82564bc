"""Shipping class model."""

from sqlalchemy import Boolean, CheckConstraint, Column, Numeric, String

from src.core.database import Base
from .base import IdentifierMixin, SerializableMixin, TenantOwnedMixin


class ShippingClass(Base, IdentifierMixin, TenantOwnedMixin, SerializableMixin):
    """Named delivery fee for a location. Several may be marked default."""

    __tablename__ = "shipping_classes"

    name = Column(String(255), nullable=False)
    fee = Column(Numeric(10, 2), nullable=False, comment="Flat delivery fee")
    location = Column(String(255), nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint("fee >= 0", name="valid_shipping_fee"),
    )
