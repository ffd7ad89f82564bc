"""Tenant model for multi-tenant isolation."""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import relationship

from src.core.database import Base
from .base import IdentifierMixin, SerializableMixin, TimestampMixin


TENANT_STATUSES = ("active", "suspended", "pending")


class Tenant(Base, IdentifierMixin, TimestampMixin, SerializableMixin):
    """
    Tenant model representing an independent seller and its storefront.
    All products, orders, shipping classes and settings belong to a tenant.
    """

    __tablename__ = "tenants"

    name = Column(
        String(255),
        nullable=False,
        comment="Store display name"
    )
    slug = Column(
        String(100),
        unique=True,
        nullable=False,
        comment="Unique storefront URL slug"
    )
    plan_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("plans.id"),
        nullable=True,
        comment="Current subscription plan"
    )
    status = Column(
        String(20),
        default="active",
        nullable=False,
        comment="Tenant status: active, suspended, pending"
    )

    plan = relationship("Plan", lazy="selectin")
    settings = relationship("StoreSettings", uselist=False, lazy="selectin", viewonly=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'suspended', 'pending')",
            name="valid_tenant_status"
        ),
        Index("idx_tenants_status", "status"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name='{self.name}', slug='{self.slug}')>"
