"""Product and product variant models."""

from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from src.core.database import Base
from .base import IdentifierMixin, JSONType, SerializableMixin, TenantOwnedMixin, TimestampMixin


PRODUCT_STATUSES = ("active", "draft", "archived")


class Product(Base, IdentifierMixin, TenantOwnedMixin, TimestampMixin, SerializableMixin):
    """Catalog item sold by a single tenant."""

    __tablename__ = "products"

    name = Column(String(255), nullable=False, comment="Display name")
    slug = Column(String(255), nullable=False, comment="Tenant-unique URL slug")
    price = Column(Numeric(10, 2), nullable=False, comment="Unit price")
    description = Column(Text, nullable=True)
    images = Column(JSONType, nullable=False, default=list, comment="Ordered image references")
    status = Column(String(20), nullable=False, default="draft", comment="active, draft, archived")
    has_variants = Column(Boolean, nullable=False, default=False)

    variants = relationship(
        "ProductVariant",
        back_populates="product",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=lambda: [ProductVariant.is_default.desc(), ProductVariant.created_at.desc()],
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "slug", name="uq_products_tenant_slug"),
        CheckConstraint("status IN ('active', 'draft', 'archived')", name="valid_product_status"),
        CheckConstraint("price >= 0", name="valid_product_price"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def to_dict(self):
        data = super().to_dict()
        data["variants"] = [variant.to_dict() for variant in self.variants]
        return data


class ProductVariant(Base, IdentifierMixin, TimestampMixin, SerializableMixin):
    """Priced option of a product (size, colour, ...)."""

    __tablename__ = "product_variants"

    product_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False, comment="e.g. 'Small - Red'")
    sku = Column(String(100), nullable=True)
    price = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"), comment="Price override")
    stock = Column(Integer, nullable=False, default=0)
    attributes = Column(JSONType, nullable=False, default=dict, comment="Free-form attribute map")
    is_default = Column(Boolean, nullable=False, default=False)

    product = relationship("Product", back_populates="variants")

    __table_args__ = (
        CheckConstraint("price >= 0", name="valid_variant_price"),
    )
