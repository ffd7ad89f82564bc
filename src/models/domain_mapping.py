"""Custom domain mapping model."""

from sqlalchemy import Boolean, Column, String

from src.core.database import Base
from .base import IdentifierMixin, SerializableMixin, TenantOwnedMixin, TimestampMixin


class DomainMapping(Base, IdentifierMixin, TenantOwnedMixin, TimestampMixin, SerializableMixin):
    """Custom hostname pointing at a tenant's storefront. Stored lower-cased."""

    __tablename__ = "domain_mappings"

    domain = Column(String(253), unique=True, nullable=False)
    verified = Column(Boolean, nullable=False, default=False)
