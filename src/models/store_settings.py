"""Per-tenant storefront settings."""

from sqlalchemy import Column, ForeignKey, String, Uuid

from src.core.database import Base
from .base import IdentifierMixin, SerializableMixin


TRACKING_FIELDS = ("fb_pixel_id", "gtm_id")


class StoreSettings(Base, IdentifierMixin, SerializableMixin):
    """One row per tenant: branding, contact and tracking ids."""

    __tablename__ = "store_settings"

    tenant_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tenants.id"),
        unique=True,
        nullable=False,
        comment="Owning tenant UUID"
    )
    fb_pixel_id = Column(String(100), nullable=True)
    gtm_id = Column(String(100), nullable=True)
    store_logo = Column(String(1024), nullable=True)
    primary_color = Column(String(20), nullable=True, default="#3b82f6")
    whatsapp_number = Column(String(32), nullable=True)
    contact_email = Column(String(255), nullable=True, comment="Receives new-order notifications")
