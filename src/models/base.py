"""Base model classes and mixins."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declared_attr

# JSONB on PostgreSQL, plain JSON elsewhere (tests run on SQLite)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> uuid.UUID:
    """Random, non-sequential identifier for every entity."""
    return uuid.uuid4()


class TimestampMixin:
    """Mixin for adding created_at and updated_at timestamps."""

    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        comment="Record creation timestamp"
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
        comment="Record last update timestamp"
    )


class IdentifierMixin:
    """Opaque UUID primary key."""

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=new_id,
        comment="Primary key UUID"
    )


class TenantOwnedMixin:
    """
    Every catalog, shipping, settings and order row belongs to exactly one tenant.

    The tenant id is set at creation and never reassigned; lookups compare it
    against the caller's tenant before the row is used.
    """

    @declared_attr
    def tenant_id(cls):
        return Column(
            Uuid(as_uuid=True),
            ForeignKey("tenants.id"),
            nullable=False,
            index=True,
            comment="Owning tenant UUID"
        )

    def is_owned_by(self, tenant_id: uuid.UUID) -> bool:
        return self.tenant_id is not None and str(self.tenant_id) == str(tenant_id)


def serialize_value(value: Any) -> Any:
    """JSON-friendly rendering of column values."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    return value


class SerializableMixin:
    """Column-to-dict conversion used by the API layer."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert model instance to dictionary."""
        return {
            column.name: serialize_value(getattr(self, column.name))
            for column in self.__table__.columns
        }

    def update_from_dict(self, data: Dict[str, Any]) -> None:
        """Update model instance from dictionary."""
        for key, value in data.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"
