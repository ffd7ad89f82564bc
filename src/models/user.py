"""User account model."""

from sqlalchemy import CheckConstraint, Column, ForeignKey, String, Uuid

from src.core.database import Base
from .base import IdentifierMixin, SerializableMixin, TimestampMixin


class User(Base, IdentifierMixin, TimestampMixin, SerializableMixin):
    """Login identity. Tenant users own exactly one store; admins own none."""

    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, comment="Login email")
    password_hash = Column(String(255), nullable=False, comment="bcrypt password hash")
    role = Column(String(20), nullable=False, default="tenant", comment="Role: tenant, admin")
    tenant_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tenants.id"),
        nullable=True,
        index=True,
        comment="Store owned by this user"
    )

    __table_args__ = (
        CheckConstraint("role IN ('tenant', 'admin')", name="valid_user_role"),
    )

    def to_dict(self):
        data = super().to_dict()
        data.pop("password_hash", None)
        return data
