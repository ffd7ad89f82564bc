"""Registration, login and identity schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from .base import BaseSchema, JSONAPIResponse


class RegisterAttributes(BaseSchema):
    """Fields for opening a new store. Rules are applied by the tenant service."""

    email: str = Field(description="Owner login email")
    password: str = Field(description="At least 8 characters")
    store_name: str = Field(description="Store display name")
    store_slug: str = Field(description="Storefront URL slug")


class RegisterData(BaseSchema):
    type: str = Field("registration", description="Resource type")
    attributes: RegisterAttributes


class RegisterRequest(BaseSchema):
    """Request schema for registration."""

    data: RegisterData


class LoginAttributes(BaseSchema):
    email: str = Field(description="Login email")
    password: str = Field(min_length=1, description="Password")


class LoginData(BaseSchema):
    type: str = Field("session", description="Resource type")
    attributes: LoginAttributes


class LoginRequest(BaseSchema):
    """Request schema for login."""

    data: LoginData


class UserAttributes(BaseSchema):
    email: str
    role: str
    tenant_id: Optional[UUID] = None
    created_at: Optional[datetime] = None


class UserResource(BaseSchema):
    type: str = Field("user", description="Resource type")
    id: UUID
    attributes: UserAttributes


class SessionMeta(BaseSchema):
    access_token: str = Field(description="Bearer token")
    token_type: str = Field("bearer")
    tenant_slug: Optional[str] = None


class SessionResponse(JSONAPIResponse):
    """Authenticated user plus a freshly issued token."""

    data: UserResource
    meta: SessionMeta


class UserResponse(JSONAPIResponse):
    data: UserResource
    meta: Optional[dict] = None


class SlugAvailabilityResponse(BaseSchema):
    slug: str
    available: bool
