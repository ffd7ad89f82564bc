"""Pydantic schemas for request/response validation."""

from .base import *
from .auth import *
from .catalog import *
from .order import *
from .store import *
from .analytics import *
from .admin import *

__all__ = [
    # Base schemas
    "BaseSchema",
    "MoneyAmount",
    "JSONAPIResponse",
    "JSONAPICollectionResponse",
    "JSONAPIError",
    "JSONAPIErrorResponse",
    "HealthCheckResponse",
    "resource",

    # Auth schemas
    "RegisterRequest",
    "LoginRequest",
    "SessionResponse",
    "UserResponse",
    "SlugAvailabilityResponse",

    # Catalog schemas
    "ProductResource",
    "ProductWriteRequest",
    "ProductResponse",
    "ProductCollectionResponse",
    "ProductVariantResource",
    "ProductVariantWriteRequest",
    "ProductVariantResponse",
    "ProductVariantCollectionResponse",
    "ShippingClassResource",
    "ShippingClassWriteRequest",
    "ShippingClassResponse",
    "ShippingClassCollectionResponse",

    # Order schemas
    "OrderResource",
    "OrderResponse",
    "OrderCollectionResponse",
    "CheckoutRequest",
    "OrderStatusUpdateRequest",
    "BulkOrderStatusUpdateRequest",
    "BulkOrderStatusUpdateResponse",

    # Store schemas
    "StoreSettingsUpdateRequest",
    "StoreSettingsResponse",
    "DomainCreateRequest",
    "DomainResponse",
    "DomainCollectionResponse",
    "StorefrontProductResponse",

    # Analytics schemas
    "AnalyticsResponse",
    "DashboardStatsResponse",

    # Admin schemas
    "PlanWriteRequest",
    "PlanResponse",
    "PlanCollectionResponse",
    "TenantResponse",
    "TenantCollectionResponse",
    "TenantStatusUpdateRequest",
    "TenantPlanUpdateRequest",
    "PlatformStatsResponse",
]
