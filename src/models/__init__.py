"""Database models for the storefront ledger service."""

from .base import TimestampMixin, TenantOwnedMixin
from .plan import Plan
from .tenant import Tenant, TENANT_STATUSES
from .user import User
from .product import Product, ProductVariant, PRODUCT_STATUSES
from .shipping_class import ShippingClass
from .order import Order, OrderStatus, ORDER_STATUSES
from .store_settings import StoreSettings, TRACKING_FIELDS
from .domain_mapping import DomainMapping

__all__ = [
    "TimestampMixin",
    "TenantOwnedMixin",
    "Plan",
    "Tenant",
    "TENANT_STATUSES",
    "User",
    "Product",
    "ProductVariant",
    "PRODUCT_STATUSES",
    "ShippingClass",
    "Order",
    "OrderStatus",
    "ORDER_STATUSES",
    "StoreSettings",
    "TRACKING_FIELDS",
    "DomainMapping",
]
