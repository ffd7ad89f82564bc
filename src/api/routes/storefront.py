"""Public storefront endpoints. No authentication; stores are addressed by slug."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import get_notifier
from src.api.routes.products import product_resource
from src.core.database import get_db_session
from src.models.store_settings import TRACKING_FIELDS
from src.schemas.base import resource
from src.schemas.order import CheckoutRequest, OrderResponse
from src.schemas.store import StorefrontProductResponse
from src.services.catalog_service import ShippingService
from src.services.notifications import NotificationDispatcher
from src.services.order_service import OrderService
from src.services.plan_service import PlanGovernor
from src.services.tenant_scope import StorefrontScope

logger = logging.getLogger(__name__)
router = APIRouter()

PUBLIC_SETTINGS_FIELDS = ("fb_pixel_id", "gtm_id", "store_logo", "primary_color", "whatsapp_number")


@router.get("/{store_slug}/product/{product_slug}", response_model=StorefrontProductResponse)
async def get_storefront_product(
    store_slug: str,
    product_slug: str,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Product page data: the active product with its variants, the store's
    shipping options (default first) and its public settings.
    """
    storefront = StorefrontScope(session)
    tenant = await storefront.resolve_tenant(store_slug)
    product = await storefront.get_product_by_slug(tenant, product_slug)
    shipping_classes = await ShippingService(session, tenant.id).list_shipping_classes()

    public_settings = {}
    if tenant.settings:
        public_settings = {field: getattr(tenant.settings, field) for field in PUBLIC_SETTINGS_FIELDS}
        if not PlanGovernor.can_use_tracking(tenant):
            for field in TRACKING_FIELDS:
                public_settings[field] = None

    return StorefrontProductResponse(
        data=product_resource(product),
        meta={
            "tenant": {"id": tenant.id, "name": tenant.name, "slug": tenant.slug},
            "shipping_classes": [resource("shipping_class", shipping_class) for shipping_class in shipping_classes],
            "settings": public_settings,
        },
    )


@router.post("/{store_slug}/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def place_order(
    store_slug: str,
    request: CheckoutRequest,
    session: AsyncSession = Depends(get_db_session),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    """
    Cash-on-delivery checkout.

    Prices are computed server-side from the product (or variant) and the
    chosen shipping class; the order starts as ``new``.
    """
    order = await OrderService(session, notifier=notifier).place_order(
        store_slug, request.data.attributes.model_dump()
    )
    return OrderResponse(data=resource("order", order))
