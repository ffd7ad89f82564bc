"""Tests for storefront checkout."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from src.api.dependencies.common import get_notifier
from src.main import app
from src.models import Order
from src.services.notifications import NotificationDispatcher


class RecordingNotifier(NotificationDispatcher):
    """Collects summaries instead of delivering them."""

    def __init__(self, fail: bool = False):
        super().__init__(backend="mock")
        self.fail = fail
        self.sent = []

    async def _send_mock(self, summary):
        if self.fail:
            raise RuntimeError("mail relay unavailable")
        self.sent.append(summary)
        return True


@pytest.fixture
def notifier():
    recorder = RecordingNotifier()
    app.dependency_overrides[get_notifier] = lambda: recorder
    yield recorder
    app.dependency_overrides.pop(get_notifier, None)


@pytest.mark.asyncio
async def test_checkout_prices_order(client: AsyncClient, factory, checkout_data, notifier):
    """Subtotal, shipping and total are computed server-side."""
    tenant, _ = await factory.tenant("rahim-store")
    product = await factory.product(tenant, price="500.00")
    shipping_class = await factory.shipping_class(tenant, fee="60.00")

    response = await client.post(
        "/api/store/rahim-store/orders",
        json=checkout_data(product.id, shipping_class.id, quantity=2),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["type"] == "order"
    attributes = data["attributes"]
    assert attributes["subtotal"] == "1000.00"
    assert attributes["shipping_fee"] == "60.00"
    assert attributes["total"] == "1060.00"
    assert attributes["status"] == "new"
    assert attributes["quantity"] == 2
    assert attributes["phone"] == "+8801712345678"
    assert attributes["tenant_id"] == str(tenant.id)
    assert attributes["order_number"] == data["id"].replace("-", "")[-8:].upper()


@pytest.mark.asyncio
async def test_checkout_is_exact_for_fractional_prices(client: AsyncClient, factory, checkout_data, notifier):
    tenant, _ = await factory.tenant("rahim-store")
    product = await factory.product(tenant, price="33.33")
    shipping_class = await factory.shipping_class(tenant, fee="0.00")

    response = await client.post(
        "/api/store/rahim-store/orders",
        json=checkout_data(product.id, shipping_class.id, quantity=3),
    )

    assert response.status_code == 201
    assert response.json()["data"]["attributes"]["total"] == "99.99"


@pytest.mark.asyncio
async def test_checkout_uses_variant_price(client: AsyncClient, factory, checkout_data, notifier):
    tenant, _ = await factory.tenant("rahim-store")
    product = await factory.product(tenant, price="500.00")
    variant = await factory.variant(product, price="550.00")
    shipping_class = await factory.shipping_class(tenant, fee="60.00")

    response = await client.post(
        "/api/store/rahim-store/orders",
        json=checkout_data(product.id, shipping_class.id, variant_id=str(variant.id)),
    )

    assert response.status_code == 201
    attributes = response.json()["data"]["attributes"]
    assert attributes["variant_id"] == str(variant.id)
    assert attributes["subtotal"] == "550.00"
    assert attributes["total"] == "610.00"


@pytest.mark.asyncio
async def test_checkout_rejects_variant_of_another_product(client: AsyncClient, factory, checkout_data, notifier):
    tenant, _ = await factory.tenant("rahim-store")
    product = await factory.product(tenant, slug="t-shirt")
    other_product = await factory.product(tenant, slug="mug")
    variant = await factory.variant(other_product)
    shipping_class = await factory.shipping_class(tenant)

    response = await client.post(
        "/api/store/rahim-store/orders",
        json=checkout_data(product.id, shipping_class.id, variant_id=str(variant.id)),
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["code"] == "INVALID_VARIANT"


@pytest.mark.asyncio
async def test_checkout_rejects_foreign_shipping_class(client: AsyncClient, factory, checkout_data, notifier):
    """A shipping class id that belongs to another store is refused."""
    tenant, _ = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    other, _ = await factory.tenant("karim-store")
    foreign_shipping = await factory.shipping_class(other, fee="1.00")

    response = await client.post(
        "/api/store/rahim-store/orders",
        json=checkout_data(product.id, foreign_shipping.id),
    )

    assert response.status_code == 400
    error = response.json()["errors"][0]
    assert error["code"] == "INVALID_SHIPPING_OPTION"
    assert error["detail"] == "Invalid shipping option"


@pytest.mark.asyncio
async def test_checkout_rejects_foreign_product(client: AsyncClient, factory, checkout_data, notifier):
    tenant, _ = await factory.tenant("rahim-store")
    shipping_class = await factory.shipping_class(tenant)
    other, _ = await factory.tenant("karim-store")
    foreign_product = await factory.product(other)

    response = await client.post(
        "/api/store/rahim-store/orders",
        json=checkout_data(foreign_product.id, shipping_class.id),
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_checkout_hides_suspended_store(client: AsyncClient, factory, checkout_data, notifier):
    tenant, _ = await factory.tenant("rahim-store", status="suspended")
    product = await factory.product(tenant)
    shipping_class = await factory.shipping_class(tenant)

    response = await client.post(
        "/api/store/rahim-store/orders",
        json=checkout_data(product.id, shipping_class.id),
    )

    assert response.status_code == 404
    assert response.json()["errors"][0]["detail"] == "Store not found"


@pytest.mark.asyncio
async def test_checkout_hides_draft_product(client: AsyncClient, factory, checkout_data, notifier):
    tenant, _ = await factory.tenant("rahim-store")
    product = await factory.product(tenant, status="draft")
    shipping_class = await factory.shipping_class(tenant)

    response = await client.post(
        "/api/store/rahim-store/orders",
        json=checkout_data(product.id, shipping_class.id),
    )

    assert response.status_code == 404
    assert response.json()["errors"][0]["detail"] == "Product not found"


@pytest.mark.asyncio
async def test_checkout_unknown_store(client: AsyncClient, factory, checkout_data, notifier):
    tenant, _ = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    shipping_class = await factory.shipping_class(tenant)

    response = await client.post(
        "/api/store/no-such-store/orders",
        json=checkout_data(product.id, shipping_class.id),
    )

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides,code", [
    ({"phone": "12345"}, "INVALID_PHONE"),
    ({"customer_name": "A"}, "NAME_TOO_SHORT"),
    ({"address": "Dhaka"}, "ADDRESS_TOO_SHORT"),
    ({"quantity": 0}, "INVALID_QUANTITY"),
    ({"quantity": 10**20}, "INVALID_QUANTITY"),
])
async def test_checkout_field_errors(client: AsyncClient, factory, checkout_data, notifier, overrides, code):
    tenant, _ = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    shipping_class = await factory.shipping_class(tenant)

    response = await client.post(
        "/api/store/rahim-store/orders",
        json=checkout_data(product.id, shipping_class.id, **overrides),
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["code"] == code


@pytest.mark.asyncio
async def test_checkout_rejects_total_too_large_to_store(
    client: AsyncClient, factory, checkout_data, notifier, db_session
):
    tenant, _ = await factory.tenant("rahim-store")
    product = await factory.product(tenant, price="99999999.00")
    shipping_class = await factory.shipping_class(tenant, fee="60.00")

    response = await client.post(
        "/api/store/rahim-store/orders",
        json=checkout_data(product.id, shipping_class.id, quantity=2),
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["code"] == "ORDER_TOTAL_TOO_LARGE"
    assert (await db_session.execute(select(func.count()).select_from(Order))).scalar_one() == 0
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_checkout_notifies_seller(client: AsyncClient, factory, checkout_data, notifier):
    tenant, _ = await factory.tenant("rahim-store", contact_email="seller@rahim-store.example.com")
    product = await factory.product(tenant, price="500.00")
    shipping_class = await factory.shipping_class(tenant, fee="60.00")

    response = await client.post(
        "/api/store/rahim-store/orders",
        json=checkout_data(product.id, shipping_class.id),
    )
    await notifier.drain()

    assert response.status_code == 201
    assert len(notifier.sent) == 1
    summary = notifier.sent[0]
    assert summary.tenant_email == "seller@rahim-store.example.com"
    assert summary.total == "560.00"
    assert summary.order_number == response.json()["data"]["attributes"]["order_number"]


@pytest.mark.asyncio
async def test_checkout_without_contact_email_skips_notification(client: AsyncClient, factory, checkout_data, notifier):
    tenant, _ = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    shipping_class = await factory.shipping_class(tenant)

    response = await client.post(
        "/api/store/rahim-store/orders",
        json=checkout_data(product.id, shipping_class.id),
    )
    await notifier.drain()

    assert response.status_code == 201
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_notification_failure_does_not_affect_order(client: AsyncClient, factory, checkout_data, notifier):
    notifier.fail = True
    tenant, _ = await factory.tenant("rahim-store", contact_email="seller@rahim-store.example.com")
    product = await factory.product(tenant)
    shipping_class = await factory.shipping_class(tenant)

    response = await client.post(
        "/api/store/rahim-store/orders",
        json=checkout_data(product.id, shipping_class.id),
    )
    await notifier.drain()

    assert response.status_code == 201
    assert response.json()["data"]["attributes"]["status"] == "new"


@pytest.mark.asyncio
async def test_storefront_product_page(client: AsyncClient, factory):
    tenant, _ = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    await factory.variant(product)
    await factory.shipping_class(tenant)

    response = await client.get("/api/store/rahim-store/product/t-shirt")

    assert response.status_code == 200
    body = response.json()
    assert body["data"]["id"] == str(product.id)
    assert body["data"]["attributes"]["price"] == "500.00"
    assert len(body["data"]["attributes"]["variants"]) == 1
    assert body["meta"]["tenant"]["slug"] == "rahim-store"
    assert body["meta"]["shipping_classes"][0]["attributes"]["fee"] == "60.00"
