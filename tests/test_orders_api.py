"""Tests for the order ledger endpoints."""

import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from src.models import Order
from src.services import order_service


def status_update(status: str) -> dict:
    return {"data": {"type": "order", "attributes": {"status": status}}}


def bulk_update(order_ids, status: str) -> dict:
    return {
        "data": {
            "type": "order_status_batch",
            "attributes": {"order_ids": [str(order_id) for order_id in order_ids], "status": status},
        }
    }


@pytest.fixture
def strict_transitions(monkeypatch):
    monkeypatch.setattr(order_service.settings, "strict_order_transitions", True)


@pytest.mark.asyncio
async def test_list_orders_is_scoped_to_tenant(client: AsyncClient, factory, auth_headers):
    tenant, user = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    await factory.order(tenant, product, "100.00")
    await factory.order(tenant, product, "200.00", status="delivered")

    other, _ = await factory.tenant("karim-store")
    other_product = await factory.product(other)
    await factory.order(other, other_product, "999.00")

    response = await client.get("/api/orders", headers=auth_headers(user))

    assert response.status_code == 200
    body = response.json()
    assert body["meta"]["total"] == 2
    assert {item["attributes"]["total"] for item in body["data"]} == {"100.00", "200.00"}

    filtered = await client.get("/api/orders?status=delivered", headers=auth_headers(user))
    assert [item["attributes"]["total"] for item in filtered.json()["data"]] == ["200.00"]


@pytest.mark.asyncio
async def test_get_foreign_order_is_not_found(client: AsyncClient, factory, auth_headers):
    _, user = await factory.tenant("rahim-store")
    other, _ = await factory.tenant("karim-store")
    other_product = await factory.product(other)
    foreign_order = await factory.order(other, other_product, "999.00")

    response = await client.get(f"/api/orders/{foreign_order.id}", headers=auth_headers(user))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_status_follows_lifecycle(client: AsyncClient, factory, auth_headers):
    tenant, user = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    order = await factory.order(tenant, product, "100.00")

    for status in ("confirmed", "shipped", "delivered"):
        response = await client.patch(
            f"/api/orders/{order.id}/status", json=status_update(status), headers=auth_headers(user)
        )
        assert response.status_code == 200
        assert response.json()["data"]["attributes"]["status"] == status

    # Amounts never change after placement
    assert response.json()["data"]["attributes"]["total"] == "100.00"


@pytest.mark.asyncio
async def test_update_status_rejects_invalid_transition(client: AsyncClient, factory, auth_headers, strict_transitions):
    tenant, user = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    order = await factory.order(tenant, product, "100.00", status="delivered")

    response = await client.patch(
        f"/api/orders/{order.id}/status", json=status_update("new"), headers=auth_headers(user)
    )

    assert response.status_code == 409
    error = response.json()["errors"][0]
    assert error["code"] == "INVALID_STATUS_TRANSITION"
    assert error["meta"] == {"from": "delivered", "to": "new"}


@pytest.mark.asyncio
@pytest.mark.parametrize("current,target", [("delivered", "new"), ("new", "delivered"), ("cancelled", "confirmed")])
async def test_update_status_accepts_any_status_by_default(client: AsyncClient, factory, auth_headers, current, target):
    """Sellers may correct an order to any status unless the lifecycle is enforced."""
    tenant, user = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    order = await factory.order(tenant, product, "100.00", status=current)

    response = await client.patch(
        f"/api/orders/{order.id}/status", json=status_update(target), headers=auth_headers(user)
    )

    assert response.status_code == 200
    assert response.json()["data"]["attributes"]["status"] == target


@pytest.mark.asyncio
async def test_bulk_status_update_accepts_any_status_by_default(client: AsyncClient, factory, db_session, auth_headers):
    tenant, user = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    delivered = await factory.order(tenant, product, "100.00", status="delivered")
    cancelled = await factory.order(tenant, product, "100.00", status="cancelled")

    response = await client.patch(
        "/api/orders/bulk-status",
        json=bulk_update([delivered.id, cancelled.id], "new"),
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    result = await db_session.execute(select(Order.status))
    assert set(result.scalars().all()) == {"new"}


@pytest.mark.asyncio
async def test_update_status_to_same_value_is_accepted(client: AsyncClient, factory, auth_headers):
    tenant, user = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    order = await factory.order(tenant, product, "100.00", status="shipped")

    response = await client.patch(
        f"/api/orders/{order.id}/status", json=status_update("shipped"), headers=auth_headers(user)
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_update_status_rejects_unknown_status(client: AsyncClient, factory, auth_headers):
    tenant, user = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    order = await factory.order(tenant, product, "100.00")

    response = await client.patch(
        f"/api/orders/{order.id}/status", json=status_update("lost"), headers=auth_headers(user)
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["code"] == "INVALID_ORDER_STATUS"


@pytest.mark.asyncio
async def test_update_status_of_foreign_order_is_not_found(client: AsyncClient, factory, auth_headers):
    """Another store's order is reported exactly like a missing one and stays untouched."""
    _, user = await factory.tenant("rahim-store")
    other, _ = await factory.tenant("karim-store")
    other_product = await factory.product(other)
    foreign_order = await factory.order(other, other_product, "999.00")

    response = await client.patch(
        f"/api/orders/{foreign_order.id}/status", json=status_update("confirmed"), headers=auth_headers(user)
    )
    missing = await client.patch(
        f"/api/orders/{uuid.uuid4()}/status", json=status_update("confirmed"), headers=auth_headers(user)
    )

    assert response.status_code == 404
    assert response.json()["errors"][0]["detail"] == missing.json()["errors"][0]["detail"]
    assert foreign_order.status == "new"


@pytest.mark.asyncio
async def test_bulk_status_update(client: AsyncClient, factory, auth_headers):
    tenant, user = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    orders = [await factory.order(tenant, product, "100.00") for _ in range(3)]

    response = await client.patch(
        "/api/orders/bulk-status",
        json=bulk_update([order.id for order in orders], "confirmed"),
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    assert response.json()["meta"] == {"updated": 3, "status": "confirmed"}


@pytest.mark.asyncio
async def test_bulk_status_update_is_all_or_nothing(client: AsyncClient, factory, db_session, auth_headers):
    """One foreign id fails the whole batch and no order changes."""
    tenant, user = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    own_orders = [await factory.order(tenant, product, "100.00") for _ in range(2)]

    other, _ = await factory.tenant("karim-store")
    other_product = await factory.product(other)
    foreign_order = await factory.order(other, other_product, "999.00")

    response = await client.patch(
        "/api/orders/bulk-status",
        json=bulk_update([*(order.id for order in own_orders), foreign_order.id], "confirmed"),
        headers=auth_headers(user),
    )

    assert response.status_code == 404
    result = await db_session.execute(select(Order.status))
    assert set(result.scalars().all()) == {"new"}


@pytest.mark.asyncio
async def test_bulk_status_update_checks_every_transition(
    client: AsyncClient, factory, db_session, auth_headers, strict_transitions
):
    tenant, user = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    fresh = await factory.order(tenant, product, "100.00")
    cancelled = await factory.order(tenant, product, "100.00", status="cancelled")

    response = await client.patch(
        "/api/orders/bulk-status",
        json=bulk_update([fresh.id, cancelled.id], "confirmed"),
        headers=auth_headers(user),
    )

    assert response.status_code == 409
    result = await db_session.execute(select(Order.status).where(Order.id == fresh.id))
    assert result.scalar_one() == "new"


@pytest.mark.asyncio
async def test_bulk_status_update_requires_ids(client: AsyncClient, factory, auth_headers):
    _, user = await factory.tenant("rahim-store")

    response = await client.patch(
        "/api/orders/bulk-status", json=bulk_update([], "confirmed"), headers=auth_headers(user)
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_orders_require_authentication(client: AsyncClient):
    response = await client.get("/api/orders")

    assert response.status_code == 401
    assert response.json()["errors"][0]["code"] == "AUTHENTICATION_REQUIRED"


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(client: AsyncClient):
    response = await client.get("/api/orders", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401
