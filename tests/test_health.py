"""Tests for health check endpoints."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test basic health check endpoint."""
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()

    assert data["status"] == "healthy"
    assert "timestamp" in data
    assert "version" in data
    assert data["environment"] == "test"
    assert data["dependencies"]["database"]["status"] == "healthy"
    assert data["dependencies"]["notifications"]["type"] == "mock"


@pytest.mark.asyncio
async def test_version_endpoint(client: AsyncClient):
    """Test version information endpoint."""
    response = await client.get("/version")

    assert response.status_code == 200
    data = response.json()

    assert data["service"] == "storefront-ledger-service"
    assert "version" in data
    assert "api_version" in data


@pytest.mark.asyncio
async def test_root_endpoint(client: AsyncClient):
    """Test root endpoint."""
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()

    assert data["service"] == "storefront-ledger-service"
    assert data["status"] == "running"


@pytest.mark.asyncio
async def test_responses_carry_request_id(client: AsyncClient):
    """Every response is stamped by the logging middleware."""
    response = await client.get("/version", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert "X-Process-Time" in response.headers
