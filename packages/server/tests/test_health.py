"""
Health check endpoint tests.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Health endpoint should return status ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_ready_check(client: AsyncClient):
    """Ready endpoint should return status ready."""
    response = await client.get("/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready"}


@pytest.mark.asyncio
async def test_api_root(client: AsyncClient):
    """API v1 root should return version and endpoint list."""
    response = await client.get("/api/v1/")
    assert response.status_code == 200
    data = response.json()
    assert data["api"] == "v1"
    assert "/subscriptions/subscribed" in data["endpoints"]


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client: AsyncClient):
    response = await client.get("/api/v1/nope")
    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["statusCode"] == 404


@pytest.mark.asyncio
async def test_cors_preflight_allows_only_routed_methods(client: AsyncClient):
    origin = "http://localhost:5173"
    allowed = await client.options(
        "/api/v1/subscriptions/subscribed",
        headers={"Origin": origin, "Access-Control-Request-Method": "POST"},
    )
    assert allowed.status_code == 200
    rejected = await client.options(
        "/api/v1/subscriptions/subscribed",
        headers={"Origin": origin, "Access-Control-Request-Method": "DELETE"},
    )
    assert rejected.status_code == 400
