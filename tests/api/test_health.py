"""Smoke tests for health and app wiring."""

from httpx import AsyncClient


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_readiness_without_document_store(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json()["document_store"] is False


async def test_services_unavailable_without_document_store(client: AsyncClient) -> None:
    """Routes needing Firestore answer 503 when it was not configured."""
    response = await client.get("/api/v1/places/ratings", params={"key": "a, b @ <1,2>"})
    assert response.status_code == 503
    assert response.json()["error"] == "SERVICE_UNAVAILABLE"


async def test_missing_token_is_401(client: AsyncClient) -> None:
    response = await client.get("/api/v1/users/me")
    assert response.status_code == 401
    assert response.json()["error"] == "AUTHENTICATION_ERROR"
