"""Tests for GET /api/health."""
import pytest
from httpx import AsyncClient

from tests.conftest import StubCompletionClient


@pytest.mark.asyncio
async def test_health_returns_200(client: AsyncClient):
    resp = await client.get("/api/health/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["database"] == "ok"
    assert data["completion_api"] == "ok"
    assert data["version"] == "1.0.0"


@pytest.mark.asyncio
async def test_health_degraded_without_api_key(client: AsyncClient, completion_stub: StubCompletionClient):
    completion_stub.is_configured = False
    resp = await client.get("/api/health/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "degraded"
    assert data["completion_api"] == "unconfigured"


@pytest.mark.asyncio
async def test_root_endpoint(client: AsyncClient):
    resp = await client.get("/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "SOW Generator API"


@pytest.mark.asyncio
async def test_process_time_header(client: AsyncClient):
    resp = await client.get("/api/accounts")
    assert resp.headers["x-process-time"].endswith("ms")
