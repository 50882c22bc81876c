"""
tests.test_smoke

Minimal smoke tests to validate the service can boot and serve core endpoints.

Responsibilities:
- Ensure the FastAPI app starts, creates its schema and seeds reference data in test mode.
"""

from __future__ import annotations

import httpx
import pytest


@pytest.mark.asyncio
async def test_health_endpoints(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r.json()["service"] == "capopt-platform"

    r = await client.get("/readyz")
    assert r.status_code == 200
    assert r.json() == {"status": "ready", "industries": 3}


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz", headers={"x-request-id": "req-123"})
    assert r.headers["x-request-id"] == "req-123"


@pytest.mark.asyncio
async def test_api_requires_authentication(client: httpx.AsyncClient) -> None:
    for path in (
        "/api/business-canvas",
        "/api/assets",
        "/api/controls",
        "/api/processes",
        "/api/operating-models",
        "/api/users",
    ):
        r = await client.get(path)
        assert r.status_code == 401, path


@pytest.mark.asyncio
async def test_reference_data_is_seeded(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/industries")
    assert r.status_code == 200
    codes = {i["code"] for i in r.json()["industries"]}
    assert "MINING_METALS" in codes
