"""
tests.test_operating_models_api

Operating models: create with components, listing filters, partial updates, soft-hidden
inactive models and delete.
"""

from __future__ import annotations

import uuid

import httpx
import pytest

BASE = "/api/operating-models"


async def _create(client: httpx.AsyncClient, headers: dict[str, str], **body) -> dict:
    r = await client.post(BASE, headers=headers, json=body)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.mark.asyncio
async def test_create_with_components(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    model = await _create(
        client,
        admin_headers,
        name="Copper operating model",
        suppliers=[{"name": "Explosives Co", "supplier_type": "MATERIAL_SUPPLIER"}],
        locations=[{"name": "Pit", "location_type": "PRODUCTION_FACILITY", "country": "AU"}],
        value_chains=[
            {"name": "Processing", "value_chain_type": "PRIMARY", "sequence": 2},
            {"name": "Mining", "value_chain_type": "PRIMARY", "sequence": 1},
        ],
        organisation=[{"name": "Operations", "org_type": "FUNCTIONAL", "employee_count": 120}],
        information=[{"name": "Fleet telemetry", "info_type": "OPERATIONAL"}],
        management_systems=[{"name": "SAP", "system_type": "ERP", "vendor": "SAP"}],
    )
    assert model["status"] == "DRAFT"
    assert model["edit_mode"] == "SINGLE_USER"
    assert model["auto_save"] is True
    assert model["last_saved"] is not None
    assert model["version"] == "1.0"
    assert model["created_by"]["email"].endswith("@capopt.io")
    assert [v["name"] for v in model["value_chains"]] == ["Mining", "Processing"]
    assert model["suppliers"][0]["criticality"] == "MEDIUM"
    assert model["locations"][0]["status"] == "ACTIVE"
    assert model["management_systems"][0]["vendor"] == "SAP"

    r = await client.get(f"{BASE}/{model['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["organisation"][0]["employee_count"] == 120


@pytest.mark.asyncio
async def test_create_validates_input(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    r = await client.post(BASE, headers=admin_headers, json={"description": "No name"})
    assert r.status_code == 400

    r = await client.post(
        BASE,
        headers=admin_headers,
        json={"name": "Orphan", "business_canvas_id": str(uuid.uuid4())},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Unknown reference for: business_canvas_id"

    r = await client.post(
        "/api/business-canvas", headers=admin_headers, json={"name": "Linked canvas"}
    )
    canvas_id = r.json()["id"]
    model = await _create(client, admin_headers, name="Linked", business_canvas_id=canvas_id)
    assert model["business_canvas_id"] == canvas_id


@pytest.mark.asyncio
async def test_list_hides_inactive_and_filters(
    client: httpx.AsyncClient, user_headers: dict[str, str]
) -> None:
    first = await _create(client, user_headers, name="First")
    second = await _create(client, user_headers, name="Second")

    r = await client.get(BASE, headers=user_headers)
    assert [m["name"] for m in r.json()] == ["Second", "First"]

    r = await client.patch(f"{BASE}/{first['id']}", headers=user_headers, json={"name": "First v2"})
    assert r.status_code == 200
    r = await client.get(BASE, headers=user_headers)
    assert [m["name"] for m in r.json()] == ["First v2", "Second"]

    r = await client.put(f"{BASE}/{second['id']}", headers=user_headers, json={"is_active": False})
    assert r.json()["is_active"] is False
    r = await client.get(BASE, headers=user_headers)
    assert [m["name"] for m in r.json()] == ["First v2"]
    assert (await client.get(f"{BASE}/{second['id']}", headers=user_headers)).status_code == 200

    r = await client.get(BASE, headers=user_headers, params={"enterprise_id": str(uuid.uuid4())})
    assert r.json() == []


@pytest.mark.asyncio
async def test_update_ignores_null_on_required_columns(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    model = await _create(client, admin_headers, name="Nulls", description="Kept for now")
    r = await client.put(
        f"{BASE}/{model['id']}",
        headers=admin_headers,
        json={"name": None, "status": None, "auto_save": None, "description": None},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["name"] == "Nulls"
    assert body["status"] == "DRAFT"
    assert body["auto_save"] is True
    assert body["description"] is None


@pytest.mark.asyncio
async def test_delete_and_missing(client: httpx.AsyncClient, admin_headers: dict[str, str]) -> None:
    model = await _create(
        client,
        admin_headers,
        name="Doomed",
        suppliers=[{"name": "Haulage", "supplier_type": "LOGISTICS_PROVIDER"}],
    )
    r = await client.delete(f"{BASE}/{model['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json() == {"message": "Operating model deleted successfully"}

    for method in ("GET", "PUT", "DELETE"):
        body = {} if method == "PUT" else None
        r = await client.request(
            method, f"{BASE}/{model['id']}", headers=admin_headers, json=body
        )
        assert r.status_code == 404, method
        assert r.json()["detail"] == "Operating model not found"

    assert (await client.get(BASE)).status_code == 401
