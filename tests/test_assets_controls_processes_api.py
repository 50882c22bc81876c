"""
tests.test_assets_controls_processes_api

Critical controls, assets and processes, including control links and `include=` shaping.
"""

from __future__ import annotations

import httpx
import pytest


async def _lookups(client: httpx.AsyncClient, headers: dict[str, str]) -> dict:
    r = await client.get("/api/controls/lookups", headers=headers)
    assert r.status_code == 200
    return r.json()


@pytest.mark.asyncio
async def test_asset_lifecycle(client: httpx.AsyncClient, admin_headers: dict[str, str]) -> None:
    r = await client.post(
        "/api/assets",
        headers=admin_headers,
        json={
            "name": "Primary crusher",
            "type": "EQUIPMENT",
            "criticality": "HIGH",
            "risks": [{"name": "Liner wear", "severity": "MEDIUM", "likelihood": "HIGH"}],
            "monitors": [{"name": "Vibration", "frequency": "HOURLY"}],
        },
    )
    assert r.status_code == 201
    asset = r.json()
    assert asset["status"] == "OPERATIONAL"
    assert asset["created_by"]["email"].endswith("@capopt.io")
    assert asset["risks"][0]["likelihood"] == "HIGH"
    assert asset["monitors"][0]["status"] == "ACTIVE"
    assert "controls" not in asset

    await client.post(
        "/api/assets", headers=admin_headers, json={"name": "Office", "type": "FACILITY"}
    )
    r = await client.get("/api/assets", headers=admin_headers, params={"criticality": "HIGH"})
    assert [a["name"] for a in r.json()] == ["Primary crusher"]

    r = await client.put(
        f"/api/assets/{asset['id']}", headers=admin_headers, json={"status": "MAINTENANCE"}
    )
    assert r.status_code == 200
    assert r.json()["status"] == "MAINTENANCE"
    assert r.json()["name"] == "Primary crusher"

    r = await client.delete(f"/api/assets/{asset['id']}", headers=admin_headers)
    assert r.status_code == 200
    r = await client.get(f"/api/assets/{asset['id']}", headers=admin_headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_control_create_filter_and_lookups(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    lookups = await _lookups(client, admin_headers)
    safety = next(c for c in lookups["risk_categories"] if c["name"] == "Safety")
    preventive = next(t for t in lookups["control_types"] if t["name"] == "Preventive")

    r = await client.post(
        "/api/controls",
        headers=admin_headers,
        json={
            "name": "Ground support inspection",
            "risk_category_id": safety["id"],
            "control_type_id": preventive["id"],
            "priority": "CRITICAL",
        },
    )
    assert r.status_code == 201
    control = r.json()
    assert control["risk_category"]["name"] == "Safety"
    assert control["compliance_status"] == "UNDER_REVIEW"

    await client.post("/api/controls", headers=admin_headers, json={"name": "Unclassified"})

    r = await client.get("/api/controls", headers=admin_headers, params={"risk_category": "safe"})
    assert [c["name"] for c in r.json()] == ["Ground support inspection"]
    r = await client.get("/api/controls", headers=admin_headers, params={"priority": "MEDIUM"})
    assert [c["name"] for c in r.json()] == ["Unclassified"]

    r = await client.post(
        "/api/controls",
        headers=admin_headers,
        json={"name": "Dangling", "risk_category_id": "00000000-0000-0000-0000-000000000000"},
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_control_links_and_cleanup(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    control = (
        await client.post("/api/controls", headers=admin_headers, json={"name": "Isolation"})
    ).json()
    asset = (
        await client.post(
            "/api/assets", headers=admin_headers, json={"name": "Conveyor", "type": "EQUIPMENT"}
        )
    ).json()
    process = (
        await client.post(
            "/api/processes",
            headers=admin_headers,
            json={"name": "Shutdown", "steps": [{"name": "Isolate", "order_index": 1}]},
        )
    ).json()

    base = f"/api/controls/{control['id']}"
    r = await client.post(f"{base}/assets/{asset['id']}", headers=admin_headers)
    assert r.status_code == 201
    assert r.json()["created"] is True
    r = await client.post(f"{base}/assets/{asset['id']}", headers=admin_headers)
    assert r.json()["created"] is False
    r = await client.post(f"{base}/processes/{process['id']}", headers=admin_headers)
    assert r.status_code == 201

    r = await client.get(base, headers=admin_headers, params={"include": "assets,processes"})
    body = r.json()
    assert [a["name"] for a in body["assets"]] == ["Conveyor"]
    assert [p["name"] for p in body["processes"]] == ["Shutdown"]

    r = await client.get(
        f"/api/assets/{asset['id']}", headers=admin_headers, params={"include": "controls"}
    )
    assert [c["name"] for c in r.json()["controls"]] == ["Isolation"]

    r = await client.delete(f"{base}/processes/{process['id']}", headers=admin_headers)
    assert r.status_code == 200
    r = await client.delete(f"{base}/processes/{process['id']}", headers=admin_headers)
    assert r.status_code == 404

    # Deleting the control removes its remaining links.
    r = await client.delete(base, headers=admin_headers)
    assert r.status_code == 200
    r = await client.get(
        f"/api/assets/{asset['id']}", headers=admin_headers, params={"include": "controls"}
    )
    assert r.json()["controls"] == []


@pytest.mark.asyncio
async def test_process_lifecycle(client: httpx.AsyncClient, admin_headers: dict[str, str]) -> None:
    r = await client.post(
        "/api/processes",
        headers=admin_headers,
        json={
            "name": "Ore processing",
            "priority": "HIGH",
            "steps": [
                {"name": "Flotation", "order_index": 2},
                {"name": "Crushing", "order_index": 1},
            ],
            "metrics": [{"name": "Recovery", "value": 88.5, "unit": "%"}],
            "risks": [{"name": "Tailings", "severity": "CRITICAL"}],
        },
    )
    assert r.status_code == 201
    process = r.json()
    assert process["status"] == "DRAFT"
    assert [s["name"] for s in process["steps"]] == ["Crushing", "Flotation"]
    assert process["metrics"][0]["value"] == 88.5

    r = await client.get("/api/processes", headers=admin_headers, params={"status": "ACTIVE"})
    assert r.json() == []

    r = await client.put(
        f"/api/processes/{process['id']}", headers=admin_headers, json={"status": "ACTIVE"}
    )
    assert r.json()["status"] == "ACTIVE"

    r = await client.delete(f"/api/processes/{process['id']}", headers=admin_headers)
    assert r.status_code == 200
    r = await client.get("/api/processes", headers=admin_headers)
    assert r.json() == []


@pytest.mark.asyncio
async def test_null_on_required_columns_leaves_them_unchanged(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    r = await client.post(
        "/api/controls",
        headers=admin_headers,
        json={"name": "Isolation lockout", "description": "LOTO", "priority": "HIGH"},
    )
    control = r.json()

    r = await client.put(
        f"/api/controls/{control['id']}",
        headers=admin_headers,
        json={"priority": None, "compliance_status": None, "description": None},
    )
    assert r.status_code == 200
    assert r.json()["priority"] == "HIGH"
    assert r.json()["compliance_status"] == "UNDER_REVIEW"
    assert r.json()["description"] is None

    r = await client.post(
        "/api/assets", headers=admin_headers, json={"name": "Conveyor", "type": "EQUIPMENT"}
    )
    r = await client.put(
        f"/api/assets/{r.json()['id']}", headers=admin_headers, json={"status": None}
    )
    assert r.status_code == 200
    assert r.json()["status"] == "OPERATIONAL"

    r = await client.post("/api/processes", headers=admin_headers, json={"name": "Blasting"})
    r = await client.put(
        f"/api/processes/{r.json()['id']}", headers=admin_headers, json={"version": None}
    )
    assert r.status_code == 200
    assert r.json()["version"] == "1.0"
