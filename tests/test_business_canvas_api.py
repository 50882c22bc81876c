"""
tests.test_business_canvas_api

Business canvas endpoints: CRUD, status workflow with cascades, export, sharing, templates.
"""

from __future__ import annotations

from typing import Any

import httpx
import pytest

BASE = "/api/business-canvas"

REVIEW_READY: dict[str, Any] = {
    "name": "Copper Operations",
    "description": "Open pit copper mine and concentrator",
    "industry": "MINING_METALS",
    "sector": "COPPER",
    "business_type": "CORPORATION",
    "value_propositions": [
        {"description": "Reliable concentrate supply"},
        {"description": "Low-carbon copper"},
        {"description": "Traceable provenance"},
    ],
    "customer_segments": [
        {"name": "Smelters", "description": "Asian smelters"},
        {"name": "Traders", "description": "Metal traders"},
    ],
    "revenue_streams": [
        {"type": "Concentrate sales", "description": "Spot and term"},
        {"type": "By-products", "description": "Gold and silver credits"},
    ],
    "partnerships": [
        {"name": "Rail operator", "description": "Haulage to port"},
        {"name": "Port authority", "description": "Ship loading"},
    ],
    "resources": [
        {"name": "Ore body", "type": "PHYSICAL", "description": "Reserves"},
        {"name": "Workforce", "type": "HUMAN", "description": "Operators"},
        {"name": "Mine plan", "type": "INTELLECTUAL", "description": "Life of mine"},
    ],
    "activities": [
        {"name": "Mining", "description": "Drill and blast"},
        {"name": "Processing", "description": "Flotation"},
        {"name": "Logistics", "description": "Rail and ship"},
    ],
    "cost_structures": [
        {"description": "Energy", "category": "OPERATING"},
        {"description": "Labour", "category": "OPERATING"},
    ],
    "channels": [
        {"type": "Direct sales", "description": "Offtake contracts"},
        {"type": "Brokers", "description": "Spot market"},
    ],
}


async def _create(client: httpx.AsyncClient, headers: dict[str, str], **body: Any) -> dict:
    r = await client.post(BASE, headers=headers, json=body)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.mark.asyncio
async def test_create_and_get_canvas_with_sections(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    created = await _create(client, admin_headers, **REVIEW_READY)
    assert created["status"] == "DRAFT"
    assert len(created["value_propositions"]) == 3
    assert created["value_propositions"][0]["priority"] == "MEDIUM"

    r = await client.get(f"{BASE}/{created['id']}", headers=admin_headers)
    assert r.status_code == 200
    detail = r.json()
    assert detail["name"] == "Copper Operations"
    assert len(detail["resources"]) == 3
    assert detail["enterprise"] is None


@pytest.mark.asyncio
async def test_create_rejects_invalid_section_items(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    r = await client.post(
        BASE,
        headers=admin_headers,
        json={"name": "Bad", "resources": [{"name": "Cash", "type": "NOT_A_TYPE"}]},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Validation failed"


@pytest.mark.asyncio
async def test_list_filters_include_and_no_cache(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    await _create(client, admin_headers, name="Beta", value_propositions=[{"description": "x"}])
    await _create(client, admin_headers, name="Alpha", is_active=False)
    await _create(client, admin_headers, name="Gamma")

    r = await client.get(BASE, headers=admin_headers)
    assert r.status_code == 200
    assert r.headers["cache-control"] == "no-cache, no-store, must-revalidate"
    assert [c["name"] for c in r.json()] == ["Beta", "Gamma", "Alpha"]
    assert "value_propositions" not in r.json()[0]

    r = await client.get(
        BASE, headers=admin_headers, params={"is_active": "true", "include": "valuePropositions"}
    )
    names = [c["name"] for c in r.json()]
    assert names == ["Beta", "Gamma"]
    assert len(r.json()[0]["value_propositions"]) == 1
    assert "channels" not in r.json()[0]


@pytest.mark.asyncio
async def test_update_normalizes_sectors(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    canvas = await _create(client, admin_headers, name="Sectors")
    r = await client.put(
        f"{BASE}/{canvas['id']}",
        headers=admin_headers,
        json={
            "sectors": [
                {"sector_code": "COAL", "is_primary": False},
                {"sector_code": "COPPER", "is_primary": True},
            ],
            "description": "Updated",
        },
    )
    assert r.status_code == 200
    body = r.json()
    assert body["sectors"] == ["COAL", "COPPER"]
    assert body["primary_sector"] == "COPPER"
    assert body["description"] == "Updated"
    assert body["name"] == "Sectors"
    assert body["last_saved"] is not None

    r = await client.put(f"{BASE}/{canvas['id']}", headers=admin_headers, json={"sectors": ["URANIUM"]})
    assert r.json()["sectors"] == ["URANIUM"]
    assert r.json()["primary_sector"] == "URANIUM"


@pytest.mark.asyncio
async def test_update_ignores_null_on_required_columns(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    canvas = await _create(client, admin_headers, name="Nulls", description="Kept")
    r = await client.put(
        f"{BASE}/{canvas['id']}",
        headers=admin_headers,
        json={"is_active": None, "version": None, "auto_save": None, "description": None},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["is_active"] is True
    assert body["version"] == "1.0"
    assert body["auto_save"] is True
    assert body["description"] is None

    r = await client.put(f"{BASE}/{canvas['id']}", headers=admin_headers, json={"name": None})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_parent_canvas_checks(client: httpx.AsyncClient, admin_headers: dict[str, str]) -> None:
    parent = await _create(client, admin_headers, name="Parent")
    child = await _create(client, admin_headers, name="Child", parent_canvas_id=parent["id"])

    r = await client.put(
        f"{BASE}/{parent['id']}", headers=admin_headers, json={"parent_canvas_id": parent["id"]}
    )
    assert r.status_code == 400

    r = await client.put(
        f"{BASE}/{parent['id']}", headers=admin_headers, json={"parent_canvas_id": child["id"]}
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_missing_canvas_is_404(client: httpx.AsyncClient, admin_headers: dict[str, str]) -> None:
    missing = "00000000-0000-0000-0000-000000000000"
    r = await client.get(f"{BASE}/{missing}", headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["detail"] == "Business canvas not found"
    r = await client.patch(f"{BASE}/{missing}", headers=admin_headers, json={"status": "REVIEW"})
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_status_change_rejected_with_validation_body(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    canvas = await _create(client, admin_headers, name="Thin")
    r = await client.patch(f"{BASE}/{canvas['id']}", headers=admin_headers, json={"status": "REVIEW"})
    assert r.status_code == 400
    body = r.json()
    assert body["detail"] == "Status change not allowed"
    assert body["validation"]["is_valid"] is False
    assert "Description" in body["validation"]["missing_fields"]
    assert body["validation"]["errors"] == ["Canvas does not meet REVIEW criteria"]


@pytest.mark.asyncio
async def test_user_role_cannot_publish(
    client: httpx.AsyncClient, admin_headers: dict[str, str], user_headers: dict[str, str]
) -> None:
    canvas = await _create(client, admin_headers, **REVIEW_READY)
    r = await client.patch(f"{BASE}/{canvas['id']}", headers=user_headers, json={"status": "REVIEW"})
    assert r.status_code == 200
    assert r.json()["status"] == "REVIEW"

    r = await client.patch(
        f"{BASE}/{canvas['id']}", headers=user_headers, json={"status": "PUBLISHED"}
    )
    assert r.status_code == 400
    assert "does not have permission" in r.json()["validation"]["errors"][0]


@pytest.mark.asyncio
async def test_status_transitions_and_dry_run(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    canvas = await _create(client, admin_headers, **REVIEW_READY)

    r = await client.get(f"{BASE}/{canvas['id']}/status-transitions", headers=admin_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["current_status"] == "DRAFT"
    assert [t["status"] for t in body["available_transitions"]] == ["REVIEW", "ARCHIVED"]

    r = await client.post(
        f"{BASE}/{canvas['id']}/status/validate", headers=admin_headers, json={"status": "REVIEW"}
    )
    assert r.status_code == 200
    assert r.json()["is_valid"] is True

    # The dry run does not change anything.
    r = await client.get(f"{BASE}/{canvas['id']}", headers=admin_headers)
    assert r.json()["status"] == "DRAFT"


@pytest.mark.asyncio
async def test_archive_cascades_to_descendants(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    root = await _create(client, admin_headers, name="Root")
    child = await _create(client, admin_headers, name="Child", parent_canvas_id=root["id"])
    grandchild = await _create(
        client, admin_headers, name="Grandchild", parent_canvas_id=child["id"]
    )
    unrelated = await _create(client, admin_headers, name="Unrelated")

    r = await client.patch(f"{BASE}/{root['id']}", headers=admin_headers, json={"status": "ARCHIVED"})
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ARCHIVED"
    assert body["cascade_info"] == {
        "archived_count": 3,
        "parent_canvas": "Root",
        "descendant_count": 2,
    }
    assert body["warnings"] == [
        "Canvas has 1 active child canvases. Consider archiving them first."
    ]

    for canvas_id, expected in (
        (grandchild["id"], "ARCHIVED"),
        (child["id"], "ARCHIVED"),
        (unrelated["id"], "DRAFT"),
    ):
        r = await client.get(f"{BASE}/{canvas_id}", headers=admin_headers)
        assert r.json()["status"] == expected


@pytest.mark.asyncio
async def test_delete_cascades_to_descendants(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    root = await _create(client, admin_headers, **{**REVIEW_READY, "name": "Root"})
    child = await _create(client, admin_headers, name="Child", parent_canvas_id=root["id"])
    await _create(client, admin_headers, name="Grandchild", parent_canvas_id=child["id"])
    await client.post(
        f"{BASE}/{root['id']}/share", headers=admin_headers, json={"type": "TEAM_ACCESS"}
    )

    r = await client.delete(f"{BASE}/{root['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json() == {
        "message": "Business canvas and descendants deleted successfully",
        "deleted_count": 3,
        "parent_canvas": "Root",
        "descendant_count": 2,
    }

    r = await client.get(BASE, headers=admin_headers)
    assert r.json() == []


@pytest.mark.asyncio
async def test_quality_report(client: httpx.AsyncClient, admin_headers: dict[str, str]) -> None:
    canvas = await _create(
        client,
        admin_headers,
        name="Quality",
        channels=[{"type": "Direct"}, {"type": "direct", "description": "dup"}],
    )
    r = await client.get(f"{BASE}/{canvas['id']}/quality", headers=admin_headers)
    assert r.status_code == 200
    issues = r.json()["issues"]
    assert "Duplicate titles found in channels: direct" in issues
    assert any(issue.endswith(": Missing description") for issue in issues)


@pytest.mark.asyncio
async def test_export_json_csv_and_placeholder(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    canvas = await _create(client, admin_headers, **REVIEW_READY)
    url = f"{BASE}/{canvas['id']}/export"

    r = await client.post(url, headers=admin_headers, json={"format": "JSON"})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("application/json")
    assert r.headers["content-disposition"] == (
        f'attachment; filename="business-canvas-{canvas["id"]}.json"'
    )
    document = r.json()
    assert document["canvas"]["name"] == "Copper Operations"
    assert len(document["content"]["channels"]) == 2
    assert set(document["context"]) == {"enterprise", "facility", "business_unit"}

    r = await client.post(url, headers=admin_headers, json={"format": "CSV"})
    assert r.headers["content-type"].startswith("text/csv")
    lines = r.text.strip().splitlines()
    assert lines[0] == "section,title,description"
    assert len(lines) == 1 + 19

    r = await client.post(url, headers=admin_headers, json={"format": "PDF"})
    assert r.headers["content-type"] == "application/pdf"
    assert "placeholder export" in r.text

    r = await client.post(url, headers=admin_headers, json={"format": "DOCX"})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_sharing(client: httpx.AsyncClient, admin_headers: dict[str, str]) -> None:
    canvas = await _create(client, admin_headers, name="Shared")
    url = f"{BASE}/{canvas['id']}/share"

    r = await client.post(url, headers=admin_headers, json={"type": "EMAIL_INVITE"})
    assert r.status_code == 400

    r = await client.post(
        url,
        headers=admin_headers,
        json={"type": "EMAIL_INVITE", "email": "guest@capopt.io", "permissions": "EDIT"},
    )
    assert r.status_code == 200
    assert r.json()["message"] == "Canvas shared with guest@capopt.io"
    assert r.json()["sharing_setting"]["permissions"]["access"] == "EDIT"

    r = await client.post(url, headers=admin_headers, json={"type": "PUBLIC_LINK"})
    assert r.json()["sharing_setting"]["value"] == (
        f"https://capopt.com/canvas/{canvas['id']}/shared"
    )

    r = await client.get(url, headers=admin_headers)
    assert r.status_code == 200
    assert len(r.json()["sharing_settings"]) == 2


@pytest.mark.asyncio
async def test_templates_create_list_and_load(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    r = await client.post(f"{BASE}/templates", headers=admin_headers, json={"name": "No canvas"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Name and canvas data are required"

    r = await client.post(
        f"{BASE}/templates",
        headers=admin_headers,
        json={
            "name": "Mining starter",
            "category": "MINING",
            "is_public": True,
            "canvas": {
                "valuePropositions": [{"description": "Safe production"}],
                "channels": [{"type": "Offtake"}],
            },
        },
    )
    assert r.status_code == 201
    template = r.json()
    assert template["created_by"]["email"].endswith("@capopt.io")
    assert template["usage_count"] == 0

    await client.post(
        f"{BASE}/templates", headers=admin_headers, json={"name": "Private", "canvas": {"a": 1}}
    )

    r = await client.get(f"{BASE}/templates", headers=admin_headers, params={"is_public": "true"})
    assert [t["name"] for t in r.json()] == ["Mining starter"]
    r = await client.get(f"{BASE}/templates", headers=admin_headers, params={"category": "CUSTOM"})
    assert [t["name"] for t in r.json()] == ["Private"]

    r = await client.post(f"{BASE}/templates/{template['id']}/load", headers=admin_headers)
    assert r.status_code == 201
    canvas = r.json()
    assert canvas["name"] == "Mining starter - Copy"
    assert canvas["status"] == "DRAFT"
    assert [v["description"] for v in canvas["value_propositions"]] == ["Safe production"]
    assert len(canvas["channels"]) == 1

    r = await client.get(f"{BASE}/templates", headers=admin_headers, params={"is_public": "true"})
    assert r.json()[0]["usage_count"] == 1
