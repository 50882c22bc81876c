"""
tests.test_reference_api

Reference data endpoints: industries, frameworks with sector fallback, facility types,
operational streams and the enum vocabularies.
"""

from __future__ import annotations

import httpx
import pytest
from sqlalchemy import func, select

from capopt_platform.db.models import Industry, RiskCategory
from capopt_platform.db.reference_data import seed_reference_data


@pytest.mark.asyncio
async def test_industries_include_sectors(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/industries")
    industries = r.json()["industries"]
    assert [i["code"] for i in industries] == ["MINING_METALS", "OIL_GAS", "CHEMICALS"]
    mining = industries[0]
    assert mining["sectors"][0]["code"] == "COPPER"
    assert mining["sectors"][0]["risk_profile"] == "MEDIUM"


@pytest.mark.asyncio
async def test_frameworks_sector_specific_and_fallback(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/frameworks")
    assert r.status_code == 400
    assert r.json()["detail"] == "Industry parameter is required"

    r = await client.get(
        "/api/frameworks", params={"industry": "MINING_METALS", "sector": "COAL"}
    )
    body = r.json()
    assert body["operational_streams"][0]["name"] == "Open Cut Mining"
    assert body["operational_streams"][0]["sector"] == "COAL"
    assert body["compliance_frameworks"][0]["name"] == "Coal Mining Safety and Health Act"
    assert any(f["code"] == "OPEN_PIT_MINE" for f in body["facility_types"])

    # GOLD has no rows of its own: industry-level rows are returned instead.
    r = await client.get(
        "/api/frameworks",
        params={"industry": "MINING_METALS", "sector": "GOLD", "type": "compliance"},
    )
    body = r.json()
    assert set(body) == {"compliance_frameworks"}
    assert body["compliance_frameworks"][0]["name"] == "WHS Act 2011"
    assert body["compliance_frameworks"][0]["sector"] is None

    r = await client.get("/api/frameworks", params={"industry": "MINING_METALS", "type": "bogus"})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_facility_types_and_operational_streams(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/facility-types", params={"industry": "OIL_GAS"})
    codes = [f["code"] for f in r.json()["facility_types"]]
    assert codes[:2] == ["ONSHORE_WELL", "OFFSHORE_PLATFORM"]
    assert "REFINERY" in codes

    r = await client.get("/api/facility-types", params={"industry": "NOPE"})
    assert r.status_code == 404

    r = await client.get(
        "/api/operational-streams", params={"industry": "MINING_METALS", "sectors": "URANIUM"}
    )
    names = [s["name"] for s in r.json()["operational_streams"]]
    assert names == [
        "Uranium Extraction",
        "Radiation Safety",
        "Nuclear Compliance",
        "Transport Security",
    ]

    r = await client.get(
        "/api/operational-streams", params={"industry": "CHEMICALS", "sectors": "X"}
    )
    assert [s["name"] for s in r.json()["operational_streams"]] == [
        "Batch Processing",
        "Continuous Processing",
        "Hazardous Materials Handling",
    ]


@pytest.mark.asyncio
async def test_enums(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/enums")
    assert r.status_code == 400
    r = await client.get("/api/enums", params={"type": "nonsense"})
    assert r.status_code == 400

    r = await client.get("/api/enums", params={"type": "business-types"})
    assert r.json()["values"]["SOLE_TRADER"] == "Sole Trader"
    assert r.json()["count"] == 6

    r = await client.get("/api/enums", params={"type": "canvas-statuses"})
    assert r.json()["values"] == {
        "DRAFT": "Draft",
        "REVIEW": "Review",
        "PUBLISHED": "Published",
        "ARCHIVED": "Archived",
    }

    r = await client.get("/api/enums", params={"type": "sectors"})
    assert r.status_code == 400
    r = await client.get("/api/enums", params={"type": "sectors", "industry": "Atlantis"})
    assert r.status_code == 404
    assert r.json()["detail"] == "Industry not found: Atlantis"

    # Industries can be looked up by display name as well as code.
    r = await client.get("/api/enums", params={"type": "sectors", "industry": "Oil & Gas"})
    assert r.json()["values"]["UPSTREAM"] == "Upstream Operations"

    r = await client.get(
        "/api/enums", params={"type": "compliance-frameworks", "industry": "CHEMICALS"}
    )
    assert r.json()["count"] == 2

    r = await client.get(
        "/api/enums",
        params={"type": "sector-recommendations", "industry": "MINING_METALS", "sectors": "COAL"},
    )
    values = r.json()["values"]
    assert "Dust Control" in values["operational_streams"]
    assert "Water Management Act" in values["compliance_frameworks"]


@pytest.mark.asyncio
async def test_seeding_is_idempotent(app) -> None:
    async with app.state.sessionmaker() as session:
        assert await seed_reference_data(session) == 0
        await session.commit()
        assert await session.scalar(select(func.count()).select_from(Industry)) == 3
        assert await session.scalar(select(func.count()).select_from(RiskCategory)) == 4
