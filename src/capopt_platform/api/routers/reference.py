"""
capopt_platform.api.routers.reference

Read-only reference data: industries, sector-aware frameworks, facility types and
operational streams. Public (no auth), like the health endpoints.
"""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND

from capopt_platform.api.deps import db_session, parse_include
from capopt_platform.db.models import (
    FacilityType,
    Industry,
    IndustryComplianceFramework,
    IndustryOperationalStream,
)
from capopt_platform.db.repositories.reference import ReferenceRepo

router = APIRouter(prefix="/api", tags=["reference"])


def industry_view(industry: Industry) -> dict[str, Any]:
    return {
        "id": str(industry.id),
        "code": industry.code,
        "name": industry.name,
        "description": industry.description,
        "category": industry.category,
        "sectors": [
            {
                "id": str(s.id),
                "code": s.code,
                "name": s.name,
                "description": s.description,
                "category": s.category,
                "risk_profile": s.risk_profile,
            }
            for s in industry.sectors
            if s.is_active
        ],
    }


def facility_type_view(ft: FacilityType, *, sort_order: int | None = None) -> dict[str, Any]:
    return {
        "id": str(ft.id),
        "code": ft.code,
        "name": ft.name,
        "description": ft.description,
        "category": ft.category,
        "risk_profile": ft.risk_profile,
        "is_active": ft.is_active,
        "sort_order": ft.sort_order if sort_order is None else sort_order,
    }


def _stream_item(stream: IndustryOperationalStream) -> dict[str, Any]:
    return {
        "id": str(stream.id),
        "code": stream.stream_name,
        "name": stream.stream_name,
        "description": stream.description,
        "category": stream.category,
        "sector": stream.sector or None,
        "is_auto_applied": True,
    }


def _framework_item(framework: IndustryComplianceFramework) -> dict[str, Any]:
    return {
        "id": str(framework.id),
        "code": framework.framework_name,
        "name": framework.framework_name,
        "description": framework.description,
        "category": framework.category,
        "sector": framework.sector or None,
        "is_auto_applied": True,
    }


async def require_industry(repo: ReferenceRepo, code: str) -> Industry:
    industry = await repo.industry(code)
    if industry is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail=f"Industry not found: {code}")
    return industry


@router.get("/industries")
async def list_industries(session: AsyncSession = Depends(db_session)) -> dict[str, Any]:
    industries = await ReferenceRepo(session).industries()
    return {"success": True, "industries": [industry_view(i) for i in industries]}


@router.get("/frameworks")
async def frameworks(
    industry: str | None = None,
    sector: str | None = None,
    type: Literal["operational", "compliance", "facility"] | None = None,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    if not industry:
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST, detail="Industry parameter is required"
        )

    repo = ReferenceRepo(session)
    found = await repo.industry(industry)
    result: dict[str, Any] = {}

    # An unknown industry yields empty lists rather than an error.
    if type in (None, "operational"):
        streams = await repo.operational_streams(industry=found, sector=sector) if found else []
        result["operational_streams"] = [_stream_item(s) for s in streams]
    if type in (None, "compliance"):
        frameworks_ = (
            await repo.compliance_frameworks(industry=found, sector=sector) if found else []
        )
        result["compliance_frameworks"] = [_framework_item(f) for f in frameworks_]
    if type in (None, "facility"):
        links = await repo.facility_types_for(found) if found else []
        result["facility_types"] = [
            {**facility_type_view(link.facility_type, sort_order=link.sort_order),
             "is_auto_applied": False}
            for link in links
        ]
    return result


@router.get("/facility-types")
async def facility_types(
    industry: str | None = None,
    category: str | None = None,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = ReferenceRepo(session)
    if industry:
        found = await require_industry(repo, industry)
        items = [
            facility_type_view(link.facility_type, sort_order=link.sort_order)
            for link in await repo.facility_types_for(found)
            if category is None or link.facility_type.category == category
        ]
    else:
        items = [facility_type_view(ft) for ft in await repo.facility_types(category=category)]
    return {"success": True, "facility_types": items}


@router.get("/operational-streams")
async def operational_streams(
    industry: str | None = None,
    sectors: str | None = None,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = ReferenceRepo(session)
    if not industry:
        streams = await repo.all_operational_streams()
    else:
        found = await require_industry(repo, industry)
        wanted = sorted(parse_include(sectors))
        streams = (
            await repo.streams_for_sectors(industry=found, sectors=wanted) if wanted else []
        )
        if not streams:
            # No sector-specific rows: every stream the industry defines.
            streams = await repo.operational_streams(industry=found)

    # Names repeat across sectors; keep the first occurrence of each.
    seen: set[str] = set()
    items: list[dict[str, Any]] = []
    for stream in streams:
        if stream.stream_name in seen:
            continue
        seen.add(stream.stream_name)
        items.append(_stream_item(stream))
    return {"success": True, "operational_streams": items}
