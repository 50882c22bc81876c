"""
capopt_platform.api.routers.enums

`GET /api/enums?type=...` returns a `{code: label}` vocabulary for canvas form fields, either
static (business types, regions, risk profiles, statuses) or read from the reference tables.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_400_BAD_REQUEST

from capopt_platform.api.deps import db_session, parse_include
from capopt_platform.api.routers.reference import require_industry
from capopt_platform.canvas.status import STATUS_INFO
from capopt_platform.db.reference_data import (
    BUSINESS_TYPES,
    REGIONAL_CLASSIFICATIONS,
    RISK_PROFILES,
)
from capopt_platform.db.repositories.reference import ReferenceRepo

router = APIRouter(prefix="/api", tags=["reference"])

_STATIC: dict[str, dict[str, str]] = {
    "business-types": BUSINESS_TYPES,
    "regional-classifications": REGIONAL_CLASSIFICATIONS,
    "risk-profiles": RISK_PROFILES,
    "canvas-statuses": {status: info["label"] for status, info in STATUS_INFO.items()},
}


def _industry_param(industry: str | None, what: str) -> str:
    if not industry:
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST, detail=f"Industry parameter required for {what}"
        )
    return industry


async def _industries(repo: ReferenceRepo, industry: str | None, sectors: str | None) -> Any:
    return {i.code: i.name for i in await repo.industries()}


async def _sectors(repo: ReferenceRepo, industry: str | None, sectors: str | None) -> Any:
    found = await require_industry(repo, _industry_param(industry, "sectors"))
    return {s.code: s.name for s in found.sectors if s.is_active}


async def _facility_types(repo: ReferenceRepo, industry: str | None, sectors: str | None) -> Any:
    found = await require_industry(repo, _industry_param(industry, "facility types"))
    return {
        link.facility_type.code: link.facility_type.name
        for link in await repo.facility_types_for(found)
    }


async def _operational_streams(
    repo: ReferenceRepo, industry: str | None, sectors: str | None
) -> Any:
    found = await require_industry(repo, _industry_param(industry, "operational streams"))
    return {s.stream_name: s.stream_name for s in await repo.operational_streams(industry=found)}


async def _compliance_frameworks(
    repo: ReferenceRepo, industry: str | None, sectors: str | None
) -> Any:
    found = await require_industry(repo, _industry_param(industry, "compliance frameworks"))
    return {
        f.framework_name: f.framework_name
        for f in await repo.compliance_frameworks(industry=found)
    }


async def _sector_recommendations(
    repo: ReferenceRepo, industry: str | None, sectors: str | None
) -> Any:
    code = _industry_param(industry, "sector recommendations")
    selected = sorted(parse_include(sectors))
    if not selected:
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST,
            detail="Sectors parameter required for sector recommendations",
        )
    found = await require_industry(repo, code)
    streams = await repo.streams_for_sectors(industry=found, sectors=selected)
    frameworks = await repo.frameworks_for_sectors(industry=found, sectors=selected)
    return {
        "operational_streams": list(dict.fromkeys(s.stream_name for s in streams)),
        "compliance_frameworks": list(dict.fromkeys(f.framework_name for f in frameworks)),
    }


_DYNAMIC: dict[str, Callable[[ReferenceRepo, str | None, str | None], Awaitable[Any]]] = {
    "industries": _industries,
    "sectors": _sectors,
    "facility-types": _facility_types,
    "operational-streams": _operational_streams,
    "compliance-frameworks": _compliance_frameworks,
    "sector-recommendations": _sector_recommendations,
}


@router.get("/enums")
async def enum_values(
    type: str | None = None,
    industry: str | None = None,
    sectors: str | None = None,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    if not type:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Type parameter is required")

    if type in _STATIC:
        values: Any = dict(_STATIC[type])
    elif type in _DYNAMIC:
        values = await _DYNAMIC[type](ReferenceRepo(session), industry, sectors)
    else:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Invalid enum type")

    return {"type": type, "values": values, "count": len(values)}
