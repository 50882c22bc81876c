"""
capopt_platform.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness check (`/healthz`) with service identity.
- Provide readiness check (`/readyz`): the database answers and reference data is loaded.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from capopt_platform import __version__
from capopt_platform.api.deps import db_session, settings_dep
from capopt_platform.db.models import Industry
from capopt_platform.settings import Settings

router = APIRouter()


@router.get("/healthz")
async def healthz(settings: Settings = Depends(settings_dep)) -> dict[str, str]:
    return {"status": "ok", "service": settings.service_name, "version": __version__}


@router.get("/readyz")
async def readyz(
    settings: Settings = Depends(settings_dep), session: AsyncSession = Depends(db_session)
) -> dict[str, Any]:
    industries = await session.scalar(select(func.count()).select_from(Industry))
    # Canvas forms cannot be filled in without reference data.
    if settings.seed_reference_data and not industries:
        raise HTTPException(
            status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Reference data not loaded"
        )
    return {"status": "ready", "industries": industries}
