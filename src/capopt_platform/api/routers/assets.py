"""
capopt_platform.api.routers.assets

Asset endpoints. Risks, protections, monitors and optimisations are created with the asset.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_404_NOT_FOUND

from capopt_platform.api.deps import db_session, drop_required_nulls, parse_include
from capopt_platform.api.views import asset_view
from capopt_platform.auth.deps import get_principal
from capopt_platform.auth.models import Principal
from capopt_platform.db.models import (
    Asset,
    AssetStatus,
    AssetType,
    ImprovementStatus,
    Likelihood,
    MonitorStatus,
    Priority,
)
from capopt_platform.db.repositories.assets import CHILD_MODELS, AssetRepo
from capopt_platform.observability.logging import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/api/assets", tags=["assets"], dependencies=[Depends(get_principal)])

_NOT_FOUND = "Asset not found"


class AssetRiskIn(BaseModel):
    name: str = Field(min_length=1)
    description: str | None = None
    severity: Priority
    likelihood: Likelihood | None = None
    mitigation: str | None = None


class AssetProtectionIn(BaseModel):
    name: str = Field(min_length=1)
    measure: str | None = None
    type: str | None = None
    effectiveness: str | None = None


class AssetMonitorIn(BaseModel):
    name: str = Field(min_length=1)
    type: str | None = None
    status: MonitorStatus = MonitorStatus.active
    frequency: str | None = None


class AssetOptimisationIn(BaseModel):
    name: str = Field(min_length=1)
    opportunity: str | None = None
    benefit: str | None = None
    cost: float | None = None
    priority: Priority = Priority.medium
    status: ImprovementStatus = ImprovementStatus.proposed


class AssetCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    type: AssetType
    location: str | None = None
    status: AssetStatus = AssetStatus.operational
    criticality: Priority = Priority.medium

    risks: list[AssetRiskIn] = Field(default_factory=list)
    protections: list[AssetProtectionIn] = Field(default_factory=list)
    monitors: list[AssetMonitorIn] = Field(default_factory=list)
    optimisations: list[AssetOptimisationIn] = Field(default_factory=list)


class AssetUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    type: AssetType | None = None
    location: str | None = None
    status: AssetStatus | None = None
    criticality: Priority | None = None


async def _require_asset(
    assets: AssetRepo,
    asset_id: uuid.UUID,
    *,
    include: set[str] | None = None,
    fresh: bool = False,
) -> Asset:
    asset = await assets.get(asset_id, include=include or (), fresh=fresh)
    if asset is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return asset


@router.get("")
async def list_assets(
    type: AssetType | None = None,
    status: AssetStatus | None = None,
    criticality: Priority | None = None,
    include: str | None = None,
    session: AsyncSession = Depends(db_session),
) -> list[dict[str, Any]]:
    wanted = parse_include(include)
    assets = await AssetRepo(session).find(
        type=type, status=status, criticality=criticality, include=wanted
    )
    return [asset_view(a, include=wanted) for a in assets]


@router.post("", status_code=HTTP_201_CREATED)
async def create_asset(
    body: AssetCreate,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    assets = AssetRepo(session)
    asset = await assets.create(
        fields=body.model_dump(exclude=set(CHILD_MODELS)),
        children={attr: [row.model_dump() for row in getattr(body, attr)] for attr in CHILD_MODELS},
        created_by_id=principal.user_id,
    )
    await session.commit()
    log.info("asset_created", asset_id=str(asset.id))

    return asset_view(await _require_asset(assets, asset.id, fresh=True))


@router.get("/{asset_id}")
async def get_asset(
    asset_id: uuid.UUID,
    include: str | None = None,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    wanted = parse_include(include)
    asset = await _require_asset(AssetRepo(session), asset_id, include=wanted)
    return asset_view(asset, include=wanted)


@router.put("/{asset_id}")
async def update_asset(
    asset_id: uuid.UUID,
    body: AssetUpdate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    assets = AssetRepo(session)
    asset = await _require_asset(assets, asset_id)

    fields = drop_required_nulls(Asset, body.model_dump(exclude_unset=True))
    await assets.update(asset=asset, fields=fields)
    await session.commit()
    return asset_view(asset)


@router.delete("/{asset_id}")
async def delete_asset(
    asset_id: uuid.UUID, session: AsyncSession = Depends(db_session)
) -> dict[str, Any]:
    assets = AssetRepo(session)
    asset = await _require_asset(assets, asset_id)
    await assets.delete(asset)
    await session.commit()
    log.info("asset_deleted", asset_id=str(asset_id))
    return {"message": "Asset deleted successfully"}
