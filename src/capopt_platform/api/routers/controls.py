"""
capopt_platform.api.routers.controls

Critical control endpoints, including links to assets and processes.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND

from capopt_platform.api.deps import db_session, drop_required_nulls, parse_include
from capopt_platform.api.views import columns, control_view
from capopt_platform.auth.deps import get_principal
from capopt_platform.auth.models import Principal
from capopt_platform.db.models import ComplianceStatus, CriticalControl, Priority
from capopt_platform.db.repositories.assets import AssetRepo
from capopt_platform.db.repositories.controls import ControlRepo
from capopt_platform.db.repositories.processes import ProcessRepo
from capopt_platform.observability.logging import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/api/controls", tags=["controls"], dependencies=[Depends(get_principal)])

_NOT_FOUND = "Control not found"


class ControlCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    risk_category_id: uuid.UUID | None = None
    control_type_id: uuid.UUID | None = None
    effectiveness_id: uuid.UUID | None = None
    compliance_status: ComplianceStatus = ComplianceStatus.under_review
    priority: Priority = Priority.medium


class ControlUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    risk_category_id: uuid.UUID | None = None
    control_type_id: uuid.UUID | None = None
    effectiveness_id: uuid.UUID | None = None
    compliance_status: ComplianceStatus | None = None
    priority: Priority | None = None


async def _require_control(
    controls: ControlRepo,
    control_id: uuid.UUID,
    *,
    include: set[str] | None = None,
    fresh: bool = False,
) -> CriticalControl:
    control = await controls.get(control_id, include=include or (), fresh=fresh)
    if control is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return control


async def _check_lookups(controls: ControlRepo, fields: dict[str, Any]) -> None:
    missing = await controls.missing_lookups(fields)
    if missing:
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST,
            detail=f"Unknown reference for: {', '.join(missing)}",
        )


@router.get("")
async def list_controls(
    status: ComplianceStatus | None = None,
    priority: Priority | None = None,
    risk_category: str | None = None,
    include: str | None = None,
    session: AsyncSession = Depends(db_session),
) -> list[dict[str, Any]]:
    wanted = parse_include(include)
    controls = await ControlRepo(session).find(
        compliance_status=status, priority=priority, risk_category=risk_category, include=wanted
    )
    return [control_view(c, include=wanted) for c in controls]


@router.get("/lookups")
async def control_lookups(session: AsyncSession = Depends(db_session)) -> dict[str, Any]:
    lookups = await ControlRepo(session).lookups()
    return {name: [columns(row) for row in rows] for name, rows in lookups.items()}


@router.post("", status_code=HTTP_201_CREATED)
async def create_control(
    body: ControlCreate,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    controls = ControlRepo(session)
    fields = body.model_dump()
    await _check_lookups(controls, fields)
    control = await controls.create(fields=fields, created_by_id=principal.user_id)
    await session.commit()
    log.info("control_created", control_id=str(control.id))

    return control_view(await _require_control(controls, control.id, fresh=True))


@router.get("/{control_id}")
async def get_control(
    control_id: uuid.UUID,
    include: str | None = None,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    wanted = parse_include(include)
    control = await _require_control(ControlRepo(session), control_id, include=wanted)
    return control_view(control, include=wanted)


@router.put("/{control_id}")
async def update_control(
    control_id: uuid.UUID,
    body: ControlUpdate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    controls = ControlRepo(session)
    control = await _require_control(controls, control_id)

    fields = drop_required_nulls(CriticalControl, body.model_dump(exclude_unset=True))
    await _check_lookups(controls, fields)
    await controls.update(control=control, fields=fields)
    await session.commit()

    return control_view(await _require_control(controls, control.id, fresh=True))


@router.delete("/{control_id}")
async def delete_control(
    control_id: uuid.UUID, session: AsyncSession = Depends(db_session)
) -> dict[str, Any]:
    controls = ControlRepo(session)
    control = await _require_control(controls, control_id)
    await controls.delete(control)
    await session.commit()
    log.info("control_deleted", control_id=str(control_id))
    return {"message": "Control deleted successfully"}


# --- Links ----------------------------------------------------------------------


@router.post("/{control_id}/assets/{asset_id}", status_code=HTTP_201_CREATED)
async def link_asset(
    control_id: uuid.UUID, asset_id: uuid.UUID, session: AsyncSession = Depends(db_session)
) -> dict[str, Any]:
    controls = ControlRepo(session)
    await _require_control(controls, control_id)
    if await AssetRepo(session).get(asset_id) is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Asset not found")
    created = await controls.link_asset(control_id=control_id, asset_id=asset_id)
    await session.commit()
    return {"control_id": str(control_id), "asset_id": str(asset_id), "created": created}


@router.delete("/{control_id}/assets/{asset_id}")
async def unlink_asset(
    control_id: uuid.UUID, asset_id: uuid.UUID, session: AsyncSession = Depends(db_session)
) -> dict[str, Any]:
    removed = await ControlRepo(session).unlink_asset(control_id=control_id, asset_id=asset_id)
    if not removed:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Link not found")
    await session.commit()
    return {"message": "Control unlinked from asset"}


@router.post("/{control_id}/processes/{process_id}", status_code=HTTP_201_CREATED)
async def link_process(
    control_id: uuid.UUID, process_id: uuid.UUID, session: AsyncSession = Depends(db_session)
) -> dict[str, Any]:
    controls = ControlRepo(session)
    await _require_control(controls, control_id)
    if await ProcessRepo(session).get(process_id) is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Process not found")
    created = await controls.link_process(control_id=control_id, process_id=process_id)
    await session.commit()
    return {"control_id": str(control_id), "process_id": str(process_id), "created": created}


@router.delete("/{control_id}/processes/{process_id}")
async def unlink_process(
    control_id: uuid.UUID, process_id: uuid.UUID, session: AsyncSession = Depends(db_session)
) -> dict[str, Any]:
    removed = await ControlRepo(session).unlink_process(
        control_id=control_id, process_id=process_id
    )
    if not removed:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Link not found")
    await session.commit()
    return {"message": "Control unlinked from process"}
