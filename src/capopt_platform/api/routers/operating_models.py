"""
capopt_platform.api.routers.operating_models

Operating model endpoints. Suppliers, locations, value chains, organisation units,
information assets and management systems are created with the model.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND

from capopt_platform.api.deps import db_session, drop_required_nulls
from capopt_platform.api.views import operating_model_view
from capopt_platform.auth.deps import get_principal
from capopt_platform.auth.models import Principal
from capopt_platform.db.models import (
    CanvasStatus,
    LocationType,
    OperatingModel,
    OrganisationType,
    Priority,
    SupplierType,
    ValueChainType,
)
from capopt_platform.db.repositories.operating_models import CHILD_MODELS, OperatingModelRepo
from capopt_platform.observability.logging import get_logger

log = get_logger(__name__)

router = APIRouter(
    prefix="/api/operating-models",
    tags=["operating-models"],
    dependencies=[Depends(get_principal)],
)

_NOT_FOUND = "Operating model not found"


class _ComponentIn(BaseModel):
    name: str = Field(min_length=1)
    description: str | None = None
    notes: str | None = None


class SupplierIn(_ComponentIn):
    supplier_type: SupplierType
    category: str | None = None
    criticality: Priority = Priority.medium
    contract_type: str | None = None
    contract_value: float | None = None
    risk_level: Priority | None = None
    contact_email: str | None = None


class LocationIn(_ComponentIn):
    location_type: LocationType
    address: str | None = None
    city: str | None = None
    country: str | None = None
    status: str = "ACTIVE"
    criticality: Priority = Priority.medium
    employee_count: int | None = Field(default=None, ge=0)


class ValueChainIn(_ComponentIn):
    value_chain_type: ValueChainType
    sequence: int = Field(default=0, ge=0)
    complexity: str | None = None
    cost: float | None = None
    risk_level: Priority | None = None
    status: str = "ACTIVE"


class OrganisationIn(_ComponentIn):
    org_type: OrganisationType
    level: str | None = None
    manager: str | None = None
    employee_count: int | None = Field(default=None, ge=0)
    responsibilities: list[str] = Field(default_factory=list)


class InformationIn(_ComponentIn):
    info_type: str = Field(min_length=1)
    source: str | None = None
    frequency: str | None = None
    accessibility: str | None = None


class ManagementSystemIn(_ComponentIn):
    system_type: str = Field(min_length=1)
    vendor: str | None = None
    version: str | None = None
    status: str = "ACTIVE"


class OperatingModelCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    enterprise_id: uuid.UUID | None = None
    facility_id: uuid.UUID | None = None
    business_unit_id: uuid.UUID | None = None
    business_canvas_id: uuid.UUID | None = None

    suppliers: list[SupplierIn] = Field(default_factory=list)
    locations: list[LocationIn] = Field(default_factory=list)
    value_chains: list[ValueChainIn] = Field(default_factory=list)
    organisation: list[OrganisationIn] = Field(default_factory=list)
    information: list[InformationIn] = Field(default_factory=list)
    management_systems: list[ManagementSystemIn] = Field(default_factory=list)


class OperatingModelUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    version: str | None = Field(default=None, max_length=32)
    is_active: bool | None = None
    status: CanvasStatus | None = None
    edit_mode: str | None = Field(default=None, max_length=32)
    auto_save: bool | None = None
    enterprise_id: uuid.UUID | None = None
    facility_id: uuid.UUID | None = None
    business_unit_id: uuid.UUID | None = None
    business_canvas_id: uuid.UUID | None = None


async def _require_model(
    models: OperatingModelRepo, model_id: uuid.UUID, *, fresh: bool = False
) -> OperatingModel:
    model = await models.get(model_id, fresh=fresh)
    if model is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return model


async def _check_references(models: OperatingModelRepo, fields: dict[str, Any]) -> None:
    missing = await models.missing_references(fields)
    if missing:
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST,
            detail=f"Unknown reference for: {', '.join(missing)}",
        )


@router.get("")
async def list_operating_models(
    enterprise_id: uuid.UUID | None = None,
    facility_id: uuid.UUID | None = None,
    business_unit_id: uuid.UUID | None = None,
    session: AsyncSession = Depends(db_session),
) -> list[dict[str, Any]]:
    models = await OperatingModelRepo(session).find(
        enterprise_id=enterprise_id, facility_id=facility_id, business_unit_id=business_unit_id
    )
    return [operating_model_view(m) for m in models]


@router.post("", status_code=HTTP_201_CREATED)
async def create_operating_model(
    body: OperatingModelCreate,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    models = OperatingModelRepo(session)
    fields = body.model_dump(exclude=set(CHILD_MODELS))
    await _check_references(models, fields)

    # New models open as single-user drafts with auto-save on.
    model = await models.create(
        fields={
            **fields,
            "status": CanvasStatus.draft,
            "edit_mode": "SINGLE_USER",
            "auto_save": True,
            "last_saved": datetime.utcnow(),
        },
        children={attr: [row.model_dump() for row in getattr(body, attr)] for attr in CHILD_MODELS},
        created_by_id=principal.user_id,
    )
    await session.commit()
    log.info("operating_model_created", operating_model_id=str(model.id))

    return operating_model_view(await _require_model(models, model.id, fresh=True))


@router.get("/{model_id}")
async def get_operating_model(
    model_id: uuid.UUID, session: AsyncSession = Depends(db_session)
) -> dict[str, Any]:
    return operating_model_view(await _require_model(OperatingModelRepo(session), model_id))


@router.api_route("/{model_id}", methods=["PUT", "PATCH"])
async def update_operating_model(
    model_id: uuid.UUID,
    body: OperatingModelUpdate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    models = OperatingModelRepo(session)
    model = await _require_model(models, model_id)

    fields = drop_required_nulls(OperatingModel, body.model_dump(exclude_unset=True))
    await _check_references(models, fields)
    await models.update(model=model, fields=fields)
    await session.commit()
    return operating_model_view(model)


@router.delete("/{model_id}")
async def delete_operating_model(
    model_id: uuid.UUID, session: AsyncSession = Depends(db_session)
) -> dict[str, Any]:
    models = OperatingModelRepo(session)
    model = await _require_model(models, model_id)
    await models.delete(model)
    await session.commit()
    log.info("operating_model_deleted", operating_model_id=str(model_id))
    return {"message": "Operating model deleted successfully"}


# --- Module Notes -----------------------------------------------------------
# Component collections are replaced only through create; edits after that touch the
# model's own columns. Listings hide inactive models, but GET by id still returns them.
