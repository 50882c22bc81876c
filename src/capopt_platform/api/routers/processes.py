"""
capopt_platform.api.routers.processes

Process endpoints. Steps, inputs, outputs, metrics and risks are created with the process.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_404_NOT_FOUND

from capopt_platform.api.deps import db_session, drop_required_nulls, parse_include
from capopt_platform.api.views import process_view
from capopt_platform.auth.deps import get_principal
from capopt_platform.auth.models import Principal
from capopt_platform.db.models import Likelihood, Priority, Process, ProcessStatus
from capopt_platform.db.repositories.processes import CHILD_MODELS, ProcessRepo
from capopt_platform.observability.logging import get_logger

log = get_logger(__name__)

router = APIRouter(
    prefix="/api/processes", tags=["processes"], dependencies=[Depends(get_principal)]
)

_NOT_FOUND = "Process not found"


class ProcessStepIn(BaseModel):
    name: str = Field(min_length=1)
    description: str | None = None
    order_index: int = Field(default=0, ge=0)
    duration: float | None = None
    responsible: str | None = None


class ProcessInputIn(BaseModel):
    name: str = Field(min_length=1)
    type: str | None = None
    description: str | None = None
    required: bool = False


class ProcessOutputIn(BaseModel):
    name: str = Field(min_length=1)
    type: str | None = None
    description: str | None = None
    quality: str | None = None


class ProcessMetricIn(BaseModel):
    name: str = Field(min_length=1)
    value: float
    unit: str | None = None
    target: float | None = None
    frequency: str | None = None


class ProcessRiskIn(BaseModel):
    name: str = Field(min_length=1)
    description: str | None = None
    severity: Priority
    likelihood: Likelihood | None = None
    impact: Priority | None = None
    mitigation: str | None = None


class ProcessCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    version: str = "1.0"
    status: ProcessStatus = ProcessStatus.draft
    priority: Priority = Priority.medium

    steps: list[ProcessStepIn] = Field(default_factory=list)
    inputs: list[ProcessInputIn] = Field(default_factory=list)
    outputs: list[ProcessOutputIn] = Field(default_factory=list)
    metrics: list[ProcessMetricIn] = Field(default_factory=list)
    risks: list[ProcessRiskIn] = Field(default_factory=list)


class ProcessUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    version: str | None = None
    status: ProcessStatus | None = None
    priority: Priority | None = None



async def _require_process(
    processes: ProcessRepo,
    process_id: uuid.UUID,
    *,
    include: set[str] | None = None,
    fresh: bool = False,
) -> Process:
    process = await processes.get(process_id, include=include or (), fresh=fresh)
    if process is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return process

@router.get("")
async def list_processes(
    status: ProcessStatus | None = None,
    priority: Priority | None = None,
    include: str | None = None,
    session: AsyncSession = Depends(db_session),
) -> list[dict[str, Any]]:
    wanted = parse_include(include)
    processes = await ProcessRepo(session).find(status=status, priority=priority, include=wanted)
    return [process_view(p, include=wanted) for p in processes]


@router.post("", status_code=HTTP_201_CREATED)
async def create_process(
    body: ProcessCreate,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    processes = ProcessRepo(session)
    process = await processes.create(
        fields=body.model_dump(exclude=set(CHILD_MODELS)),
        children={attr: [row.model_dump() for row in getattr(body, attr)] for attr in CHILD_MODELS},
        created_by_id=principal.user_id,
    )
    await session.commit()
    log.info("process_created", process_id=str(process.id))

    return process_view(await _require_process(processes, process.id, fresh=True))


@router.get("/{process_id}")
async def get_process(
    process_id: uuid.UUID,
    include: str | None = None,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    wanted = parse_include(include)
    process = await _require_process(ProcessRepo(session), process_id, include=wanted)
    return process_view(process, include=wanted)


@router.put("/{process_id}")
async def update_process(
    process_id: uuid.UUID,
    body: ProcessUpdate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    processes = ProcessRepo(session)
    process = await _require_process(processes, process_id)

    fields = drop_required_nulls(Process, body.model_dump(exclude_unset=True))
    await processes.update(process=process, fields=fields)
    await session.commit()
    return process_view(process)


@router.delete("/{process_id}")
async def delete_process(
    process_id: uuid.UUID, session: AsyncSession = Depends(db_session)
) -> dict[str, Any]:
    processes = ProcessRepo(session)
    process = await _require_process(processes, process_id)
    await processes.delete(process)
    await session.commit()
    log.info("process_deleted", process_id=str(process_id))
    return {"message": "Process deleted successfully"}
