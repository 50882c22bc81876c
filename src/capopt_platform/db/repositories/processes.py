"""
capopt_platform.db.repositories.processes

Repository for `Process` aggregates (steps, inputs, outputs, metrics, risks) and their links
to critical controls.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from capopt_platform.db.models import (
    Priority,
    Process,
    ProcessControl,
    ProcessInput,
    ProcessMetric,
    ProcessOutput,
    ProcessRisk,
    ProcessStatus,
    ProcessStep,
)

CHILD_MODELS: dict[str, type] = {
    "steps": ProcessStep,
    "inputs": ProcessInput,
    "outputs": ProcessOutput,
    "metrics": ProcessMetric,
    "risks": ProcessRisk,
}


def _options(include: Iterable[str]) -> list[Any]:
    opts: list[Any] = []
    if "controls" in include:
        opts.append(selectinload(Process.control_links).selectinload(ProcessControl.control))
    return opts


class ProcessRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        fields: dict[str, Any],
        children: dict[str, list[dict[str, Any]]],
        created_by_id: uuid.UUID,
    ) -> Process:
        process = Process(created_by_id=created_by_id, **fields)
        for attr, rows in children.items():
            model = CHILD_MODELS[attr]
            getattr(process, attr).extend(model(**row) for row in rows)
        self._session.add(process)
        await self._session.flush()
        return process

    async def get(
        self, process_id: uuid.UUID, *, include: Iterable[str] = (), fresh: bool = False
    ) -> Process | None:
        stmt = select(Process).where(Process.id == process_id).options(*_options(include))
        if fresh:
            stmt = stmt.execution_options(populate_existing=True)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def find(
        self,
        *,
        status: ProcessStatus | None = None,
        priority: Priority | None = None,
        created_by_id: uuid.UUID | None = None,
        include: Iterable[str] = (),
    ) -> list[Process]:
        stmt = select(Process).options(*_options(include))
        if status is not None:
            stmt = stmt.where(Process.status == status)
        if priority is not None:
            stmt = stmt.where(Process.priority == priority)
        if created_by_id is not None:
            stmt = stmt.where(Process.created_by_id == created_by_id)
        stmt = stmt.order_by(desc(Process.created_at))
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(self, *, process: Process, fields: dict[str, Any]) -> Process:
        for name, value in fields.items():
            setattr(process, name, value)
        process.updated_at = datetime.utcnow()
        await self._session.flush()
        return process

    async def delete(self, process: Process) -> None:
        await self._session.execute(
            delete(ProcessControl).where(ProcessControl.process_id == process.id)
        )
        await self._session.delete(process)
        await self._session.flush()
