"""
capopt_platform.db.repositories.controls

Repository for `CriticalControl` entities and the asset/process join tables.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from capopt_platform.db.models import (
    AssetControl,
    ComplianceStatus,
    ControlEffectiveness,
    ControlType,
    CriticalControl,
    Priority,
    ProcessControl,
    RiskCategory,
)


def _options(include: Iterable[str]) -> list[Any]:
    opts: list[Any] = []
    if "assets" in include:
        opts.append(selectinload(CriticalControl.asset_links).selectinload(AssetControl.asset))
    if "processes" in include:
        opts.append(
            selectinload(CriticalControl.process_links).selectinload(ProcessControl.process)
        )
    return opts


class ControlRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, fields: dict[str, Any], created_by_id: uuid.UUID) -> CriticalControl:
        control = CriticalControl(created_by_id=created_by_id, **fields)
        self._session.add(control)
        await self._session.flush()
        return control

    async def get(
        self, control_id: uuid.UUID, *, include: Iterable[str] = (), fresh: bool = False
    ) -> CriticalControl | None:
        stmt = (
            select(CriticalControl)
            .where(CriticalControl.id == control_id)
            .options(*_options(include))
        )
        if fresh:
            stmt = stmt.execution_options(populate_existing=True)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def find(
        self,
        *,
        compliance_status: ComplianceStatus | None = None,
        priority: Priority | None = None,
        risk_category: str | None = None,
        include: Iterable[str] = (),
    ) -> list[CriticalControl]:
        stmt = select(CriticalControl).options(*_options(include))
        if compliance_status is not None:
            stmt = stmt.where(CriticalControl.compliance_status == compliance_status)
        if priority is not None:
            stmt = stmt.where(CriticalControl.priority == priority)
        if risk_category:
            # Case-insensitive "contains" match on the category name.
            stmt = stmt.join(
                RiskCategory, CriticalControl.risk_category_id == RiskCategory.id
            ).where(
                func.lower(RiskCategory.name).contains(risk_category.lower())
            )
        stmt = stmt.order_by(desc(CriticalControl.created_at))
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(self, *, control: CriticalControl, fields: dict[str, Any]) -> CriticalControl:
        for name, value in fields.items():
            setattr(control, name, value)
        control.updated_at = datetime.utcnow()
        await self._session.flush()
        return control

    async def delete(self, control: CriticalControl) -> None:
        await self._session.execute(
            delete(AssetControl).where(AssetControl.control_id == control.id)
        )
        await self._session.execute(
            delete(ProcessControl).where(ProcessControl.control_id == control.id)
        )
        await self._session.delete(control)
        await self._session.flush()

    # --- links --------------------------------------------------------------

    async def link_asset(self, *, control_id: uuid.UUID, asset_id: uuid.UUID) -> bool:
        """Create the link if missing. Returns False when it already existed."""
        stmt = select(AssetControl).where(
            AssetControl.control_id == control_id, AssetControl.asset_id == asset_id
        )
        if (await self._session.execute(stmt)).scalar_one_or_none() is not None:
            return False
        self._session.add(AssetControl(control_id=control_id, asset_id=asset_id))
        await self._session.flush()
        return True

    async def unlink_asset(self, *, control_id: uuid.UUID, asset_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            delete(AssetControl).where(
                AssetControl.control_id == control_id, AssetControl.asset_id == asset_id
            )
        )
        return result.rowcount > 0

    async def link_process(self, *, control_id: uuid.UUID, process_id: uuid.UUID) -> bool:
        stmt = select(ProcessControl).where(
            ProcessControl.control_id == control_id, ProcessControl.process_id == process_id
        )
        if (await self._session.execute(stmt)).scalar_one_or_none() is not None:
            return False
        self._session.add(ProcessControl(control_id=control_id, process_id=process_id))
        await self._session.flush()
        return True

    async def unlink_process(self, *, control_id: uuid.UUID, process_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            delete(ProcessControl).where(
                ProcessControl.control_id == control_id, ProcessControl.process_id == process_id
            )
        )
        return result.rowcount > 0

    # --- lookups ------------------------------------------------------------

    async def lookups(self) -> dict[str, list[Any]]:
        async def rows(stmt: Any) -> list[Any]:
            return list((await self._session.execute(stmt)).scalars().all())

        return {
            "risk_categories": await rows(select(RiskCategory).order_by(RiskCategory.name)),
            "control_types": await rows(select(ControlType).order_by(ControlType.name)),
            "effectiveness": await rows(
                select(ControlEffectiveness).order_by(desc(ControlEffectiveness.score))
            ),
        }

    async def missing_lookups(self, fields: dict[str, Any]) -> list[str]:
        """Names of lookup id fields in `fields` that reference no row."""
        missing: list[str] = []
        for name, model in (
            ("risk_category_id", RiskCategory),
            ("control_type_id", ControlType),
            ("effectiveness_id", ControlEffectiveness),
        ):
            value = fields.get(name)
            if value is not None and await self._session.get(model, value) is None:
                missing.append(name)
        return missing
