"""
capopt_platform.db.repositories.assets

Repository for `Asset` aggregates (risks, protections, monitors, optimisations) and their
links to critical controls.
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
    Asset,
    AssetControl,
    AssetMonitor,
    AssetOptimisation,
    AssetProtection,
    AssetRisk,
    AssetStatus,
    AssetType,
    Priority,
)

CHILD_MODELS: dict[str, type] = {
    "risks": AssetRisk,
    "protections": AssetProtection,
    "monitors": AssetMonitor,
    "optimisations": AssetOptimisation,
}


def _options(include: Iterable[str]) -> list[Any]:
    opts: list[Any] = []
    if "controls" in include:
        opts.append(selectinload(Asset.control_links).selectinload(AssetControl.control))
    return opts


class AssetRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        fields: dict[str, Any],
        children: dict[str, list[dict[str, Any]]],
        created_by_id: uuid.UUID,
    ) -> Asset:
        asset = Asset(created_by_id=created_by_id, **fields)
        for attr, rows in children.items():
            model = CHILD_MODELS[attr]
            getattr(asset, attr).extend(model(**row) for row in rows)
        self._session.add(asset)
        await self._session.flush()
        return asset

    async def get(
        self, asset_id: uuid.UUID, *, include: Iterable[str] = (), fresh: bool = False
    ) -> Asset | None:
        stmt = select(Asset).where(Asset.id == asset_id).options(*_options(include))
        if fresh:
            stmt = stmt.execution_options(populate_existing=True)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def find(
        self,
        *,
        type: AssetType | None = None,
        status: AssetStatus | None = None,
        criticality: Priority | None = None,
        created_by_id: uuid.UUID | None = None,
        include: Iterable[str] = (),
    ) -> list[Asset]:
        stmt = select(Asset).options(*_options(include))
        if type is not None:
            stmt = stmt.where(Asset.type == type)
        if status is not None:
            stmt = stmt.where(Asset.status == status)
        if criticality is not None:
            stmt = stmt.where(Asset.criticality == criticality)
        if created_by_id is not None:
            stmt = stmt.where(Asset.created_by_id == created_by_id)
        stmt = stmt.order_by(desc(Asset.created_at))
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(self, *, asset: Asset, fields: dict[str, Any]) -> Asset:
        for name, value in fields.items():
            setattr(asset, name, value)
        asset.updated_at = datetime.utcnow()
        await self._session.flush()
        return asset

    async def delete(self, asset: Asset) -> None:
        # Join rows first; owned children go with the asset via ORM cascade.
        await self._session.execute(delete(AssetControl).where(AssetControl.asset_id == asset.id))
        await self._session.delete(asset)
        await self._session.flush()
