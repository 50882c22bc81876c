from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from capopt_platform.canvas.sections import SectionSpec


class CanvasItemRepo:
    """Data access for one canvas section; the ORM model comes from the section registry."""

    def __init__(self, session: AsyncSession, spec: SectionSpec) -> None:
        self._session = session
        self._spec = spec

    async def list_for_canvas(self, canvas_id: uuid.UUID) -> list[Any]:
        model = self._spec.model
        stmt = (
            select(model)
            .where(model.business_canvas_id == canvas_id)
            .order_by(desc(model.created_at))
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def get(self, *, canvas_id: uuid.UUID, item_id: uuid.UUID) -> Any | None:
        # Items are always scoped to their canvas so ids from another canvas read as missing.
        model = self._spec.model
        stmt = select(model).where(model.id == item_id, model.business_canvas_id == canvas_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def add(self, item: Any) -> Any:
        self._session.add(item)
        await self._session.flush()
        return item

    async def update(self, *, item: Any, fields: dict[str, Any]) -> Any:
        for name, value in fields.items():
            setattr(item, name, value)
        item.updated_at = datetime.utcnow()
        await self._session.flush()
        return item

    async def delete(self, item: Any) -> None:
        await self._session.delete(item)
        await self._session.flush()
