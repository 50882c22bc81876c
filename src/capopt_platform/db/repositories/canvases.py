"""
capopt_platform.db.repositories.canvases

Repository for `BusinessCanvas` aggregates and their sharing/export/template records.

Responsibilities:
- Create, fetch, filter and update canvases (sections are eager-loaded by the mapper).
- Walk the parent/child canvas hierarchy (`parent_canvas_id`) for cascading operations.
- Persist sharing settings, export records and templates.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from capopt_platform.db.models import (
    BusinessCanvas,
    CanvasExport,
    CanvasSharingSetting,
    CanvasStatus,
    CanvasTemplate,
    ExportFormat,
    ShareType,
)


class CanvasRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self, *, fields: dict[str, Any], sections: dict[str, list[Any]]
    ) -> BusinessCanvas:
        canvas = BusinessCanvas(**fields)
        for attr, items in sections.items():
            getattr(canvas, attr).extend(items)
        self._session.add(canvas)
        await self._session.flush()
        return canvas

    async def get(self, canvas_id: uuid.UUID, *, fresh: bool = False) -> BusinessCanvas | None:
        stmt = select(BusinessCanvas).where(BusinessCanvas.id == canvas_id)
        if fresh:
            # Re-read column values and eager collections after writes in this session.
            stmt = stmt.execution_options(populate_existing=True)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def exists(self, canvas_id: uuid.UUID) -> bool:
        stmt = select(BusinessCanvas.id).where(BusinessCanvas.id == canvas_id)
        return (await self._session.execute(stmt)).scalar_one_or_none() is not None

    async def find(
        self,
        *,
        is_active: bool | None = None,
        status: CanvasStatus | None = None,
        enterprise_id: uuid.UUID | None = None,
    ) -> list[BusinessCanvas]:
        stmt = select(BusinessCanvas)
        if is_active is not None:
            stmt = stmt.where(BusinessCanvas.is_active == is_active)
        if status is not None:
            stmt = stmt.where(BusinessCanvas.status == status)
        if enterprise_id is not None:
            stmt = stmt.where(BusinessCanvas.enterprise_id == enterprise_id)
        stmt = stmt.order_by(desc(BusinessCanvas.is_active), BusinessCanvas.name)
        return list((await self._session.execute(stmt)).scalars().all())

    async def update_fields(
        self, *, canvas: BusinessCanvas, fields: dict[str, Any]
    ) -> BusinessCanvas:
        for name, value in fields.items():
            setattr(canvas, name, value)
        now = datetime.utcnow()
        canvas.updated_at = now
        canvas.last_saved = now
        await self._session.flush()
        return canvas

    async def child_statuses(self, canvas_id: uuid.UUID) -> list[CanvasStatus]:
        stmt = select(BusinessCanvas.status).where(BusinessCanvas.parent_canvas_id == canvas_id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def descendant_levels(self, canvas_id: uuid.UUID) -> list[list[uuid.UUID]]:
        """
        Breadth-first walk of the hierarchy below `canvas_id`.

        Returns one list of ids per depth (children first, then grandchildren, ...). A visited
        set guards against accidental cycles in `parent_canvas_id`.
        """

        levels: list[list[uuid.UUID]] = []
        visited: set[uuid.UUID] = {canvas_id}
        frontier = [canvas_id]
        while frontier:
            stmt = select(BusinessCanvas.id).where(BusinessCanvas.parent_canvas_id.in_(frontier))
            found = (await self._session.execute(stmt)).scalars().all()
            ids = [i for i in found if i not in visited]
            if not ids:
                break
            visited.update(ids)
            levels.append(ids)
            frontier = ids
        return levels

    async def set_status(
        self, *, canvas_ids: list[uuid.UUID], status: CanvasStatus
    ) -> list[BusinessCanvas]:
        if not canvas_ids:
            return []
        stmt = select(BusinessCanvas).where(BusinessCanvas.id.in_(canvas_ids))
        canvases = list((await self._session.execute(stmt)).scalars().all())
        now = datetime.utcnow()
        for canvas in canvases:
            canvas.status = status
            canvas.updated_at = now
            canvas.last_saved = now
        await self._session.flush()
        return canvases

    async def delete_ids(self, canvas_ids: list[uuid.UUID]) -> int:
        stmt = select(BusinessCanvas).where(BusinessCanvas.id.in_(canvas_ids))
        canvases = list((await self._session.execute(stmt)).scalars().all())
        for canvas in canvases:
            # AsyncSession.delete loads cascaded collections (sharing/export rows) before deleting.
            await self._session.delete(canvas)
        await self._session.flush()
        return len(canvases)

    # --- sharing / exports --------------------------------------------------

    async def add_share(
        self,
        *,
        canvas_id: uuid.UUID,
        type: ShareType,
        value: str,
        permissions: dict[str, Any],
        expires_at: datetime | None = None,
    ) -> CanvasSharingSetting:
        share = CanvasSharingSetting(
            business_canvas_id=canvas_id,
            type=type,
            value=value,
            permissions=permissions,
            is_active=True,
            expires_at=expires_at,
        )
        self._session.add(share)
        await self._session.flush()
        return share

    async def list_shares(self, canvas_id: uuid.UUID) -> list[CanvasSharingSetting]:
        stmt = (
            select(CanvasSharingSetting)
            .where(
                CanvasSharingSetting.business_canvas_id == canvas_id,
                CanvasSharingSetting.is_active.is_(True),
            )
            .order_by(desc(CanvasSharingSetting.created_at))
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def add_export(
        self,
        *,
        canvas_id: uuid.UUID,
        format: ExportFormat,
        file_name: str,
        exported_by: str,
        export_metadata: dict[str, Any],
    ) -> CanvasExport:
        record = CanvasExport(
            business_canvas_id=canvas_id,
            format=format,
            file_name=file_name,
            exported_by=exported_by,
            export_metadata=export_metadata,
        )
        self._session.add(record)
        await self._session.flush()
        return record


class TemplateRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find(
        self, *, category: str | None = None, is_public: bool | None = None
    ) -> list[CanvasTemplate]:
        stmt = select(CanvasTemplate)
        if category is not None:
            stmt = stmt.where(CanvasTemplate.category == category)
        if is_public is not None:
            stmt = stmt.where(CanvasTemplate.is_public.is_(is_public))
        stmt = stmt.order_by(
            desc(CanvasTemplate.usage_count), desc(CanvasTemplate.rating), CanvasTemplate.name
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def create(
        self,
        *,
        name: str,
        description: str | None,
        category: str,
        tags: list[str],
        thumbnail: str | None,
        canvas: dict[str, Any],
        is_public: bool,
        created_by_id: uuid.UUID | None,
    ) -> CanvasTemplate:
        template = CanvasTemplate(
            name=name,
            description=description,
            category=category,
            tags=tags,
            thumbnail=thumbnail,
            canvas=canvas,
            is_public=is_public,
            usage_count=0,
            created_by_id=created_by_id,
        )
        self._session.add(template)
        await self._session.flush()
        await self._session.refresh(template, attribute_names=["created_by"])
        return template

    async def get(self, template_id: uuid.UUID) -> CanvasTemplate | None:
        return await self._session.get(CanvasTemplate, template_id)

    async def record_use(self, template: CanvasTemplate) -> None:
        template.usage_count = (template.usage_count or 0) + 1
        await self._session.flush()
