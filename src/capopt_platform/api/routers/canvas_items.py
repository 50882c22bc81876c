"""
capopt_platform.api.routers.canvas_items

CRUD endpoints for the eight canvas sections, one router per section built from the registry:
`/api/business-canvas/{canvas_id}/<section-slug>[/{item_id}]`.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_404_NOT_FOUND

from capopt_platform.api.deps import db_session, drop_required_nulls
from capopt_platform.auth.deps import get_principal
from capopt_platform.canvas.sections import SECTIONS, SectionSpec, build_item, serialize_item
from capopt_platform.db.repositories.canvas_items import CanvasItemRepo
from capopt_platform.db.repositories.canvases import CanvasRepo
from capopt_platform.observability.logging import get_logger
from capopt_platform.services.canvas_service import CanvasNotFoundError

log = get_logger(__name__)


def build_section_router(spec: SectionSpec) -> APIRouter:
    router = APIRouter(
        prefix=f"/api/business-canvas/{{canvas_id}}/{spec.slug}",
        tags=["business-canvas"],
        dependencies=[Depends(get_principal)],
    )
    not_found = f"{spec.label} item not found"

    async def require_canvas(session: AsyncSession, canvas_id: uuid.UUID) -> None:
        if not await CanvasRepo(session).exists(canvas_id):
            raise CanvasNotFoundError(str(canvas_id))

    @router.get("", name=f"list_{spec.attr}")
    async def list_items(
        canvas_id: uuid.UUID, session: AsyncSession = Depends(db_session)
    ) -> list[dict[str, Any]]:
        await require_canvas(session, canvas_id)
        items = await CanvasItemRepo(session, spec).list_for_canvas(canvas_id)
        return [serialize_item(spec, item) for item in items]

    @router.post("", status_code=HTTP_201_CREATED, name=f"create_{spec.attr}")
    async def create_item(
        canvas_id: uuid.UUID,
        body: dict[str, Any] = Body(...),
        session: AsyncSession = Depends(db_session),
    ) -> dict[str, Any]:
        await require_canvas(session, canvas_id)
        payload = spec.create_schema.model_validate(body)
        item = await CanvasItemRepo(session, spec).add(
            build_item(spec, canvas_id=canvas_id, payload=payload)
        )
        await session.commit()
        log.info("canvas_item_created", section=spec.attr, canvas_id=str(canvas_id))
        return serialize_item(spec, item)

    @router.put("/{item_id}", name=f"update_{spec.attr}")
    async def update_item(
        canvas_id: uuid.UUID,
        item_id: uuid.UUID,
        body: dict[str, Any] = Body(...),
        session: AsyncSession = Depends(db_session),
    ) -> dict[str, Any]:
        await require_canvas(session, canvas_id)
        items = CanvasItemRepo(session, spec)
        item = await items.get(canvas_id=canvas_id, item_id=item_id)
        if item is None:
            raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail=not_found)

        payload = spec.update_schema.model_validate(body)
        fields = drop_required_nulls(spec.model, payload.model_dump(exclude_unset=True))
        await items.update(item=item, fields=fields)
        await session.commit()
        return serialize_item(spec, item)

    @router.delete("/{item_id}", name=f"delete_{spec.attr}")
    async def delete_item(
        canvas_id: uuid.UUID,
        item_id: uuid.UUID,
        session: AsyncSession = Depends(db_session),
    ) -> dict[str, Any]:
        await require_canvas(session, canvas_id)
        items = CanvasItemRepo(session, spec)
        item = await items.get(canvas_id=canvas_id, item_id=item_id)
        if item is None:
            raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail=not_found)
        await items.delete(item)
        await session.commit()
        log.info("canvas_item_deleted", section=spec.attr, canvas_id=str(canvas_id))
        return {"message": f"{spec.label} item deleted successfully"}

    return router


routers: list[APIRouter] = [build_section_router(spec) for spec in SECTIONS]
