"""
capopt_platform.api.routers.business_canvas

Business canvas endpoints.

Responsibilities:
- CRUD over canvases (metadata + nested section items on create).
- Status workflow: transitions, dry-run validation, guarded PATCH with archive cascade.
- Content quality report, export, sharing and templates.
"""

from __future__ import annotations

import json
import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_400_BAD_REQUEST

from capopt_platform.api.deps import (
    db_session,
    drop_required_nulls,
    parse_include,
    settings_dep,
)
from capopt_platform.auth.deps import get_principal
from capopt_platform.auth.models import Principal
from capopt_platform.canvas.quality import validate_content_quality
from capopt_platform.canvas.sections import (
    SECTIONS,
    ActivityCreate,
    ChannelCreate,
    CostStructureCreate,
    CustomerSegmentCreate,
    PartnershipCreate,
    ResourceCreate,
    RevenueStreamCreate,
    ValuePropositionCreate,
    build_item,
    resolve_section,
)
from capopt_platform.canvas.serialize import serialize_canvas
from capopt_platform.canvas.status import available_transitions, status_info
from capopt_platform.db.models import (
    BusinessCanvas,
    CanvasSharingSetting,
    CanvasStatus,
    CanvasTemplate,
    ExportFormat,
    SharePermission,
    ShareType,
)
from capopt_platform.db.repositories.canvases import CanvasRepo, TemplateRepo
from capopt_platform.observability.logging import get_logger
from capopt_platform.services.canvas_service import CanvasNotFoundError, CanvasService
from capopt_platform.settings import Settings

log = get_logger(__name__)

router = APIRouter(
    prefix="/api/business-canvas",
    tags=["business-canvas"],
    dependencies=[Depends(get_principal)],
)

_NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


# --- Schemas ------------------------------------------------------------------


class SectorSelection(BaseModel):
    sector_code: str = Field(min_length=1)
    is_primary: bool = False


class CanvasFields(BaseModel):
    """Metadata shared by create and update; every field optional so PUT stays partial."""

    description: str | None = None
    version: str | None = None
    is_active: bool | None = None
    edit_mode: str | None = None
    auto_save: bool | None = None
    legal_name: str | None = None
    abn: str | None = None
    acn: str | None = None
    industry: str | None = None
    sector: str | None = None
    sectors: list[str | SectorSelection] | None = None
    sector_types: list[str] | None = None
    business_type: str | None = None
    regional: str | None = None
    primary_location: str | None = None
    coordinates: str | None = None
    facility_type: str | None = None
    operational_streams: list[str] | None = None
    strategic_objective: str | None = None
    value_proposition: str | None = None
    competitive_advantage: str | None = None
    annual_revenue: float | None = None
    employee_count: int | None = Field(default=None, ge=0)
    risk_profile: str | None = None
    digital_maturity: str | None = None
    compliance_requirements: list[str] | None = None
    regulatory_framework: list[str] | None = None
    enterprise_id: uuid.UUID | None = None
    facility_id: uuid.UUID | None = None
    business_unit_id: uuid.UUID | None = None
    parent_canvas_id: uuid.UUID | None = None


class CanvasCreate(CanvasFields):
    name: str = Field(min_length=1, max_length=255)

    value_propositions: list[ValuePropositionCreate] = Field(default_factory=list)
    customer_segments: list[CustomerSegmentCreate] = Field(default_factory=list)
    revenue_streams: list[RevenueStreamCreate] = Field(default_factory=list)
    partnerships: list[PartnershipCreate] = Field(default_factory=list)
    resources: list[ResourceCreate] = Field(default_factory=list)
    activities: list[ActivityCreate] = Field(default_factory=list)
    cost_structures: list[CostStructureCreate] = Field(default_factory=list)
    channels: list[ChannelCreate] = Field(default_factory=list)


class CanvasUpdate(CanvasFields):
    name: str | None = Field(default=None, min_length=1, max_length=255)


class StatusRequest(BaseModel):
    status: str = Field(min_length=1)


class ExportRequest(BaseModel):
    format: ExportFormat


class ShareRequest(BaseModel):
    type: ShareType
    email: str | None = None
    permissions: SharePermission = SharePermission.view


class TemplateCreate(BaseModel):
    name: str | None = None
    description: str | None = None
    category: str = "CUSTOM"
    tags: list[str] = Field(default_factory=list)
    thumbnail: str | None = None
    canvas: dict[str, Any] | None = None
    is_public: bool = False


# --- Helpers --------------------------------------------------------------------


def _normalize_sectors(entries: list[str | SectorSelection]) -> tuple[list[str], str | None]:
    """
    Accept plain sector codes or `{sector_code, is_primary}` selections.

    Returns the stored code list and the primary sector: the flagged entry, else the first.
    """

    codes: list[str] = []
    primary: str | None = None
    for entry in entries:
        code = entry if isinstance(entry, str) else entry.sector_code
        if code not in codes:
            codes.append(code)
        if isinstance(entry, SectorSelection) and entry.is_primary and primary is None:
            primary = code
    if primary is None and codes:
        primary = codes[0]
    return codes, primary


def _metadata_fields(body: CanvasFields) -> dict[str, Any]:
    fields = body.model_dump(exclude_unset=True, include=set(CanvasFields.model_fields) | {"name"})
    if "sectors" in fields:
        codes, primary = _normalize_sectors(body.sectors or [])
        fields["sectors"] = codes
        fields["primary_sector"] = primary
    # Explicit nulls on list columns clear them.
    for name in ("sector_types", "operational_streams", "compliance_requirements",
                 "regulatory_framework"):
        if name in fields and fields[name] is None:
            fields[name] = []
    return fields


async def _fresh(canvases: CanvasRepo, canvas_id: uuid.UUID) -> BusinessCanvas:
    # Re-read after commit so collections reflect the stored rows.
    canvas = await canvases.get(canvas_id, fresh=True)
    if canvas is None:
        raise CanvasNotFoundError(str(canvas_id))
    return canvas


def _include_sections(raw: str | None) -> set[str]:
    wanted: set[str] = set()
    for name in parse_include(raw):
        spec = resolve_section(name)
        if spec is not None:
            wanted.add(spec.attr)
    return wanted


async def _check_parent(
    canvases: CanvasRepo, *, canvas_id: uuid.UUID | None, parent_id: uuid.UUID
) -> None:
    if canvas_id is not None:
        if parent_id == canvas_id:
            raise HTTPException(
                status_code=HTTP_400_BAD_REQUEST, detail="A canvas cannot be its own parent"
            )
        descendants = {i for level in await canvases.descendant_levels(canvas_id) for i in level}
        if parent_id in descendants:
            raise HTTPException(
                status_code=HTTP_400_BAD_REQUEST,
                detail="A canvas cannot be nested under one of its descendants",
            )
    if not await canvases.exists(parent_id):
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Parent canvas not found")


def _share_view(share: CanvasSharingSetting) -> dict[str, Any]:
    return {
        "id": str(share.id),
        "business_canvas_id": str(share.business_canvas_id),
        "type": share.type.value,
        "value": share.value,
        "permissions": share.permissions,
        "is_active": share.is_active,
        "expires_at": share.expires_at.isoformat() if share.expires_at else None,
        "created_at": share.created_at.isoformat(),
    }


def _template_view(t: CanvasTemplate) -> dict[str, Any]:
    creator = t.created_by
    return {
        "id": str(t.id),
        "name": t.name,
        "description": t.description,
        "category": t.category,
        "tags": t.tags,
        "thumbnail": t.thumbnail,
        "canvas": t.canvas,
        "is_public": t.is_public,
        "usage_count": t.usage_count,
        "rating": t.rating,
        "created_by": (
            {"id": str(creator.id), "name": creator.name, "email": creator.email}
            if creator is not None
            else None
        ),
        "created_at": t.created_at.isoformat(),
    }


def _service(session: AsyncSession, settings: Settings) -> CanvasService:
    return CanvasService(session=session, settings=settings)


# --- Templates (registered before `/{canvas_id}` routes) ------------------------


@router.get("/templates")
async def list_templates(
    category: str | None = None,
    is_public: bool | None = None,
    session: AsyncSession = Depends(db_session),
) -> list[dict[str, Any]]:
    templates = await TemplateRepo(session).find(category=category, is_public=is_public)
    return [_template_view(t) for t in templates]


@router.post("/templates", status_code=HTTP_201_CREATED)
async def create_template(
    body: TemplateCreate,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    if not body.name or not body.canvas:
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST, detail="Name and canvas data are required"
        )
    template = await TemplateRepo(session).create(
        name=body.name,
        description=body.description,
        category=body.category,
        tags=body.tags,
        thumbnail=body.thumbnail,
        canvas=body.canvas,
        is_public=body.is_public,
        created_by_id=principal.user_id,
    )
    await session.commit()
    log.info("canvas_template_created", template_id=str(template.id))
    return _template_view(template)


@router.post("/templates/{template_id}/load", status_code=HTTP_201_CREATED)
async def load_template(
    template_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    canvas = await _service(session, settings).create_from_template(
        template_id=template_id, principal=principal
    )
    return serialize_canvas(canvas)


# --- Canvases -------------------------------------------------------------------


@router.get("")
async def list_canvases(
    response: Response,
    is_active: bool | None = None,
    status: CanvasStatus | None = None,
    enterprise_id: uuid.UUID | None = None,
    include: str | None = Query(default=None, description="Comma-separated section names"),
    session: AsyncSession = Depends(db_session),
) -> list[dict[str, Any]]:
    canvases = await CanvasRepo(session).find(
        is_active=is_active, status=status, enterprise_id=enterprise_id
    )
    response.headers.update(_NO_CACHE_HEADERS)
    sections = _include_sections(include)
    return [serialize_canvas(c, sections=sections) for c in canvases]


@router.post("", status_code=HTTP_201_CREATED)
async def create_canvas(
    body: CanvasCreate,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    canvases = CanvasRepo(session)
    if body.parent_canvas_id is not None:
        await _check_parent(canvases, canvas_id=None, parent_id=body.parent_canvas_id)

    fields = _metadata_fields(body)
    fields["name"] = body.name
    sections = {
        spec.attr: [
            build_item(spec, canvas_id=None, payload=item) for item in getattr(body, spec.attr)
        ]
        for spec in SECTIONS
    }
    canvas = await canvases.create(fields=fields, sections=sections)
    await session.commit()
    log.info("canvas_created", canvas_id=str(canvas.id), user_id=str(principal.user_id))

    return serialize_canvas(await _fresh(canvases, canvas.id), context=True)


@router.get("/{canvas_id}")
async def get_canvas(
    canvas_id: uuid.UUID, session: AsyncSession = Depends(db_session)
) -> dict[str, Any]:
    canvas = await CanvasRepo(session).get(canvas_id)
    if canvas is None:
        raise CanvasNotFoundError(str(canvas_id))
    return serialize_canvas(canvas, context=True)


@router.put("/{canvas_id}")
async def update_canvas(
    canvas_id: uuid.UUID,
    body: CanvasUpdate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    canvases = CanvasRepo(session)
    canvas = await canvases.get(canvas_id)
    if canvas is None:
        raise CanvasNotFoundError(str(canvas_id))
    if body.parent_canvas_id is not None:
        await _check_parent(canvases, canvas_id=canvas.id, parent_id=body.parent_canvas_id)

    fields = _metadata_fields(body)
    if "name" in fields and fields["name"] is None:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Canvas name cannot be empty")
    fields = drop_required_nulls(BusinessCanvas, fields)
    await canvases.update_fields(canvas=canvas, fields=fields)
    await session.commit()
    log.info("canvas_updated", canvas_id=str(canvas.id), fields=sorted(fields))

    return serialize_canvas(await _fresh(canvases, canvas.id), context=True)


@router.patch("/{canvas_id}")
async def change_canvas_status(
    canvas_id: uuid.UUID,
    body: StatusRequest,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    canvas, result, cascade = await _service(session, settings).change_status(
        canvas_id=canvas_id, target=body.status, principal=principal
    )
    data = serialize_canvas(canvas, context=True)
    data["warnings"] = result.warnings
    if cascade is not None:
        data["cascade_info"] = cascade
    return data


@router.delete("/{canvas_id}")
async def delete_canvas(
    canvas_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    info = await _service(session, settings).delete_canvas(canvas_id=canvas_id)
    return {"message": "Business canvas and descendants deleted successfully", **info}


# --- Workflow -------------------------------------------------------------------


@router.get("/{canvas_id}/status-transitions")
async def status_transitions(
    canvas_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    canvas = await CanvasRepo(session).get(canvas_id)
    if canvas is None:
        raise CanvasNotFoundError(str(canvas_id))
    current = canvas.status.value
    return {
        "current_status": current,
        "status_info": status_info(current),
        "available_transitions": [
            {"status": target, **status_info(target)}
            for target in available_transitions(principal.role, current)
        ],
    }


@router.post("/{canvas_id}/status/validate")
async def validate_status(
    canvas_id: uuid.UUID,
    body: StatusRequest,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    result = await _service(session, settings).check_status(
        canvas_id=canvas_id, target=body.status, principal=principal
    )
    return {"target_status": body.status, **result.to_dict()}


@router.get("/{canvas_id}/quality")
async def content_quality(
    canvas_id: uuid.UUID, session: AsyncSession = Depends(db_session)
) -> dict[str, Any]:
    canvas = await CanvasRepo(session).get(canvas_id)
    if canvas is None:
        raise CanvasNotFoundError(str(canvas_id))
    issues = validate_content_quality(canvas)
    return {"issues": issues, "issue_count": len(issues)}


@router.post("/{canvas_id}/export")
async def export_canvas(
    canvas_id: uuid.UUID,
    body: ExportRequest,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> Response:
    export = await _service(session, settings).export_canvas(
        canvas_id=canvas_id, format=body.format, principal=principal
    )
    if export.document is not None:
        content = json.dumps(export.document, indent=2)
    else:
        content = export.content or ""
    return Response(
        content=content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.file_name}"'},
    )


@router.post("/{canvas_id}/share")
async def share_canvas(
    canvas_id: uuid.UUID,
    body: ShareRequest,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    share, message = await _service(session, settings).share_canvas(
        canvas_id=canvas_id,
        type=body.type,
        permission=body.permissions,
        principal=principal,
        email=body.email,
    )
    return {"success": True, "sharing_setting": _share_view(share), "message": message}


@router.get("/{canvas_id}/share")
async def list_shares(
    canvas_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    shares = await _service(session, settings).list_shares(canvas_id=canvas_id)
    return {"sharing_settings": [_share_view(s) for s in shares]}
