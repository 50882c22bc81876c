"""
capopt_platform.services.canvas_service

Canvas lifecycle service (transaction + persistence owner).

Responsibilities:
- Status changes guarded by the role/completeness rules, with cascading archive.
- Cascading delete of a canvas and its descendants.
- Export (records a `CanvasExport` row and renders the requested format).
- Sharing settings.
- New canvases instantiated from templates.
"""

from __future__ import annotations

import csv
import io
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from capopt_platform.auth.models import Principal
from capopt_platform.canvas.sections import SECTIONS, build_sections, item_title
from capopt_platform.canvas.serialize import (
    business_unit_summary,
    enterprise_summary,
    facility_summary,
    serialize_canvas,
)
from capopt_platform.canvas.status import (
    CanvasContentCounts,
    CanvasValidationResult,
    validate_status_transition,
)
from capopt_platform.db.models import (
    BusinessCanvas,
    CanvasSharingSetting,
    CanvasStatus,
    ExportFormat,
    SharePermission,
    ShareType,
)
from capopt_platform.db.repositories.canvases import CanvasRepo, TemplateRepo
from capopt_platform.observability.logging import get_logger
from capopt_platform.settings import Settings

log = get_logger(__name__)

EXPORT_MEDIA_TYPES: dict[ExportFormat, str] = {
    ExportFormat.pdf: "application/pdf",
    ExportFormat.png: "image/png",
    ExportFormat.svg: "image/svg+xml",
    ExportFormat.json: "application/json",
    ExportFormat.csv: "text/csv",
    ExportFormat.excel: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

_SHARE_MESSAGES: dict[ShareType, str] = {
    ShareType.public_link: "Canvas shared via link",
    ShareType.team_access: "Canvas shared with team",
}


class CanvasNotFoundError(Exception):
    pass


class CanvasStatusError(Exception):
    """A requested status change was rejected; carries the full validation result."""

    def __init__(self, result: CanvasValidationResult) -> None:
        super().__init__("; ".join(result.errors) or "Status change rejected")
        self.result = result


class ShareRequestError(ValueError):
    pass


class TemplateNotFoundError(Exception):
    pass


@dataclass(frozen=True, slots=True)
class ExportResult:
    file_name: str
    media_type: str
    # Exactly one of `document` (JSON) or `content` (text body) is set.
    document: dict[str, Any] | None = None
    content: str | None = None


class CanvasService:
    def __init__(self, *, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._canvases = CanvasRepo(session)

    async def _require(self, canvas_id: uuid.UUID, *, fresh: bool = False) -> BusinessCanvas:
        canvas = await self._canvases.get(canvas_id, fresh=fresh)
        if canvas is None:
            raise CanvasNotFoundError(str(canvas_id))
        return canvas

    # --- status ---------------------------------------------------------------

    async def check_status(
        self, *, canvas_id: uuid.UUID, target: str, principal: Principal
    ) -> CanvasValidationResult:
        """Dry run of `change_status`: evaluates the rules without writing anything."""
        canvas = await self._require(canvas_id)
        return await self._validate(canvas=canvas, target=target, principal=principal)

    async def _validate(
        self, *, canvas: BusinessCanvas, target: str, principal: Principal
    ) -> CanvasValidationResult:
        child_statuses: list[CanvasStatus] = []
        if target == CanvasStatus.archived.value:
            child_statuses = await self._canvases.child_statuses(canvas.id)
        return validate_status_transition(
            canvas=canvas,
            counts=CanvasContentCounts.from_canvas(canvas),
            user_role=principal.role,
            current_status=canvas.status.value,
            target_status=target,
            child_statuses=child_statuses,
        )

    async def change_status(
        self, *, canvas_id: uuid.UUID, target: str, principal: Principal
    ) -> tuple[BusinessCanvas, CanvasValidationResult, dict[str, Any] | None]:
        canvas = await self._require(canvas_id)
        result = await self._validate(canvas=canvas, target=target, principal=principal)
        if not result.is_valid:
            log.info(
                "canvas_status_rejected",
                canvas_id=str(canvas_id),
                current=canvas.status.value,
                target=target,
                errors=result.errors,
            )
            raise CanvasStatusError(result)

        status = CanvasStatus(target)
        cascade: dict[str, Any] | None = None
        if status == CanvasStatus.archived:
            levels = await self._canvases.descendant_levels(canvas.id)
            descendants = [i for level in levels for i in level]
            await self._canvases.set_status(canvas_ids=[canvas.id, *descendants], status=status)
            cascade = {
                "archived_count": len(descendants) + 1,
                "parent_canvas": canvas.name,
                "descendant_count": len(descendants),
            }
            log.info("canvas_archived", canvas_id=str(canvas.id), **cascade)
        else:
            await self._canvases.set_status(canvas_ids=[canvas.id], status=status)
            log.info("canvas_status_changed", canvas_id=str(canvas.id), status=status.value)

        await self._session.commit()
        return await self._require(canvas.id, fresh=True), result, cascade

    # --- delete -----------------------------------------------------------------

    async def delete_canvas(self, *, canvas_id: uuid.UUID) -> dict[str, Any]:
        canvas = await self._require(canvas_id)
        name = canvas.name
        levels = await self._canvases.descendant_levels(canvas.id)
        descendant_count = sum(len(level) for level in levels)

        # Deepest level first so no row is deleted while a child still points at it.
        for level in reversed(levels):
            await self._canvases.delete_ids(level)
        await self._canvases.delete_ids([canvas.id])
        await self._session.commit()

        info = {
            "deleted_count": descendant_count + 1,
            "parent_canvas": name,
            "descendant_count": descendant_count,
        }
        log.info("canvas_deleted", canvas_id=str(canvas_id), **info)
        return info

    # --- export -------------------------------------------------------------------

    async def export_canvas(
        self, *, canvas_id: uuid.UUID, format: ExportFormat, principal: Principal
    ) -> ExportResult:
        canvas = await self._require(canvas_id)
        file_name = f"business-canvas-{canvas.id}.{format.value.lower()}"

        await self._canvases.add_export(
            canvas_id=canvas.id,
            format=format,
            file_name=file_name,
            exported_by=principal.actor,
            export_metadata={
                "export_date": datetime.utcnow().isoformat(),
                "format": format.value,
                "canvas_name": canvas.name,
            },
        )
        await self._session.commit()
        log.info("canvas_exported", canvas_id=str(canvas.id), format=format.value)

        media_type = EXPORT_MEDIA_TYPES[format]
        if format == ExportFormat.json:
            return ExportResult(
                file_name=file_name, media_type=media_type, document=self._export_document(canvas)
            )
        if format == ExportFormat.csv:
            return ExportResult(file_name=file_name, media_type=media_type, content=_to_csv(canvas))
        return ExportResult(
            file_name=file_name,
            media_type=media_type,
            content=(
                f"Business Canvas Export: {canvas.name}\nFormat: {format.value}\n\n"
                f"This is a placeholder export. Actual {format.value} generation "
                "would be implemented here."
            ),
        )

    @staticmethod
    def _export_document(canvas: BusinessCanvas) -> dict[str, Any]:
        full = serialize_canvas(canvas)
        return {
            "canvas": {
                "id": full["id"],
                "name": full["name"],
                "description": full["description"],
                "version": full["version"],
                "status": full["status"],
                "created_at": full["created_at"],
                "updated_at": full["updated_at"],
            },
            "content": {spec.attr: full[spec.attr] for spec in SECTIONS},
            "context": {
                "enterprise": enterprise_summary(canvas.enterprise),
                "facility": facility_summary(canvas.facility),
                "business_unit": business_unit_summary(canvas.business_unit),
            },
        }

    # --- sharing ------------------------------------------------------------------

    async def share_canvas(
        self,
        *,
        canvas_id: uuid.UUID,
        type: ShareType,
        permission: SharePermission,
        principal: Principal,
        email: str | None = None,
    ) -> tuple[CanvasSharingSetting, str]:
        canvas = await self._require(canvas_id)

        if type == ShareType.email_invite:
            if not email:
                raise ShareRequestError("Email is required for EMAIL_INVITE sharing")
            value = email
            message = f"Canvas shared with {email}"
        elif type == ShareType.public_link:
            value = f"{self._settings.public_base_url.rstrip('/')}/canvas/{canvas.id}/shared"
            message = _SHARE_MESSAGES[type]
        else:
            value = "team-access"
            message = _SHARE_MESSAGES[type]

        share = await self._canvases.add_share(
            canvas_id=canvas.id,
            type=type,
            value=value,
            permissions={
                "access": permission.value,
                "granted_at": datetime.utcnow().isoformat(),
                "granted_by": principal.actor,
            },
        )
        await self._session.commit()
        log.info("canvas_shared", canvas_id=str(canvas.id), share_type=type.value)
        return share, message

    async def list_shares(self, *, canvas_id: uuid.UUID) -> list[CanvasSharingSetting]:
        await self._require(canvas_id)
        return await self._canvases.list_shares(canvas_id)

    # --- templates ----------------------------------------------------------------

    async def create_from_template(
        self, *, template_id: uuid.UUID, principal: Principal
    ) -> BusinessCanvas:
        templates = TemplateRepo(self._session)
        template = await templates.get(template_id)
        if template is None:
            raise TemplateNotFoundError(str(template_id))

        now = datetime.utcnow()
        canvas = await self._canvases.create(
            fields={
                "name": f"{template.name} - Copy",
                "description": f"Created from template: {template.name}",
                "version": "1.0",
                "status": CanvasStatus.draft,
                "edit_mode": "SINGLE_USER",
                "auto_save": True,
                "last_saved": now,
            },
            sections=build_sections(template.canvas or {}),
        )
        await templates.record_use(template)
        await self._session.commit()
        log.info(
            "canvas_created_from_template",
            canvas_id=str(canvas.id),
            template_id=str(template.id),
            user_id=str(principal.user_id),
        )
        return await self._require(canvas.id, fresh=True)


def _to_csv(canvas: BusinessCanvas) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["section", "title", "description"])
    for spec in SECTIONS:
        for item in getattr(canvas, spec.attr):
            description = item.description if spec.has_description else ""
            writer.writerow([spec.label, item_title(spec, item), description or ""])
    return buf.getvalue()


# --- Module Notes -----------------------------------------------------------
# Routers translate the service exceptions above into HTTP responses via the handlers
# registered in `capopt_platform.api.errors`.
