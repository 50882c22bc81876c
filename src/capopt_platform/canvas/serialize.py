"""
capopt_platform.canvas.serialize

JSON-ready views of canvases and their organizational context.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from capopt_platform.canvas.sections import SECTIONS, serialize_item
from capopt_platform.db.models import BusinessCanvas, BusinessUnit, Enterprise, Facility

CANVAS_FIELDS: tuple[str, ...] = (
    "name",
    "description",
    "version",
    "is_active",
    "status",
    "edit_mode",
    "auto_save",
    "legal_name",
    "abn",
    "acn",
    "industry",
    "sector",
    "sectors",
    "primary_sector",
    "sector_types",
    "business_type",
    "regional",
    "primary_location",
    "coordinates",
    "facility_type",
    "operational_streams",
    "strategic_objective",
    "value_proposition",
    "competitive_advantage",
    "annual_revenue",
    "employee_count",
    "risk_profile",
    "digital_maturity",
    "compliance_requirements",
    "regulatory_framework",
)


def _plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _id(value: Any) -> str | None:
    return None if value is None else str(value)


def enterprise_summary(e: Enterprise | None) -> dict[str, Any] | None:
    if e is None:
        return None
    return {"id": str(e.id), "name": e.name, "legal_name": e.legal_name, "industry": e.industry}


def facility_summary(f: Facility | None) -> dict[str, Any] | None:
    if f is None:
        return None
    return {"id": str(f.id), "name": f.name, "code": f.code, "facility_type": f.facility_type}


def business_unit_summary(b: BusinessUnit | None) -> dict[str, Any] | None:
    if b is None:
        return None
    return {"id": str(b.id), "name": b.name, "code": b.code}


def serialize_canvas(
    canvas: BusinessCanvas,
    *,
    sections: Iterable[str] | None = None,
    context: bool = False,
) -> dict[str, Any]:
    """
    `sections` selects which section attributes to embed (None embeds all eight, an empty
    iterable none). `context` adds enterprise/facility/business unit summaries.
    """

    data: dict[str, Any] = {"id": str(canvas.id)}
    for name in CANVAS_FIELDS:
        data[name] = _plain(getattr(canvas, name))
    data["enterprise_id"] = _id(canvas.enterprise_id)
    data["facility_id"] = _id(canvas.facility_id)
    data["business_unit_id"] = _id(canvas.business_unit_id)
    data["parent_canvas_id"] = _id(canvas.parent_canvas_id)
    data["last_saved"] = _plain(canvas.last_saved)
    data["created_at"] = canvas.created_at.isoformat()
    data["updated_at"] = canvas.updated_at.isoformat()

    wanted = None if sections is None else set(sections)
    for spec in SECTIONS:
        if wanted is None or spec.attr in wanted:
            data[spec.attr] = [serialize_item(spec, item) for item in getattr(canvas, spec.attr)]

    if context:
        data["enterprise"] = enterprise_summary(canvas.enterprise)
        data["facility"] = facility_summary(canvas.facility)
        data["business_unit"] = business_unit_summary(canvas.business_unit)
    return data
