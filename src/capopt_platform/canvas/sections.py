"""
capopt_platform.canvas.sections

Registry of the eight Business Model Canvas sections.

Each entry ties together the URL slug, the ORM model / relationship attribute on
`BusinessCanvas`, request schemas, the field used as an item's "title" and the
minimum item count required before a canvas may enter REVIEW.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from capopt_platform.db.models import (
    Activity,
    Channel,
    CostStructure,
    CustomerSegment,
    Partnership,
    Priority,
    Resource,
    ResourceType,
    RevenueStream,
    ValueProposition,
)

# --- Request schemas --------------------------------------------------------


class ValuePropositionCreate(BaseModel):
    description: str = Field(min_length=1)
    priority: Priority | None = None


class ValuePropositionUpdate(BaseModel):
    description: str | None = Field(default=None, min_length=1)
    priority: Priority | None = None


class CustomerSegmentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    size: float | None = None
    priority: Priority | None = None


class CustomerSegmentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    size: float | None = None
    priority: Priority | None = None


class RevenueStreamCreate(BaseModel):
    type: str = Field(min_length=1, max_length=255)
    description: str | None = None
    estimated_value: float | None = None
    frequency: str | None = None


class RevenueStreamUpdate(BaseModel):
    type: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    estimated_value: float | None = None
    frequency: str | None = None


class PartnershipCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    type: str | None = None
    description: str | None = None
    value: str | None = None


class PartnershipUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    type: str | None = None
    description: str | None = None
    value: str | None = None


class ResourceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    type: ResourceType
    description: str | None = None
    availability: str | None = None
    cost: float | None = None


class ResourceUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    type: ResourceType | None = None
    description: str | None = None
    availability: str | None = None
    cost: float | None = None


class ActivityCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    priority: Priority | None = None
    cost: float | None = None


class ActivityUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    priority: Priority | None = None
    cost: float | None = None


class CostStructureCreate(BaseModel):
    description: str = Field(min_length=1)
    category: str | None = None
    amount: float | None = None
    frequency: str | None = None


class CostStructureUpdate(BaseModel):
    description: str | None = Field(default=None, min_length=1)
    category: str | None = None
    amount: float | None = None
    frequency: str | None = None


class ChannelCreate(BaseModel):
    type: str = Field(min_length=1, max_length=255)
    description: str | None = None
    effectiveness: str | None = None
    cost: float | None = None


class ChannelUpdate(BaseModel):
    type: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    effectiveness: str | None = None
    cost: float | None = None


# --- Registry ---------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SectionSpec:
    slug: str
    attr: str
    label: str
    model: type
    title_field: str
    # False when the title field *is* the description (nothing separate to check).
    has_description: bool
    create_schema: type[BaseModel]
    update_schema: type[BaseModel]
    review_minimum: int

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self.create_schema.model_fields)


SECTIONS: tuple[SectionSpec, ...] = (
    SectionSpec(
        "value-propositions", "value_propositions", "Value Propositions", ValueProposition,
        "description", False, ValuePropositionCreate, ValuePropositionUpdate, 3,
    ),
    SectionSpec(
        "customer-segments", "customer_segments", "Customer Segments", CustomerSegment,
        "name", True, CustomerSegmentCreate, CustomerSegmentUpdate, 2,
    ),
    SectionSpec(
        "revenue-streams", "revenue_streams", "Revenue Streams", RevenueStream,
        "type", True, RevenueStreamCreate, RevenueStreamUpdate, 2,
    ),
    SectionSpec(
        "partnerships", "partnerships", "Key Partnerships", Partnership,
        "name", True, PartnershipCreate, PartnershipUpdate, 2,
    ),
    SectionSpec(
        "resources", "resources", "Key Resources", Resource,
        "name", True, ResourceCreate, ResourceUpdate, 3,
    ),
    SectionSpec(
        "activities", "activities", "Key Activities", Activity,
        "name", True, ActivityCreate, ActivityUpdate, 3,
    ),
    SectionSpec(
        "cost-structures", "cost_structures", "Cost Structures", CostStructure,
        "description", False, CostStructureCreate, CostStructureUpdate, 2,
    ),
    SectionSpec(
        "channels", "channels", "Channels", Channel,
        "type", True, ChannelCreate, ChannelUpdate, 2,
    ),
)

SECTIONS_BY_SLUG: dict[str, SectionSpec] = {s.slug: s for s in SECTIONS}
SECTIONS_BY_ATTR: dict[str, SectionSpec] = {s.attr: s for s in SECTIONS}


def _plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    return value


def item_title(spec: SectionSpec, item: Any) -> str:
    raw = item.get(spec.title_field) if isinstance(item, dict) else getattr(item, spec.title_field)
    return "" if raw is None else str(_plain(raw))


def serialize_item(spec: SectionSpec, item: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": str(item.id),
        "business_canvas_id": str(item.business_canvas_id),
    }
    for name in spec.fields:
        data[name] = _plain(getattr(item, name))
    data["created_at"] = item.created_at.isoformat()
    data["updated_at"] = item.updated_at.isoformat()
    return data


def build_item(spec: SectionSpec, *, canvas_id: Any, payload: BaseModel) -> Any:
    # Omitted optional columns fall back to the model defaults (e.g. priority=MEDIUM).
    return spec.model(business_canvas_id=canvas_id, **payload.model_dump(exclude_none=True))


_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def resolve_section(name: str) -> SectionSpec | None:
    """Look a section up by attribute (`cost_structures`), slug or camelCase name."""
    key = _CAMEL_BOUNDARY.sub("_", name.strip()).replace("-", "_").lower()
    return SECTIONS_BY_ATTR.get(key)


def build_sections(raw: Mapping[str, Any]) -> dict[str, list[Any]]:
    """
    Validate nested section payloads (`{"value_propositions": [{...}, ...], ...}`) and build
    unsaved ORM items keyed by relationship attribute. Keys that name no section are ignored.
    """

    built: dict[str, list[Any]] = {}
    for key, items in raw.items():
        spec = resolve_section(key)
        if spec is None or not items:
            continue
        built[spec.attr] = [
            build_item(spec, canvas_id=None, payload=spec.create_schema.model_validate(item))
            for item in items
        ]
    return built


# --- Module Notes -----------------------------------------------------------
# `SECTIONS` is the single registry of section kinds; the generic section routers,
# canvas serialization, cloning and quality checks all iterate it.
