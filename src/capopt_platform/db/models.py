"""
capopt_platform.db.models

Core persistence schema for the platform.

Responsibilities:
- Organizational hierarchy: Enterprise -> Facility -> BusinessUnit.
- Business Model Canvas and its eight content sections, plus sharing/export/template records.
- Reference data: industries, sectors, facility types, operational streams, compliance frameworks.
- Critical controls, assets, processes and the join tables linking them.
- Operating models and their six component collections.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy import Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from capopt_platform.db.base import Base


def _utcnow() -> datetime:
    # Naive UTC timestamps, consistent across SQLite and Postgres.
    return datetime.utcnow()


def _pk() -> Mapped[uuid.UUID]:
    return mapped_column(SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4)


# --- Enums ------------------------------------------------------------------
# Enum values are part of the JSON API; treat them as a stable contract.


class UserRole(enum.StrEnum):
    admin = "ADMIN"
    manager = "MANAGER"
    user = "USER"
    auditor = "AUDITOR"
    superadmin = "SUPERADMIN"
    security_officer = "SECURITY_OFFICER"
    data_steward = "DATA_STEWARD"
    process_owner = "PROCESS_OWNER"
    control_owner = "CONTROL_OWNER"
    viewer = "VIEWER"
    external_auditor = "EXTERNAL_AUDITOR"
    maintenance = "MAINTENANCE"
    documentation_specialist = "DOCUMENTATION_SPECIALIST"


class CanvasStatus(enum.StrEnum):
    draft = "DRAFT"
    review = "REVIEW"
    published = "PUBLISHED"
    archived = "ARCHIVED"


class Priority(enum.StrEnum):
    low = "LOW"
    medium = "MEDIUM"
    high = "HIGH"
    critical = "CRITICAL"


class Likelihood(enum.StrEnum):
    low = "LOW"
    medium = "MEDIUM"
    high = "HIGH"
    very_high = "VERY_HIGH"


class ResourceType(enum.StrEnum):
    human = "HUMAN"
    financial = "FINANCIAL"
    physical = "PHYSICAL"
    intellectual = "INTELLECTUAL"
    digital = "DIGITAL"


class ShareType(enum.StrEnum):
    email_invite = "EMAIL_INVITE"
    public_link = "PUBLIC_LINK"
    team_access = "TEAM_ACCESS"


class SharePermission(enum.StrEnum):
    view = "VIEW"
    review = "REVIEW"
    edit = "EDIT"


class ExportFormat(enum.StrEnum):
    pdf = "PDF"
    png = "PNG"
    svg = "SVG"
    json = "JSON"
    csv = "CSV"
    excel = "EXCEL"


class AssetType(enum.StrEnum):
    equipment = "EQUIPMENT"
    facility = "FACILITY"
    system = "SYSTEM"
    process = "PROCESS"
    personnel = "PERSONNEL"
    information = "INFORMATION"


class AssetStatus(enum.StrEnum):
    operational = "OPERATIONAL"
    maintenance = "MAINTENANCE"
    offline = "OFFLINE"
    retired = "RETIRED"


class MonitorStatus(enum.StrEnum):
    active = "ACTIVE"
    inactive = "INACTIVE"
    maintenance = "MAINTENANCE"
    failed = "FAILED"


class ImprovementStatus(enum.StrEnum):
    proposed = "PROPOSED"
    approved = "APPROVED"
    in_progress = "IN_PROGRESS"
    completed = "COMPLETED"
    cancelled = "CANCELLED"


class ComplianceStatus(enum.StrEnum):
    compliant = "COMPLIANT"
    non_compliant = "NON_COMPLIANT"
    partially_compliant = "PARTIALLY_COMPLIANT"
    under_review = "UNDER_REVIEW"


class ProcessStatus(enum.StrEnum):
    draft = "DRAFT"
    active = "ACTIVE"
    deprecated = "DEPRECATED"
    archived = "ARCHIVED"


class SupplierType(enum.StrEnum):
    material_supplier = "MATERIAL_SUPPLIER"
    service_provider = "SERVICE_PROVIDER"
    technology_partner = "TECHNOLOGY_PARTNER"
    logistics_provider = "LOGISTICS_PROVIDER"
    consultant = "CONSULTANT"
    equipment_supplier = "EQUIPMENT_SUPPLIER"
    financial_partner = "FINANCIAL_PARTNER"
    regulatory_partner = "REGULATORY_PARTNER"


class LocationType(enum.StrEnum):
    headquarters = "HEADQUARTERS"
    production_facility = "PRODUCTION_FACILITY"
    warehouse = "WAREHOUSE"
    distribution_center = "DISTRIBUTION_CENTER"
    office = "OFFICE"
    laboratory = "LABORATORY"
    workshop = "WORKSHOP"
    field_office = "FIELD_OFFICE"
    remote_site = "REMOTE_SITE"


class ValueChainType(enum.StrEnum):
    primary = "PRIMARY"
    support = "SUPPORT"
    enabling = "ENABLING"
    customer_facing = "CUSTOMER_FACING"
    internal = "INTERNAL"


class OrganisationType(enum.StrEnum):
    functional = "FUNCTIONAL"
    divisional = "DIVISIONAL"
    matrix = "MATRIX"
    network = "NETWORK"
    team_based = "TEAM_BASED"
    project_based = "PROJECT_BASED"


# --- Users ------------------------------------------------------------------


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = _pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(512), nullable=False)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), nullable=False, default=UserRole.user)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


# --- Organizational hierarchy -----------------------------------------------


class Enterprise(Base):
    __tablename__ = "enterprises"

    id: Mapped[uuid.UUID] = _pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    legal_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    abn: Mapped[str | None] = mapped_column(String(32), nullable=True)
    acn: Mapped[str | None] = mapped_column(String(32), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    industry: Mapped[str | None] = mapped_column(String(64), nullable=True)
    sector: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)


class Facility(Base):
    __tablename__ = "facilities"

    id: Mapped[uuid.UUID] = _pk()
    enterprise_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("enterprises.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    facility_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)


class BusinessUnit(Base):
    __tablename__ = "business_units"

    id: Mapped[uuid.UUID] = _pk()
    enterprise_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("enterprises.id"), nullable=False, index=True
    )
    facility_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("facilities.id"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)


# --- Business Model Canvas --------------------------------------------------


class BusinessCanvas(Base):
    __tablename__ = "business_canvases"

    id: Mapped[uuid.UUID] = _pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[str] = mapped_column(String(32), nullable=False, default="1.0")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    status: Mapped[CanvasStatus] = mapped_column(
        Enum(CanvasStatus), nullable=False, default=CanvasStatus.draft, index=True
    )
    edit_mode: Mapped[str | None] = mapped_column(String(32), nullable=True)
    auto_save: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_saved: Mapped[datetime | None] = mapped_column(nullable=True)

    # Business metadata (checked by the REVIEW/PUBLISHED status rules).
    legal_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    abn: Mapped[str | None] = mapped_column(String(32), nullable=True)
    acn: Mapped[str | None] = mapped_column(String(32), nullable=True)
    industry: Mapped[str | None] = mapped_column(String(64), nullable=True)
    sector: Mapped[str | None] = mapped_column(String(64), nullable=True)
    sectors: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    primary_sector: Mapped[str | None] = mapped_column(String(64), nullable=True)
    sector_types: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    business_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    regional: Mapped[str | None] = mapped_column(String(64), nullable=True)
    primary_location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    coordinates: Mapped[str | None] = mapped_column(String(64), nullable=True)
    facility_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    operational_streams: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    strategic_objective: Mapped[str | None] = mapped_column(Text, nullable=True)
    value_proposition: Mapped[str | None] = mapped_column(Text, nullable=True)
    competitive_advantage: Mapped[str | None] = mapped_column(Text, nullable=True)
    annual_revenue: Mapped[float | None] = mapped_column(Float, nullable=True)
    employee_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    risk_profile: Mapped[str | None] = mapped_column(String(32), nullable=True)
    digital_maturity: Mapped[str | None] = mapped_column(String(32), nullable=True)
    compliance_requirements: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    regulatory_framework: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    enterprise_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("enterprises.id"), nullable=True, index=True
    )
    facility_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("facilities.id"), nullable=True, index=True
    )
    business_unit_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("business_units.id"), nullable=True, index=True
    )
    parent_canvas_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("business_canvases.id"), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    value_propositions: Mapped[list[ValueProposition]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    customer_segments: Mapped[list[CustomerSegment]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    revenue_streams: Mapped[list[RevenueStream]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    partnerships: Mapped[list[Partnership]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    resources: Mapped[list[Resource]] = relationship(cascade="all, delete-orphan", lazy="selectin")
    activities: Mapped[list[Activity]] = relationship(cascade="all, delete-orphan", lazy="selectin")
    cost_structures: Mapped[list[CostStructure]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    channels: Mapped[list[Channel]] = relationship(cascade="all, delete-orphan", lazy="selectin")

    enterprise: Mapped[Enterprise | None] = relationship(lazy="selectin")
    facility: Mapped[Facility | None] = relationship(lazy="selectin")
    business_unit: Mapped[BusinessUnit | None] = relationship(lazy="selectin")

    sharing_settings: Mapped[list[CanvasSharingSetting]] = relationship(
        cascade="all, delete-orphan"
    )
    exports: Mapped[list[CanvasExport]] = relationship(cascade="all, delete-orphan")

    __table_args__ = (Index("ix_canvases_active_name", "is_active", "name"),)


class _CanvasItem:
    # Shared columns for the eight canvas content sections.
    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    business_canvas_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("business_canvases.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


class ValueProposition(_CanvasItem, Base):
    __tablename__ = "value_propositions"

    description: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[Priority] = mapped_column(
        Enum(Priority), nullable=False, default=Priority.medium
    )


class CustomerSegment(_CanvasItem, Base):
    __tablename__ = "customer_segments"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    size: Mapped[float | None] = mapped_column(Float, nullable=True)
    priority: Mapped[Priority] = mapped_column(
        Enum(Priority), nullable=False, default=Priority.medium
    )


class RevenueStream(_CanvasItem, Base):
    __tablename__ = "revenue_streams"

    type: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    estimated_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    frequency: Mapped[str | None] = mapped_column(String(64), nullable=True)


class Partnership(_CanvasItem, Base):
    __tablename__ = "partnerships"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)


class Resource(_CanvasItem, Base):
    __tablename__ = "resources"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[ResourceType] = mapped_column(Enum(ResourceType), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    availability: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cost: Mapped[float | None] = mapped_column(Float, nullable=True)


class Activity(_CanvasItem, Base):
    __tablename__ = "activities"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[Priority] = mapped_column(
        Enum(Priority), nullable=False, default=Priority.medium
    )
    cost: Mapped[float | None] = mapped_column(Float, nullable=True)


class CostStructure(_CanvasItem, Base):
    __tablename__ = "cost_structures"

    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    frequency: Mapped[str | None] = mapped_column(String(64), nullable=True)


class Channel(_CanvasItem, Base):
    __tablename__ = "channels"

    type: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    effectiveness: Mapped[str | None] = mapped_column(String(64), nullable=True)
    cost: Mapped[float | None] = mapped_column(Float, nullable=True)


class CanvasSharingSetting(Base):
    __tablename__ = "canvas_sharing_settings"

    id: Mapped[uuid.UUID] = _pk()
    business_canvas_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("business_canvases.id"), nullable=False, index=True
    )
    type: Mapped[ShareType] = mapped_column(Enum(ShareType), nullable=False)
    value: Mapped[str] = mapped_column(String(512), nullable=False)
    permissions: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expires_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)


class CanvasExport(Base):
    __tablename__ = "canvas_exports"

    id: Mapped[uuid.UUID] = _pk()
    business_canvas_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("business_canvases.id"), nullable=False, index=True
    )
    format: Mapped[ExportFormat] = mapped_column(Enum(ExportFormat), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    exported_by: Mapped[str] = mapped_column(String(256), nullable=False)
    # `metadata` is reserved on declarative classes.
    export_metadata: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)


class CanvasTemplate(Base):
    __tablename__ = "canvas_templates"

    id: Mapped[uuid.UUID] = _pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(64), nullable=False, default="CUSTOM", index=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    thumbnail: Mapped[str | None] = mapped_column(String(512), nullable=True)
    canvas: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_by_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("users.id"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    created_by: Mapped[User | None] = relationship(lazy="selectin")


# --- Reference data ---------------------------------------------------------


class Industry(Base):
    __tablename__ = "industries"

    id: Mapped[uuid.UUID] = _pk()
    code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    sectors: Mapped[list[Sector]] = relationship(
        cascade="all, delete-orphan", lazy="selectin", order_by="Sector.sort_order"
    )


class Sector(Base):
    __tablename__ = "sectors"

    id: Mapped[uuid.UUID] = _pk()
    industry_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("industries.id"), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    risk_profile: Mapped[str | None] = mapped_column(String(32), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (UniqueConstraint("industry_id", "code", name="uq_sectors_industry_code"),)


class FacilityType(Base):
    __tablename__ = "facility_types"

    id: Mapped[uuid.UUID] = _pk()
    code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    risk_profile: Mapped[str | None] = mapped_column(String(32), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class IndustryFacilityTypeAssociation(Base):
    __tablename__ = "industry_facility_types"

    id: Mapped[uuid.UUID] = _pk()
    industry_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("industries.id"), nullable=False, index=True
    )
    facility_type_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("facility_types.id"), nullable=False
    )
    is_applicable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    facility_type: Mapped[FacilityType] = relationship(lazy="selectin")

    __table_args__ = (
        UniqueConstraint("industry_id", "facility_type_id", name="uq_industry_facility_type"),
    )


class IndustryOperationalStream(Base):
    __tablename__ = "industry_operational_streams"

    id: Mapped[uuid.UUID] = _pk()
    industry_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("industries.id"), nullable=False, index=True
    )
    # Empty string marks an industry-level stream (applies when a sector has none).
    sector: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    stream_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(64), nullable=False, default="OPERATIONAL")
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (Index("ix_streams_industry_sector", "industry_id", "sector"),)


class IndustryComplianceFramework(Base):
    __tablename__ = "industry_compliance_frameworks"

    id: Mapped[uuid.UUID] = _pk()
    industry_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("industries.id"), nullable=False, index=True
    )
    sector: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    framework_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(64), nullable=False, default="REGULATORY")
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (Index("ix_frameworks_industry_sector", "industry_id", "sector"),)


# --- Critical controls ------------------------------------------------------


class RiskCategory(Base):
    __tablename__ = "risk_categories"

    id: Mapped[uuid.UUID] = _pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str | None] = mapped_column(String(32), nullable=True)


class ControlType(Base):
    __tablename__ = "control_types"

    id: Mapped[uuid.UUID] = _pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)


class ControlEffectiveness(Base):
    __tablename__ = "control_effectiveness"

    id: Mapped[uuid.UUID] = _pk()
    rating: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    score: Mapped[int | None] = mapped_column(Integer, nullable=True)


class CriticalControl(Base):
    __tablename__ = "critical_controls"

    id: Mapped[uuid.UUID] = _pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    risk_category_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("risk_categories.id"), nullable=True
    )
    control_type_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("control_types.id"), nullable=True
    )
    effectiveness_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("control_effectiveness.id"), nullable=True
    )
    compliance_status: Mapped[ComplianceStatus] = mapped_column(
        Enum(ComplianceStatus), nullable=False, default=ComplianceStatus.under_review, index=True
    )
    priority: Mapped[Priority] = mapped_column(
        Enum(Priority), nullable=False, default=Priority.medium, index=True
    )
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    risk_category: Mapped[RiskCategory | None] = relationship(lazy="selectin")
    control_type: Mapped[ControlType | None] = relationship(lazy="selectin")
    effectiveness: Mapped[ControlEffectiveness | None] = relationship(lazy="selectin")
    created_by: Mapped[User] = relationship(lazy="selectin")

    # Link collections are loaded on demand by the repositories (`include=`).
    asset_links: Mapped[list[AssetControl]] = relationship(viewonly=True, lazy="raise")
    process_links: Mapped[list[ProcessControl]] = relationship(viewonly=True, lazy="raise")


# --- Assets -----------------------------------------------------------------


class Asset(Base):
    __tablename__ = "assets"

    id: Mapped[uuid.UUID] = _pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[AssetType] = mapped_column(Enum(AssetType), nullable=False, index=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[AssetStatus] = mapped_column(
        Enum(AssetStatus), nullable=False, default=AssetStatus.operational, index=True
    )
    criticality: Mapped[Priority] = mapped_column(
        Enum(Priority), nullable=False, default=Priority.medium, index=True
    )
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    created_by: Mapped[User] = relationship(lazy="selectin")
    risks: Mapped[list[AssetRisk]] = relationship(cascade="all, delete-orphan", lazy="selectin")
    protections: Mapped[list[AssetProtection]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    monitors: Mapped[list[AssetMonitor]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    optimisations: Mapped[list[AssetOptimisation]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    control_links: Mapped[list[AssetControl]] = relationship(viewonly=True, lazy="raise")


class _AssetChild:
    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    asset_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("assets.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class AssetRisk(_AssetChild, Base):
    __tablename__ = "asset_risks"

    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    severity: Mapped[Priority] = mapped_column(Enum(Priority), nullable=False)
    likelihood: Mapped[Likelihood | None] = mapped_column(Enum(Likelihood), nullable=True)
    mitigation: Mapped[str | None] = mapped_column(Text, nullable=True)


class AssetProtection(_AssetChild, Base):
    __tablename__ = "asset_protections"

    measure: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    effectiveness: Mapped[str | None] = mapped_column(String(64), nullable=True)


class AssetMonitor(_AssetChild, Base):
    __tablename__ = "asset_monitors"

    type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    status: Mapped[MonitorStatus] = mapped_column(
        Enum(MonitorStatus), nullable=False, default=MonitorStatus.active
    )
    frequency: Mapped[str | None] = mapped_column(String(64), nullable=True)


class AssetOptimisation(_AssetChild, Base):
    __tablename__ = "asset_optimisations"

    opportunity: Mapped[str | None] = mapped_column(Text, nullable=True)
    benefit: Mapped[str | None] = mapped_column(Text, nullable=True)
    cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    priority: Mapped[Priority] = mapped_column(
        Enum(Priority), nullable=False, default=Priority.medium
    )
    status: Mapped[ImprovementStatus] = mapped_column(
        Enum(ImprovementStatus), nullable=False, default=ImprovementStatus.proposed
    )


class AssetControl(Base):
    __tablename__ = "asset_controls"

    id: Mapped[uuid.UUID] = _pk()
    asset_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("assets.id"), nullable=False, index=True
    )
    control_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("critical_controls.id"), nullable=False, index=True
    )

    asset: Mapped[Asset] = relationship(viewonly=True, lazy="raise")
    control: Mapped[CriticalControl] = relationship(viewonly=True, lazy="raise")

    __table_args__ = (UniqueConstraint("asset_id", "control_id", name="uq_asset_control"),)


# --- Processes --------------------------------------------------------------


class Process(Base):
    __tablename__ = "processes"

    id: Mapped[uuid.UUID] = _pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[str] = mapped_column(String(32), nullable=False, default="1.0")
    status: Mapped[ProcessStatus] = mapped_column(
        Enum(ProcessStatus), nullable=False, default=ProcessStatus.draft, index=True
    )
    priority: Mapped[Priority] = mapped_column(
        Enum(Priority), nullable=False, default=Priority.medium, index=True
    )
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    created_by: Mapped[User] = relationship(lazy="selectin")
    steps: Mapped[list[ProcessStep]] = relationship(
        cascade="all, delete-orphan", lazy="selectin", order_by="ProcessStep.order_index"
    )
    inputs: Mapped[list[ProcessInput]] = relationship(cascade="all, delete-orphan", lazy="selectin")
    outputs: Mapped[list[ProcessOutput]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    metrics: Mapped[list[ProcessMetric]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    risks: Mapped[list[ProcessRisk]] = relationship(cascade="all, delete-orphan", lazy="selectin")
    control_links: Mapped[list[ProcessControl]] = relationship(viewonly=True, lazy="raise")


class _ProcessChild:
    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    process_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("processes.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class ProcessStep(_ProcessChild, Base):
    __tablename__ = "process_steps"

    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duration: Mapped[float | None] = mapped_column(Float, nullable=True)
    responsible: Mapped[str | None] = mapped_column(String(255), nullable=True)


class ProcessInput(_ProcessChild, Base):
    __tablename__ = "process_inputs"

    type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class ProcessOutput(_ProcessChild, Base):
    __tablename__ = "process_outputs"

    type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    quality: Mapped[str | None] = mapped_column(String(255), nullable=True)


class ProcessMetric(_ProcessChild, Base):
    __tablename__ = "process_metrics"

    value: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str | None] = mapped_column(String(32), nullable=True)
    target: Mapped[float | None] = mapped_column(Float, nullable=True)
    frequency: Mapped[str | None] = mapped_column(String(64), nullable=True)


class ProcessRisk(_ProcessChild, Base):
    __tablename__ = "process_risks"

    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    severity: Mapped[Priority] = mapped_column(Enum(Priority), nullable=False)
    likelihood: Mapped[Likelihood | None] = mapped_column(Enum(Likelihood), nullable=True)
    impact: Mapped[Priority | None] = mapped_column(Enum(Priority), nullable=True)
    mitigation: Mapped[str | None] = mapped_column(Text, nullable=True)


class ProcessControl(Base):
    __tablename__ = "process_controls"

    id: Mapped[uuid.UUID] = _pk()
    process_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("processes.id"), nullable=False, index=True
    )
    control_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("critical_controls.id"), nullable=False, index=True
    )

    process: Mapped[Process] = relationship(viewonly=True, lazy="raise")
    control: Mapped[CriticalControl] = relationship(viewonly=True, lazy="raise")

    __table_args__ = (UniqueConstraint("process_id", "control_id", name="uq_process_control"),)


# --- Operating models -------------------------------------------------------


class OperatingModel(Base):
    __tablename__ = "operating_models"

    id: Mapped[uuid.UUID] = _pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[str] = mapped_column(String(32), nullable=False, default="1.0")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    status: Mapped[CanvasStatus] = mapped_column(
        Enum(CanvasStatus), nullable=False, default=CanvasStatus.draft, index=True
    )
    edit_mode: Mapped[str | None] = mapped_column(String(32), nullable=True)
    auto_save: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_saved: Mapped[datetime | None] = mapped_column(nullable=True)

    enterprise_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("enterprises.id"), nullable=True, index=True
    )
    facility_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("facilities.id"), nullable=True, index=True
    )
    business_unit_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("business_units.id"), nullable=True, index=True
    )
    business_canvas_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("business_canvases.id"), nullable=True, index=True
    )
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    created_by: Mapped[User] = relationship(lazy="selectin")
    suppliers: Mapped[list[OperatingModelSupplier]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    locations: Mapped[list[OperatingModelLocation]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    value_chains: Mapped[list[OperatingModelValueChain]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OperatingModelValueChain.sequence",
    )
    organisation: Mapped[list[OperatingModelOrganisation]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    information: Mapped[list[OperatingModelInformation]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    management_systems: Mapped[list[OperatingModelManagementSystem]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )


class _OperatingModelChild:
    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    operating_model_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("operating_models.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class OperatingModelSupplier(_OperatingModelChild, Base):
    __tablename__ = "operating_model_suppliers"

    supplier_type: Mapped[SupplierType] = mapped_column(Enum(SupplierType), nullable=False)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    criticality: Mapped[Priority] = mapped_column(
        Enum(Priority), nullable=False, default=Priority.medium
    )
    contract_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    contract_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    risk_level: Mapped[Priority | None] = mapped_column(Enum(Priority), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(320), nullable=True)


class OperatingModelLocation(_OperatingModelChild, Base):
    __tablename__ = "operating_model_locations"

    location_type: Mapped[LocationType] = mapped_column(Enum(LocationType), nullable=False)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(128), nullable=True)
    country: Mapped[str | None] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="ACTIVE")
    criticality: Mapped[Priority] = mapped_column(
        Enum(Priority), nullable=False, default=Priority.medium
    )
    employee_count: Mapped[int | None] = mapped_column(Integer, nullable=True)


class OperatingModelValueChain(_OperatingModelChild, Base):
    __tablename__ = "operating_model_value_chains"

    value_chain_type: Mapped[ValueChainType] = mapped_column(
        Enum(ValueChainType), nullable=False
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    complexity: Mapped[str | None] = mapped_column(String(32), nullable=True)
    cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    risk_level: Mapped[Priority | None] = mapped_column(Enum(Priority), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="ACTIVE")


class OperatingModelOrganisation(_OperatingModelChild, Base):
    __tablename__ = "operating_model_organisation_units"

    org_type: Mapped[OrganisationType] = mapped_column(Enum(OrganisationType), nullable=False)
    level: Mapped[str | None] = mapped_column(String(32), nullable=True)
    manager: Mapped[str | None] = mapped_column(String(255), nullable=True)
    employee_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    responsibilities: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)


class OperatingModelInformation(_OperatingModelChild, Base):
    __tablename__ = "operating_model_information_assets"

    info_type: Mapped[str] = mapped_column(String(64), nullable=False)
    source: Mapped[str | None] = mapped_column(String(255), nullable=True)
    frequency: Mapped[str | None] = mapped_column(String(32), nullable=True)
    accessibility: Mapped[str | None] = mapped_column(String(32), nullable=True)


class OperatingModelManagementSystem(_OperatingModelChild, Base):
    __tablename__ = "operating_model_management_systems"

    system_type: Mapped[str] = mapped_column(String(64), nullable=False)
    vendor: Mapped[str | None] = mapped_column(String(255), nullable=True)
    version: Mapped[str | None] = mapped_column(String(32), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="ACTIVE")


# --- Module Notes -----------------------------------------------------------
# Content collections are eager-loaded (`selectin`) because every read path serializes them.
# Join-table links are `viewonly` + `lazy="raise"`: repositories opt in via loader options so
# async sessions never trigger implicit IO.
