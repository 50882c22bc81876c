"""
capopt_platform.db.reference_data

Idempotent seeding of reference data used by canvas forms and the `/api/enums` and
`/api/frameworks` endpoints.

Responsibilities:
- Industries with their sectors.
- Facility types and their industry associations.
- Operational streams and compliance frameworks (sector-specific and industry-level).
- Critical control lookups (risk categories, control types, effectiveness ratings).
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from capopt_platform.db.models import (
    ControlEffectiveness,
    ControlType,
    FacilityType,
    Industry,
    IndustryComplianceFramework,
    IndustryFacilityTypeAssociation,
    IndustryOperationalStream,
    RiskCategory,
    Sector,
)
from capopt_platform.observability.logging import get_logger

log = get_logger(__name__)

# Industry-level rows use sector "" and act as a fallback for sectors without their own rows.
INDUSTRIES: list[dict[str, Any]] = [
    {
        "code": "MINING_METALS",
        "name": "Mining & Metals",
        "description": (
            "Extractive industries including mining, metals processing, and mineral exploration"
        ),
        "category": "EXTRACTIVE",
        "sectors": [
            ("COPPER", "Copper Mining", "COMMODITY", "MEDIUM"),
            ("GOLD", "Gold Mining", "COMMODITY", "HIGH"),
            ("URANIUM", "Uranium Mining", "COMMODITY", "CRITICAL"),
            ("IRON_ORE", "Iron Ore Mining", "COMMODITY", "MEDIUM"),
            ("COAL", "Coal Mining", "COMMODITY", "HIGH"),
            ("LITHIUM", "Lithium Mining", "COMMODITY", "MEDIUM"),
            ("EXPLORATION", "Exploration", "VALUE_CHAIN", "HIGH"),
            ("PRODUCTION", "Production", "VALUE_CHAIN", "MEDIUM"),
            ("PROCESSING", "Processing", "VALUE_CHAIN", "MEDIUM"),
            ("CLOSURE", "Closure & Rehabilitation", "VALUE_CHAIN", "HIGH"),
            ("CONTRACT_MINING", "Contract Mining Services", "SUPPORT_SERVICES", "MEDIUM"),
        ],
        "facility_types": [
            ("OPEN_PIT_MINE", "Open Pit Mine", "EXTRACTION", "HIGH"),
            ("UNDERGROUND_MINE", "Underground Mine", "EXTRACTION", "CRITICAL"),
            ("CRUSHING_PLANT", "Crushing Plant", "PROCESSING", "HIGH"),
            ("FLOTATION_PLANT", "Flotation Plant", "PROCESSING", "HIGH"),
            ("SMELTER", "Smelter", "PROCESSING", "CRITICAL"),
            ("REFINERY", "Refinery", "PROCESSING", "CRITICAL"),
            ("POWER_STATION", "Power Station", "INFRASTRUCTURE", "HIGH"),
            ("WATER_TREATMENT", "Water Treatment Plant", "INFRASTRUCTURE", "MEDIUM"),
            ("OFFICE", "Office Complex", "SUPPORT", "LOW"),
            ("LABORATORY", "Laboratory", "SUPPORT", "MEDIUM"),
        ],
        "operational_streams": {
            "": [
                "Exploration & Resource Definition",
                "Mine Planning",
                "Extraction",
                "Processing",
                "Environmental Management",
                "Safety & Health",
            ],
            "COAL": [
                "Open Cut Mining",
                "Underground Mining",
                "Coal Processing",
                "Transport & Logistics",
                "Rehabilitation",
                "Dust Control",
            ],
            "COPPER": [
                "Open Pit Mining",
                "Ore Processing",
                "Metallurgical Operations",
                "Tailings Management",
                "Water Management",
            ],
            "URANIUM": [
                "Uranium Extraction",
                "Radiation Safety",
                "Nuclear Compliance",
                "Transport Security",
            ],
        },
        "compliance_frameworks": {
            "": [
                "WHS Act 2011",
                "Mining Act 1992",
                "Environmental Protection Act",
                "ISO 45001 Occupational Health and Safety",
            ],
            "COAL": [
                "Coal Mining Safety and Health Act",
                "National Greenhouse and Energy Reporting Act",
                "Water Management Act",
            ],
            "URANIUM": [
                "Australian Radiation Protection and Nuclear Safety Act",
                "Nuclear Non-Proliferation (Safeguards) Act",
            ],
        },
    },
    {
        "code": "OIL_GAS",
        "name": "Oil & Gas",
        "description": "Upstream, midstream, and downstream oil and gas operations",
        "category": "EXTRACTIVE",
        "sectors": [
            ("UPSTREAM", "Upstream Operations", "VALUE_CHAIN", "HIGH"),
            ("MIDSTREAM", "Midstream Operations", "VALUE_CHAIN", "MEDIUM"),
            ("DOWNSTREAM", "Downstream Operations", "VALUE_CHAIN", "HIGH"),
            ("RENEWABLES", "Renewable Energy", "VALUE_CHAIN", "MEDIUM"),
        ],
        "facility_types": [
            ("ONSHORE_WELL", "Onshore Well", "EXTRACTION", "HIGH"),
            ("OFFSHORE_PLATFORM", "Offshore Platform", "EXTRACTION", "CRITICAL"),
            ("REFINERY", "Oil Refinery", "PROCESSING", "CRITICAL"),
            ("PIPELINE_TERMINAL", "Pipeline Terminal", "INFRASTRUCTURE", "HIGH"),
            ("LNG_TERMINAL", "LNG Terminal", "INFRASTRUCTURE", "CRITICAL"),
            ("CONTROL_ROOM", "Control Room", "SUPPORT", "MEDIUM"),
        ],
        "operational_streams": {
            "": [
                "Drilling Operations",
                "Production Operations",
                "Pipeline Operations",
                "Process Safety",
            ],
            "UPSTREAM": [
                "Exploration & Appraisal",
                "Well Construction",
                "Reservoir Management",
            ],
        },
        "compliance_frameworks": {
            "": [
                "Offshore Petroleum and Greenhouse Gas Storage Act",
                "WHS Act 2011",
                "API RP 75 Safety and Environmental Management",
            ],
        },
    },
    {
        "code": "CHEMICALS",
        "name": "Chemicals",
        "description": "Chemical manufacturing and processing industries",
        "category": "MANUFACTURING",
        "sectors": [
            ("BASIC_CHEMICALS", "Basic Chemicals", "VALUE_CHAIN", "HIGH"),
            ("SPECIALTY_CHEMICALS", "Specialty Chemicals", "VALUE_CHAIN", "MEDIUM"),
            ("PETROCHEMICALS", "Petrochemicals", "VALUE_CHAIN", "HIGH"),
        ],
        "facility_types": [
            ("CHEMICAL_PLANT", "Chemical Plant", "PROCESSING", "CRITICAL"),
            ("REACTOR_UNIT", "Reactor Unit", "PROCESSING", "CRITICAL"),
            ("STORAGE_TANK_FARM", "Storage Tank Farm", "INFRASTRUCTURE", "HIGH"),
        ],
        "operational_streams": {
            "": ["Batch Processing", "Continuous Processing", "Hazardous Materials Handling"],
        },
        "compliance_frameworks": {
            "": ["Industrial Chemicals Act 2019", "Major Hazard Facilities Regulations"],
        },
    },
]


# Static code -> label vocabularies served by `/api/enums`.
BUSINESS_TYPES: dict[str, str] = {
    "CORPORATION": "Corporation",
    "PARTNERSHIP": "Partnership",
    "SOLE_TRADER": "Sole Trader",
    "TRUST": "Trust",
    "JOINT_VENTURE": "Joint Venture",
    "SUBSIDIARY": "Subsidiary",
}

REGIONAL_CLASSIFICATIONS: dict[str, str] = {
    "METROPOLITAN": "Metropolitan",
    "REGIONAL": "Regional",
    "REMOTE": "Remote",
    "RURAL": "Rural",
    "COASTAL": "Coastal",
    "INLAND": "Inland",
}

RISK_PROFILES: dict[str, str] = {
    "LOW": "Low",
    "MEDIUM": "Medium",
    "HIGH": "High",
    "CRITICAL": "Critical",
}

# (name, description, colour)
RISK_CATEGORIES: list[tuple[str, str, str]] = [
    ("Safety", "Safety-related risks and controls", "#ef4444"),
    ("Environmental", "Environmental risks and controls", "#10b981"),
    ("Operational", "Operational risks and controls", "#3b82f6"),
    ("Financial", "Financial risks and controls", "#f59e0b"),
]

# (name, description, category)
CONTROL_TYPES: list[tuple[str, str, str]] = [
    ("Preventive", "Controls that prevent risks from occurring", "Primary"),
    ("Detective", "Controls that detect when risks have occurred", "Secondary"),
    ("Corrective", "Controls that correct issues after they occur", "Tertiary"),
]

# (rating, description, score)
CONTROL_EFFECTIVENESS: list[tuple[str, str, int]] = [
    ("Effective", "Control is working as intended", 5),
    ("Needs Attention", "Control requires improvement", 3),
    ("Critical", "Control is not effective and requires immediate attention", 1),
]


async def _seed_control_lookups(session: AsyncSession) -> None:
    categories = set((await session.execute(select(RiskCategory.name))).scalars().all())
    for name, description, color in RISK_CATEGORIES:
        if name not in categories:
            session.add(RiskCategory(name=name, description=description, color=color))

    types = set((await session.execute(select(ControlType.name))).scalars().all())
    for name, description, category in CONTROL_TYPES:
        if name not in types:
            session.add(ControlType(name=name, description=description, category=category))

    ratings = set((await session.execute(select(ControlEffectiveness.rating))).scalars().all())
    for rating, description, score in CONTROL_EFFECTIVENESS:
        if rating not in ratings:
            session.add(ControlEffectiveness(rating=rating, description=description, score=score))
    await session.flush()


async def seed_reference_data(session: AsyncSession) -> int:
    """
    Insert any reference rows that are not present yet. Returns the number of industries created.

    Existing industries (matched by code) are left untouched, so repeated startups are no-ops.
    """

    existing = set((await session.execute(select(Industry.code))).scalars().all())
    facility_types: dict[str, FacilityType] = {
        ft.code: ft for ft in (await session.execute(select(FacilityType))).scalars().all()
    }

    created = 0
    for order, spec in enumerate(INDUSTRIES, start=1):
        if spec["code"] in existing:
            continue

        industry = Industry(
            code=spec["code"],
            name=spec["name"],
            description=spec["description"],
            category=spec["category"],
            sort_order=order,
            sectors=[
                Sector(code=code, name=name, category=category, risk_profile=risk, sort_order=i)
                for i, (code, name, category, risk) in enumerate(spec["sectors"], start=1)
            ],
        )
        session.add(industry)
        await session.flush()

        for i, (code, name, category, risk) in enumerate(spec["facility_types"], start=1):
            ft = facility_types.get(code)
            if ft is None:
                ft = FacilityType(code=code, name=name, category=category, risk_profile=risk)
                session.add(ft)
                await session.flush()
                facility_types[code] = ft
            session.add(
                IndustryFacilityTypeAssociation(
                    industry_id=industry.id, facility_type_id=ft.id, sort_order=i
                )
            )

        for sector, streams in spec["operational_streams"].items():
            for i, stream in enumerate(streams, start=1):
                session.add(
                    IndustryOperationalStream(
                        industry_id=industry.id, sector=sector, stream_name=stream, sort_order=i
                    )
                )

        for sector, frameworks in spec["compliance_frameworks"].items():
            for i, framework in enumerate(frameworks, start=1):
                session.add(
                    IndustryComplianceFramework(
                        industry_id=industry.id,
                        sector=sector,
                        framework_name=framework,
                        sort_order=i,
                    )
                )
        created += 1

    await _seed_control_lookups(session)
    return created


async def seed_on_startup(session_factory: async_sessionmaker[AsyncSession]) -> None:
    async with session_factory() as session:
        created = await seed_reference_data(session)
        await session.commit()
    log.info("reference_data_seeded", industries_created=created)


# --- Module Notes -----------------------------------------------------------
# Bulk demo records (enterprises, sample canvases) are intentionally not seeded here.
