"""
capopt_platform.db.repositories.reference

Read-only access to reference data (industries, sectors, facility types, operational
streams, compliance frameworks).
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from capopt_platform.db.models import (
    FacilityType,
    Industry,
    IndustryComplianceFramework,
    IndustryFacilityTypeAssociation,
    IndustryOperationalStream,
)


class ReferenceRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def industries(self) -> list[Industry]:
        stmt = select(Industry).where(Industry.is_active.is_(True)).order_by(Industry.sort_order)
        return list((await self._session.execute(stmt)).scalars().all())

    async def industry(self, code_or_name: str) -> Industry | None:
        # Code first, then display name.
        stmt = select(Industry).where(Industry.code == code_or_name)
        found = (await self._session.execute(stmt)).scalar_one_or_none()
        if found is not None:
            return found
        stmt = select(Industry).where(Industry.name == code_or_name).limit(1)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def operational_streams(
        self, *, industry: Industry, sector: str | None = None
    ) -> list[IndustryOperationalStream]:
        """
        Active streams for the industry; narrowed to `sector` when given, falling back to the
        industry-level rows (sector "") if the sector has none of its own.
        """

        base = (
            select(IndustryOperationalStream)
            .where(
                IndustryOperationalStream.industry_id == industry.id,
                IndustryOperationalStream.is_active.is_(True),
            )
            .order_by(IndustryOperationalStream.sort_order)
        )
        if not sector:
            return list((await self._session.execute(base)).scalars().all())
        rows = list(
            (await self._session.execute(base.where(IndustryOperationalStream.sector == sector)))
            .scalars()
            .all()
        )
        if rows:
            return rows
        return list(
            (await self._session.execute(base.where(IndustryOperationalStream.sector == "")))
            .scalars()
            .all()
        )

    async def compliance_frameworks(
        self, *, industry: Industry, sector: str | None = None
    ) -> list[IndustryComplianceFramework]:
        base = (
            select(IndustryComplianceFramework)
            .where(
                IndustryComplianceFramework.industry_id == industry.id,
                IndustryComplianceFramework.is_active.is_(True),
            )
            .order_by(IndustryComplianceFramework.sort_order)
        )
        if not sector:
            return list((await self._session.execute(base)).scalars().all())
        rows = list(
            (await self._session.execute(base.where(IndustryComplianceFramework.sector == sector)))
            .scalars()
            .all()
        )
        if rows:
            return rows
        return list(
            (await self._session.execute(base.where(IndustryComplianceFramework.sector == "")))
            .scalars()
            .all()
        )

    async def facility_types_for(self, industry: Industry) -> list[IndustryFacilityTypeAssociation]:
        stmt = (
            select(IndustryFacilityTypeAssociation)
            .where(
                IndustryFacilityTypeAssociation.industry_id == industry.id,
                IndustryFacilityTypeAssociation.is_applicable.is_(True),
            )
            .order_by(IndustryFacilityTypeAssociation.sort_order)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def facility_types(self, *, category: str | None = None) -> list[FacilityType]:
        stmt = select(FacilityType).where(FacilityType.is_active.is_(True))
        if category:
            stmt = stmt.where(FacilityType.category == category)
        stmt = stmt.order_by(FacilityType.category, FacilityType.name)
        return list((await self._session.execute(stmt)).scalars().all())

    async def streams_for_sectors(
        self, *, industry: Industry, sectors: list[str]
    ) -> list[IndustryOperationalStream]:
        stmt = (
            select(IndustryOperationalStream)
            .where(
                IndustryOperationalStream.industry_id == industry.id,
                IndustryOperationalStream.sector.in_(sectors),
                IndustryOperationalStream.is_active.is_(True),
            )
            .order_by(IndustryOperationalStream.sort_order)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def frameworks_for_sectors(
        self, *, industry: Industry, sectors: list[str]
    ) -> list[IndustryComplianceFramework]:
        stmt = (
            select(IndustryComplianceFramework)
            .where(
                IndustryComplianceFramework.industry_id == industry.id,
                IndustryComplianceFramework.sector.in_(sectors),
                IndustryComplianceFramework.is_active.is_(True),
            )
            .order_by(IndustryComplianceFramework.sort_order)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def all_operational_streams(self) -> list[IndustryOperationalStream]:
        stmt = (
            select(IndustryOperationalStream)
            .where(IndustryOperationalStream.is_active.is_(True))
            .order_by(IndustryOperationalStream.stream_name)
        )
        return list((await self._session.execute(stmt)).scalars().all())
