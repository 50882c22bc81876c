"""
capopt_platform.db.repositories.operating_models

Repository for `OperatingModel` aggregates and their six component collections.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from capopt_platform.db.models import (
    BusinessCanvas,
    BusinessUnit,
    Enterprise,
    Facility,
    OperatingModel,
    OperatingModelInformation,
    OperatingModelLocation,
    OperatingModelManagementSystem,
    OperatingModelOrganisation,
    OperatingModelSupplier,
    OperatingModelValueChain,
)

CHILD_MODELS: dict[str, type] = {
    "suppliers": OperatingModelSupplier,
    "locations": OperatingModelLocation,
    "value_chains": OperatingModelValueChain,
    "organisation": OperatingModelOrganisation,
    "information": OperatingModelInformation,
    "management_systems": OperatingModelManagementSystem,
}


class OperatingModelRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        fields: dict[str, Any],
        children: dict[str, list[dict[str, Any]]],
        created_by_id: uuid.UUID,
    ) -> OperatingModel:
        model = OperatingModel(created_by_id=created_by_id, **fields)
        for attr, rows in children.items():
            child = CHILD_MODELS[attr]
            getattr(model, attr).extend(child(**row) for row in rows)
        self._session.add(model)
        await self._session.flush()
        return model

    async def get(self, model_id: uuid.UUID, *, fresh: bool = False) -> OperatingModel | None:
        stmt = select(OperatingModel).where(OperatingModel.id == model_id)
        if fresh:
            stmt = stmt.execution_options(populate_existing=True)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def find(
        self,
        *,
        enterprise_id: uuid.UUID | None = None,
        facility_id: uuid.UUID | None = None,
        business_unit_id: uuid.UUID | None = None,
    ) -> list[OperatingModel]:
        # Inactive models are soft-deleted from listings.
        stmt = select(OperatingModel).where(OperatingModel.is_active.is_(True))
        if enterprise_id is not None:
            stmt = stmt.where(OperatingModel.enterprise_id == enterprise_id)
        if facility_id is not None:
            stmt = stmt.where(OperatingModel.facility_id == facility_id)
        if business_unit_id is not None:
            stmt = stmt.where(OperatingModel.business_unit_id == business_unit_id)
        stmt = stmt.order_by(desc(OperatingModel.updated_at))
        return list((await self._session.execute(stmt)).scalars().all())

    async def update(self, *, model: OperatingModel, fields: dict[str, Any]) -> OperatingModel:
        for name, value in fields.items():
            setattr(model, name, value)
        model.updated_at = datetime.utcnow()
        await self._session.flush()
        return model

    async def missing_references(self, fields: dict[str, Any]) -> list[str]:
        """Names of hierarchy and canvas id fields in `fields` that reference no row."""
        missing: list[str] = []
        for name, target in (
            ("enterprise_id", Enterprise),
            ("facility_id", Facility),
            ("business_unit_id", BusinessUnit),
            ("business_canvas_id", BusinessCanvas),
        ):
            value = fields.get(name)
            if value is not None and await self._session.get(target, value) is None:
                missing.append(name)
        return missing

    async def delete(self, model: OperatingModel) -> None:
        await self._session.delete(model)
        await self._session.flush()
