"""
capopt_platform.api.views

JSON views of users, critical controls, assets, processes and operating models.

Column values are read from the mapper so new columns show up without touching the views;
relationships are added explicitly, and join-table links only when `include` asks for them.
"""

from __future__ import annotations

import enum
import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import inspect

from capopt_platform.db.models import Asset, CriticalControl, OperatingModel, Process, User


def _plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


def columns(obj: Any) -> dict[str, Any]:
    return {attr.key: _plain(getattr(obj, attr.key)) for attr in inspect(obj).mapper.column_attrs}


def user_summary(user: User | None) -> dict[str, Any] | None:
    if user is None:
        return None
    return {"id": str(user.id), "name": user.name, "email": user.email}


def user_view(user: User) -> dict[str, Any]:
    data = columns(user)
    data.pop("password_hash")
    return data


def control_view(control: CriticalControl, *, include: Iterable[str] = ()) -> dict[str, Any]:
    include = set(include)
    data = columns(control)
    data["risk_category"] = columns(control.risk_category) if control.risk_category else None
    data["control_type"] = columns(control.control_type) if control.control_type else None
    data["effectiveness"] = columns(control.effectiveness) if control.effectiveness else None
    data["created_by"] = user_summary(control.created_by)
    if "assets" in include:
        data["assets"] = [columns(link.asset) for link in control.asset_links]
    if "processes" in include:
        data["processes"] = [columns(link.process) for link in control.process_links]
    return data


def asset_view(asset: Asset, *, include: Iterable[str] = ()) -> dict[str, Any]:
    data = columns(asset)
    data["created_by"] = user_summary(asset.created_by)
    for attr in ("risks", "protections", "monitors", "optimisations"):
        data[attr] = [columns(child) for child in getattr(asset, attr)]
    if "controls" in set(include):
        data["controls"] = [columns(link.control) for link in asset.control_links]
    return data


def process_view(process: Process, *, include: Iterable[str] = ()) -> dict[str, Any]:
    data = columns(process)
    data["created_by"] = user_summary(process.created_by)
    for attr in ("steps", "inputs", "outputs", "metrics", "risks"):
        data[attr] = [columns(child) for child in getattr(process, attr)]
    if "controls" in set(include):
        data["controls"] = [columns(link.control) for link in process.control_links]
    return data


def operating_model_view(model: OperatingModel) -> dict[str, Any]:
    data = columns(model)
    data["created_by"] = user_summary(model.created_by)
    for attr in (
        "suppliers",
        "locations",
        "value_chains",
        "organisation",
        "information",
        "management_systems",
    ):
        data[attr] = [columns(child) for child in getattr(model, attr)]
    return data
