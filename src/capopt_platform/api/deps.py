"""
capopt_platform.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings and DB sessions.
- Encapsulate app.state access patterns (settings/engine/sessionmaker).
- Small request-shaping helpers shared by routers (`include=` parsing, partial updates).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from capopt_platform.settings import Settings, get_settings


def settings_dep(request: Request) -> Settings:
    # The app factory pins its Settings on app.state; fall back to the env-derived instance.
    return getattr(request.app.state, "settings", None) or get_settings()


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # The sessionmaker is created in the lifespan of `capopt_platform.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is explicit in routers and services.
    async with session_factory() as session:
        yield session


def parse_include(raw: str | None) -> set[str]:
    """Split an `include=a,b,c` query value into a set of trimmed names."""
    if not raw:
        return set()
    return {part.strip() for part in raw.split(",") if part.strip()}


def drop_required_nulls(model: type, fields: dict[str, Any]) -> dict[str, Any]:
    """
    Remove explicit nulls aimed at NOT NULL columns of `model`.

    Partial updates treat such a null as "leave unchanged"; nullable columns can still be cleared.
    """
    required = {column.key for column in model.__table__.columns if not column.nullable}
    return {
        name: value
        for name, value in fields.items()
        if value is not None or name not in required
    }
