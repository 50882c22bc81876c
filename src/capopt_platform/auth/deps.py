"""
capopt_platform.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert the session cookie (or a bearer token) into a typed `Principal`.
- Enforce RBAC via reusable dependency factories.
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from capopt_platform.api.deps import db_session, settings_dep
from capopt_platform.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from capopt_platform.auth.models import Principal
from capopt_platform.db.repositories.users import UserRepo
from capopt_platform.settings import Settings

_bearer = HTTPBearer(auto_error=False)


def _tokens_from_request(
    request: Request,
    creds: HTTPAuthorizationCredentials | None,
    settings: Settings,
) -> list[str]:
    # Cookie first (browser sessions), then Authorization header (API clients, tests).
    tokens: list[str] = []
    cookie = request.cookies.get(settings.auth_cookie_name)
    if cookie:
        tokens.append(cookie)
    if creds is not None and creds.credentials:
        tokens.append(creds.credentials)
    return tokens


def _decode_first_valid(tokens: list[str], cfg: JwtConfig) -> dict[str, Any]:
    # A stale cookie must not shadow a valid bearer token; report the last failure.
    error: JwtValidationError | None = None
    for token in tokens:
        try:
            return decode_and_validate(cfg=cfg, token=token)
        except JwtValidationError as e:
            error = e
    raise HTTPException(
        status_code=HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {error}"
    ) from error


async def get_principal(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
    session: AsyncSession = Depends(db_session),
) -> Principal:
    tokens = _tokens_from_request(request, creds, settings)
    if not tokens:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Authentication required")

    payload = _decode_first_valid(tokens, JwtConfig.from_settings(settings))

    try:
        user_id = uuid.UUID(str(payload.get("sub", "")))
    except ValueError as e:
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token subject"
        ) from e

    user = await UserRepo(session).get(user_id)
    if user is None or not user.is_active:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="User not found or inactive")

    structlog.contextvars.bind_contextvars(user_id=str(user.id))
    return Principal(user_id=user.id, email=user.email, name=user.name, role=user.role.value)


def require_roles(*required: str):
    allowed = frozenset(required)

    def _dep(principal: Principal = Depends(get_principal)) -> Principal:
        # Admins bypass role checks.
        if principal.is_admin:
            return principal
        if principal.role not in allowed:
            raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Insufficient role")
        return principal

    return _dep


# --- Module Notes -----------------------------------------------------------
# `get_principal` shares the request-scoped session with the endpoint (FastAPI caches
# `db_session` per request), so the user lookup costs one extra query.
