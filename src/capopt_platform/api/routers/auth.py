"""
capopt_platform.api.routers.auth

Account endpoints: register, login/logout (JWT cookie), profile.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)

from capopt_platform.api.deps import db_session, settings_dep
from capopt_platform.auth.deps import get_principal
from capopt_platform.auth.jwt import JwtConfig, issue_token
from capopt_platform.auth.models import Principal
from capopt_platform.auth.passwords import hash_password, verify_password
from capopt_platform.db.models import User, UserRole
from capopt_platform.db.repositories.users import UserRepo
from capopt_platform.observability.logging import get_logger
from capopt_platform.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    name: str = Field(min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6, max_length=256)
    role: UserRole | None = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=256)


class ProfileUpdateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr


def _user_summary(user: User) -> dict[str, Any]:
    return {"id": str(user.id), "name": user.name, "email": user.email, "role": user.role.value}


def _profile(user: User) -> dict[str, Any]:
    return {
        **_user_summary(user),
        "is_active": user.is_active,
        "last_login": user.last_login.isoformat() if user.last_login else None,
        "created_at": user.created_at.isoformat(),
        "updated_at": user.updated_at.isoformat(),
    }


def _token_for(user: User, settings: Settings) -> str:
    return issue_token(
        cfg=JwtConfig.from_settings(settings),
        subject=str(user.id),
        email=user.email,
        role=user.role.value,
        ttl=timedelta(days=settings.jwt_ttl_days),
    )


@router.post("/register", status_code=HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    users = UserRepo(session)
    if await users.get_by_email(body.email) is not None:
        raise HTTPException(
            status_code=HTTP_409_CONFLICT, detail="User with this email already exists"
        )

    # Self-assigned roles are a dev/test convenience; production sign-ups are plain users.
    role = body.role or UserRole.user
    if settings.env == "prod":
        role = UserRole.user

    user = await users.create(
        name=body.name,
        email=body.email,
        password_hash=hash_password(body.password),
        role=role,
    )
    await session.commit()
    log.info("user_registered", user_id=str(user.id), role=role.value)
    return {"success": True, "token": _token_for(user, settings), "user": _user_summary(user)}


@router.post("/login")
async def login(
    body: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    users = UserRepo(session)
    user = await users.get_by_email(body.email)
    if user is None or not verify_password(user.password_hash, body.password):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Account is deactivated")

    await users.touch_login(user)
    await session.commit()

    response.set_cookie(
        key=settings.auth_cookie_name,
        value=_token_for(user, settings),
        max_age=int(timedelta(days=settings.jwt_ttl_days).total_seconds()),
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )
    log.info("user_logged_in", user_id=str(user.id))
    return _user_summary(user)


@router.post("/logout")
async def logout(response: Response, settings: Settings = Depends(settings_dep)) -> dict[str, Any]:
    response.delete_cookie(key=settings.auth_cookie_name, path="/")
    return {"success": True}


@router.get("/profile")
async def get_profile(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    user = await UserRepo(session).get(principal.user_id)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User profile not found")
    return _profile(user)


@router.put("/profile")
async def update_profile(
    body: ProfileUpdateRequest,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    users = UserRepo(session)
    other = await users.get_by_email(body.email)
    if other is not None and other.id != principal.user_id:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Email is already taken")

    user = await users.get(principal.user_id)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User profile not found")
    await users.update_profile(user=user, name=body.name, email=body.email)
    await session.commit()
    return _profile(user)
