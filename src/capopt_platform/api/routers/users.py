"""
capopt_platform.api.routers.users

User administration endpoints.

Responsibilities:
- List accounts filtered by role and active flag.
- Create accounts with an explicit role (no self-service restrictions apply here).
- Admin-only: every route sits behind `require_roles`.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_409_CONFLICT

from capopt_platform.api.deps import db_session
from capopt_platform.api.views import user_view
from capopt_platform.auth.deps import require_roles
from capopt_platform.auth.models import Principal
from capopt_platform.auth.passwords import hash_password
from capopt_platform.db.models import UserRole
from capopt_platform.db.repositories.users import UserRepo
from capopt_platform.observability.logging import get_logger

log = get_logger(__name__)

_admin_only = require_roles(UserRole.admin.value)

router = APIRouter(prefix="/api/users", tags=["users"], dependencies=[Depends(_admin_only)])


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6, max_length=256)
    role: UserRole = UserRole.user


@router.get("")
async def list_users(
    role: UserRole | None = None,
    is_active: bool | None = None,
    session: AsyncSession = Depends(db_session),
) -> list[dict[str, Any]]:
    users = await UserRepo(session).find(role=role, is_active=is_active)
    return [user_view(u) for u in users]


@router.post("", status_code=HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    principal: Principal = Depends(_admin_only),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    users = UserRepo(session)
    if await users.get_by_email(body.email) is not None:
        raise HTTPException(
            status_code=HTTP_409_CONFLICT, detail="User with this email already exists"
        )

    user = await users.create(
        name=body.name,
        email=body.email,
        password_hash=hash_password(body.password),
        role=body.role,
    )
    await session.commit()
    log.info("user_created", user_id=str(user.id), role=body.role.value, by=principal.actor)
    return user_view(user)
