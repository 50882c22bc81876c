from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from capopt_platform.db.models import User, UserRole


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: UserRole = UserRole.user,
    ) -> User:
        user = User(
            name=name,
            email=email.lower(),
            password_hash=password_hash,
            role=role,
            is_active=True,
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def get(self, user_id: uuid.UUID) -> User | None:
        return await self._session.get(User, user_id)

    async def find(
        self, *, role: UserRole | None = None, is_active: bool | None = None
    ) -> list[User]:
        stmt = select(User)
        if role is not None:
            stmt = stmt.where(User.role == role)
        if is_active is not None:
            stmt = stmt.where(User.is_active.is_(is_active))
        stmt = stmt.order_by(desc(User.created_at))
        return list((await self._session.execute(stmt)).scalars().all())

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(func.lower(User.email) == email.lower())
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def touch_login(self, user: User) -> None:
        user.last_login = datetime.utcnow()
        await self._session.flush()

    async def update_profile(
        self,
        *,
        user: User,
        name: str | None = None,
        email: str | None = None,
    ) -> User:
        if name is not None:
            user.name = name
        if email is not None:
            user.email = email.lower()
        user.updated_at = datetime.utcnow()
        await self._session.flush()
        return user
