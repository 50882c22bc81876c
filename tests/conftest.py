"""
tests.conftest

Shared fixtures: an app per test backed by a temporary SQLite file, an in-process HTTP
client, and bearer headers for freshly registered users.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from capopt_platform.api.app import create_app
from capopt_platform.settings import Settings


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'capopt-test.db'}",
        jwt_secret="test-secret-with-at-least-32-bytes!!",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not run lifespan events; drive them explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def _register(client: httpx.AsyncClient, *, role: str) -> dict[str, str]:
    email = f"{role.lower()}-{uuid.uuid4().hex[:8]}@capopt.io"
    r = await client.post(
        "/api/auth/register",
        json={
            "name": f"{role.title()} Tester",
            "email": email,
            "password": "secret123",
            "role": role,
        },
    )
    assert r.status_code == 201, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}


@pytest.fixture
def register_user(client: httpx.AsyncClient) -> Callable[..., Awaitable[dict[str, str]]]:
    """Register a fresh user with the given role and return bearer headers for it."""

    async def _do(role: str = "USER") -> dict[str, str]:
        return await _register(client, role=role)

    return _do


@pytest_asyncio.fixture
async def admin_headers(client: httpx.AsyncClient) -> dict[str, str]:
    return await _register(client, role="ADMIN")


@pytest_asyncio.fixture
async def user_headers(client: httpx.AsyncClient) -> dict[str, str]:
    return await _register(client, role="USER")
