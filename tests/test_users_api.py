"""
tests.test_users_api

Admin-only user administration: listing with filters and account creation.
"""

from __future__ import annotations

import httpx
import pytest


@pytest.mark.asyncio
async def test_admin_creates_and_lists_users(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    r = await client.post(
        "/api/users",
        headers=admin_headers,
        json={
            "name": "Morgan Auditor",
            "email": "Morgan.Audit@capopt.io",
            "password": "secret123",
            "role": "AUDITOR",
        },
    )
    assert r.status_code == 201
    created = r.json()
    assert created["email"] == "morgan.audit@capopt.io"
    assert created["role"] == "AUDITOR"
    assert created["is_active"] is True
    assert "password_hash" not in created

    r = await client.post(
        "/api/users",
        headers=admin_headers,
        json={"name": "Plain", "email": "plain@capopt.io", "password": "secret123"},
    )
    assert r.json()["role"] == "USER"

    r = await client.get("/api/users", headers=admin_headers)
    emails = [u["email"] for u in r.json()]
    # Newest first.
    assert emails[:2] == ["plain@capopt.io", "morgan.audit@capopt.io"]

    r = await client.get("/api/users", headers=admin_headers, params={"role": "AUDITOR"})
    assert [u["email"] for u in r.json()] == ["morgan.audit@capopt.io"]

    r = await client.get("/api/users", headers=admin_headers, params={"is_active": "false"})
    assert r.json() == []


@pytest.mark.asyncio
async def test_duplicate_email_is_conflict(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    body = {"name": "Sam", "email": "sam@capopt.io", "password": "secret123"}
    assert (await client.post("/api/users", headers=admin_headers, json=body)).status_code == 201

    r = await client.post(
        "/api/users", headers=admin_headers, json={**body, "email": "SAM@capopt.io"}
    )
    assert r.status_code == 409
    assert r.json()["detail"] == "User with this email already exists"


@pytest.mark.asyncio
async def test_missing_fields_are_400(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    r = await client.post("/api/users", headers=admin_headers, json={"name": "No email"})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_non_admins_cannot_manage_users(
    client: httpx.AsyncClient, user_headers: dict[str, str], register_user
) -> None:
    body = {"name": "Sneaky", "email": "sneaky@capopt.io", "password": "secret123"}
    r = await client.post("/api/users", headers=user_headers, json=body)
    assert r.status_code == 403

    superadmin = await register_user("SUPERADMIN")
    assert (await client.get("/api/users", headers=superadmin)).status_code == 200

    assert (await client.get("/api/users")).status_code == 401
