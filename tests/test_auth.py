"""
tests.test_auth

Account endpoints, token handling and the role guard.
"""

from __future__ import annotations

import httpx
import pytest

from capopt_platform.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate, issue_token
from capopt_platform.auth.passwords import hash_password, verify_password
from capopt_platform.settings import Settings

SECRET = "unit-test-secret-with-32-plus-bytes"


def test_password_hash_round_trip() -> None:
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password(hashed, "secret123")
    assert not verify_password(hashed, "wrong")


def test_token_rejected_for_other_audience() -> None:
    cfg = JwtConfig.from_settings(Settings(jwt_secret=SECRET))
    token = issue_token(cfg=cfg, subject="u1", email="u1@capopt.io", role="USER")
    assert decode_and_validate(cfg=cfg, token=token)["role"] == "USER"

    other = JwtConfig.from_settings(Settings(jwt_secret=SECRET, jwt_audience="someone-else"))
    with pytest.raises(JwtValidationError):
        decode_and_validate(cfg=other, token=token)


@pytest.mark.asyncio
async def test_register_login_profile_flow(client: httpx.AsyncClient) -> None:
    r = await client.post(
        "/api/auth/register",
        json={"name": "Dana Ops", "email": "Dana@capopt.io", "password": "secret123"},
    )
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["user"]["email"] == "dana@capopt.io"
    assert body["user"]["role"] == "USER"

    r = await client.post(
        "/api/auth/register",
        json={"name": "Dana Again", "email": "dana@capopt.io", "password": "secret123"},
    )
    assert r.status_code == 409

    r = await client.post(
        "/api/auth/login", json={"email": "dana@capopt.io", "password": "not-the-one"}
    )
    assert r.status_code == 401

    r = await client.post(
        "/api/auth/login", json={"email": "dana@capopt.io", "password": "secret123"}
    )
    assert r.status_code == 200
    set_cookie = r.headers["set-cookie"]
    assert set_cookie.startswith("capopt_jwt=")
    assert "httponly" in set_cookie.lower()
    token = set_cookie.split(";", 1)[0].split("=", 1)[1]

    headers = {"Authorization": f"Bearer {token}"}
    r = await client.get("/api/auth/profile", headers=headers)
    assert r.status_code == 200
    assert r.json()["last_login"] is not None

    r = await client.put(
        "/api/auth/profile", headers=headers, json={"name": "Dana O.", "email": "dana.o@capopt.io"}
    )
    assert r.status_code == 200
    assert r.json()["email"] == "dana.o@capopt.io"


@pytest.mark.asyncio
async def test_profile_email_conflict(client: httpx.AsyncClient, register_user) -> None:
    await client.post(
        "/api/auth/register",
        json={"name": "Taken", "email": "taken@capopt.io", "password": "secret123"},
    )
    headers = await register_user("USER")
    r = await client.put(
        "/api/auth/profile", headers=headers, json={"name": "Me", "email": "taken@capopt.io"}
    )
    assert r.status_code == 409
    assert r.json()["detail"] == "Email is already taken"


@pytest.mark.asyncio
async def test_invalid_bearer_token(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/auth/profile", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_register_validation_errors_are_400(client: httpx.AsyncClient) -> None:
    r = await client.post("/api/auth/register", json={"name": "X", "email": "bad", "password": "1"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Validation failed"
    assert r.json()["errors"]


@pytest.mark.asyncio
async def test_bad_cookie_falls_back_to_bearer(client: httpx.AsyncClient, admin_headers) -> None:
    stale = {"Cookie": "capopt_jwt=garbage"}
    r = await client.get("/api/auth/profile", headers={**admin_headers, **stale})
    assert r.status_code == 200
    assert r.json()["role"] == "ADMIN"

    r = await client.get("/api/auth/profile", headers=stale)
    assert r.status_code == 401
    assert r.json()["detail"].startswith("Invalid token")


@pytest.mark.asyncio
async def test_require_roles_guards_user_admin(client: httpx.AsyncClient, register_user) -> None:
    user = await register_user("USER")
    manager = await register_user("MANAGER")
    admin = await register_user("ADMIN")

    assert (await client.get("/api/users", headers=user)).status_code == 403
    r = await client.get("/api/users", headers=manager)
    assert r.status_code == 403
    assert r.json()["detail"] == "Insufficient role"
    assert (await client.get("/api/users", headers=admin)).status_code == 200
