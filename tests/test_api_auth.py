"""
tests.test_api_auth

End-to-end HTTP flows: register, login, protected read, logout, secret change.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from fastapi import FastAPI

from authgate.api.deps import sessionmaker_from_app
from authgate.db.session import create_engine, create_sessionmaker
from authgate.settings import Settings

UNAUTHORIZED = {"detail": "Unauthorized"}


async def _register(client: httpx.AsyncClient, identifier: str, secret: str) -> httpx.Response:
    return await client.post("/v1/auth/register", json={"identifier": identifier, "secret": secret})


async def _login(client: httpx.AsyncClient, identifier: str, secret: str) -> httpx.Response:
    return await client.post("/v1/auth/login", json={"identifier": identifier, "secret": secret})


@pytest.mark.asyncio
async def test_alice_scenario(client: httpx.AsyncClient, settings: Settings) -> None:
    r = await _register(client, "alice", "p@ss1")
    assert r.status_code == 201
    assert r.json() == {"identifier": "alice"}

    r = await _login(client, "alice", "wrong")
    assert r.status_code == 401
    assert r.json() == UNAUTHORIZED
    assert settings.cookie_name not in client.cookies

    r = await _login(client, "alice", "p@ss1")
    assert r.status_code == 200
    assert r.json() == {"identifier": "alice"}
    handle = client.cookies[settings.cookie_name]
    assert handle
    set_cookie = r.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "samesite=lax" in set_cookie

    r = await client.get("/v1/me")
    assert r.status_code == 200
    assert r.json() == {"identifier": "alice"}

    r = await client.post("/v1/auth/logout")
    assert r.status_code == 200
    assert r.json() == {"status": "logged_out"}
    assert settings.cookie_name not in client.cookies

    # Replaying the old handle after logout is rejected.
    r = await client.get("/v1/me", headers={"cookie": f"{settings.cookie_name}={handle}"})
    assert r.status_code == 401
    assert r.json() == UNAUTHORIZED


@pytest.mark.asyncio
async def test_register_duplicate_returns_409(client: httpx.AsyncClient) -> None:
    assert (await _register(client, "alice", "p@ss1")).status_code == 201
    r = await _register(client, "alice", "other")
    assert r.status_code == 409
    assert "digest" not in r.text


@pytest.mark.asyncio
async def test_register_response_has_no_secret_material(client: httpx.AsyncClient) -> None:
    r = await _register(client, "carol", "hunter2")
    assert set(r.json()) == {"identifier"}
    assert "hunter2" not in r.text
    assert "argon2" not in r.text


@pytest.mark.asyncio
async def test_unknown_identifier_and_wrong_secret_look_the_same(
    client: httpx.AsyncClient,
) -> None:
    await _register(client, "alice", "p@ss1")
    wrong = await _login(client, "alice", "nope")
    unknown = await _login(client, "mallory", "p@ss1")
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == UNAUTHORIZED


@pytest.mark.asyncio
async def test_protected_read_requires_session(client: httpx.AsyncClient, settings: Settings) -> None:
    assert (await client.get("/v1/me")).status_code == 401
    r = await client.get("/v1/me", headers={"cookie": f"{settings.cookie_name}=forged"})
    assert r.status_code == 401
    assert r.json() == UNAUTHORIZED


@pytest.mark.asyncio
async def test_logout_is_idempotent(client: httpx.AsyncClient) -> None:
    for _ in range(2):
        r = await client.post("/v1/auth/logout")
        assert r.status_code == 200
        assert r.json() == {"status": "logged_out"}


@pytest.mark.asyncio
async def test_request_validation(client: httpx.AsyncClient) -> None:
    r = await client.post("/v1/auth/register", json={"identifier": "", "secret": "x"})
    assert r.status_code == 422
    r = await client.post("/v1/auth/register", json={"identifier": "a" * 257, "secret": "x"})
    assert r.status_code == 422
    r = await client.post("/v1/auth/login", json={"identifier": "alice"})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_relogin_replaces_session(client: httpx.AsyncClient, settings: Settings) -> None:
    await _register(client, "alice", "p@ss1")
    await _login(client, "alice", "p@ss1")
    first = client.cookies[settings.cookie_name]

    await _login(client, "alice", "p@ss1")
    second = client.cookies[settings.cookie_name]
    assert second != first

    r = await client.get("/v1/me", headers={"cookie": f"{settings.cookie_name}={first}"})
    assert r.status_code == 401
    assert (await client.get("/v1/me")).status_code == 200


@pytest.mark.asyncio
async def test_secret_change_revokes_other_sessions(
    app: FastAPI, client: httpx.AsyncClient
) -> None:
    await _register(client, "alice", "p@ss1")

    # A second device logs in on its own cookie jar.
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as other:
        assert (await _login(other, "alice", "p@ss1")).status_code == 200
        await _login(client, "alice", "p@ss1")

        r = await client.post(
            "/v1/me/password", json={"current_secret": "wrong", "new_secret": "p@ss2"}
        )
        assert r.status_code == 401

        r = await client.post(
            "/v1/me/password", json={"current_secret": "p@ss1", "new_secret": "p@ss2"}
        )
        assert r.status_code == 200
        assert r.json() == {"status": "rotated"}

        assert (await client.get("/v1/me")).status_code == 200
        assert (await other.get("/v1/me")).status_code == 401

    await client.post("/v1/auth/logout")
    assert (await _login(client, "alice", "p@ss1")).status_code == 401
    assert (await _login(client, "alice", "p@ss2")).status_code == 200


@pytest.mark.asyncio
async def test_secret_change_requires_session(client: httpx.AsyncClient) -> None:
    r = await client.post("/v1/me/password", json={"current_secret": "a", "new_secret": "b"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_backend_failure_returns_generic_500(
    app: FastAPI, client: httpx.AsyncClient, tmp_path: Path
) -> None:
    # A database file under a missing directory cannot be opened.
    broken = create_engine(
        Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'authgate.db'}")
    )
    broken_sessionmaker = create_sessionmaker(broken)
    app.dependency_overrides[sessionmaker_from_app] = lambda: broken_sessionmaker
    try:
        for r in (
            await _register(client, "alice", "p@ss1"),
            await _login(client, "alice", "p@ss1"),
        ):
            assert r.status_code == 500
            assert r.json() == {"detail": "Internal error"}
            assert "OperationalError" not in r.text
            assert "unable to open" not in r.text
    finally:
        app.dependency_overrides.clear()
        await broken.dispose()
