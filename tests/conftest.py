"""
tests.conftest

Shared fixtures: isolated settings, database, services and an ASGI client.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from authgate.api.app import create_app
from authgate.api.deps import build_session_gate
from authgate.auth.handles import HandleConfig
from authgate.auth.passwords import SecretHasher
from authgate.db.init_db import init_db
from authgate.db.session import create_engine, create_sessionmaker
from authgate.services.session_gate import SessionGate
from authgate.settings import Settings


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    # Cheap argon2 parameters keep the suite fast; production defaults are much higher.
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'authgate.db'}",
        session_secret="test-session-secret-0123456789abcdef",
        argon2_time_cost=1,
        argon2_memory_cost=8,
        argon2_parallelism=1,
        log_level="WARNING",
    )


@pytest.fixture()
def hasher(settings: Settings) -> SecretHasher:
    return SecretHasher.from_settings(settings)


@pytest.fixture()
def handle_cfg(settings: Settings) -> HandleConfig:
    return HandleConfig.from_settings(settings)


@pytest_asyncio.fixture()
async def engine(settings: Settings) -> AsyncIterator[AsyncEngine]:
    engine = create_engine(settings)
    await init_db(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(engine)


@pytest_asyncio.fixture()
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
def make_gate(
    hasher: SecretHasher, handle_cfg: HandleConfig, settings: Settings
) -> Callable[[AsyncSession], SessionGate]:
    def _make(session: AsyncSession) -> SessionGate:
        return build_session_gate(session, hasher=hasher, handle_cfg=handle_cfg, settings=settings)

    return _make


@pytest_asyncio.fixture()
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not run lifespan; drive it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture()
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
