"""
authgate.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and the argon2 hasher.
- Build the per-request credential store, verifier and session gate.
- Encapsulate app.state access patterns.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import timedelta

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from authgate.auth.handles import HandleConfig
from authgate.auth.passwords import SecretHasher
from authgate.services.credential_store import CredentialStore
from authgate.services.session_gate import SessionGate
from authgate.services.verifier import CredentialVerifier
from authgate.settings import Settings


def settings_dep(request: Request) -> Settings:
    # Set by `create_app`; tests inject their own Settings there.
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


def hasher_from_app(request: Request) -> SecretHasher:
    return request.app.state.hasher  # type: ignore[attr-defined]


def handle_cfg_from_app(request: Request) -> HandleConfig:
    return request.app.state.handle_cfg  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed by the service layer.
    async with session_factory() as session:
        yield session


def build_session_gate(
    session: AsyncSession,
    *,
    hasher: SecretHasher,
    handle_cfg: HandleConfig,
    settings: Settings,
) -> SessionGate:
    store = CredentialStore(session=session, hasher=hasher)
    return SessionGate(
        session=session,
        verifier=CredentialVerifier(store=store, hasher=hasher),
        handle_cfg=handle_cfg,
        ttl=timedelta(seconds=settings.session_ttl_seconds),
    )


def credential_store(
    session: AsyncSession = Depends(db_session),
    hasher: SecretHasher = Depends(hasher_from_app),
) -> CredentialStore:
    return CredentialStore(session=session, hasher=hasher)


def credential_verifier(
    store: CredentialStore = Depends(credential_store),
    hasher: SecretHasher = Depends(hasher_from_app),
) -> CredentialVerifier:
    return CredentialVerifier(store=store, hasher=hasher)


def session_gate(
    session: AsyncSession = Depends(db_session),
    hasher: SecretHasher = Depends(hasher_from_app),
    handle_cfg: HandleConfig = Depends(handle_cfg_from_app),
    settings: Settings = Depends(settings_dep),
) -> SessionGate:
    return build_session_gate(session, hasher=hasher, handle_cfg=handle_cfg, settings=settings)


# --- Module Notes -----------------------------------------------------------
# FastAPI caches dependencies per request, so store, verifier and gate built
# for one request share a single AsyncSession.
