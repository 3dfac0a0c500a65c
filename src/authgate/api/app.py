"""
authgate.api.app

FastAPI app factory for the authgate service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/exception handlers.
- Initialize and dispose shared infrastructure (DB engine, session factory, hasher).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from authgate import __version__
from authgate.api.deps import build_session_gate
from authgate.api.errors import register_exception_handlers
from authgate.api.routers.account import router as account_router
from authgate.api.routers.auth import router as auth_router
from authgate.api.routers.health import router as health_router
from authgate.auth.handles import HandleConfig
from authgate.auth.passwords import SecretHasher
from authgate.db.init_db import init_db
from authgate.db.session import create_engine, create_sessionmaker
from authgate.observability.logging import configure_logging, get_logger
from authgate.observability.middleware import RequestContextMiddleware
from authgate.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)
    settings.check_production_safety()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        # Shared infrastructure lives on app.state; routers reach it via `api.deps`.
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        app.state.hasher = SecretHasher.from_settings(settings)
        app.state.handle_cfg = HandleConfig.from_settings(settings)
        if settings.env in ("dev", "test"):
            # Prod runs Alembic migrations instead.
            await init_db(engine)
        await _purge_expired_sessions(app, settings)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="authgate",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(account_router)

    return app


async def _purge_expired_sessions(app: FastAPI, settings: Settings) -> None:
    async with app.state.sessionmaker() as session:
        gate = build_session_gate(
            session, hasher=app.state.hasher, handle_cfg=app.state.handle_cfg, settings=settings
        )
        await gate.purge_expired()


# --- Module Notes -----------------------------------------------------------
# App composition stays here; credential and session logic stays in services.
