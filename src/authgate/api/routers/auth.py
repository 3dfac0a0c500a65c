"""
authgate.api.routers.auth

Registration, login and logout endpoints.

Responsibilities:
- Register principals (201 / 409).
- Log in: verify credentials, set the session cookie (200 / 401).
- Log out: destroy the session, clear the cookie (idempotent).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from starlette.status import HTTP_201_CREATED

from authgate.api.deps import credential_store, session_gate, settings_dep
from authgate.auth.deps import session_handle
from authgate.auth.models import MAX_IDENTIFIER_LENGTH
from authgate.services.credential_store import CredentialStore
from authgate.services.session_gate import SessionGate
from authgate.settings import Settings

router = APIRouter(prefix="/v1/auth", tags=["auth"])

MAX_SECRET_LENGTH = 1024


class CredentialsRequest(BaseModel):
    identifier: str = Field(min_length=1, max_length=MAX_IDENTIFIER_LENGTH)
    secret: str = Field(min_length=1, max_length=MAX_SECRET_LENGTH, repr=False)


class IdentityResponse(BaseModel):
    identifier: str


class StatusResponse(BaseModel):
    status: str


def cookie_settings(settings: Settings) -> dict:
    return {"httponly": True, "samesite": "lax", "secure": settings.cookie_secure, "path": "/"}


@router.post("/register", response_model=IdentityResponse, status_code=HTTP_201_CREATED)
async def register(
    body: CredentialsRequest,
    store: CredentialStore = Depends(credential_store),
) -> IdentityResponse:
    principal = await store.register(body.identifier, body.secret)
    return IdentityResponse(identifier=principal.identifier)


@router.post("/login", response_model=IdentityResponse)
async def login(
    body: CredentialsRequest,
    response: Response,
    prior_handle: str | None = Depends(session_handle),
    gate: SessionGate = Depends(session_gate),
    settings: Settings = Depends(settings_dep),
) -> IdentityResponse:
    result = await gate.login(body.identifier, body.secret, prior_handle=prior_handle)
    response.set_cookie(
        settings.cookie_name,
        result.handle,
        max_age=settings.session_ttl_seconds,
        **cookie_settings(settings),
    )
    return IdentityResponse(identifier=result.principal.identifier)


@router.post("/logout", response_model=StatusResponse)
async def logout(
    response: Response,
    handle: str | None = Depends(session_handle),
    gate: SessionGate = Depends(session_gate),
    settings: Settings = Depends(settings_dep),
) -> StatusResponse:
    await gate.logout(handle)
    response.delete_cookie(settings.cookie_name, **cookie_settings(settings))
    return StatusResponse(status="logged_out")


# --- Module Notes -----------------------------------------------------------
# Login failures of any cause surface as the same 401 body (see `api.errors`).
