"""
authgate.api.routers.account

Endpoints for the authenticated principal.

Responsibilities:
- Protected read of the caller's identity.
- Secret change: verify the current secret, rotate the digest, revoke the
  principal's other sessions.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from authgate.api.deps import credential_store, credential_verifier, session_gate
from authgate.api.routers.auth import MAX_SECRET_LENGTH, IdentityResponse, StatusResponse
from authgate.auth.deps import require_authenticated, session_context
from authgate.auth.models import Principal, SessionContext
from authgate.errors import Unauthorized
from authgate.services.credential_store import CredentialStore
from authgate.services.session_gate import SessionGate
from authgate.services.verifier import CredentialVerifier

router = APIRouter(prefix="/v1/me", tags=["account"])


class SecretChangeRequest(BaseModel):
    current_secret: str = Field(min_length=1, max_length=MAX_SECRET_LENGTH, repr=False)
    new_secret: str = Field(min_length=1, max_length=MAX_SECRET_LENGTH, repr=False)


@router.get("", response_model=IdentityResponse)
async def whoami(principal: Principal = Depends(require_authenticated)) -> IdentityResponse:
    return IdentityResponse(identifier=principal.identifier)


@router.post("/password", response_model=StatusResponse)
async def change_secret(
    body: SecretChangeRequest,
    context: SessionContext = Depends(session_context),
    store: CredentialStore = Depends(credential_store),
    verifier: CredentialVerifier = Depends(credential_verifier),
    gate: SessionGate = Depends(session_gate),
) -> StatusResponse:
    principal = SessionGate.require_authenticated(context)
    result = await verifier.verify(principal.identifier, body.current_secret)
    if not result.success:
        raise Unauthorized()

    # One transaction: revoke_all commits the new digest together with the
    # revocation, and a failure rolls both back. The caller keeps its session.
    await store.rotate_secret(principal.identifier, body.new_secret, commit=False)
    await gate.revoke_all(principal.identifier, keep=context.session_id)
    return StatusResponse(status="rotated")
