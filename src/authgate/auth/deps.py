"""
authgate.auth.deps

FastAPI dependency functions for session resolution and guarding.

Responsibilities:
- Read the session handle from the session cookie.
- Resolve it into a typed `SessionContext`.
- Guard protected endpoints (`require_authenticated`).
"""

from __future__ import annotations

from fastapi import Depends, Request

from authgate.api.deps import session_gate, settings_dep
from authgate.auth.models import Principal, SessionContext
from authgate.services.session_gate import SessionGate
from authgate.settings import Settings


def session_handle(request: Request, settings: Settings = Depends(settings_dep)) -> str | None:
    return request.cookies.get(settings.cookie_name) or None


async def session_context(
    handle: str | None = Depends(session_handle),
    gate: SessionGate = Depends(session_gate),
) -> SessionContext:
    return await gate.resolve(handle)


def require_authenticated(context: SessionContext = Depends(session_context)) -> Principal:
    # Raises Unauthorized (401) before the endpoint body runs.
    return SessionGate.require_authenticated(context)


# --- Module Notes -----------------------------------------------------------
# Protected endpoints depend on `require_authenticated`; endpoints that also
# need the session id (e.g. secret change) depend on `session_context`.
