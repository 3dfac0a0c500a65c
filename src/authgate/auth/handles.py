"""
authgate.auth.handles

Session handle minting and decoding.

Responsibilities:
- Generate unpredictable session ids.
- Wrap a session id into a signed, expiring handle (HS256 JWS) for the client.
- Decode handles with strict claim requirements (iss/aud/exp/iat/sub/sid).

Note:
- The handle only proves which session row to look up; the session registry
  decides whether it is still live.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import jwt
from jwt import InvalidTokenError

from authgate.settings import Settings

SESSION_ID_BYTES = 32


@dataclass(frozen=True, slots=True)
class HandleConfig:
    # Algorithm/issuer/audience are enforced during decoding.
    alg: str
    issuer: str
    audience: str
    secret: str

    @classmethod
    def from_settings(cls, settings: Settings) -> HandleConfig:
        return cls(
            alg="HS256",
            issuer=settings.session_issuer,
            audience=settings.session_audience,
            secret=settings.session_secret,
        )


@dataclass(frozen=True, slots=True)
class HandleClaims:
    session_id: str
    identifier: str
    expires_at: datetime


class InvalidHandle(Exception):
    pass


def new_session_id() -> str:
    return secrets.token_urlsafe(SESSION_ID_BYTES)


def encode_handle(
    *,
    cfg: HandleConfig,
    session_id: str,
    identifier: str,
    issued_at: datetime,
    expires_at: datetime,
) -> str:
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": identifier,
        "sid": session_id,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_handle(*, cfg: HandleConfig, handle: str, allow_expired: bool = False) -> HandleClaims:
    if not handle:
        raise InvalidHandle("empty handle")
    try:
        payload = jwt.decode(
            handle,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={
                "require": ["exp", "iat", "iss", "aud", "sub", "sid"],
                # Callers that pass allow_expired let the session row decide liveness.
                "verify_exp": not allow_expired,
            },
        )
    except InvalidTokenError as e:
        raise InvalidHandle(str(e)) from e

    session_id = payload.get("sid")
    identifier = payload.get("sub")
    if not isinstance(session_id, str) or not session_id:
        raise InvalidHandle("bad sid claim")
    if not isinstance(identifier, str) or not identifier:
        raise InvalidHandle("bad sub claim")
    return HandleClaims(
        session_id=session_id,
        identifier=identifier,
        expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
    )


# --- Module Notes -----------------------------------------------------------
# Handles are used by:
# - `services/session_gate.py` (mint on login, decode on resolve/logout)
# - `api/routers/auth.py` (carried in the session cookie)
