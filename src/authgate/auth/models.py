"""
authgate.auth.models

Auth domain models.

Responsibilities:
- Define the registered identity type (`Principal`) handed to protected logic.
- Keep the digest-bearing record (`StoredCredential`) separate, with an explicit
  projection to `Principal`.
- Model the per-request session state (`SessionContext`).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime

MAX_IDENTIFIER_LENGTH = 256


def validate_identifier(identifier: str) -> str:
    # Identifiers are case-sensitive and compared verbatim; no normalization.
    if not isinstance(identifier, str) or not identifier:
        raise ValueError("identifier must be a non-empty string")
    if len(identifier) > MAX_IDENTIFIER_LENGTH:
        raise ValueError("identifier too long")
    return identifier


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Registered identity as seen outside the credential store. Has no digest.
    """

    identifier: str

    def __post_init__(self) -> None:
        validate_identifier(self.identifier)


@dataclass(frozen=True, slots=True)
class StoredCredential:
    identifier: str
    secret_digest: str = ""

    def to_principal(self) -> Principal:
        return Principal(identifier=self.identifier)

    def __repr__(self) -> str:
        return f"StoredCredential(identifier={self.identifier!r}, secret_digest=<redacted>)"


@dataclass(frozen=True, slots=True)
class VerificationResult:
    success: bool
    principal: Principal | None = None

    @classmethod
    def failed(cls) -> VerificationResult:
        return cls(success=False, principal=None)


@dataclass(frozen=True, slots=True)
class SessionRecord:
    session_id: str
    identifier: str
    created_at: datetime
    expires_at: datetime


class SessionState(enum.StrEnum):
    anonymous = "ANONYMOUS"
    authenticated = "AUTHENTICATED"


@dataclass(frozen=True, slots=True)
class SessionContext:
    """
    Session state of one request-handling context.
    """

    state: SessionState = SessionState.anonymous
    principal: Principal | None = None
    session_id: str | None = None

    @classmethod
    def anonymous(cls) -> SessionContext:
        return cls()

    @classmethod
    def authenticated(cls, *, principal: Principal, session_id: str) -> SessionContext:
        return cls(state=SessionState.authenticated, principal=principal, session_id=session_id)

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.authenticated


@dataclass(frozen=True, slots=True)
class LoginResult:
    principal: Principal
    handle: str
    context: SessionContext
    expires_at: datetime


# --- Module Notes -----------------------------------------------------------
# `Principal` is the only identity type that crosses into routers and business
# logic. `StoredCredential` stays inside the store/verifier boundary.
