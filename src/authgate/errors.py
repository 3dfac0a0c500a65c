"""
authgate.errors

Domain error kinds shared by the store, verifier and session gate.

Responsibilities:
- Give every failure mode a distinct type.
- Carry no digests, handles or secrets in messages.
"""

from __future__ import annotations


class AuthGateError(Exception):
    pass


class DuplicateIdentifier(AuthGateError):
    def __init__(self, identifier: str) -> None:
        super().__init__(f"identifier already registered: {identifier}")
        self.identifier = identifier


class NotFound(AuthGateError):
    """Internal only; never surfaced raw to the transport layer."""


class VerificationError(AuthGateError):
    """The credential backend failed while checking a secret."""


class Unauthorized(AuthGateError):
    """
    Missing, invalid or expired session, or credentials that did not match.

    The message is constant: callers must not learn which check failed.
    """

    def __init__(self) -> None:
        super().__init__("Unauthorized")


# --- Module Notes -----------------------------------------------------------
# HTTP mapping lives in `authgate.api.errors`.
