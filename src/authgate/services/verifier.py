"""
authgate.services.verifier

Credential verifier.

Responsibilities:
- Check a claimed identifier/secret pair against the stored digest.
- Fail identically for unknown identifiers and wrong secrets.
- Surface backend failures as `VerificationError`.
"""

from __future__ import annotations

import asyncio

from sqlalchemy.exc import SQLAlchemyError

from authgate.auth.models import MAX_IDENTIFIER_LENGTH, VerificationResult
from authgate.auth.passwords import SecretHasher
from authgate.errors import NotFound, VerificationError
from authgate.observability.logging import get_logger
from authgate.services.credential_store import CredentialStore

log = get_logger(__name__)


class CredentialVerifier:
    def __init__(self, *, store: CredentialStore, hasher: SecretHasher) -> None:
        self._store = store
        self._hasher = hasher

    async def verify(self, identifier: str, plaintext_secret: str) -> VerificationResult:
        credential = None
        if identifier and len(identifier) <= MAX_IDENTIFIER_LENGTH:
            try:
                credential = await self._store.find_credential(identifier)
            except SQLAlchemyError as e:
                log.error("verification.backend_failed", error_type=type(e).__name__)
                raise VerificationError("credential backend unavailable") from e

        if credential is None:
            # Same argon2 cost as a real check, so timing does not reveal unknown identifiers.
            await asyncio.to_thread(self._hasher.verify_dummy, plaintext_secret)
            return VerificationResult.failed()

        matched = await asyncio.to_thread(
            self._hasher.verify, credential.secret_digest, plaintext_secret
        )
        if not matched:
            return VerificationResult.failed()

        if self._hasher.needs_rehash(credential.secret_digest):
            await self._upgrade_digest(credential.identifier, plaintext_secret)

        return VerificationResult(success=True, principal=credential.to_principal())

    async def _upgrade_digest(self, identifier: str, plaintext_secret: str) -> None:
        # A failed upgrade leaves the old, still valid digest in place.
        try:
            await self._store.rehash(identifier, plaintext_secret)
        except (SQLAlchemyError, NotFound) as e:
            log.warning("secret.rehash_failed", identifier=identifier, error_type=type(e).__name__)


# --- Module Notes -----------------------------------------------------------
# The verifier never raises for "credentials did not match"; that outcome is a
# value (`success=False`). Only backend failures raise.
