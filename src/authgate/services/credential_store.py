"""
authgate.services.credential_store

Credential store: owns principal records.

Responsibilities:
- Register principals with a salted one-way digest of their secret.
- Exact-match lookup, projected to `Principal` (no digest).
- Digest rotation (secret change) and rehash after parameter upgrades.
"""

from __future__ import annotations

import asyncio

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.auth.models import Principal, StoredCredential, validate_identifier
from authgate.auth.passwords import SecretHasher
from authgate.db.repositories.principals import PrincipalRepo
from authgate.errors import DuplicateIdentifier, NotFound
from authgate.observability.logging import get_logger

log = get_logger(__name__)


class CredentialStore:
    def __init__(self, *, session: AsyncSession, hasher: SecretHasher) -> None:
        self._session = session
        self._hasher = hasher
        self._principals = PrincipalRepo(session)

    async def register(self, identifier: str, plaintext_secret: str) -> Principal:
        validate_identifier(identifier)
        # argon2 is CPU-bound; keep it off the event loop.
        digest = await asyncio.to_thread(self._hasher.hash, plaintext_secret)
        try:
            await self._principals.add(identifier=identifier, secret_digest=digest)
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            log.info("principal.duplicate", identifier=identifier)
            raise DuplicateIdentifier(identifier) from e
        except Exception:
            await self._session.rollback()
            raise

        log.info("principal.registered", identifier=identifier)
        return Principal(identifier=identifier)

    async def find_by_identifier(self, identifier: str) -> Principal:
        row = await self._principals.get_by_identifier(identifier)
        if row is None:
            raise NotFound(identifier)
        return Principal(identifier=row.identifier)

    async def find_credential(self, identifier: str) -> StoredCredential | None:
        # Digest-bearing read; only the verifier calls this.
        return await self._principals.get_credential(identifier)

    async def rotate_secret(
        self, identifier: str, new_plaintext_secret: str, *, commit: bool = True
    ) -> None:
        """
        Replace the digest of `identifier`.

        With `commit=False` the update is only flushed; the caller commits it
        together with follow-up writes (e.g. session revocation) or rolls back.
        """

        digest = await asyncio.to_thread(self._hasher.hash, new_plaintext_secret)
        await self._write_digest(identifier, digest, commit=commit)
        log.info("secret.rotated", identifier=identifier, committed=commit)

    async def rehash(self, identifier: str, plaintext_secret: str) -> None:
        digest = await asyncio.to_thread(self._hasher.hash, plaintext_secret)
        await self._write_digest(identifier, digest)
        log.info("secret.rehashed", identifier=identifier)

    async def _write_digest(self, identifier: str, digest: str, *, commit: bool = True) -> None:
        try:
            updated = await self._principals.set_digest(identifier=identifier, secret_digest=digest)
            if not updated:
                raise NotFound(identifier)
            if commit:
                await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise


# --- Module Notes -----------------------------------------------------------
# Registration is the only insert path. Uniqueness is the DB constraint's job,
# not a read-then-write check, so concurrent registrations cannot both succeed.
