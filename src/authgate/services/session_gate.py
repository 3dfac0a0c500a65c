"""
authgate.services.session_gate

Session gate: mints, resolves and destroys session handles, and guards
protected operations.

Responsibilities:
- login: verify credentials, then bind a fresh session to the principal.
- resolve: turn a handle into an authenticated or anonymous `SessionContext`.
- logout: destroy the session behind a handle (idempotent).
- require_authenticated: reject anonymous contexts with `Unauthorized`.
- Registry maintenance: revoke all sessions of a principal, purge expired rows.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.auth.handles import (
    HandleConfig,
    InvalidHandle,
    decode_handle,
    encode_handle,
    new_session_id,
)
from authgate.auth.models import LoginResult, Principal, SessionContext
from authgate.db.models import utcnow
from authgate.db.repositories.principals import PrincipalRepo
from authgate.db.repositories.sessions import SessionRepo
from authgate.errors import Unauthorized, VerificationError
from authgate.observability.logging import get_logger
from authgate.services.verifier import CredentialVerifier

log = get_logger(__name__)


class SessionGate:
    def __init__(
        self,
        *,
        session: AsyncSession,
        verifier: CredentialVerifier,
        handle_cfg: HandleConfig,
        ttl: timedelta,
    ) -> None:
        self._session = session
        self._verifier = verifier
        self._handle_cfg = handle_cfg
        self._ttl = ttl

        self._principals = PrincipalRepo(session)
        self._sessions = SessionRepo(session)

    async def login(
        self,
        identifier: str,
        plaintext_secret: str,
        *,
        prior_handle: str | None = None,
    ) -> LoginResult:
        """
        Verify credentials and mint a new session.

        Any session behind `prior_handle` is destroyed; the new handle shares
        nothing with it. Raises `Unauthorized` on a credential mismatch and
        `VerificationError` when the backend fails.
        """

        result = await self._verifier.verify(identifier, plaintext_secret)
        if not result.success or result.principal is None:
            log.info("login.failed")
            raise Unauthorized()

        now = datetime.now(UTC)
        expires_at = now + self._ttl
        session_id = new_session_id()
        try:
            await self._sessions.delete_expired(now.replace(tzinfo=None))
            if prior_handle:
                await self._delete_by_handle(prior_handle)
            row = await self._principals.get_by_identifier(result.principal.identifier)
            if row is None:
                # Principal vanished between verification and session creation.
                await self._session.rollback()
                raise Unauthorized()
            await self._sessions.create(
                session_id=session_id,
                principal_id=row.id,
                expires_at=expires_at.replace(tzinfo=None),
            )
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            log.error("session.create_failed", error_type=type(e).__name__)
            raise VerificationError("session backend unavailable") from e

        handle = encode_handle(
            cfg=self._handle_cfg,
            session_id=session_id,
            identifier=result.principal.identifier,
            issued_at=now,
            expires_at=expires_at,
        )
        log.info("login.succeeded", identifier=result.principal.identifier)
        return LoginResult(
            principal=result.principal,
            handle=handle,
            context=SessionContext.authenticated(
                principal=result.principal, session_id=session_id
            ),
            expires_at=expires_at,
        )

    async def resolve(self, handle: str | None) -> SessionContext:
        if not handle:
            return SessionContext.anonymous()
        try:
            # The row decides expiry, so an expired row can still be found and deleted.
            claims = decode_handle(cfg=self._handle_cfg, handle=handle, allow_expired=True)
        except InvalidHandle as e:
            log.debug("session.invalid_handle", reason=str(e))
            return SessionContext.anonymous()

        try:
            record = await self._sessions.get(claims.session_id)
            if record is None:
                return SessionContext.anonymous()
            if record.expires_at <= utcnow():
                await self._sessions.delete(record.session_id)
                await self._session.commit()
                log.info("session.expired", identifier=record.identifier)
                return SessionContext.anonymous()
        except SQLAlchemyError as e:
            await self._session.rollback()
            log.error("session.resolve_failed", error_type=type(e).__name__)
            raise VerificationError("session backend unavailable") from e

        if record.identifier != claims.identifier:
            return SessionContext.anonymous()
        return SessionContext.authenticated(
            principal=Principal(identifier=record.identifier),
            session_id=record.session_id,
        )

    async def logout(self, handle: str | None) -> SessionContext:
        if handle:
            try:
                destroyed = await self._delete_by_handle(handle)
                await self._session.commit()
            except SQLAlchemyError as e:
                await self._session.rollback()
                log.error("session.destroy_failed", error_type=type(e).__name__)
                raise VerificationError("session backend unavailable") from e
            if destroyed:
                log.info("session.destroyed")
        return SessionContext.anonymous()

    @staticmethod
    def require_authenticated(context: SessionContext) -> Principal:
        if not context.is_authenticated or context.principal is None:
            raise Unauthorized()
        return context.principal

    async def revoke_all(self, identifier: str, *, keep: str | None = None) -> int:
        try:
            row = await self._principals.get_by_identifier(identifier)
            if row is None:
                return 0
            count = await self._sessions.delete_for_principal(row.id, keep=keep)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise VerificationError("session backend unavailable") from e
        log.info("session.revoked_all", identifier=identifier, count=count)
        return count

    async def purge_expired(self) -> int:
        count = await self._sessions.delete_expired(utcnow())
        await self._session.commit()
        if count:
            log.info("session.purged", count=count)
        return count

    async def _delete_by_handle(self, handle: str) -> int:
        try:
            claims = decode_handle(cfg=self._handle_cfg, handle=handle, allow_expired=True)
        except InvalidHandle:
            return 0
        return await self._sessions.delete(claims.session_id)


# --- Module Notes -----------------------------------------------------------
# The session row is the source of truth; a correctly signed handle whose row
# was deleted resolves to an anonymous context.
