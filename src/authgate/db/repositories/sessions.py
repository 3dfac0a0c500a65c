"""
authgate.db.repositories.sessions

Repository for `SessionRow` entities (the session registry table).

Responsibilities:
- Create, fetch and delete sessions by id.
- Bulk-delete sessions of a principal and expired sessions.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.auth.models import SessionRecord
from authgate.db.models import PrincipalRow, SessionRow


class SessionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self, *, session_id: str, principal_id: int, expires_at: datetime
    ) -> SessionRow:
        row = SessionRow(session_id=session_id, principal_id=principal_id, expires_at=expires_at)
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, session_id: str) -> SessionRecord | None:
        # Column select; nothing is lazy-loaded in async code.
        stmt = (
            select(
                SessionRow.session_id,
                SessionRow.created_at,
                SessionRow.expires_at,
                PrincipalRow.identifier,
            )
            .join(PrincipalRow, PrincipalRow.id == SessionRow.principal_id)
            .where(SessionRow.session_id == session_id)
        )
        row = (await self._session.execute(stmt)).one_or_none()
        if row is None:
            return None
        return SessionRecord(
            session_id=row.session_id,
            identifier=row.identifier,
            created_at=row.created_at,
            expires_at=row.expires_at,
        )

    async def delete(self, session_id: str) -> int:
        result = await self._session.execute(
            delete(SessionRow).where(SessionRow.session_id == session_id)
        )
        return result.rowcount

    async def delete_for_principal(self, principal_id: int, *, keep: str | None = None) -> int:
        stmt = delete(SessionRow).where(SessionRow.principal_id == principal_id)
        if keep is not None:
            stmt = stmt.where(SessionRow.session_id != keep)
        result = await self._session.execute(stmt)
        return result.rowcount

    async def delete_expired(self, now: datetime) -> int:
        result = await self._session.execute(
            delete(SessionRow).where(SessionRow.expires_at <= now)
        )
        return result.rowcount


# --- Module Notes -----------------------------------------------------------
# Deletes are single statements, so a logout racing a resolve either removes
# the row first (resolve sees nothing) or after (resolve saw a live session).
