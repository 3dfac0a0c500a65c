"""
authgate.db.repositories.principals

Repository for `PrincipalRow` entities.

Responsibilities:
- Insert principals (uniqueness enforced by the DB constraint).
- Exact-match lookup by identifier.
- Digest reads and rotation for the verifier/store.
"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.auth.models import StoredCredential
from authgate.db.models import PrincipalRow, utcnow


class PrincipalRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, *, identifier: str, secret_digest: str) -> PrincipalRow:
        # Raises IntegrityError on a duplicate identifier; the caller maps it.
        row = PrincipalRow(identifier=identifier, secret_digest=secret_digest)
        self._session.add(row)
        await self._session.flush()
        return row

    async def get_by_identifier(self, identifier: str) -> PrincipalRow | None:
        stmt = select(PrincipalRow).where(PrincipalRow.identifier == identifier)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_credential(self, identifier: str) -> StoredCredential | None:
        stmt = select(PrincipalRow.identifier, PrincipalRow.secret_digest).where(
            PrincipalRow.identifier == identifier
        )
        row = (await self._session.execute(stmt)).one_or_none()
        if row is None:
            return None
        return StoredCredential(identifier=row.identifier, secret_digest=row.secret_digest)

    async def set_digest(self, *, identifier: str, secret_digest: str) -> bool:
        stmt = (
            update(PrincipalRow)
            .where(PrincipalRow.identifier == identifier)
            .values(secret_digest=secret_digest, updated_at=utcnow())
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1
