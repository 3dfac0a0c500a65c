"""
authgate.db.models

Persistence schema for credentials and sessions.

Responsibilities:
- PrincipalRow: one row per registered principal (identifier + secret digest).
- SessionRow: one row per live session, bound to a principal.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from authgate.auth.models import MAX_IDENTIFIER_LENGTH
from authgate.db.base import Base


def utcnow() -> datetime:
    # Naive UTC: SQLite drops tzinfo, so all stored timestamps are naive UTC.
    return datetime.now(UTC).replace(tzinfo=None)


class PrincipalRow(Base):
    __tablename__ = "principals"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # UNIQUE makes concurrent registrations of one identifier race-free.
    identifier: Mapped[str] = mapped_column(
        String(MAX_IDENTIFIER_LENGTH), nullable=False, unique=True
    )
    secret_digest: Mapped[str] = mapped_column(String(512), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)


class SessionRow(Base):
    __tablename__ = "sessions"

    session_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    principal_id: Mapped[int] = mapped_column(
        ForeignKey("principals.id", ondelete="CASCADE"), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(nullable=False)

    __table_args__ = (Index("ix_sessions_expires_at", "expires_at"),)


# --- Module Notes -----------------------------------------------------------
# Outside this package the digest is only read through the verifier path
# (`PrincipalRepo.get_credential`); everything else projects to `Principal`.
