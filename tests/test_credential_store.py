"""
tests.test_credential_store

Credential store: registration, lookup, uniqueness and secret rotation.
"""

from __future__ import annotations

import asyncio
import dataclasses

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from authgate.auth.passwords import SecretHasher
from authgate.db.models import PrincipalRow
from authgate.errors import DuplicateIdentifier, NotFound
from authgate.services.credential_store import CredentialStore


@pytest.mark.asyncio
async def test_register_persists_digest_only(db: AsyncSession, hasher: SecretHasher) -> None:
    store = CredentialStore(session=db, hasher=hasher)
    principal = await store.register("alice", "p@ss1")

    assert principal.identifier == "alice"
    assert [f.name for f in dataclasses.fields(principal)] == ["identifier"]

    row = (await db.execute(select(PrincipalRow))).scalar_one()
    assert row.identifier == "alice"
    assert row.secret_digest != "p@ss1"
    assert hasher.verify(row.secret_digest, "p@ss1")


@pytest.mark.asyncio
async def test_register_twice_fails(db: AsyncSession, hasher: SecretHasher) -> None:
    store = CredentialStore(session=db, hasher=hasher)
    await store.register("alice", "p@ss1")
    with pytest.raises(DuplicateIdentifier):
        await store.register("alice", "other")
    # The session is usable after the failed insert.
    assert (await store.find_by_identifier("alice")).identifier == "alice"


@pytest.mark.asyncio
async def test_identifiers_are_case_sensitive(db: AsyncSession, hasher: SecretHasher) -> None:
    store = CredentialStore(session=db, hasher=hasher)
    await store.register("alice", "p@ss1")
    await store.register("Alice", "p@ss1")
    assert (await store.find_by_identifier("Alice")).identifier == "Alice"


@pytest.mark.asyncio
async def test_concurrent_duplicate_registration_has_one_winner(
    session_factory: async_sessionmaker[AsyncSession], hasher: SecretHasher
) -> None:
    async def attempt() -> object:
        async with session_factory() as session:
            return await CredentialStore(session=session, hasher=hasher).register("bob", "s3cret")

    results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)
    failures = [r for r in results if isinstance(r, BaseException)]
    assert len(failures) == 1
    assert isinstance(failures[0], DuplicateIdentifier)

    async with session_factory() as session:
        rows = (await session.execute(select(PrincipalRow))).scalars().all()
    assert [r.identifier for r in rows] == ["bob"]


@pytest.mark.asyncio
async def test_find_by_identifier_missing(db: AsyncSession, hasher: SecretHasher) -> None:
    store = CredentialStore(session=db, hasher=hasher)
    with pytest.raises(NotFound):
        await store.find_by_identifier("nobody")
    assert await store.find_credential("nobody") is None


@pytest.mark.asyncio
async def test_invalid_identifier_rejected(db: AsyncSession, hasher: SecretHasher) -> None:
    store = CredentialStore(session=db, hasher=hasher)
    with pytest.raises(ValueError):
        await store.register("", "p@ss1")
    with pytest.raises(ValueError):
        await store.register("x" * 257, "p@ss1")


@pytest.mark.asyncio
async def test_rotate_secret(db: AsyncSession, hasher: SecretHasher) -> None:
    store = CredentialStore(session=db, hasher=hasher)
    await store.register("alice", "p@ss1")
    await store.rotate_secret("alice", "p@ss2")

    credential = await store.find_credential("alice")
    assert credential is not None
    assert hasher.verify(credential.secret_digest, "p@ss2")
    assert not hasher.verify(credential.secret_digest, "p@ss1")
    assert "secret_digest=<redacted>" in repr(credential)

    with pytest.raises(NotFound):
        await store.rotate_secret("nobody", "x")


@pytest.mark.asyncio
async def test_uncommitted_rotation_rolls_back(
    db: AsyncSession,
    hasher: SecretHasher,
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    store = CredentialStore(session=db, hasher=hasher)
    await store.register("alice", "p@ss1")
    await store.rotate_secret("alice", "p@ss2", commit=False)
    await db.rollback()

    async with session_factory() as fresh:
        credential = await CredentialStore(session=fresh, hasher=hasher).find_credential("alice")
    assert credential is not None
    assert hasher.verify(credential.secret_digest, "p@ss1")
