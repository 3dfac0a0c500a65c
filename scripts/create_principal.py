#!/usr/bin/env python3
"""
scripts.create_principal

Register a principal from the command line (prompts for the secret).
"""

from __future__ import annotations

import asyncio
from getpass import getpass

from authgate.auth.passwords import SecretHasher
from authgate.db.init_db import init_db
from authgate.db.session import create_engine, create_sessionmaker, session_scope
from authgate.errors import DuplicateIdentifier
from authgate.observability.logging import configure_logging
from authgate.services.credential_store import CredentialStore
from authgate.settings import get_settings


async def _register(identifier: str, secret: str) -> None:
    settings = get_settings()
    engine = create_engine(settings)
    try:
        if settings.env in ("dev", "test"):
            await init_db(engine)
        async with session_scope(create_sessionmaker(engine)) as session:
            store = CredentialStore(session=session, hasher=SecretHasher.from_settings(settings))
            await store.register(identifier, secret)
    finally:
        await engine.dispose()


def main() -> None:
    settings = get_settings()
    configure_logging(service_name=f"{settings.service_name}-cli", level=settings.log_level)

    identifier = input("Identifier: ").strip()
    secret = getpass("Secret: ")
    if secret != getpass("Repeat secret: "):
        raise SystemExit("Secrets do not match")

    try:
        asyncio.run(_register(identifier, secret))
    except DuplicateIdentifier:
        raise SystemExit(f"Identifier already registered: {identifier}") from None
    print(f"OK -> {identifier}")


if __name__ == "__main__":
    main()
