"""
authgate.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (session signing secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_SESSION_SECRET = "dev-session-secret-change-me-before-deploying"
# HS256 keys shorter than the digest size are rejected in prod.
MIN_SESSION_SECRET_BYTES = 32


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="AUTHGATE_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "authgate"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./authgate.db"

    # Session handles
    session_secret: str = Field(default=DEV_SESSION_SECRET, repr=False)
    session_issuer: str = "authgate"
    session_audience: str = "authgate-session"
    session_ttl_seconds: int = Field(default=8 * 60 * 60, ge=60)
    cookie_name: str = "authgate_session"
    cookie_secure: bool = False

    # Argon2id parameters; lower them only for tests.
    argon2_time_cost: int = Field(default=3, ge=1)
    argon2_memory_cost: int = Field(default=64 * 1024, ge=8)
    argon2_parallelism: int = Field(default=4, ge=1)

    def check_production_safety(self) -> None:
        if self.env != "prod":
            return
        if self.session_secret == DEV_SESSION_SECRET:
            raise RuntimeError("AUTHGATE_SESSION_SECRET must be set in prod")
        if len(self.session_secret.encode("utf-8")) < MIN_SESSION_SECRET_BYTES:
            raise RuntimeError(
                f"AUTHGATE_SESSION_SECRET must be at least {MIN_SESSION_SECRET_BYTES} bytes"
            )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Rotating `session_secret` invalidates every outstanding handle, since the
# signature check runs before the session registry is consulted.
