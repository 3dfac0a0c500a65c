"""
authgate.auth.passwords

Secret hashing and verification (argon2id).

Responsibilities:
- Produce salted one-way digests of plaintext secrets.
- Verify a secret against a digest (constant-time inside argon2).
- Report digests created with outdated parameters so they can be rehashed.
"""

from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from authgate.settings import Settings


class SecretHasher:
    def __init__(
        self, *, time_cost: int = 3, memory_cost: int = 64 * 1024, parallelism: int = 4
    ) -> None:
        self._ph = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )
        # Checked when the identifier is unknown so both failure paths cost the same.
        self._dummy_digest = self._ph.hash("authgate-dummy-secret")

    @classmethod
    def from_settings(cls, settings: Settings) -> SecretHasher:
        return cls(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
            parallelism=settings.argon2_parallelism,
        )

    def hash(self, plain: str) -> str:
        if not plain:
            raise ValueError("empty secret")
        return self._ph.hash(plain)

    def verify(self, digest: str, plain: str) -> bool:
        if not digest or not plain:
            return False
        try:
            return self._ph.verify(digest, plain)
        except (VerificationError, InvalidHashError):
            # VerifyMismatchError is a VerificationError subclass.
            return False

    def verify_dummy(self, plain: str) -> None:
        self.verify(self._dummy_digest, plain or "-")

    def needs_rehash(self, digest: str) -> bool:
        try:
            return self._ph.check_needs_rehash(digest)
        except InvalidHashError:
            return True


# --- Module Notes -----------------------------------------------------------
# argon2 encodes algorithm, parameters and salt into the digest string, so a
# digest stays verifiable after the configured parameters change.
