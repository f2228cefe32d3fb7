"""Password hashing and verification (argon2id)."""

import secrets

from argon2 import PasswordHasher as _Argon2Hasher
from argon2 import Type
from argon2.exceptions import InvalidHashError, VerificationError

from authsvc.core.config import Settings

# Min/max lengths for password input validation.
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


class PasswordHasher:
    """
    Salted, memory-hard password hashing.

    hash() output is an encoded argon2id string ($argon2id$v=19$m=...,t=...,p=...$salt$hash)
    that carries its own parameters, so verify() needs nothing but the stored string.
    """

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ) -> None:
        self._impl = _Argon2Hasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=Type.ID,
        )
        self._dummy_hash: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "PasswordHasher":
        return cls(
            time_cost=settings.ARGON2_TIME_COST,
            memory_cost=settings.ARGON2_MEMORY_COST_KIB,
            parallelism=settings.ARGON2_PARALLELISM,
        )

    def hash(self, password: str) -> str:
        """Hash a plain-text password for storage. Raises argon2 HashingError on failure."""
        return self._impl.hash(password)

    def verify(self, hashed: str, password: str) -> bool:
        """Verify a plain password against a stored hash. Malformed hashes verify as False."""
        try:
            return self._impl.verify(hashed, password)
        except (VerificationError, InvalidHashError, TypeError, ValueError):
            return False

    def verify_dummy(self, password: str) -> bool:
        """
        Spend one verification's worth of work against a throwaway hash and return False.
        Used when the account does not exist so response timing matches a real mismatch.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self._impl.hash(secrets.token_urlsafe(16))
        self.verify(self._dummy_hash, password)
        return False

    def needs_rehash(self, hashed: str) -> bool:
        """True when the stored hash was produced with different cost parameters."""
        try:
            return self._impl.check_needs_rehash(hashed)
        except (InvalidHashError, ValueError):
            return True
