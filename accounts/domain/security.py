"""
Security primitives - password hashing and verification tokens.

Production implementations of the PasswordHasher and TokenGenerator ports.
"""

import secrets

import argon2
from argon2 import exceptions as argon_exc

from .exceptions import PasswordHashError


class Argon2Hasher:
    """
    Implements PasswordHasher protocol via argon2id.

    Every call to hash() uses a fresh random salt, so hashing the same
    password twice yields different strings. The defaults match the
    parameters of the service's reference dummy hash so that a dummy
    comparison costs the same as a real one.
    """

    def __init__(self, time_cost: int = 1, memory_cost: int = 65536, parallelism: int = 8) -> None:
        self._hasher = argon2.PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=argon2.Type.ID,
        )

    def hash(self, password: str) -> str:
        return self._hasher.hash(password)

    def compare(self, password: str, password_hash: str) -> bool:
        """
        Check a password against an argon2 hash.

        A mismatch is a normal False result. Only a hash that cannot be
        decoded raises, since that points at corrupted stored data.
        """
        try:
            return self._hasher.verify(password_hash, password)
        except argon_exc.InvalidHashError as e:
            raise PasswordHashError("malformed password hash") from e
        except argon_exc.VerificationError:
            # Includes VerifyMismatchError
            return False


class UrlSafeTokenGenerator:
    """Implements TokenGenerator protocol with 256 bits of randomness."""

    def __init__(self, nbytes: int = 32) -> None:
        self._nbytes = nbytes

    def generate(self) -> str:
        return secrets.token_urlsafe(self._nbytes)
