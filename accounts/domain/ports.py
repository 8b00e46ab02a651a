"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, plus the records that cross those ports.
Adapters implement these protocols via structural subtyping.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID


@dataclass(frozen=True)
class UserRecord:
    """A persisted user row."""

    id: UUID
    email: str
    password_hash: str
    email_verified: bool = False


@dataclass(frozen=True)
class EmailVerificationKey:
    """
    A single-use token proving control of an email address.

    Expiry is derived from `created_at` and the service's token lifetime;
    it is never stored.
    """

    id: int
    user_id: UUID
    email: str
    token: str
    created_at: datetime


class PasswordHasher(Protocol):
    """Port interface for one-way password hashing."""

    def hash(self, password: str) -> str:
        """Hash a password with a fresh random salt."""
        ...

    def compare(self, password: str, password_hash: str) -> bool:
        """
        Check a password against a stored hash.

        Returns:
            True if the password matches, False otherwise

        Raises:
            PasswordHashError: If the hash cannot be decoded
        """
        ...


class TokenGenerator(Protocol):
    """Port interface for verification token generation."""

    def generate(self) -> str:
        """Return an unguessable, URL-safe token."""
        ...


class Mailer(Protocol):
    """Port interface for email delivery."""

    def send(self, to: str, sender: str, subject: str, body: str) -> None:
        """Deliver a single plain-text message."""
        ...


class EmailVerifier(Protocol):
    """Port interface for the registration notifications."""

    def duplicate_registration(self, email: str) -> None:
        """Tell the owner of a verified address that someone tried to re-register it."""
        ...

    def new_email(self, email: str, token: str) -> None:
        """Send the verification link for a newly registered address."""
        ...


class Transaction(Protocol):
    """
    Port interface for a database transaction.

    Both methods raise TransactionClosed once the transaction has
    already been committed or rolled back.
    """

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class Database(Protocol):
    """Port interface for starting transactions."""

    def begin(self) -> Transaction: ...


class UserQueries(Protocol):
    """
    Port interface for user and verification key persistence.

    The same query set runs either on the base connection pool or, via
    with_tx(), inside a transaction.
    """

    def with_tx(self, tx: Transaction) -> "UserQueries":
        """Return queries bound to the given transaction."""
        ...

    def verified_email_exists(self, email: str) -> bool: ...

    def insert_user(self, user_id: UUID, email: str, password_hash: str) -> UserRecord: ...

    def insert_verification_key(self, user_id: UUID, email: str, token: str) -> None: ...

    def get_verification_key_by_token(self, token: str) -> EmailVerificationKey | None:
        """Return the key for a token, or None if there is none."""
        ...

    def mark_email_verified(self, user_id: UUID) -> None: ...

    def delete_unverified_users_by_email(self, email: str) -> None: ...

    def delete_verification_key_by_id(self, key_id: int) -> None: ...

    def get_verified_user_by_email(self, email: str) -> UserRecord | None:
        """Return the verified user owning an email, or None."""
        ...
