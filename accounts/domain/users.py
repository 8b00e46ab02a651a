"""
Account domain service - authentication, registration and email verification.

This module contains the core business logic for user accounts. All
cross-entity consistency is delegated to database transactions:

- register(): duplicate check + user insert + verification key insert
  happen in one transaction, and the verification email is sent before
  the commit so that a failed send leaves no half-registered user.
- verify_email(): marking the user verified and pruning duplicate
  unverified rows for the same address happen in one transaction. The
  consumed key is deleted afterwards, outside of it.

A transaction is rolled back on every exit that is not a commit. If the
rollback itself fails while another failure is propagating, both are
raised together as a CompoundError.
"""

import logging
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager, suppress
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import UUID

from .exceptions import (
    CompoundError,
    FieldError,
    InvalidCredentials,
    InvalidToken,
    NewUserErrors,
    PasswordHashError,
    ServiceError,
    TransactionClosed,
    VerificationCleanupError,
)
from .ports import Database, EmailVerifier, PasswordHasher, TokenGenerator, Transaction, UserQueries

logger = logging.getLogger(__name__)

EMAIL_MIN_LENGTH = 3
EMAIL_MAX_LENGTH = 254
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 1000

DEFAULT_TOKEN_LIFETIME = timedelta(minutes=15)

# Reference values for the comparison run when no account matches. The
# values are unrelated to any account; the hash only has to decode.
# Hash of "hyde" with argon2id, m=65536, t=1, p=8.
DUMMY_COMPARE_PASSWORD = "jekyll"
DUMMY_COMPARE_HASH = (
    "$argon2id$v=19$m=65536,t=1,p=8$+6TY8oCAV6WfG6DPgK55Lg$paDhSsjLEhkbUb8YOha73/zxzuC9VJgxCGvKosEtOEQ"
)


@dataclass(frozen=True)
class NewUser:
    """Validated registration input. Build with make_new_user()."""

    email: str
    password: str


@dataclass(frozen=True)
class User:
    """An authenticated identity."""

    id: UUID


def make_new_user(email: str, password: str) -> NewUser:
    """
    Validate raw registration input.

    The email is trimmed; the password is kept exactly as given since
    whitespace in passwords is significant. Both fields are always
    checked so every applicable error is reported at once.

    Raises:
        NewUserErrors: If either field is invalid
    """
    errors = NewUserErrors()

    trimmed_email = email.strip()
    if not trimmed_email:
        errors.email.append(FieldError("required", "Email is required."))
    elif (
        len(trimmed_email) < EMAIL_MIN_LENGTH
        or len(trimmed_email) > EMAIL_MAX_LENGTH
        or "@" not in trimmed_email
    ):
        errors.email.append(FieldError("email", "Enter a valid email address."))

    if len(password) < PASSWORD_MIN_LENGTH:
        errors.password.append(
            FieldError("min", f"Password must be at least {PASSWORD_MIN_LENGTH} characters.")
        )
    elif len(password) > PASSWORD_MAX_LENGTH:
        errors.password.append(
            FieldError("max", f"Password must be at most {PASSWORD_MAX_LENGTH:,} characters.")
        )

    if errors.email or errors.password:
        raise errors

    return NewUser(email=trimmed_email, password=password)


@contextmanager
def _wrap_errors(operation: str) -> Iterator[None]:
    """Re-raise any failure as a ServiceError naming the operation."""
    try:
        yield
    except Exception as e:
        raise ServiceError(f"{operation}: {e}") from e


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AccountService:
    """
    Domain service for user accounts.

    Orchestrates the hasher, token generator, persistence and notification
    ports. Holds no mutable state of its own, so a single instance can
    serve concurrent requests.
    """

    db: Database
    queries: UserQueries
    hasher: PasswordHasher
    token_generator: TokenGenerator
    email_verifier: EmailVerifier
    token_lifetime: timedelta = DEFAULT_TOKEN_LIFETIME
    clock: Callable[[], datetime] = field(default=_utcnow)

    def authenticate(self, email: str, password: str) -> User:
        """
        Check credentials against verified accounts.

        Unknown accounts and wrong passwords raise the same exception and
        take the same time: a dummy comparison is run when no account
        matches.

        Returns:
            The matching user's identity

        Raises:
            InvalidCredentials: If no verified account matches the pair
            ServiceError: If the lookup fails or the stored hash is malformed
        """
        with _wrap_errors("searching for user"):
            user = self.queries.get_verified_user_by_email(email.strip())

        if user is None:
            # Result is irrelevant, only the time spent matters.
            with suppress(PasswordHashError):
                self.hasher.compare(DUMMY_COMPARE_PASSWORD, DUMMY_COMPARE_HASH)

            raise InvalidCredentials()

        # A malformed hash is corrupted data, not a wrong password.
        with _wrap_errors(f"comparing password to hash for user {user.id}"):
            matches = self.hasher.compare(password, user.password_hash)

        if not matches:
            raise InvalidCredentials()

        return User(id=user.id)

    def register(self, new_user: NewUser) -> None:
        """
        Register a new, unverified user and send the verification email.

        If the address already belongs to a verified user, nothing is
        persisted and the owner is notified of the attempt instead. That
        path is not an error for the caller, so registering reveals
        nothing about which addresses have accounts.

        Raises:
            ServiceError: On any hashing, persistence or notification failure
        """
        # Hash before opening the transaction; it is CPU-bound.
        with _wrap_errors("failed to hash password"):
            password_hash = self.hasher.hash(new_user.password)

        with self._transaction() as tx:
            queries = self.queries.with_tx(tx)

            with _wrap_errors("failed to check for duplicate email"):
                email_already_verified = queries.verified_email_exists(new_user.email)

            if email_already_verified:
                logger.debug("Registration is for an email that has already been verified.")

                # Nothing was written, so the transaction just rolls back.
                with _wrap_errors("failed to send duplicate registration notice"):
                    self.email_verifier.duplicate_registration(new_user.email)
                return

            user_id = uuid.uuid4()

            with _wrap_errors("failed to persist new user"):
                queries.insert_user(user_id, new_user.email, password_hash)

            logger.debug("Persisted new user %s", user_id)

            token = self.token_generator.generate()

            with _wrap_errors(f"failed to insert email verification key for user {user_id}"):
                queries.insert_verification_key(user_id, new_user.email, token)

            logger.debug("Persisted email verification key for user %s", user_id)

            with _wrap_errors(f"failed to send email verification for user {user_id}"):
                self.email_verifier.new_email(new_user.email, token)

            with _wrap_errors(f"failed to commit registration for user {user_id}"):
                tx.commit()

        logger.info("Registered a new user %s", user_id)

    def verify_email(self, token: str) -> None:
        """
        Consume a verification token and mark its user's email verified.

        Unknown and expired tokens raise the same exception. Once the
        verification commits, other unverified users with the same email
        are gone and the consumed key is deleted.

        Raises:
            InvalidToken: If the token does not exist or has expired
            VerificationCleanupError: If the email was verified but the key
                could not be deleted afterwards
            ServiceError: On any other persistence failure
        """
        with _wrap_errors("retrieving verification key"):
            key = self.queries.get_verification_key_by_token(token)

        if key is None:
            logger.debug("Email verification token does not exist.")
            raise InvalidToken()

        if key.created_at + self.token_lifetime < self.clock():
            logger.debug("Email verification token is expired.")
            raise InvalidToken()

        with self._transaction() as tx:
            queries = self.queries.with_tx(tx)

            with _wrap_errors(f"marking email verified for user {key.user_id}"):
                queries.mark_email_verified(key.user_id)

            with _wrap_errors("deleting duplicate unverified users"):
                queries.delete_unverified_users_by_email(key.email)

            with _wrap_errors(f"committing email verification for user {key.user_id}"):
                tx.commit()

        logger.info("Verified email address for user %s", key.user_id)

        try:
            self.queries.delete_verification_key_by_id(key.id)
        except Exception as e:
            raise VerificationCleanupError(f"deleting used verification key {key.id}: {e}") from e

    @contextmanager
    def _transaction(self) -> Iterator[Transaction]:
        """
        Open a transaction that is rolled back unless committed.

        Rolling back an already committed transaction raises
        TransactionClosed, which is expected and ignored.
        """
        with _wrap_errors("starting transaction"):
            tx = self.db.begin()

        rolled_back = False
        try:
            yield tx
        except Exception as e:
            rolled_back = True
            self._rollback(tx, e)
            raise
        finally:
            # Also reached on KeyboardInterrupt and GeneratorExit
            if not rolled_back:
                self._rollback(tx, None)

    def _rollback(self, tx: Transaction, failure: Exception | None) -> None:
        try:
            tx.rollback()
        except TransactionClosed:
            return
        except Exception as e:
            if failure is None:
                raise ServiceError(f"rolling back transaction: {e}") from e
            raise CompoundError([failure, e]) from failure
