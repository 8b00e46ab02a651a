"""
Domain exceptions - Semantic error types for the account service.

This module defines the error taxonomy callers branch on. Expected outcomes
(invalid credentials, invalid token, validation failures) are distinct classes
so adapters can render specific messages without string matching. Everything
else is a ServiceError that carries the operation context in its message and
the underlying cause via exception chaining.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field


class AccountError(Exception):
    """Base class for account domain errors."""

    pass


@dataclass(frozen=True)
class FieldError:
    """A single validation failure for one input field."""

    code: str
    message: str


@dataclass(eq=False)
class NewUserErrors(AccountError):
    """Registration input failed validation. Errors are grouped per field."""

    email: list[FieldError] = field(default_factory=list)
    password: list[FieldError] = field(default_factory=list)

    def __str__(self) -> str:
        codes = {
            "email": [e.code for e in self.email],
            "password": [e.code for e in self.password],
        }
        return f"invalid new user: {codes}"


class InvalidCredentials(AccountError):
    """Email/password pair does not match a verified account."""

    pass


class InvalidToken(AccountError):
    """Verification token does not exist or has expired."""

    pass


class ServiceError(AccountError):
    """Internal or infrastructure failure. Opaque to end users."""

    pass


class CompoundError(ServiceError):
    """
    Several failures surfaced together.

    Raised when a transaction rollback fails while another failure is
    already being handled. The original failure comes first in `errors`.
    """

    def __init__(self, errors: Sequence[BaseException]) -> None:
        self.errors = tuple(errors)
        super().__init__("\n".join(str(e) for e in self.errors))


class VerificationCleanupError(ServiceError):
    """The email was verified but the consumed key could not be deleted."""

    pass


class PasswordHashError(AccountError):
    """A stored password hash could not be decoded."""

    pass


class TransactionClosed(AccountError):
    """Commit or rollback was attempted on a finished transaction."""

    pass
