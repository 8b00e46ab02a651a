"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account identity core: credential checks,
registration and email verification. It defines its own port interfaces
for infrastructure abstraction; adapters live in accounts.adapters.
"""

from .exceptions import (
    AccountError,
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
from .ports import (
    Database,
    EmailVerificationKey,
    EmailVerifier,
    Mailer,
    PasswordHasher,
    TokenGenerator,
    Transaction,
    UserQueries,
    UserRecord,
)
from .security import Argon2Hasher, UrlSafeTokenGenerator
from .users import AccountService, NewUser, User, make_new_user

__all__ = [
    "AccountError",
    "AccountService",
    "Argon2Hasher",
    "CompoundError",
    "Database",
    "EmailVerificationKey",
    "EmailVerifier",
    "FieldError",
    "InvalidCredentials",
    "InvalidToken",
    "Mailer",
    "NewUser",
    "NewUserErrors",
    "PasswordHashError",
    "PasswordHasher",
    "ServiceError",
    "TokenGenerator",
    "Transaction",
    "TransactionClosed",
    "UrlSafeTokenGenerator",
    "User",
    "UserQueries",
    "UserRecord",
    "VerificationCleanupError",
    "make_new_user",
]
