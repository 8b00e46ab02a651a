"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from functools import lru_cache

from fastapi import Request
from psycopg_pool import ConnectionPool

from accounts.adapters.repository.postgres import PostgresDatabase, PostgresUserQueries
from accounts.adapters.smtp.console import ConsoleMailer
from accounts.adapters.smtp.smtp import SmtpMailer
from accounts.adapters.smtp.verifier import EmailNotifier
from accounts.config.settings import get_settings
from accounts.domain.ports import Mailer
from accounts.domain.security import Argon2Hasher, UrlSafeTokenGenerator
from accounts.domain.users import AccountService

# Module-level singleton - the token generator is stateless
_token_generator = UrlSafeTokenGenerator()


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


@lru_cache
def get_hasher() -> Argon2Hasher:
    """Get argon2id hasher configured from settings (singleton)."""
    settings = get_settings()
    return Argon2Hasher(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
    )


@lru_cache
def get_mailer() -> Mailer:
    """Get the configured mailer (singleton)."""
    settings = get_settings()
    if settings.mailer == "smtp":
        return SmtpMailer(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout_seconds,
        )
    return ConsoleMailer()


def get_account_service(request: Request) -> AccountService:
    """
    Create account service with injected dependencies.

    Wires together persistence, hashing, tokens and notifications.
    """
    settings = get_settings()
    pool = get_pool(request)
    return AccountService(
        db=PostgresDatabase(pool),
        queries=PostgresUserQueries(pool),
        hasher=get_hasher(),
        token_generator=_token_generator,
        email_verifier=EmailNotifier(get_mailer(), settings.base_url, settings.email_sender),
        token_lifetime=settings.token_lifetime,
    )
