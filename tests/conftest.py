"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory doubles of every domain port
- An AccountService wired to those doubles
"""

import pytest

from accounts.domain.users import AccountService
from tests.fakes import (
    FakeHasher,
    InMemoryDatabase,
    InMemoryUserQueries,
    RecordingEmailVerifier,
    SequentialTokenGenerator,
)


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def queries(db: InMemoryDatabase) -> InMemoryUserQueries:
    return InMemoryUserQueries(db)


@pytest.fixture
def hasher() -> FakeHasher:
    return FakeHasher()


@pytest.fixture
def tokens() -> SequentialTokenGenerator:
    return SequentialTokenGenerator()


@pytest.fixture
def verifier() -> RecordingEmailVerifier:
    return RecordingEmailVerifier()


@pytest.fixture
def service(
    db: InMemoryDatabase,
    queries: InMemoryUserQueries,
    hasher: FakeHasher,
    tokens: SequentialTokenGenerator,
    verifier: RecordingEmailVerifier,
) -> AccountService:
    """Account service wired to in-memory doubles."""
    return AccountService(
        db=db,
        queries=queries,
        hasher=hasher,
        token_generator=tokens,
        email_verifier=verifier,
    )
