"""Shared fixtures for tests against a real PostgreSQL database."""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool

from tests.postgres import clean_tables, open_test_pool


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for integration tests."""
    pool = open_test_pool()
    yield pool
    pool.close()


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean tables before each test."""
    clean_tables(pool)
    yield
