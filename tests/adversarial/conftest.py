"""
Shared fixtures for adversarial tests.

Timing tests run the real argon2 hasher against in-memory storage; race
condition tests need PostgreSQL and are skipped when it is unavailable.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool

from tests.postgres import clean_tables, open_test_pool

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for adversarial tests."""
    pool = open_test_pool()
    yield pool
    pool.close()


@pytest.fixture
def clean_pool(pool: ConnectionPool) -> ConnectionPool:
    """Connection pool over empty tables."""
    clean_tables(pool)
    return pool
