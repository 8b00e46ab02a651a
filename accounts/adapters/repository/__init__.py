"""Repository adapters - Database implementations."""

from .postgres import PostgresDatabase, PostgresTransaction, PostgresUserQueries, run_migrations

__all__ = ["PostgresDatabase", "PostgresTransaction", "PostgresUserQueries", "run_migrations"]
