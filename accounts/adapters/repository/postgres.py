"""
PostgreSQL persistence adapter - Implements the Database and UserQueries protocols.

This module provides the PostgreSQL implementation of the domain's
persistence ports using psycopg3 with raw SQL.

Transaction Design:
------------------
PostgresUserQueries has two forms sharing one query set:

1. **Pooled** (`PostgresUserQueries(pool)`): each query checks out its own
   connection and commits immediately.

2. **Transactional** (`queries.with_tx(tx)`): queries run on the
   connection held by a PostgresTransaction and are only persisted when
   the domain service commits that transaction.

A PostgresTransaction returns its connection to the pool on commit or
rollback. Any further commit/rollback raises TransactionClosed, which the
domain treats as the expected result of rolling back after a commit.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from importlib import resources
from importlib.resources.abc import Traversable
from uuid import UUID

from psycopg import Connection, Cursor
from psycopg_pool import ConnectionPool

from accounts.domain.exceptions import TransactionClosed
from accounts.domain.ports import EmailVerificationKey, Transaction, UserRecord

logger = logging.getLogger(__name__)

_USER_COLUMNS = "id, email, password_hash, email_verified"
_KEY_COLUMNS = "id, user_id, email, token, created_at"


class PostgresTransaction:
    """
    Implements Transaction protocol over a pooled psycopg connection.

    The connection is not in autocommit mode, so the first statement
    executed on it opens the transaction.
    """

    def __init__(self, pool: ConnectionPool, conn: Connection) -> None:
        self._pool = pool
        self._conn = conn
        self._closed = False

    @property
    def connection(self) -> Connection:
        if self._closed:
            raise TransactionClosed("transaction is closed")
        return self._conn

    def commit(self) -> None:
        if self._closed:
            raise TransactionClosed("transaction is closed")
        try:
            self._conn.commit()
        finally:
            self._release()

    def rollback(self) -> None:
        if self._closed:
            raise TransactionClosed("transaction is closed")
        try:
            self._conn.rollback()
        finally:
            self._release()

    def _release(self) -> None:
        self._closed = True
        self._pool.putconn(self._conn)


class PostgresDatabase:
    """Implements Database protocol via a psycopg3 connection pool."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def begin(self) -> PostgresTransaction:
        """Check a connection out of the pool for the length of a transaction."""
        return PostgresTransaction(self._pool, self._pool.getconn())


class PostgresUserQueries:
    """
    Implements UserQueries protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool, tx: PostgresTransaction | None = None) -> None:
        """
        Initialize queries with a connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
            tx: Transaction to run in; None runs each query on its own connection
        """
        self._pool = pool
        self._tx = tx

    def with_tx(self, tx: Transaction) -> "PostgresUserQueries":
        if not isinstance(tx, PostgresTransaction):
            raise TypeError(f"expected PostgresTransaction, got {type(tx).__name__}")
        return PostgresUserQueries(self._pool, tx)

    @contextmanager
    def _cursor(self) -> Iterator[Cursor]:
        if self._tx is not None:
            with self._tx.connection.cursor() as cursor:
                yield cursor
            return

        with self._pool.connection() as conn, conn.cursor() as cursor:
            yield cursor
            conn.commit()

    def verified_email_exists(self, email: str) -> bool:
        sql = "SELECT EXISTS (SELECT 1 FROM users WHERE email = %s AND email_verified)"
        with self._cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
        return bool(row and row[0])

    def insert_user(self, user_id: UUID, email: str, password_hash: str) -> UserRecord:
        sql = f"""
            INSERT INTO users (id, email, password_hash)
            VALUES (%s, %s, %s)
            RETURNING {_USER_COLUMNS}
        """
        with self._cursor() as cursor:
            cursor.execute(sql, (user_id, email, password_hash))
            row = cursor.fetchone()
        return UserRecord(*row)

    def insert_verification_key(self, user_id: UUID, email: str, token: str) -> None:
        sql = """
            INSERT INTO email_verification_keys (user_id, email, token)
            VALUES (%s, %s, %s)
        """
        with self._cursor() as cursor:
            cursor.execute(sql, (user_id, email, token))

    def get_verification_key_by_token(self, token: str) -> EmailVerificationKey | None:
        sql = f"SELECT {_KEY_COLUMNS} FROM email_verification_keys WHERE token = %s"
        with self._cursor() as cursor:
            cursor.execute(sql, (token,))
            row = cursor.fetchone()
        return EmailVerificationKey(*row) if row is not None else None

    def mark_email_verified(self, user_id: UUID) -> None:
        with self._cursor() as cursor:
            cursor.execute("UPDATE users SET email_verified = TRUE WHERE id = %s", (user_id,))

    def delete_unverified_users_by_email(self, email: str) -> None:
        # Keys of the deleted users go with them (ON DELETE CASCADE)
        with self._cursor() as cursor:
            cursor.execute(
                "DELETE FROM users WHERE email = %s AND NOT email_verified",
                (email,),
            )

    def delete_verification_key_by_id(self, key_id: int) -> None:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM email_verification_keys WHERE id = %s", (key_id,))

    def get_verified_user_by_email(self, email: str) -> UserRecord | None:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s AND email_verified"
        with self._cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
        return UserRecord(*row) if row is not None else None


def migration_files(migrations_dir: Traversable | None = None) -> list[Traversable]:
    """
    List the *.sql migration files in name order.

    Args:
        migrations_dir: Directory of *.sql files; defaults to the
            migrations shipped inside the accounts package
    """
    if migrations_dir is None:
        migrations_dir = resources.files("accounts") / "migrations"

    if not migrations_dir.is_dir():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return []

    return sorted(
        (entry for entry in migrations_dir.iterdir() if entry.name.endswith(".sql")),
        key=lambda entry: entry.name,
    )


def run_migrations(pool: ConnectionPool, migrations_dir: Traversable | None = None) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
        migrations_dir: Directory of *.sql files; see migration_files()
    """
    sql_files = migration_files(migrations_dir)

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)
                conn.commit()

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
