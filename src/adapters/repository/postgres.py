"""
PostgreSQL repository adapter - Implements UserRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Token consumption is a single conditional UPDATE: the row is confirmed
only if it still holds the presented token, is unconfirmed and unexpired.
Two concurrent confirmations of the same token therefore serialize on the
row lock, and the second one matches zero rows.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

import psycopg
from psycopg.rows import class_row
from psycopg_pool import ConnectionPool, PoolTimeout

from src.domain.exceptions import EmailAlreadyRegistered, RepositoryError
from src.domain.ports import UserRecord

logger = logging.getLogger(__name__)

_USER_COLUMNS = """
    id, email, password_hash, registration_token, registration_token_expiry, confirmed
"""


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries. Driver and pool errors are
    raised as RepositoryError.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    @contextmanager
    def _cursor(self) -> Iterator[psycopg.Cursor[UserRecord]]:
        try:
            with self._pool.connection() as conn, conn.cursor(
                row_factory=class_row(UserRecord)
            ) as cursor:
                yield cursor
        except (psycopg.Error, PoolTimeout) as e:
            raise RepositoryError(str(e)) from e

    def find_by_token(self, token: str) -> UserRecord | None:
        with self._cursor() as cursor:
            cursor.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE registration_token = %s",
                (token,),
            )
            return cursor.fetchone()

    def find_by_email(self, email: str) -> UserRecord | None:
        with self._cursor() as cursor:
            cursor.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s", (email,))
            return cursor.fetchone()

    def find_by_id(self, user_id: int) -> UserRecord | None:
        with self._cursor() as cursor:
            cursor.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
            return cursor.fetchone()

    def create_user(
        self, email: str, password_hash: str, token: str, token_expiry: datetime
    ) -> UserRecord:
        """
        Insert a pending user.

        The UNIQUE constraint on email decides duplicates, so concurrent
        registrations of one address cannot both succeed.

        Raises:
            EmailAlreadyRegistered: If the email is already stored
        """
        sql = f"""
            INSERT INTO users (email, password_hash, registration_token, registration_token_expiry, confirmed)
            VALUES (%s, %s, %s, %s, FALSE)
            RETURNING {_USER_COLUMNS}
        """
        try:
            with self._cursor() as cursor:
                cursor.execute(sql, (email, password_hash, token, token_expiry))
                return cursor.fetchone()
        except RepositoryError as e:
            if isinstance(e.__cause__, psycopg.errors.UniqueViolation):
                raise EmailAlreadyRegistered(email) from None
            raise

    def mark_confirmed(self, user_id: int, token: str, now: datetime) -> bool:
        """
        Confirm the user and clear its token in one conditional UPDATE.

        Returns:
            True if exactly this call performed the transition
        """
        sql = """
            UPDATE users
            SET confirmed = TRUE,
                registration_token = NULL,
                registration_token_expiry = NULL,
                confirmed_at = %s
            WHERE id = %s
              AND registration_token = %s
              AND confirmed = FALSE
              AND registration_token_expiry > %s
        """
        with self._cursor() as cursor:
            cursor.execute(sql, (now, user_id, token, now))
            return cursor.rowcount == 1

    def ping(self) -> None:
        with self._cursor() as cursor:
            cursor.execute("SELECT 1")


MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


def run_migrations(pool: ConnectionPool, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
    """
    Apply the users schema migrations in filename order.

    Each file is run in its own transaction and must be safe to re-run
    (CREATE ... IF NOT EXISTS), since every start applies all of them.

    Returns:
        Names of the migration files that were applied

    Raises:
        RepositoryError: If a migration fails; the users table is then
            not guaranteed to match UserRecord
    """
    if not migrations_dir.is_dir():
        logger.warning("No migrations directory at %s, users schema left as is", migrations_dir)
        return []

    applied = []
    for sql_file in sorted(migrations_dir.glob("*.sql")):
        try:
            with pool.connection() as conn:
                conn.execute(sql_file.read_text())
        except (OSError, psycopg.Error, PoolTimeout) as e:
            logger.error("Users schema migration %s failed: %s", sql_file.name, e)
            raise RepositoryError(f"Migration {sql_file.name} failed") from e
        applied.append(sql_file.name)

    logger.info("Users schema up to date (%s)", ", ".join(applied) or "no migrations")
    return applied
