"""
PostgreSQL repository adapter - Implements AccountStore protocol.

This module provides the PostgreSQL implementation of the domain's
account store port using psycopg3 (async) with raw SQL.

Query Safety:
-------------
exists_by_field() accepts a field name from the domain. Field names are
resolved through a fixed column whitelist and composed with
psycopg.sql.Identifier; values are always bound parameters.

Uniqueness:
-----------
affiliate_accounts has no UNIQUE constraint on username or email. The
admission pipeline checks uniqueness before the identity is created, so
two concurrent admissions can still both succeed for the same username.
"""

import logging
from collections.abc import Mapping
from pathlib import Path

import psycopg
from psycopg import sql
from psycopg_pool import AsyncConnectionPool

from affiliate_signup.domain.exceptions import StoreError

logger = logging.getLogger(__name__)

# Record field name -> affiliate_accounts column
_QUERYABLE_COLUMNS = {
    "username": "username",
    "email": "email",
    "contact_no": "contact_no",
}

_RECORD_FIELDS = ("username", "contact_no", "email", "affiliate_type")


class PostgresAccountStore:
    """
    Implements AccountStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Driver errors surface as StoreError carrying the driver's message.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 AsyncConnectionPool for database connections
        """
        self._pool = pool

    async def exists_by_field(self, field_name: str, value: str) -> bool:
        """
        Check whether any affiliate account has field_name equal to value.

        Args:
            field_name: One of "username", "email", "contact_no"
            value: Exact value to match (case-sensitive)

        Returns:
            True if a matching record exists

        Raises:
            ValueError: If field_name is not queryable
            StoreError: If the database cannot answer
        """
        column = _QUERYABLE_COLUMNS.get(field_name)
        if column is None:
            raise ValueError(f"Field is not queryable: {field_name}")

        query = sql.SQL("SELECT 1 FROM affiliate_accounts WHERE {} = %s LIMIT 1").format(
            sql.Identifier(column)
        )

        try:
            async with self._pool.connection() as conn, conn.cursor() as cursor:
                await cursor.execute(query, (value,))
                row = await cursor.fetchone()
        except psycopg.Error as e:
            logger.error("Uniqueness query on %s failed: %s", field_name, e)
            raise StoreError(str(e)) from e

        return row is not None

    async def write_account(self, account_id: str, record: Mapping[str, str]) -> None:
        """
        Insert the affiliate profile record.

        Records are written once and never updated here; a second write
        for the same account_id fails on the primary key.

        Args:
            account_id: Identity provider issued identifier
            record: Mapping with username, contact_no, email, affiliate_type

        Raises:
            StoreError: If the insert fails for any reason
        """
        missing = [name for name in _RECORD_FIELDS if name not in record]
        if missing:
            raise StoreError(f"Record is missing fields: {', '.join(missing)}")

        insert_sql = """
            INSERT INTO affiliate_accounts (account_id, username, contact_no, email, affiliate_type)
            VALUES (%s, %s, %s, %s, %s)
        """

        try:
            async with self._pool.connection() as conn, conn.cursor() as cursor:
                await cursor.execute(
                    insert_sql,
                    (account_id, *(record[name] for name in _RECORD_FIELDS)),
                )
                await conn.commit()
        except psycopg.Error as e:
            logger.error("Writing account %s failed: %s", account_id, e)
            raise StoreError(str(e)) from e


async def run_migrations(pool: AsyncConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 AsyncConnectionPool instance
    """
    # Structure: affiliate_signup/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            async with pool.connection() as conn:
                await conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
