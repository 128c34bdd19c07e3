"""
PostgreSQL identity provider adapter - Implements IdentityProvider protocol.

Owns credentials for affiliate accounts: the admission pipeline hands it
the plaintext password once and never stores it anywhere else.

Provider policy (checked here, reported as ProviderError):
- Email must be syntactically valid (email-validator, no DNS lookup)
- Password must be at least 6 characters
- One identity per email (case-insensitive)

Passwords are hashed with bcrypt in a worker thread.
"""

import asyncio
import logging
import secrets

import bcrypt
import psycopg
from email_validator import EmailNotValidError, validate_email
from psycopg_pool import AsyncConnectionPool

from affiliate_signup.domain.exceptions import ProviderError

logger = logging.getLogger(__name__)

MIN_PROVIDER_PASSWORD_LENGTH = 6

INVALID_EMAIL_MESSAGE = "The email address is badly formatted."
WEAK_PASSWORD_MESSAGE = "Password should be at least 6 characters"
EMAIL_IN_USE_MESSAGE = "The email address is already in use by another account."


class PostgresIdentityProvider:
    """
    Implements IdentityProvider protocol via psycopg3 and bcrypt.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, pool: AsyncConnectionPool, bcrypt_cost: int = 10) -> None:
        """
        Initialize provider with connection pool.

        Args:
            pool: psycopg3 AsyncConnectionPool for database connections
            bcrypt_cost: bcrypt work factor for password hashes
        """
        self._pool = pool
        self._bcrypt_cost = bcrypt_cost

    async def create_account(self, email: str, password: str) -> str:
        """
        Create an identity and return its account id.

        Uses INSERT ... ON CONFLICT (email) DO NOTHING so a concurrent
        registration for the same email cannot create a second identity.

        Args:
            email: Email address as entered (normalized before storage)
            password: Plaintext password, hashed before storage

        Returns:
            28-character URL-safe account identifier

        Raises:
            ProviderError: Policy violation, duplicate email or database failure
        """
        normalized_email = email.strip().lower()
        try:
            validate_email(normalized_email, check_deliverability=False)
        except EmailNotValidError:
            raise ProviderError(INVALID_EMAIL_MESSAGE) from None

        if len(password) < MIN_PROVIDER_PASSWORD_LENGTH:
            raise ProviderError(WEAK_PASSWORD_MESSAGE)

        password_hash = await asyncio.to_thread(self._hash_password, password)
        account_id = secrets.token_urlsafe(21)

        insert_sql = """
            INSERT INTO identities (account_id, email, password_hash, created_at)
            VALUES (%s, %s, %s, NOW())
            ON CONFLICT (email) DO NOTHING
        """

        try:
            async with self._pool.connection() as conn, conn.cursor() as cursor:
                await cursor.execute(insert_sql, (account_id, normalized_email, password_hash))
                await conn.commit()
                created = cursor.rowcount == 1
        except psycopg.Error as e:
            logger.error("Identity creation failed: %s", e)
            raise ProviderError(str(e)) from e

        if not created:
            raise ProviderError(EMAIL_IN_USE_MESSAGE)

        logger.info("Identity created: %s", account_id)
        return account_id

    def _hash_password(self, password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self._bcrypt_cost)).decode()
