"""
Shared fixtures for integration tests.

Requires PostgreSQL reachable at DATABASE_URL. Tests are skipped when the
database cannot be reached.
"""

from collections.abc import AsyncGenerator

import psycopg
import pytest
import pytest_asyncio
from psycopg_pool import AsyncConnectionPool

from affiliate_signup.adapters.repository.postgres import run_migrations
from affiliate_signup.config.settings import get_settings


@pytest_asyncio.fixture
async def pool() -> AsyncGenerator[AsyncConnectionPool, None]:
    """Open a pool, run migrations and clean tables before each test."""
    settings = get_settings()
    try:
        conn = await psycopg.AsyncConnection.connect(settings.database_url, connect_timeout=2)
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL not available: {e}")
    await conn.close()

    pool = AsyncConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=False,
    )
    await pool.open()
    await run_migrations(pool)
    async with pool.connection() as conn:
        await conn.execute("DELETE FROM affiliate_accounts")
        await conn.execute("DELETE FROM identities")
    yield pool
    await pool.close()
