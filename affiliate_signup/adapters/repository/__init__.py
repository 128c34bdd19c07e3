"""Repository adapters - Database implementations."""

from .postgres import PostgresAccountStore, run_migrations

__all__ = ["PostgresAccountStore", "run_migrations"]
