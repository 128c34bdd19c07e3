"""Identity provider adapters."""

from .postgres import PostgresIdentityProvider

__all__ = ["PostgresIdentityProvider"]
