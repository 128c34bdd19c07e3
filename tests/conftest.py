"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory fakes for the identity provider and account store ports
- Candidate factories
- Registration service wiring
"""

import asyncio
import itertools
from collections.abc import Mapping

import pytest

from affiliate_signup.domain.exceptions import ProviderError, StoreError
from affiliate_signup.domain.models import RegistrationCandidate
from affiliate_signup.domain.ports import AffiliateCategory
from affiliate_signup.domain.registration import RegistrationService


class FakeIdentityProvider:
    """In-memory IdentityProvider: issues sequential ids, one per email."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.accounts: dict[str, str] = {}
        self.error: str | None = None
        self.delay: float = 0.0
        self._ids = itertools.count(1)

    async def create_account(self, email: str, password: str) -> str:
        self.calls.append((email, password))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise ProviderError(self.error)
        if email in self.accounts.values():
            raise ProviderError("The email address is already in use by another account.")
        account_id = f"uid-{next(self._ids)}"
        self.accounts[account_id] = email
        return account_id


class FakeAccountStore:
    """In-memory AccountStore that records every call in order."""

    def __init__(self) -> None:
        self.records: dict[str, dict[str, str]] = {}
        self.calls: list[tuple] = []
        self.write_error: str | None = None
        self.query_error: str | None = None
        self.query_delay: float = 0.0
        self.slow_field: str | None = None  # limits query_delay to one field when set
        self.write_delay: float = 0.0

    async def exists_by_field(self, field_name: str, value: str) -> bool:
        self.calls.append(("exists_by_field", field_name, value))
        if self.query_delay and self.slow_field in (None, field_name):
            await asyncio.sleep(self.query_delay)
        if self.query_error is not None:
            raise StoreError(self.query_error)
        return any(record.get(field_name) == value for record in self.records.values())

    async def write_account(self, account_id: str, record: Mapping[str, str]) -> None:
        self.calls.append(("write_account", account_id, dict(record)))
        if self.write_delay:
            await asyncio.sleep(self.write_delay)
        if self.write_error is not None:
            raise StoreError(self.write_error)
        self.records[account_id] = dict(record)

    def seed(self, account_id: str, **record: str) -> None:
        self.records[account_id] = record


def build_candidate(**overrides) -> RegistrationCandidate:
    """Build a fully valid candidate, overriding selected fields."""
    values = {
        "display_name": "alice",
        "contact_number": "09171234567",
        "email": "alice@example.com",
        "password": "abc123",
        "password_confirmation": "abc123",
        "affiliate_category": AffiliateCategory.HOTEL,
    }
    values.update(overrides)
    return RegistrationCandidate(**values)


@pytest.fixture
def make_candidate():
    """Factory for valid candidates (alice / abc123 / Hotel by default)."""
    return build_candidate


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def account_store() -> FakeAccountStore:
    return FakeAccountStore()


@pytest.fixture
def service(
    identity_provider: FakeIdentityProvider, account_store: FakeAccountStore
) -> RegistrationService:
    return RegistrationService(identity_provider=identity_provider, account_store=account_store)
