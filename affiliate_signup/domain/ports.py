"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, plus the closed enumerations shared across layers.
Adapters implement these protocols.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Protocol


class AffiliateCategory(str, Enum):
    """Closed set of affiliate classifications. No default selection."""

    HOTEL = "Hotel"
    RESORT = "Resort"


class FailureKind(str, Enum):
    """
    Failure taxonomy for a submission attempt.

    Local kinds (INCOMPLETE_INPUT, PASSWORD_MISMATCH, WEAK_PASSWORD,
    MISSING_CATEGORY) never touch a collaborator. Uniqueness kinds need
    a store query. PROVIDER_ERROR and STORE_ERROR carry the collaborator's
    own message.
    """

    INCOMPLETE_INPUT = "incomplete_input"
    PASSWORD_MISMATCH = "password_mismatch"
    WEAK_PASSWORD = "weak_password"
    USERNAME_TAKEN = "username_taken"
    EMAIL_TAKEN = "email_taken"
    MISSING_CATEGORY = "missing_category"
    PROVIDER_ERROR = "provider_error"
    STORE_ERROR = "store_error"


class FormState(str, Enum):
    """
    Per-attempt workflow states.

    Transitions:
    - IDLE -> VALIDATING -> CHECKING_USERNAME -> CHECKING_EMAIL
      -> CREATING_ACCOUNT -> PERSISTING -> SUCCEEDED
    - any non-terminal state -> FAILED
    - SUCCEEDED / FAILED -> IDLE (caller acknowledges the outcome)

    There is no cancelling state: once CREATING_ACCOUNT begins the
    attempt runs to completion or hard failure.
    """

    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    CHECKING_USERNAME = "CHECKING_USERNAME"
    CHECKING_EMAIL = "CHECKING_EMAIL"
    CREATING_ACCOUNT = "CREATING_ACCOUNT"
    PERSISTING = "PERSISTING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (FormState.SUCCEEDED, FormState.FAILED)

    @property
    def is_busy(self) -> bool:
        return self not in (FormState.IDLE, FormState.SUCCEEDED, FormState.FAILED)


class IdentityProvider(Protocol):
    """Port interface for the external identity provider."""

    async def create_account(self, email: str, password: str) -> str:
        """
        Create an authenticating identity for the email/password pair.

        Args:
            email: Email address as entered by the user
            password: Plaintext password (hashing is the provider's concern)

        Returns:
            Opaque provider-issued account identifier

        Raises:
            ProviderError: With the provider's own message (malformed email,
                password rejected by provider policy, duplicate identity,
                connectivity failure)
        """
        ...


class AccountStore(Protocol):
    """Port interface for the external account record store."""

    async def exists_by_field(self, field_name: str, value: str) -> bool:
        """
        Check whether any stored account has field_name equal to value.

        Args:
            field_name: Record field to query ("username" or "email")
            value: Exact value to match

        Returns:
            True if at least one record matches

        Raises:
            StoreError: If the store cannot answer
        """
        ...

    async def write_account(self, account_id: str, record: Mapping[str, str]) -> None:
        """
        Persist the profile record keyed by the provider-issued id.

        Raises:
            StoreError: If the record could not be written
        """
        ...
