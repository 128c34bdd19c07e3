"""
Unit tests for domain ports, value objects and exceptions.

Tests verify:
- Enumerations carry the expected wire values
- Port interfaces are properly defined
- Exceptions are properly structured
- Domain purity (zero framework imports)
"""

import subprocess
from enum import Enum
from pathlib import Path

import pytest

from affiliate_signup.domain.exceptions import (
    FormBusy,
    ProviderError,
    RegistrationError,
    StoreError,
    SubmissionInProgress,
)
from affiliate_signup.domain.models import FAILURE_MESSAGES, Failure, RegistrationCandidate
from affiliate_signup.domain.ports import (
    AccountStore,
    AffiliateCategory,
    FailureKind,
    FormState,
    IdentityProvider,
)

DOMAIN_DIR = Path(__file__).resolve().parents[2] / "affiliate_signup" / "domain"


class TestAffiliateCategory:
    def test_is_str_enum(self) -> None:
        assert issubclass(AffiliateCategory, str)
        assert issubclass(AffiliateCategory, Enum)

    def test_closed_set(self) -> None:
        assert [c.value for c in AffiliateCategory] == ["Hotel", "Resort"]


class TestFormState:
    def test_busy_states(self) -> None:
        busy = {state for state in FormState if state.is_busy}
        assert busy == {
            FormState.VALIDATING,
            FormState.CHECKING_USERNAME,
            FormState.CHECKING_EMAIL,
            FormState.CREATING_ACCOUNT,
            FormState.PERSISTING,
        }

    def test_terminal_states(self) -> None:
        terminal = {state for state in FormState if state.is_terminal}
        assert terminal == {FormState.SUCCEEDED, FormState.FAILED}

    def test_no_cancelling_state(self) -> None:
        assert not any("CANCEL" in state.name for state in FormState)


class TestFailureMessages:
    def test_local_kinds_have_fixed_messages(self) -> None:
        """Every kind except provider/store failures has a fixed message."""
        assert set(FAILURE_MESSAGES) == set(FailureKind) - {
            FailureKind.PROVIDER_ERROR,
            FailureKind.STORE_ERROR,
        }

    def test_failure_of_uses_fixed_message(self) -> None:
        failure = Failure.of(FailureKind.EMAIL_TAKEN, field="email")
        assert failure.message == "Email already used"
        assert failure.field == "email"
        assert failure.account_id is None


class TestRegistrationCandidate:
    def test_record_excludes_credentials(self) -> None:
        candidate = RegistrationCandidate(
            display_name="alice",
            contact_number="0917",
            email="alice@example.com",
            password="abc123",
            password_confirmation="abc123",
            affiliate_category=AffiliateCategory.RESORT,
        )
        assert candidate.to_record() == {
            "username": "alice",
            "contact_no": "0917",
            "email": "alice@example.com",
            "affiliate_type": "Resort",
        }

    def test_repr_hides_password(self) -> None:
        candidate = RegistrationCandidate("a", "1", "a@b.c", "secret1", "secret1")
        assert "secret1" not in repr(candidate)

    def test_record_requires_category(self) -> None:
        candidate = RegistrationCandidate("a", "1", "a@b.c", "abc123", "abc123")
        with pytest.raises(ValueError):
            candidate.to_record()

    def test_candidate_is_immutable(self) -> None:
        candidate = RegistrationCandidate("a", "1", "a@b.c", "abc123", "abc123")
        with pytest.raises(AttributeError):
            candidate.email = "x@y.z"  # type: ignore[misc]

    def test_contact_number_longer_than_column_rejected(self) -> None:
        RegistrationCandidate("a", "0" * 11, "a@b.c", "abc123", "abc123")
        with pytest.raises(ValueError, match="at most 11"):
            RegistrationCandidate("a", "0" * 40, "a@b.c", "abc123", "abc123")


class TestPorts:
    def test_identity_provider_has_create_account(self) -> None:
        assert hasattr(IdentityProvider, "create_account")

    def test_account_store_has_query_and_write(self) -> None:
        assert hasattr(AccountStore, "exists_by_field")
        assert hasattr(AccountStore, "write_account")


class TestDomainExceptions:
    @pytest.mark.parametrize("exc", [ProviderError, StoreError, SubmissionInProgress, FormBusy])
    def test_inherits_registration_error(self, exc: type) -> None:
        assert issubclass(exc, RegistrationError)

    def test_collaborator_errors_keep_message(self) -> None:
        assert ProviderError("badly formatted").message == "badly formatted"
        assert StoreError("disk full").message == "disk full"


class TestDomainPurity:
    """Domain layer has zero framework imports."""

    @pytest.mark.parametrize(
        "pattern",
        ["from fastapi", "import fastapi", "from pydantic", "import pydantic", "psycopg", "bcrypt"],
    )
    def test_no_framework_imports_in_domain(self, pattern: str) -> None:
        result = subprocess.run(
            ["grep", "-r", pattern, str(DOMAIN_DIR)],
            capture_output=True,
            text=True,
        )
        assert result.returncode != 0, f"Framework import found: {result.stdout}"
