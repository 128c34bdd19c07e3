"""
Domain value objects - Candidate input and submission outcomes.

A RegistrationCandidate is built fresh for every submission attempt and
discarded afterwards. Outcome is either Success or Failure; the UI layer
renders it and never keeps independent flags of its own.
"""

from dataclasses import dataclass, field

from .ports import AffiliateCategory, FailureKind

MAX_CONTACT_NUMBER_LENGTH = 11

# Fixed messages for failures decided locally or by a uniqueness query.
# Provider and store failures carry the collaborator's message instead.
FAILURE_MESSAGES: dict[FailureKind, str] = {
    FailureKind.INCOMPLETE_INPUT: "Please fill in all fields.",
    FailureKind.PASSWORD_MISMATCH: "Passwords do not match.",
    FailureKind.WEAK_PASSWORD: (
        "Password must be at least 6 characters long and contain both letters and numbers."
    ),
    FailureKind.USERNAME_TAKEN: "Username is not available",
    FailureKind.EMAIL_TAKEN: "Email already used",
    FailureKind.MISSING_CATEGORY: "Please select an affiliate type (Hotel or Resort).",
}


def check_contact_number(contact_number: str) -> None:
    """Raise ValueError if contact_number exceeds the stored column width."""
    if len(contact_number) > MAX_CONTACT_NUMBER_LENGTH:
        raise ValueError(
            f"Contact number must be at most {MAX_CONTACT_NUMBER_LENGTH} characters"
        )


@dataclass(frozen=True)
class RegistrationCandidate:
    """In-flight registration input for a single submission attempt."""

    display_name: str
    contact_number: str
    email: str
    password: str = field(repr=False)
    password_confirmation: str = field(repr=False)
    affiliate_category: AffiliateCategory | None = None

    def __post_init__(self) -> None:
        check_contact_number(self.contact_number)

    def to_record(self) -> dict[str, str]:
        """
        Build the profile record written to the account store.

        Credentials never appear in the record; the identity provider
        holds them.
        """
        if self.affiliate_category is None:
            raise ValueError("Cannot build a record without an affiliate category")
        return {
            "username": self.display_name,
            "contact_no": self.contact_number,
            "email": self.email,
            "affiliate_type": self.affiliate_category.value,
        }


@dataclass(frozen=True)
class Success:
    """Account created and its record persisted."""

    account_id: str


@dataclass(frozen=True)
class Failure:
    """
    Submission attempt stopped at the first failing step.

    account_id is only set for STORE_ERROR after the identity provider
    already issued an account, so the caller can reconcile the orphan.
    """

    kind: FailureKind
    message: str
    field: str | None = None
    account_id: str | None = None

    @classmethod
    def of(cls, kind: FailureKind, field: str | None = None) -> "Failure":
        """Build a failure carrying the fixed message for kind."""
        return cls(kind=kind, message=FAILURE_MESSAGES[kind], field=field)


Outcome = Success | Failure
