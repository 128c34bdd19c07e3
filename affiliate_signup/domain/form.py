"""
Registration form - Per-instance state machine around the pipeline.

A RegistrationForm holds what the user has typed so far, the category
selection, the workflow state of the current attempt and the error slots
a UI renders. The UI never keeps flags of its own; it reads state,
outcome and error_message() from here.

Only one attempt runs per form. The busy check and the move to VALIDATING
happen before the first suspension point, so a double submit on the same
event loop is rejected rather than creating a second account.
"""

import logging
from enum import Enum

from .exceptions import FormBusy, SubmissionInProgress
from .models import Outcome, RegistrationCandidate, Success, check_contact_number
from .ports import AffiliateCategory, FailureKind, FormState
from .registration import RegistrationService

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "display_name",
    "contact_number",
    "email",
    "password",
    "password_confirmation",
)


class ErrorSlot(Enum):
    """Error slots, declared in display priority order (most specific first)."""

    USERNAME = "username"
    EMAIL = "email"
    PASSWORD = "password"
    GENERAL = "general"


_SLOT_BY_KIND = {
    FailureKind.USERNAME_TAKEN: ErrorSlot.USERNAME,
    FailureKind.EMAIL_TAKEN: ErrorSlot.EMAIL,
    FailureKind.PASSWORD_MISMATCH: ErrorSlot.PASSWORD,
    FailureKind.WEAK_PASSWORD: ErrorSlot.PASSWORD,
}


def attribute_error(errors: dict[ErrorSlot, str]) -> str | None:
    """
    Pick the single message to display from the populated slots.

    username-taken > email-taken > password-related > generic.
    """
    for slot in ErrorSlot:
        message = errors.get(slot)
        if message:
            return message
    return None


class RegistrationForm:
    """One form instance: field values, selection, guard and last outcome."""

    def __init__(self, service: RegistrationService) -> None:
        self._service = service
        self._values: dict[str, str] = dict.fromkeys(EDITABLE_FIELDS, "")
        self._category: AffiliateCategory | None = None
        self._state = FormState.IDLE
        self._outcome: Outcome | None = None
        self._errors: dict[ErrorSlot, str] = {}

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def outcome(self) -> Outcome | None:
        return self._outcome

    @property
    def category(self) -> AffiliateCategory | None:
        return self._category

    @property
    def errors(self) -> dict[ErrorSlot, str]:
        return dict(self._errors)

    def value(self, name: str) -> str:
        return self._values[name]

    def update(self, **fields: str) -> None:
        """
        Set one or more field values.

        Raises:
            FormBusy: While a submission is running
            ValueError: For names that are not form fields, or a contact
                number longer than the stored column allows
        """
        self._ensure_not_busy()
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown form fields: {', '.join(sorted(unknown))}")
        if "contact_number" in fields:
            check_contact_number(fields["contact_number"])
        self._values.update(fields)

    def select_category(self, category: AffiliateCategory) -> None:
        # Allowed mid-submission; the final category gate reads it live.
        self._category = category

    def clear_category(self) -> None:
        self._category = None

    async def submit(self) -> Outcome:
        """
        Snapshot a fresh candidate and run it through the pipeline.

        Returns:
            The outcome, also kept on the form until the next attempt

        Raises:
            SubmissionInProgress: If an attempt for this form is running
        """
        if self._state.is_busy:
            raise SubmissionInProgress("A submission for this form is already running")

        self._state = FormState.VALIDATING
        self._outcome = None
        self._errors.clear()

        candidate = RegistrationCandidate(
            affiliate_category=self._category,
            **self._values,
        )
        try:
            outcome = await self._service.submit(
                candidate,
                category_source=lambda: self._category,
                on_transition=self._enter,
            )
        except BaseException:
            self._state = FormState.FAILED
            self._forget_passwords()
            self._errors[ErrorSlot.GENERAL] = "Registration failed unexpectedly."
            raise

        self._record(outcome)
        return outcome

    def acknowledge(self) -> None:
        """Return to IDLE after the caller has handled a terminal outcome."""
        self._ensure_not_busy()
        self._state = FormState.IDLE

    def abandon(self) -> None:
        """
        Clear every value, selection, error and outcome.

        Called when the caller leaves the form so no stale partial input
        survives to the next visit.
        """
        self._ensure_not_busy()
        self._values = dict.fromkeys(EDITABLE_FIELDS, "")
        self._category = None
        self._outcome = None
        self._errors.clear()
        self._state = FormState.IDLE
        logger.debug("Registration form abandoned and cleared")

    def error_message(self) -> str | None:
        return attribute_error(self._errors)

    def _enter(self, state: FormState) -> None:
        self._state = state

    def _record(self, outcome: Outcome) -> None:
        self._outcome = outcome
        self._forget_passwords()
        if isinstance(outcome, Success):
            self._state = FormState.SUCCEEDED
            return
        self._state = FormState.FAILED
        slot = _SLOT_BY_KIND.get(outcome.kind, ErrorSlot.GENERAL)
        self._errors[slot] = outcome.message

    def _forget_passwords(self) -> None:
        # Credentials live only for one attempt; a retry must re-enter them.
        self._values["password"] = ""
        self._values["password_confirmation"] = ""

    def _ensure_not_busy(self) -> None:
        if self._state.is_busy:
            raise FormBusy("Form cannot change while a submission is running")
