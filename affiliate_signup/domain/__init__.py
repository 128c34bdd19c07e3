"""
Domain layer - Pure business logic with zero framework imports.

This package contains the affiliate registration admission workflow. It
defines its own port interfaces for the identity provider and the account
store, ensuring true hexagonal architecture decoupling.
"""

from .exceptions import (
    FormBusy,
    ProviderError,
    RegistrationError,
    StoreError,
    SubmissionInProgress,
)
from .form import ErrorSlot, RegistrationForm, attribute_error
from .models import FAILURE_MESSAGES, Failure, Outcome, RegistrationCandidate, Success
from .ports import AccountStore, AffiliateCategory, FailureKind, FormState, IdentityProvider
from .registration import RegistrationService, is_strong_password

__all__ = [
    "FAILURE_MESSAGES",
    "AccountStore",
    "AffiliateCategory",
    "ErrorSlot",
    "Failure",
    "FailureKind",
    "FormBusy",
    "FormState",
    "IdentityProvider",
    "Outcome",
    "ProviderError",
    "RegistrationCandidate",
    "RegistrationError",
    "RegistrationForm",
    "RegistrationService",
    "StoreError",
    "SubmissionInProgress",
    "Success",
    "attribute_error",
    "is_strong_password",
]
