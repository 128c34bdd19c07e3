"""
Registration domain service - Affiliate admission pipeline.

This module contains the ordered submission pipeline that decides whether
a registration candidate may become an account.

Pipeline (strict order, first failure wins)
===========================================

1. Completeness        - local     -> INCOMPLETE_INPUT
2. Confirmation match  - local     -> PASSWORD_MISMATCH
3. Password strength   - local     -> WEAK_PASSWORD
4. Username uniqueness - suspends  -> USERNAME_TAKEN (field: display_name)
5. Email uniqueness    - suspends  -> EMAIL_TAKEN (field: email)
6. Category presence   - local     -> MISSING_CATEGORY
7. Account creation    - suspends  -> PROVIDER_ERROR (provider message)
8. Record persistence  - suspends  -> STORE_ERROR (store message + account id)

Collaborator calls are awaited one at a time; each step is the precondition
of the next. Nothing is retried. A failure in step 8 leaves the identity
provider account in place: there is no compensation, the returned Failure
carries the account id for out-of-band reconciliation.

Uniqueness checks and account creation are not atomic as a unit. Two
concurrent submissions with the same username or email can both pass
steps 4-5; closing that race needs a unique constraint in the store.
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import TypeVar

from .exceptions import ProviderError, RegistrationError, StoreError
from .models import Failure, Outcome, RegistrationCandidate, Success
from .ports import AccountStore, AffiliateCategory, FailureKind, FormState, IdentityProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

# At least one ASCII letter, at least one digit, six characters or more.
_PASSWORD_PATTERN = re.compile(r"(?=.*[a-zA-Z])(?=.*[0-9]).{6,}")

CategorySource = Callable[[], AffiliateCategory | None]
TransitionHook = Callable[[FormState], None]


def is_strong_password(password: str) -> bool:
    """Return True if password has a letter, a digit and length >= 6."""
    return _PASSWORD_PATTERN.fullmatch(password) is not None


def _noop_transition(state: FormState) -> None:
    pass


@dataclass
class RegistrationService:
    """
    Domain service for affiliate registration.

    Orchestrates validation, uniqueness checks, account creation and
    record persistence against the injected collaborators.

    collaborator_timeout bounds each individual collaborator call when set.
    The service imposes none by default; callers choose one.
    """

    identity_provider: IdentityProvider
    account_store: AccountStore
    collaborator_timeout: float | None = None

    async def submit(
        self,
        candidate: RegistrationCandidate,
        *,
        category_source: CategorySource | None = None,
        on_transition: TransitionHook | None = None,
    ) -> Outcome:
        """
        Run the admission pipeline for one candidate.

        Args:
            candidate: Fresh candidate for this attempt
            category_source: Returns the live category selection for the
                final category gate. Defaults to the candidate's own value.
            on_transition: Called with each state the attempt enters

        Returns:
            Success(account_id) or the Failure of the first failing step
        """
        transition = on_transition or _noop_transition
        current_category = category_source or (lambda: candidate.affiliate_category)

        transition(FormState.VALIDATING)
        local_failure = self._validate_locally(candidate)
        if local_failure is not None:
            return local_failure

        transition(FormState.CHECKING_USERNAME)
        try:
            username_taken = await self._call(
                self.account_store.exists_by_field("username", candidate.display_name),
                StoreError,
                "Username check timed out",
            )
        except StoreError as e:
            return Failure(kind=FailureKind.STORE_ERROR, message=e.message)
        if username_taken:
            logger.info("Registration rejected: username already taken")
            return Failure.of(FailureKind.USERNAME_TAKEN, field="display_name")

        transition(FormState.CHECKING_EMAIL)
        try:
            email_taken = await self._call(
                self.account_store.exists_by_field("email", candidate.email),
                StoreError,
                "Email check timed out",
            )
        except StoreError as e:
            return Failure(kind=FailureKind.STORE_ERROR, message=e.message)
        if email_taken:
            logger.info("Registration rejected: email already used")
            return Failure.of(FailureKind.EMAIL_TAKEN, field="email")

        # Selection may have been cleared while the uniqueness checks ran.
        category = current_category()
        if category is None:
            return Failure.of(FailureKind.MISSING_CATEGORY)
        if category is not candidate.affiliate_category:
            candidate = replace(candidate, affiliate_category=category)

        transition(FormState.CREATING_ACCOUNT)
        try:
            account_id = await self._call(
                self.identity_provider.create_account(candidate.email, candidate.password),
                ProviderError,
                "Identity provider timed out",
            )
        except ProviderError as e:
            logger.warning("Identity provider rejected registration: %s", e.message)
            return Failure(kind=FailureKind.PROVIDER_ERROR, message=e.message)

        transition(FormState.PERSISTING)
        try:
            await self._call(
                self.account_store.write_account(account_id, candidate.to_record()),
                StoreError,
                "Account store timed out",
            )
        except StoreError as e:
            logger.error(
                "Account %s created but its record was not persisted: %s",
                account_id,
                e.message,
            )
            return Failure(
                kind=FailureKind.STORE_ERROR,
                message=e.message,
                account_id=account_id,
            )

        logger.info("Affiliate registered successfully: %s", account_id)
        return Success(account_id=account_id)

    def _validate_locally(self, candidate: RegistrationCandidate) -> Failure | None:
        """
        Run steps 1-3. Pure: never touches a collaborator.

        Comparison is exact: no trimming, case-sensitive.
        """
        required = (
            candidate.display_name,
            candidate.contact_number,
            candidate.email,
            candidate.password,
            candidate.password_confirmation,
        )
        if not all(required) or candidate.affiliate_category is None:
            return Failure.of(FailureKind.INCOMPLETE_INPUT)

        if candidate.password != candidate.password_confirmation:
            return Failure.of(FailureKind.PASSWORD_MISMATCH)

        if not is_strong_password(candidate.password):
            return Failure.of(FailureKind.WEAK_PASSWORD)

        return None

    async def _call(
        self,
        operation: Awaitable[T],
        timeout_error: type[RegistrationError],
        timeout_message: str,
    ) -> T:
        """Await a collaborator call, mapping expiry to timeout_error."""
        if self.collaborator_timeout is None:
            return await operation
        try:
            return await asyncio.wait_for(operation, timeout=self.collaborator_timeout)
        except asyncio.TimeoutError:
            raise timeout_error(timeout_message) from None
