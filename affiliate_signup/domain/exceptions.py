"""
Domain exceptions - Semantic error types for affiliate registration.

Collaborator failures are raised by adapters as ProviderError/StoreError
and converted into Failure outcomes by the submission pipeline. Re-entry
errors reject calls against a form that is already submitting.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    pass


class ProviderError(RegistrationError):
    """Identity provider refused or failed to create the account."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class StoreError(RegistrationError):
    """Record store failed to answer a query or persist a record."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SubmissionInProgress(RegistrationError):
    """A submission for the same form instance is still running."""

    pass


class FormBusy(RegistrationError):
    """Form fields cannot be edited or cleared while a submission runs."""

    pass
