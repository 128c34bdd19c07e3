"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Empty strings pass validation; the admission pipeline reports incomplete
input itself.
"""

from typing import Literal

from pydantic import BaseModel, Field

from affiliate_signup.domain.models import Outcome, Success
from affiliate_signup.domain.ports import AffiliateCategory, FailureKind, FormState


class SubmitRequest(BaseModel):
    """Request model for a registration submission."""

    display_name: str = Field("", max_length=64, description="Unique display name")
    contact_number: str = Field(
        "",
        max_length=11,
        pattern=r"^\d*$",
        description="Contact number, digits only (max 11)",
    )
    email: str = Field("", max_length=254, description="Unique email address")
    password: str = Field("", max_length=128)
    password_confirmation: str = Field("", max_length=128)
    affiliate_category: AffiliateCategory | None = Field(
        None,
        description="Selects the category before submitting; omit to keep the current selection",
    )


class CategoryRequest(BaseModel):
    """Request model for selecting an affiliate category."""

    category: AffiliateCategory


class OutcomeModel(BaseModel):
    """Serialized submission outcome."""

    status: Literal["success", "failure"]
    account_id: str | None = None
    kind: FailureKind | None = None
    field: str | None = None
    message: str | None = None

    @classmethod
    def from_outcome(cls, outcome: Outcome) -> "OutcomeModel":
        if isinstance(outcome, Success):
            return cls(status="success", account_id=outcome.account_id)
        return cls(
            status="failure",
            account_id=outcome.account_id,
            kind=outcome.kind,
            field=outcome.field,
            message=outcome.message,
        )


class FormResponse(BaseModel):
    """Current view of a registration form instance."""

    form_id: str
    state: FormState
    category: AffiliateCategory | None = None
    outcome: OutcomeModel | None = None
    error_message: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
