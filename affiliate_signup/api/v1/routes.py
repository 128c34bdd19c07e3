"""
API v1 routes.

Defines REST endpoints for the Affiliate Registration API. Each client
opens a form instance, submits candidates against it and renders the
returned state; the form instance carries the one-attempt-at-a-time guard.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse

from affiliate_signup.api.dependencies import get_form, get_form_registry
from affiliate_signup.api.forms import FormLimitReached, FormRegistry
from affiliate_signup.api.models import (
    CategoryRequest,
    ErrorResponse,
    FormResponse,
    OutcomeModel,
    SubmitRequest,
)
from affiliate_signup.domain.exceptions import FormBusy, SubmissionInProgress
from affiliate_signup.domain.form import RegistrationForm
from affiliate_signup.domain.models import Success
from affiliate_signup.domain.ports import FailureKind

router = APIRouter(tags=["v1"])

_FAILURE_STATUS = {
    FailureKind.INCOMPLETE_INPUT: 422,
    FailureKind.PASSWORD_MISMATCH: 422,
    FailureKind.WEAK_PASSWORD: 422,
    FailureKind.MISSING_CATEGORY: 422,
    FailureKind.USERNAME_TAKEN: status.HTTP_409_CONFLICT,
    FailureKind.EMAIL_TAKEN: status.HTTP_409_CONFLICT,
    FailureKind.PROVIDER_ERROR: status.HTTP_502_BAD_GATEWAY,
    FailureKind.STORE_ERROR: status.HTTP_502_BAD_GATEWAY,
}


def _view(form_id: str, form: RegistrationForm) -> FormResponse:
    return FormResponse(
        form_id=form_id,
        state=form.state,
        category=form.category,
        outcome=OutcomeModel.from_outcome(form.outcome) if form.outcome else None,
        error_message=form.error_message(),
    )


def _busy() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="Submission already in progress",
    )


@router.post(
    "/forms",
    response_model=FormResponse,
    status_code=status.HTTP_201_CREATED,
    responses={503: {"model": ErrorResponse, "description": "Too many open forms"}},
    summary="Open a registration form",
)
async def open_form(registry: FormRegistry = Depends(get_form_registry)) -> FormResponse:
    """Open a new, empty registration form instance."""
    try:
        form_id, form = registry.open()
    except FormLimitReached:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Too many open forms",
        ) from None
    return _view(form_id, form)


@router.get(
    "/forms/{form_id}",
    response_model=FormResponse,
    responses={404: {"model": ErrorResponse, "description": "Form not found"}},
    summary="Read form state",
)
async def read_form(form_id: str, form: RegistrationForm = Depends(get_form)) -> FormResponse:
    """Current workflow state, last outcome and the single attributed error message."""
    return _view(form_id, form)


@router.put(
    "/forms/{form_id}/category",
    response_model=FormResponse,
    responses={404: {"model": ErrorResponse, "description": "Form not found"}},
    summary="Select affiliate category",
)
async def select_category(
    form_id: str,
    request_data: CategoryRequest,
    form: RegistrationForm = Depends(get_form),
) -> FormResponse:
    form.select_category(request_data.category)
    return _view(form_id, form)


@router.delete(
    "/forms/{form_id}/category",
    response_model=FormResponse,
    responses={404: {"model": ErrorResponse, "description": "Form not found"}},
    summary="Clear affiliate category",
)
async def clear_category(form_id: str, form: RegistrationForm = Depends(get_form)) -> FormResponse:
    form.clear_category()
    return _view(form_id, form)


@router.post(
    "/forms/{form_id}/submit",
    response_model=FormResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse, "description": "Form not found"},
        409: {"model": FormResponse, "description": "Username/email taken or submission in progress"},
        422: {"model": FormResponse, "description": "Candidate failed local validation"},
        502: {"model": FormResponse, "description": "Identity provider or account store failure"},
    },
    summary="Submit a registration candidate",
    description="Runs the admission pipeline: completeness, password confirmation and "
    "strength, username and email uniqueness, category, account creation and record "
    "persistence. The first failing step decides the outcome.",
)
async def submit(
    form_id: str,
    request_data: SubmitRequest,
    form: RegistrationForm = Depends(get_form),
) -> FormResponse | JSONResponse:
    """
    Submit the candidate held by this form.

    A second submit while one is running is rejected with 409 and does not
    reach the identity provider.
    """
    if form.state.is_busy:
        raise _busy()

    if request_data.affiliate_category is not None:
        form.select_category(request_data.affiliate_category)
    form.update(**request_data.model_dump(exclude={"affiliate_category"}))

    try:
        outcome = await form.submit()
    except SubmissionInProgress:
        raise _busy() from None

    view = _view(form_id, form)
    if isinstance(outcome, Success):
        return view
    return JSONResponse(
        status_code=_FAILURE_STATUS[outcome.kind],
        content=view.model_dump(mode="json"),
    )


@router.post(
    "/forms/{form_id}/acknowledge",
    response_model=FormResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Form not found"},
        409: {"model": ErrorResponse, "description": "Submission in progress"},
    },
    summary="Acknowledge the last outcome",
)
async def acknowledge(form_id: str, form: RegistrationForm = Depends(get_form)) -> FormResponse:
    """Return the form to IDLE once the caller has handled the outcome."""
    try:
        form.acknowledge()
    except FormBusy:
        raise _busy() from None
    return _view(form_id, form)


@router.delete(
    "/forms/{form_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        404: {"model": ErrorResponse, "description": "Form not found"},
        409: {"model": ErrorResponse, "description": "Submission in progress"},
    },
    summary="Abandon a registration form",
)
async def abandon_form(
    form_id: str,
    form: RegistrationForm = Depends(get_form),
    registry: FormRegistry = Depends(get_form_registry),
) -> Response:
    """Clear all input and drop the form instance."""
    try:
        registry.discard(form_id)
    except FormBusy:
        raise _busy() from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)
