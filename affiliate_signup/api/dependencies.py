"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from fastapi import Depends, HTTPException, Request, status
from psycopg_pool import AsyncConnectionPool

from affiliate_signup.adapters.identity.postgres import PostgresIdentityProvider
from affiliate_signup.adapters.repository.postgres import PostgresAccountStore
from affiliate_signup.api.forms import FormRegistry
from affiliate_signup.config.settings import Settings
from affiliate_signup.domain.form import RegistrationForm
from affiliate_signup.domain.registration import RegistrationService


def get_pool(request: Request) -> AsyncConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def build_registration_service(pool: AsyncConnectionPool, settings: Settings) -> RegistrationService:
    """
    Create registration service with injected collaborators.

    Wires together the account store and identity provider for the domain service.
    """
    return RegistrationService(
        identity_provider=PostgresIdentityProvider(pool, bcrypt_cost=settings.bcrypt_cost),
        account_store=PostgresAccountStore(pool),
        collaborator_timeout=settings.collaborator_timeout_seconds,
    )


def build_form_registry(pool: AsyncConnectionPool, settings: Settings) -> FormRegistry:
    """Create the registry whose forms share one registration service."""
    service = build_registration_service(pool, settings)
    return FormRegistry(
        form_factory=lambda: RegistrationForm(service),
        max_open=settings.max_open_forms,
        idle_ttl=settings.form_idle_ttl_seconds,
    )


def get_form_registry(request: Request) -> FormRegistry:
    """Get form registry from app state (created during lifespan startup)."""
    return request.app.state.forms


def get_form(form_id: str, registry: FormRegistry = Depends(get_form_registry)) -> RegistrationForm:
    """Resolve the form_id path parameter to an open form, or 404."""
    form = registry.get(form_id)
    if form is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
    return form
