"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from fastapi import Request

from src.config.settings import Settings
from src.domain.confirmation import ConfirmationService
from src.domain.email import EmailDispatcher
from src.domain.ports import UserRepository
from src.domain.registration import RegistrationService


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_repository(request: Request) -> UserRepository:
    """
    Get user repository from app state.

    The repository is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.repository


def get_email_dispatcher(request: Request) -> EmailDispatcher:
    return request.app.state.email_dispatcher


def get_confirmation_service(request: Request) -> ConfirmationService:
    """Create confirmation service over the app's repository."""
    return ConfirmationService(repository=get_repository(request))


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repository, email dispatcher and registration settings.
    """
    settings = get_app_settings(request)
    return RegistrationService(
        repository=get_repository(request),
        dispatcher=get_email_dispatcher(request),
        public_base_url=settings.public_base_url,
        token_ttl_seconds=settings.token_ttl_seconds,
        bcrypt_cost=settings.bcrypt_cost,
    )
