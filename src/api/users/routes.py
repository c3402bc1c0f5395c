"""
User routes - registration, confirmation and session login.

Handlers are plain ``def`` functions: FastAPI runs them in its worker
threadpool, so database and SMTP calls never block the event loop.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from src.api.auth import AuthContext, get_auth_context, require_login
from src.api.dependencies import get_confirmation_service, get_registration_service
from src.api.models import (
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    RegistrationStatusResponse,
    UserResponse,
    UserView,
    ValidationErrorResponse,
)
from src.api.responses import (
    format_registration_response,
    missing_query_parameter,
    registration_status_code,
)
from src.domain.confirmation import ConfirmationService
from src.domain.exceptions import EmailAlreadyRegistered
from src.domain.ports import EmailSendStatus, LoginResult, UserRecord
from src.domain.registration import RegistrationService

router = APIRouter(tags=["users"])

LOGIN_FAILURE_MESSAGES = {
    LoginResult.INVALID_USERNAME: "Invalid username",
    LoginResult.INVALID_PASSWORD: "Invalid password",
}


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse, "description": "Email already registered"},
        422: {"model": ValidationErrorResponse, "description": "Validation error"},
    },
    summary="Register a new user",
    description="Create an unconfirmed account and email a confirmation link.",
)
def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse:
    """
    Register a new user and send the confirmation email.

    - **email**: Valid email address to register
    - **password**: Password (minimum 8 characters)
    """
    try:
        result = service.register(request_data.email, request_data.password)
    except EmailAlreadyRegistered:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Registration failed",
        ) from None

    if result.email_status == EmailSendStatus.SENT:
        message = "Confirmation email sent"
    else:
        message = "Registered, but the confirmation email could not be sent"
    return RegisterResponse(message=message, email=result.email, email_status=result.email_status)


@router.get(
    "/register/confirm",
    response_model=RegistrationStatusResponse,
    responses={
        400: {"description": "Missing, invalid or expired token"},
        500: {"model": RegistrationStatusResponse, "description": "Confirmation failed"},
    },
    summary="Confirm a registration",
    description="Consume the single-use token from the confirmation email.",
)
def confirm_registration(
    token: str | None = Query(None, description="Registration token from the email"),
    service: ConfirmationService = Depends(get_confirmation_service),
) -> JSONResponse:
    """Confirm the registration holding ``token``."""
    if not token:
        return missing_query_parameter("token", token)

    registration_status = service.confirm_user_registration(token)
    return format_registration_response(
        registration_status_code(registration_status), registration_status
    )


@router.post(
    "/login",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
    summary="Log in with email and password",
)
def login(
    request_data: LoginRequest,
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
) -> UserResponse:
    result, user = auth.authenticator.authenticate(request_data.username, request_data.password)
    if result != LoginResult.SUCCESS:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=LOGIN_FAILURE_MESSAGES[result],
        )

    auth.login(request, user)
    return UserResponse(user=UserView.from_record(user))


@router.post("/logout", response_model=MessageResponse, summary="End the session")
def logout(
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
) -> MessageResponse:
    auth.logout(request)
    return MessageResponse(message="Logged out")


@router.get(
    "/me",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse, "description": "Not logged in"}},
    summary="Current user",
)
def me(user: UserRecord = Depends(require_login)) -> UserResponse:
    return UserResponse(user=UserView.from_record(user))
