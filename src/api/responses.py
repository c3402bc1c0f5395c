"""
Response formatting helpers shared by routes and exception handlers.
"""

from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse

from src.api.models import (
    RegistrationStatusResponse,
    ValidationErrorItem,
    ValidationErrorResponse,
)
from src.domain.ports import RegistrationStatus

REGISTRATION_MESSAGES = {
    RegistrationStatus.SUCCESS: "Registration confirmed",
    RegistrationStatus.INVALID_TOKEN: "Invalid registration token",
    RegistrationStatus.EMAIL_VERIFICATION_EXPIRED: "Registration token has expired",
    RegistrationStatus.UNKNOWN: "Registration could not be confirmed",
}

# Every status not listed here is a server-side failure
REGISTRATION_STATUS_CODES = {
    RegistrationStatus.SUCCESS: status.HTTP_200_OK,
    RegistrationStatus.INVALID_TOKEN: status.HTTP_400_BAD_REQUEST,
    RegistrationStatus.EMAIL_VERIFICATION_EXPIRED: status.HTTP_400_BAD_REQUEST,
}


def registration_status_code(registration_status: RegistrationStatus) -> int:
    return REGISTRATION_STATUS_CODES.get(
        registration_status, status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def format_registration_response(
    status_code: int, registration_status: RegistrationStatus
) -> JSONResponse:
    """Build the JSON response for a confirmation outcome."""
    body = RegistrationStatusResponse(
        status=registration_status,
        message=REGISTRATION_MESSAGES.get(
            registration_status, REGISTRATION_MESSAGES[RegistrationStatus.UNKNOWN]
        ),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def validation_error_response(
    errors: list[ValidationErrorItem],
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> JSONResponse:
    body = ValidationErrorResponse(errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def missing_query_parameter(name: str, value: Any = None) -> JSONResponse:
    """400 response for a required query parameter that is absent or empty."""
    return validation_error_response(
        [
            ValidationErrorItem(
                value=value,
                msg=f"Query parameter '{name}' is required",
                param=name,
                location="query",
            )
        ]
    )
