"""
Global exception handlers for FastAPI.

Every error leaving the application is one of the ErrorKind members and is
rendered as ``{"error": {"kind", "status", "message"[, "detail"]}}``.
Details are only included outside production.
"""

import logging
from enum import Enum

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from src.api.models import ErrorBody, ErrorResponse, ValidationErrorItem
from src.api.responses import validation_error_response

logger = logging.getLogger(__name__)


class ErrorKind(Enum):
    """Closed set of error responses, each with its status code and default message."""

    BAD_REQUEST = (status.HTTP_400_BAD_REQUEST, "Bad request")
    UNAUTHORIZED = (status.HTTP_401_UNAUTHORIZED, "Authentication required")
    FORBIDDEN = (status.HTTP_403_FORBIDDEN, "Forbidden")
    NOT_FOUND = (status.HTTP_404_NOT_FOUND, "Not found")
    METHOD_NOT_ALLOWED = (status.HTTP_405_METHOD_NOT_ALLOWED, "Method not allowed")
    CONFLICT = (status.HTTP_409_CONFLICT, "Conflict")
    INTERNAL = (status.HTTP_500_INTERNAL_SERVER_ERROR, "An internal error occurred")
    SERVICE_UNAVAILABLE = (status.HTTP_503_SERVICE_UNAVAILABLE, "Service unavailable")

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message

    @classmethod
    def from_status(cls, status_code: int) -> "ErrorKind":
        for kind in cls:
            if kind.status_code == status_code:
                return kind
        if status_code < 500:
            return cls.BAD_REQUEST
        return cls.INTERNAL


def error_response(
    kind: ErrorKind,
    message: str | None = None,
    detail: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render an ErrorKind as a JSON response."""
    body = ErrorResponse(
        error=ErrorBody(
            kind=kind.name,
            status=kind.status_code,
            message=message or kind.message,
            detail=detail,
        )
    )
    return JSONResponse(
        status_code=kind.status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


def _is_production(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return settings is not None and settings.is_production


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        kind = ErrorKind.from_status(exc.status_code)
        message = exc.detail if isinstance(exc.detail, str) else None
        return error_response(kind, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            loc = error.get("loc", ())
            errors.append(
                ValidationErrorItem(
                    value=jsonable_encoder(error.get("input")),
                    msg=error.get("msg", "Invalid value"),
                    param=".".join(str(part) for part in loc[1:]),
                    location=str(loc[0]) if loc else "",
                )
            )
        return validation_error_response(errors, status.HTTP_422_UNPROCESSABLE_ENTITY)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        detail = None if _is_production(request) else f"{type(exc).__name__}: {exc}"
        return error_response(ErrorKind.INTERNAL, detail=detail)
