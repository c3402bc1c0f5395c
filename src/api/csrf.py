"""CSRF protection - double-submit cookie middleware."""

import secrets

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from src.api.errors import ErrorKind, error_response

CSRF_COOKIE = "XSRF-TOKEN"
CSRF_HEADER = "X-XSRF-TOKEN"


class CSRFMiddleware(BaseHTTPMiddleware):
    """Issue an XSRF-TOKEN cookie and require it echoed back on unsafe methods.

    The cookie is readable by browser scripts so the frontend can copy it
    into the X-XSRF-TOKEN header. GET, HEAD and OPTIONS are never checked.
    """

    SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        cookie_token = request.cookies.get(CSRF_COOKIE)

        if request.method not in self.SAFE_METHODS:
            header_token = request.headers.get(CSRF_HEADER)
            if not cookie_token or not header_token or not secrets.compare_digest(
                cookie_token.encode(), header_token.encode()
            ):
                return error_response(ErrorKind.FORBIDDEN, "Invalid CSRF token")

        response = await call_next(request)
        response.set_cookie(
            CSRF_COOKIE,
            cookie_token or secrets.token_urlsafe(32),
            httponly=False,
            samesite="lax",
        )
        return response
