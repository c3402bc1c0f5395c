"""
Session-based authentication context.

The context is built once at startup with its collaborators and stored on
``app.state``; routes reach it through dependencies, never through module
globals. The session itself is Starlette's signed cookie session.
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status

from src.domain.authentication import Authenticator
from src.domain.ports import UserRecord

LOGIN_REQUIRED_MESSAGE = "You must be logged in to view this resource"


@dataclass
class AuthContext:
    """Logs users in and out of the request session."""

    authenticator: Authenticator
    session_key: str = "user_id"

    def login(self, request: Request, user: UserRecord) -> None:
        """Start a fresh session for ``user``."""
        request.session.clear()
        request.session[self.session_key] = user.id

    def logout(self, request: Request) -> None:
        request.session.clear()

    def current_user(self, request: Request) -> UserRecord | None:
        """Load the user stored in the session, dropping stale sessions."""
        user_id = request.session.get(self.session_key)
        if user_id is None:
            return None

        user = self.authenticator.load_user(user_id)
        if user is None:
            request.session.clear()
        return user


def get_auth_context(request: Request) -> AuthContext:
    """Get the authentication context created during app startup."""
    return request.app.state.auth_context


def require_login(
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
) -> UserRecord:
    """Dependency guarding routes that need a logged-in user."""
    user = auth.current_user(request)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=LOGIN_REQUIRED_MESSAGE)
    return user
