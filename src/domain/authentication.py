"""
Local credential authentication.

Checks an email/password pair against the stored bcrypt hash and loads
users back from the id kept in the session.
"""

from dataclasses import dataclass

import bcrypt

from .ports import LoginResult, UserRecord, UserRepository
from .registration import MAX_PASSWORD_BYTES, normalize_email


@dataclass
class Authenticator:
    """Verifies local username/password credentials."""

    repository: UserRepository

    def authenticate(self, username: str, password: str) -> tuple[LoginResult, UserRecord | None]:
        """
        Check credentials for a login attempt.

        Args:
            username: Email address used as login identifier
            password: Plaintext password

        Returns:
            (SUCCESS, user) on a match, otherwise the failure reason and None
        """
        user = self.repository.find_by_email(normalize_email(username))
        if user is None:
            return LoginResult.INVALID_USERNAME, None

        encoded = password.encode()
        if len(encoded) > MAX_PASSWORD_BYTES:
            return LoginResult.INVALID_PASSWORD, None

        if not bcrypt.checkpw(encoded, user.password_hash.encode()):
            return LoginResult.INVALID_PASSWORD, None

        return LoginResult.SUCCESS, user

    def load_user(self, user_id: int) -> UserRecord | None:
        return self.repository.find_by_id(user_id)
