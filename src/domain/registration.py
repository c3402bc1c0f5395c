"""
Registration domain service - Create pending users and send confirmation links.

A new user is stored unconfirmed with a single-use token and an expiry.
The token is emailed as a confirmation link; confirming it is handled by
ConfirmationService.
"""

import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from urllib.parse import urlencode

import bcrypt

from .confirmation import utc_now
from .email import EmailDispatcher
from .ports import EmailSendStatus, UserRepository

CONFIRMATION_PATH = "/api/users/register/confirm"
CONFIRMATION_SUBJECT = "Confirm your registration"

# bcrypt only reads the first 72 bytes of a password and rejects longer input
MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a registration request."""

    email: str
    email_status: EmailSendStatus


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates the registration flow: email normalization,
    password hashing, token generation, persistence and the
    confirmation email.
    """

    repository: UserRepository
    dispatcher: EmailDispatcher
    public_base_url: str
    token_ttl_seconds: int = 60 * 60 * 24
    bcrypt_cost: int = 10
    clock: Callable[[], datetime] = field(default=utc_now)

    def register(self, email: str, password: str) -> RegistrationResult:
        """
        Register a new, unconfirmed user and email the confirmation link.

        A failed email does not undo the registration; the status is
        reported so the caller can tell the user.

        Args:
            email: User's email address (will be normalized)
            password: User's password (will be hashed)

        Returns:
            RegistrationResult with the normalized email and email status

        Raises:
            EmailAlreadyRegistered: If the email is already stored
            RepositoryError: If the store failed
            ValueError: If the password is longer than MAX_PASSWORD_BYTES
        """
        normalized_email = normalize_email(email)
        password_hash = hash_password(password, self.bcrypt_cost)
        token = self._generate_token()
        expiry = self.clock() + timedelta(seconds=self.token_ttl_seconds)

        self.repository.create_user(normalized_email, password_hash, token, expiry)

        status = self.dispatcher.send_mail(
            normalized_email,
            CONFIRMATION_SUBJECT,
            self._confirmation_text(token),
        )
        return RegistrationResult(email=normalized_email, email_status=status)

    def confirmation_url(self, token: str) -> str:
        query = urlencode({"token": token})
        return f"{self.public_base_url.rstrip('/')}{CONFIRMATION_PATH}?{query}"

    def _confirmation_text(self, token: str) -> str:
        hours = self.token_ttl_seconds // 3600
        lifetime = f"{hours} hours" if hours else f"{self.token_ttl_seconds} seconds"
        return (
            "Thanks for signing up.\n\n"
            "Confirm your email address by opening this link:\n"
            f"{self.confirmation_url(token)}\n\n"
            f"The link expires in {lifetime}.\n"
        )

    def _generate_token(self) -> str:
        """Generate an opaque, URL-safe registration token."""
        return secrets.token_urlsafe(32)


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


def hash_password(password: str, cost: int = 10) -> str:
    """
    Hash password using bcrypt with the given cost factor.

    Raises:
        ValueError: If the password is longer than MAX_PASSWORD_BYTES
    """
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password exceeds {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=cost)).decode()

