"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the shared outcome vocabulary of the domain and the
interfaces (ports) it requires from infrastructure. Adapters implement
these protocols.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol


class RegistrationStatus(str, Enum):
    """
    Outcome of a registration confirmation attempt.

    Consumed by both the confirmation service and the HTTP layer, which
    maps each value to a response status code.
    """

    SUCCESS = "SUCCESS"
    INVALID_TOKEN = "INVALID_TOKEN"
    EMAIL_VERIFICATION_EXPIRED = "EMAIL_VERIFICATION_EXPIRED"
    UNKNOWN = "UNKNOWN"


class EmailSendStatus(str, Enum):
    """Outcome of a single email dispatch."""

    SENT = "SENT"
    FAILED = "FAILED"


class TokenState(str, Enum):
    """
    Registration token lifecycle.

    State Transitions (forward-only):
    - PENDING -> CONFIRMED (successful confirmation)
    - PENDING -> EXPIRED (expiry passed, detected lazily on confirmation attempt)

    CONFIRMED and EXPIRED are terminal. EXPIRED is derived from the stored
    expiry and is never written back to the store.
    """

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    EXPIRED = "EXPIRED"


class LoginResult(Enum):
    """Result of a local username/password check."""

    SUCCESS = "success"
    INVALID_USERNAME = "invalid_username"
    INVALID_PASSWORD = "invalid_password"


@dataclass(frozen=True)
class UserRecord:
    """User registration record as stored."""

    id: int
    email: str
    password_hash: str
    registration_token: str | None
    registration_token_expiry: datetime | None
    confirmed: bool = False

    def token_state(self, now: datetime) -> TokenState:
        """Derive the token state at ``now``."""
        if self.confirmed:
            return TokenState.CONFIRMED
        if self.registration_token_expiry is None or now >= self.registration_token_expiry:
            return TokenState.EXPIRED
        return TokenState.PENDING


@dataclass(frozen=True)
class MailMessage:
    """Plain-text email handed to a transport."""

    sender: str
    to: str
    subject: str
    text: str


@dataclass(frozen=True)
class SentInfo:
    """Transport acknowledgement for a delivered message."""

    response: str


class UserRepository(Protocol):
    """Port interface for user record persistence."""

    def find_by_token(self, token: str) -> UserRecord | None:
        """
        Look up the user holding this registration token.

        Returns:
            The matching record, or None if no record holds the token

        Raises:
            RepositoryError: On any storage failure
        """
        ...

    def find_by_email(self, email: str) -> UserRecord | None:
        """Look up a user by normalized email."""
        ...

    def find_by_id(self, user_id: int) -> UserRecord | None:
        """Look up a user by id."""
        ...

    def create_user(
        self, email: str, password_hash: str, token: str, token_expiry: datetime
    ) -> UserRecord:
        """
        Insert a pending (unconfirmed) user.

        Raises:
            EmailAlreadyRegistered: If the email is already stored
            RepositoryError: On any other storage failure
        """
        ...

    def mark_confirmed(self, user_id: int, token: str, now: datetime) -> bool:
        """
        Atomically confirm a pending user and consume its token.

        The update applies only if the record still holds ``token``, is
        unconfirmed and its expiry is after ``now``. On success the token
        and expiry are cleared so the token cannot be replayed.

        Returns:
            True if this call performed the transition, False otherwise

        Raises:
            RepositoryError: On any storage failure
        """
        ...

    def ping(self) -> None:
        """Check store connectivity, raising RepositoryError if unavailable."""
        ...


class MailTransport(Protocol):
    """Port interface for email delivery."""

    def send(self, message: MailMessage) -> SentInfo:
        """
        Deliver a message and wait for the outcome.

        Returns:
            SentInfo describing the transport response

        Raises:
            MailTransportError: If delivery failed
        """
        ...
