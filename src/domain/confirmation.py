"""
Confirmation domain service - Registration token state machine.

Token lifecycle
===============

States:
- PENDING: Token issued at registration, user not yet confirmed
- CONFIRMED: Terminal state after successful confirmation (token cleared)
- EXPIRED: Terminal state once the stored expiry has passed

Valid Transitions:
    PENDING -> CONFIRMED  (token matches, expiry not reached)
    PENDING -> EXPIRED    (detected lazily on a confirmation attempt)

EXPIRED is never persisted and failure paths never write. The
PENDING -> CONFIRMED write is a conditional update in the repository, so
two concurrent requests carrying the same token cannot both succeed.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .exceptions import RepositoryError
from .ports import RegistrationStatus, TokenState, UserRepository

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ConfirmationService:
    """Moves a pending registration to confirmed using its token."""

    repository: UserRepository
    clock: Callable[[], datetime] = field(default=utc_now)

    def confirm_user_registration(self, token: str) -> RegistrationStatus:
        """
        Confirm the registration holding ``token``.

        Args:
            token: Registration token (non-empty, checked by the caller)

        Returns:
            SUCCESS if this call confirmed the user
            INVALID_TOKEN if no pending record holds the token
            EMAIL_VERIFICATION_EXPIRED if the token's expiry has passed
            UNKNOWN if the store failed
        """
        now = self.clock()
        try:
            user = self.repository.find_by_token(token)
            if user is None:
                return RegistrationStatus.INVALID_TOKEN

            state = user.token_state(now)
            if state == TokenState.EXPIRED:
                return RegistrationStatus.EMAIL_VERIFICATION_EXPIRED
            if state == TokenState.CONFIRMED:
                return RegistrationStatus.INVALID_TOKEN

            if self.repository.mark_confirmed(user.id, token, now):
                logger.info("Registration confirmed for user %s", user.id)
                return RegistrationStatus.SUCCESS
        except RepositoryError:
            logger.exception("Registration confirmation failed")
            return RegistrationStatus.UNKNOWN

        # Conditional update lost: token consumed concurrently
        return RegistrationStatus.INVALID_TOKEN
