"""
Domain layer - Pure business logic with zero framework imports.

This package contains the registration confirmation workflow, email
dispatch and local credential checks. It defines its own port interfaces
for infrastructure abstraction.
"""

from .authentication import Authenticator
from .confirmation import ConfirmationService
from .email import EmailDispatcher, send_mail
from .exceptions import (
    EmailAlreadyRegistered,
    MailTransportError,
    RegistrationError,
    RepositoryError,
)
from .ports import (
    EmailSendStatus,
    LoginResult,
    MailMessage,
    MailTransport,
    RegistrationStatus,
    SentInfo,
    TokenState,
    UserRecord,
    UserRepository,
)
from .registration import RegistrationResult, RegistrationService

__all__ = [
    "Authenticator",
    "ConfirmationService",
    "EmailAlreadyRegistered",
    "EmailDispatcher",
    "EmailSendStatus",
    "LoginResult",
    "MailMessage",
    "MailTransport",
    "MailTransportError",
    "RegistrationError",
    "RegistrationResult",
    "RegistrationService",
    "RegistrationStatus",
    "RepositoryError",
    "SentInfo",
    "TokenState",
    "UserRecord",
    "UserRepository",
    "send_mail",
]
