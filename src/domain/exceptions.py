"""
Domain exceptions - Semantic error types for registration.

This module defines domain-specific exceptions that communicate
business rule violations and infrastructure failures without leaking
driver details.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    pass


class EmailAlreadyRegistered(RegistrationError):
    """Email already belongs to a stored user."""

    pass


class RepositoryError(Exception):
    """User store lookup or write failed."""

    pass


class MailTransportError(Exception):
    """Mail transport could not deliver a message."""

    pass
