"""Mail transport adapters."""

from .console import ConsoleMailTransport
from .smtp import SmtpMailTransport

__all__ = ["ConsoleMailTransport", "SmtpMailTransport"]
