"""
Email dispatch - Send a single message and report its outcome.

The dispatcher waits for the transport to finish and derives the
returned status from that outcome. There is no retry; callers decide
whether to retry or surface the failure.
"""

import logging
from dataclasses import dataclass

from .exceptions import MailTransportError
from .ports import EmailSendStatus, MailMessage, MailTransport

logger = logging.getLogger(__name__)


def send_mail(
    transport: MailTransport,
    address_to: str,
    subject: str,
    text: str,
    *,
    sender: str,
) -> EmailSendStatus:
    """
    Send one plain-text email through ``transport``.

    Args:
        transport: Mail transport adapter
        address_to: Recipient address
        subject: Subject line
        text: Plain text body
        sender: From address

    Returns:
        SENT if the transport accepted the message, FAILED if it raised
        MailTransportError
    """
    message = MailMessage(sender=sender, to=address_to, subject=subject, text=text)
    try:
        info = transport.send(message)
    except MailTransportError as e:
        logger.error("E-mail to %s failed: %s", address_to, e)
        return EmailSendStatus.FAILED

    logger.info("E-mail sent with response: %s", info.response)
    return EmailSendStatus.SENT


@dataclass
class EmailDispatcher:
    """Binds a transport to the configured sender address."""

    transport: MailTransport
    sender: str

    def send_mail(self, address_to: str, subject: str, text: str) -> EmailSendStatus:
        return send_mail(self.transport, address_to, subject, text, sender=self.sender)
