"""
Console mail transport adapter - Implements MailTransport protocol.

This module provides a console-based implementation of the domain's
mail transport port, logging outgoing messages for development.
"""

import logging

from src.domain.ports import MailMessage, SentInfo

logger = logging.getLogger(__name__)


class ConsoleMailTransport:
    """
    Implements MailTransport protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - confirmation links show up in the logs.
    """

    def send(self, message: MailMessage) -> SentInfo:
        """
        Log the message at INFO level (simulates delivery).

        Args:
            message: Message to "deliver"

        Returns:
            SentInfo with a fixed console response
        """
        logger.info(
            "[MAIL] From: %s To: %s Subject: %s\n%s",
            message.sender,
            message.to,
            message.subject,
            message.text,
        )
        return SentInfo(response="250 logged to console")
