"""
SMTP mail transport adapter - Implements MailTransport protocol.

Delivers plain-text messages with smtplib, optionally upgrading the
connection with STARTTLS and logging in.
"""

import smtplib
from email.mime.text import MIMEText

from src.domain.exceptions import MailTransportError
from src.domain.ports import MailMessage, SentInfo


class SmtpMailTransport:
    """
    Implements MailTransport protocol over SMTP.

    A connection is opened per message; the transport holds no sockets
    between calls.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str | None = None,
        password: str | None = None,
        starttls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.starttls = starttls
        self.timeout = timeout

    def send(self, message: MailMessage) -> SentInfo:
        """
        Deliver one message.

        Raises:
            MailTransportError: If the server refused the message or the
                connection failed
        """
        mime = MIMEText(message.text, "plain")
        mime["From"] = message.sender
        mime["To"] = message.to
        mime["Subject"] = message.subject

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.starttls:
                    server.starttls()
                if self.username:
                    server.login(self.username, self.password or "")
                refused = server.send_message(mime)
        except (smtplib.SMTPException, OSError) as e:
            raise MailTransportError(f"SMTP delivery to {message.to} failed: {e}") from e

        if refused:
            raise MailTransportError(f"SMTP server refused recipients: {sorted(refused)}")

        return SentInfo(response=f"accepted by {self.host}:{self.port}")
