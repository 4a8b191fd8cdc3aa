"""
SMTP email sender adapter - Implements NotificationSender protocol via smtplib.
"""

import logging
import smtplib
from email.message import EmailMessage

from src.domain.exceptions import NotificationFailed

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """
    Delivers plain-text messages through an SMTP relay.

    Transport failures raise NotificationFailed; the dispatcher logs them
    and reports the message as undelivered.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout

    def send(self, to: str, subject: str, body: str) -> bool:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self._sender
        message["To"] = to
        message.set_content(body)

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                if self._use_tls:
                    server.starttls()
                if self._username:
                    server.login(self._username, self._password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP delivery to {to} failed: {e}")
            raise NotificationFailed(f"SMTP delivery to {to} failed") from e
        return True
