"""
Console email sender adapter - Implements NotificationSender protocol.

This module provides a console-based implementation of the domain's
notification sender port, logging messages to stdout for demo purposes.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements NotificationSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints messages (and so verification
    codes) to stdout.
    """

    def send(self, to: str, subject: str, body: str) -> bool:
        """
        Log a message to console (simulates email delivery).

        In production, this is replaced with SmtpEmailSender.
        The message is logged at INFO level to be visible in docker-compose logs.

        Args:
            to: Recipient email address (normalized by domain layer)
            subject: Message subject
            body: Rendered plain-text body

        Returns:
            Always True
        """
        logger.info("[EMAIL] To: %s Subject: %s\n%s", to, subject, body)
        return True
