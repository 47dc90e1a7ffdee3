"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging messages to stdout for development.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints messages (and the links they
    carry) to stdout.
    """

    def send(self, recipient: str, subject: str, body: str) -> None:
        """
        Log the message to console (simulates email delivery).

        The message is logged at INFO level to be visible in docker-compose logs.

        Args:
            recipient: Recipient email address (normalized by domain layer)
            subject: Message subject
            body: HTML message body
        """
        logger.info("[EMAIL] To: %s Subject: %s Body: %s", recipient, subject, body)
