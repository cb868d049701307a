"""
Console notification sender adapter - Implements NotificationSender protocol.

This module provides a console-based implementation of the domain's
notification port, logging messages to stdout for development.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleNotificationSender:
    """
    Implements NotificationSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints messages to stdout.
    """

    def send(self, to_address: str, subject: str, body: str) -> None:
        """
        Log a message to console (simulates email delivery).

        The message is logged at INFO level to be visible in container logs.

        Args:
            to_address: Recipient email address
            subject: Message subject
            body: Plain-text body (contains the verification code)
        """
        logger.info("[NOTIFICATION] To: %s Subject: %s Body: %s", to_address, subject, body)
