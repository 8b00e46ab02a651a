"""
Console mailer adapter - Implements Mailer protocol.

This module provides a console-based implementation of the domain's
mailer port, logging whole messages for development use.
"""

import logging

logger = logging.getLogger(__name__)

MESSAGE_SEPARATOR = "*" * 80
BODY_SEPARATOR = "-" * 80


class ConsoleMailer:
    """
    Implements Mailer protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For development purposes - verification links show up in the logs.
    """

    def send(self, to: str, sender: str, subject: str, body: str) -> None:
        """
        Log the message at INFO level (simulates email delivery).

        Args:
            to: Recipient email address
            sender: From address
            subject: Message subject
            body: Plain-text message body
        """
        logger.info(
            "\n%s\nTo: %s\nFrom: %s\nSubject: %s\n%s\n%s\n%s",
            MESSAGE_SEPARATOR,
            to,
            sender,
            subject,
            BODY_SEPARATOR,
            body,
            MESSAGE_SEPARATOR,
        )
