"""
SMTP mailer adapter - Implements Mailer protocol.

Registration sends its verification email while the database transaction
is open, so every network operation here is bounded by a timeout.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage

logger = logging.getLogger(__name__)


class SmtpMailer:
    """Implements Mailer protocol via smtplib."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout

    def send(self, to: str, sender: str, subject: str, body: str) -> None:
        """
        Deliver a plain-text message.

        Raises:
            smtplib.SMTPException: If the server rejects the message
            OSError: On connection failures or timeouts
        """
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = sender
        message["To"] = to
        message.set_content(body)

        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
            if self._use_tls:
                server.starttls(context=ssl.create_default_context())
            if self._username and self._password:
                server.login(self._username, self._password)
            server.send_message(message)

        logger.debug("Sent %r to %s via %s:%s", subject, to, self._host, self._port)
