"""
Email notifier - Implements EmailVerifier protocol.

Renders the two registration messages and hands them to a Mailer. The
verification link is the configured base URL joined with the
`v1/verify-email` path and the token, the path the API serves.
"""

from urllib.parse import quote

from accounts.domain.ports import Mailer

VERIFY_EMAIL_PATH = "v1/verify-email"

DUPLICATE_REGISTRATION_SUBJECT = "Duplicate Registration"
NEW_EMAIL_SUBJECT = "Verify Your Email"

DUPLICATE_REGISTRATION_BODY = """\
Someone tried to create a new account with this email address, but it
already belongs to a verified account.

If this was you, you can log in with your existing password. If it was
not, you can safely ignore this message. No new account was created.
"""

NEW_EMAIL_BODY = """\
Thanks for signing up! Confirm that this is your email address by
following the link below:

{verification_link}

If you did not create an account, you can safely ignore this message.
"""


def verification_link(base_url: str, token: str) -> str:
    """Join the base URL, the verification path and the token."""
    return f"{base_url.rstrip('/')}/{VERIFY_EMAIL_PATH}/{quote(token, safe='')}"


class EmailNotifier:
    """
    Implements EmailVerifier protocol on top of a Mailer.

    Mailer errors propagate unchanged; the domain service wraps them.
    """

    def __init__(self, mailer: Mailer, base_url: str, sender: str) -> None:
        self._mailer = mailer
        self._base_url = base_url
        self._sender = sender

    def duplicate_registration(self, email: str) -> None:
        self._mailer.send(email, self._sender, DUPLICATE_REGISTRATION_SUBJECT, DUPLICATE_REGISTRATION_BODY)

    def new_email(self, email: str, token: str) -> None:
        body = NEW_EMAIL_BODY.format(verification_link=verification_link(self._base_url, token))
        self._mailer.send(email, self._sender, NEW_EMAIL_SUBJECT, body)
