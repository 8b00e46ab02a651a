"""Notification adapters - Mailers and the registration email notifier."""

from .console import ConsoleMailer
from .smtp import SmtpMailer
from .verifier import EmailNotifier, verification_link

__all__ = ["ConsoleMailer", "EmailNotifier", "SmtpMailer", "verification_link"]
