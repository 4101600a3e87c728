"""
SMTP delivery for the weekly backup email.

smtplib is blocking, so the whole SMTP conversation runs in a worker
thread and the event loop stays free.
"""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Optional

from src.config import EmailSettings, get_settings
from src.services.notification.interface import (
    NotificationError,
    NotificationSinkInterface,
)


class SmtpNotificationSink(NotificationSinkInterface):
    """Sends each notification as a plain-text email."""

    def __init__(self, settings: Optional[EmailSettings] = None):
        self._settings = settings or get_settings().email

    def _build_message(self, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self._settings.sender
        message["To"] = self._settings.recipient
        message.set_content(body)
        return message

    def _deliver(self, message: EmailMessage) -> None:
        s = self._settings
        with smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=s.timeout_seconds) as smtp:
            if s.use_tls:
                smtp.starttls()
            if s.username:
                smtp.login(s.username, s.password or "")
            smtp.send_message(message)

    async def send(self, subject: str, body: str) -> None:
        message = self._build_message(subject, body)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"Failed to send email: {e}")
