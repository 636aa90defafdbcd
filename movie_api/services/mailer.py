# movie_api/services/mailer.py
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

import anyio

from movie_api.core.settings import Settings

log = logging.getLogger(__name__)


class Mailer:
    """Sends transactional email over SMTP (STARTTLS)."""

    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.user = settings.smtp_user
        self.password = settings.smtp_password
        self.sender = settings.mail_from or settings.smtp_user

    @property
    def configured(self) -> bool:
        return bool(self.host and self.sender)

    def _send_sync(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=15) as smtp:
            smtp.starttls()
            if self.user and self.password:
                smtp.login(self.user, self.password)
            smtp.send_message(msg)

    async def send(self, to: str, subject: str, body: str) -> None:
        if not self.configured:
            log.warning("SMTP not configured; not sending %r", subject)
            return
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        await anyio.to_thread.run_sync(self._send_sync, msg)

    async def send_password_reset(self, to: str, link: str, valid_minutes: int = 60) -> None:
        body = (
            "We received a request to reset your password.\n\n"
            f"Open this link to choose a new one (valid for {valid_minutes} minutes):\n{link}\n\n"
            "If you did not ask for this, you can ignore this email."
        )
        await self.send(to, "Reset your password", body)
