"""Email alerts over SMTP.

Blocking smtplib work runs in a worker thread; the public coroutines
never raise. They return True on delivery and False (after logging) on
any transport failure.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from ..config import Settings
from ..errors import NotifierError
from . import FailureAlert, grouped_body, grouped_subject, single_body, single_subject

logger = logging.getLogger(__name__)


class EmailNotifier:
    """Sends failure alerts to one recipient through an SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int,
        secure: bool,
        username: str,
        password: str,
        recipient: str,
        sender: str = "",
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.secure = secure
        self.username = username
        self.password = password
        self.recipient = recipient
        self.sender = sender or username
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> EmailNotifier:
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            secure=settings.smtp_secure,
            username=settings.email_user,
            password=settings.email_password,
            recipient=settings.email_to,
            sender=settings.sender,
            timeout=settings.smtp_timeout,
        )

    # -- Notifier contract ------------------------------------------------------

    async def notify_single(self, domain: str, status: int | str) -> bool:
        ok = await self._send(single_subject(domain, status), single_body(domain, status))
        if ok:
            logger.info("Email sent for %s", domain)
        return ok

    async def notify_grouped(self, failures: list[FailureAlert]) -> bool:
        if not failures:
            return False
        ok = await self._send(grouped_subject(len(failures)), grouped_body(failures))
        if ok:
            logger.info("Email sent for %d failed sites", len(failures))
        return ok

    # -- Low-level dispatch -----------------------------------------------------

    def build_message(self, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = self.recipient
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    async def _send(self, subject: str, body: str) -> bool:
        msg = self.build_message(subject, body)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._deliver, msg)
        except NotifierError as exc:
            logger.warning("Error sending email: %s", exc)
            return False
        return True

    def _deliver(self, msg: EmailMessage) -> None:
        try:
            if self.secure:
                with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as server:
                    server.login(self.username, self.password)
                    server.send_message(msg)
            else:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                    server.ehlo()
                    if server.has_extn("starttls"):
                        server.starttls()
                        server.ehlo()
                    server.login(self.username, self.password)
                    server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotifierError(f"{self.host}:{self.port}: {exc}") from exc
