"""
Mail relay for broadcast messages.

A chat message that mentions the broadcast marker (``@everyone`` by default)
is mailed to the configured recipients with the marker replaced by a plain
word. Delivery is attempted once. The caller reports success or failure
back to the channel; there is no retry.

smtplib is blocking, so the send runs in a worker thread and never stalls
the gateway loop.
"""

from __future__ import annotations

import asyncio
import smtplib
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import Tuple

from quakebot.core.logging.logger import get_logger

logger = get_logger(__name__)

IMPLICIT_TLS_PORT = 465


@dataclass(frozen=True)
class RelaySettings:
    host: str
    port: int
    username: str
    password: str = field(repr=False)
    sender: str
    recipients: Tuple[str, ...]
    subject: str
    marker: str = "@everyone"
    replacement: str = "everyone"
    timeout_seconds: float = 15


class MailRelay:
    """
    Public Methods
    --------------
    - should_relay() -> does the text carry the broadcast marker
    - build_message() -> plain-text mail for a chat message
    - relay() -> send it; True on success
    """

    def __init__(self, settings: RelaySettings) -> None:
        self._settings = settings

    @property
    def settings(self) -> RelaySettings:
        return self._settings

    def should_relay(self, text: str) -> bool:
        return bool(self._settings.marker) and self._settings.marker in text

    def build_message(self, text: str) -> EmailMessage:
        body = text.replace(self._settings.marker, self._settings.replacement)

        msg = EmailMessage()
        msg["From"] = self._settings.sender
        msg["To"] = ", ".join(self._settings.recipients)
        msg["Subject"] = self._settings.subject
        msg.set_content(body)
        return msg

    def _send(self, msg: EmailMessage) -> None:
        s = self._settings
        if s.port == IMPLICIT_TLS_PORT:
            with smtplib.SMTP_SSL(s.host, s.port, timeout=s.timeout_seconds) as smtp:
                smtp.login(s.username, s.password)
                smtp.send_message(msg)
        else:
            with smtplib.SMTP(s.host, s.port, timeout=s.timeout_seconds) as smtp:
                smtp.starttls()
                smtp.login(s.username, s.password)
                smtp.send_message(msg)

    async def relay(self, text: str) -> bool:
        """Mail `text` to the recipients. Failures are logged, not raised."""
        if not self._settings.recipients:
            logger.warning("Relay requested but no recipients are configured")
            return False

        msg = self.build_message(text)

        try:
            await asyncio.to_thread(self._send, msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(
                "Failed to relay broadcast message",
                extra={
                    "smtp_host": self._settings.host,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
                exc_info=True,
            )
            return False

        logger.info(
            "Broadcast message relayed",
            extra={"recipients": len(self._settings.recipients)},
        )
        return True
