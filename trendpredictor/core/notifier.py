"""Plain-text email summary of a run, sent through Gmail SMTP."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Callable, Dict, Optional, Sequence

from trendpredictor.core.config import Settings
from trendpredictor.core.records import ANALYSIS_FIELDS
from trendpredictor.core.results import CallResult
from trendpredictor.core.timeutil import current_ist_time

LOGGER = logging.getLogger(__name__)

PLACEHOLDER = "N/A"
_SEPARATOR = "=" * 40
_RULE = "-" * 40
_FOOTER = (
    "---\n"
    "This analysis was generated automatically by the Trend Predictor system.\n"
    "Please review all recommendations carefully before making any investment decisions.\n"
)


def build_subject(generated_at: str) -> str:
    return f"Stock Analysis Results - {generated_at}"


def build_body(results: Sequence[Dict[str, object]], generated_at: str) -> str:
    """Render every record with fixed labels, using ``N/A`` for missing fields."""
    lines = ["Stock Analysis Results", f"Generated on: {generated_at}", "", _SEPARATOR, ""]
    for index, record in enumerate(results, start=1):
        lines.append(f"Stock Analysis #{index}:")
        lines.append(_RULE)
        for key, label in ANALYSIS_FIELDS:
            lines.append(f"{label}: {record.get(key) or PLACEHOLDER}")
        lines.extend(["", _SEPARATOR, ""])
    return "\n".join(lines) + "\n" + _FOOTER


class EmailNotifier:
    """Send the run summary to the configured recipient."""

    def __init__(
        self,
        user: Optional[str],
        password: Optional[str],
        recipient: Optional[str],
        host: str = "smtp.gmail.com",
        port: int = 465,
        transport_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP_SSL,
        clock: Callable[[], str] = current_ist_time,
        timeout: Optional[float] = 30.0,
    ) -> None:
        self.user = user
        self.password = password
        self.recipient = recipient
        self.host = host
        self.port = port
        self._transport_factory = transport_factory
        self._clock = clock
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "EmailNotifier":
        return cls(
            settings.gmail_user,
            settings.gmail_app_password,
            settings.mail_recipient,
            host=settings.smtp_host,
            port=settings.smtp_port,
            timeout=settings.http_timeout,
            **kwargs,
        )

    def build_message(self, results: Sequence[Dict[str, object]]) -> EmailMessage:
        generated_at = self._clock()
        message = EmailMessage()
        message["Subject"] = build_subject(generated_at)
        message["From"] = self.user or ""
        message["To"] = self.recipient or ""
        message.set_content(build_body(results, generated_at))
        return message

    def notify(self, results: Sequence[Dict[str, object]]) -> CallResult:
        """Email ``results``; skip with a warning when credentials are missing.

        SMTP errors propagate to the caller.
        """
        LOGGER.info("Preparing to send email with %d result(s)", len(results))
        if not (self.user and self.password and self.recipient):
            LOGGER.warning("Missing Gmail credentials or recipient; skipping email")
            return CallResult.failure("mail credentials not configured")

        message = self.build_message(results)
        with self._transport_factory(self.host, self.port, timeout=self.timeout) as transport:
            transport.login(self.user, self.password)
            transport.send_message(message)
        LOGGER.info("Email sent to %s", self.recipient)
        return CallResult.success(message["Subject"])


__all__ = ["EmailNotifier", "PLACEHOLDER", "build_body", "build_subject"]
