# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Email notification channel using async SMTP.

This channel sends email notifications using aiosmtplib for
async SMTP communication. Each message carries a plain text and
an HTML part.

Configuration comes from SMTPSettings (SMTP_* environment variables).
"""

import asyncio
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from html import escape

import aiosmtplib

from src.core.config.settings import SMTPSettings, get_settings
from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    NotificationPayload,
)

logger = logging.getLogger(__name__)


class EmailChannel(BaseChannel):
    """Email notification channel using async SMTP.

    When SMTP is not configured every send is reported as skipped
    rather than failed.
    """

    def __init__(self, smtp_settings: SMTPSettings | None = None) -> None:
        super().__init__()
        self._settings = smtp_settings or get_settings().smtp
        self._warned_unconfigured = False

    @property
    def channel_type(self) -> ChannelType:
        return ChannelType.EMAIL

    @property
    def is_configured(self) -> bool:
        return self._settings.is_configured

    async def send(self, payload: NotificationPayload) -> ChannelResult:
        """Send email notification via SMTP.

        Args:
            payload: The notification payload.

        Returns:
            ChannelResult with delivery status.
        """
        if not self.is_configured:
            if not self._warned_unconfigured:
                self.logger.warning(
                    "Email notifications disabled: SMTP_HOST, SMTP_USERNAME, "
                    "SMTP_PASSWORD, or SMTP_FROM_EMAIL not set"
                )
                self._warned_unconfigured = True
            return self.create_skipped_result("SMTP configuration incomplete")

        if not payload.recipient_email:
            return self.create_skipped_result("No recipient email address")

        message = self._build_email_message(payload)
        password = self._settings.password.get_secret_value() if self._settings.password else None

        try:
            await aiosmtplib.send(
                message,
                hostname=self._settings.host,
                port=self._settings.port,
                username=self._settings.username,
                password=password,
                start_tls=self._settings.use_tls,
                timeout=self._settings.timeout,
            )
        except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError) as e:
            self.logger.error(
                "Failed to send email to %s: %s",
                payload.recipient_email,
                str(e),
            )
            return self.create_failure_result(
                f"SMTP error: {str(e)}",
                metadata={"recipient": payload.recipient_email},
            )

        self.logger.info(
            "Email sent to %s: %s",
            payload.recipient_email,
            payload.title,
        )

        return self.create_success_result(
            message_id=message["Message-ID"],
            metadata={"recipient": payload.recipient_email},
        )

    def _build_email_message(self, payload: NotificationPayload) -> MIMEMultipart:
        """Build the MIME message with plain text and HTML alternatives."""
        message = MIMEMultipart("alternative")

        message["From"] = formataddr((self._settings.from_name, self._settings.from_email or ""))
        message["To"] = payload.recipient_email
        message["Subject"] = payload.title
        message["Message-ID"] = make_msgid()

        message.attach(MIMEText(payload.message, "plain", "utf-8"))
        html_content = payload.html_body or self._build_html(payload)
        message.attach(MIMEText(html_content, "html", "utf-8"))

        return message

    def _build_html(self, payload: NotificationPayload) -> str:
        """Wrap a plain text body in a minimal HTML document."""
        title = escape(payload.title)
        body = escape(payload.message).replace("\n", "<br>")
        return (
            "<!DOCTYPE html>\n"
            '<html><head><meta charset="utf-8"></head>'
            f"<body><h1>{title}</h1><p>{body}</p></body></html>"
        )
