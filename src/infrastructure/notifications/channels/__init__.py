# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification channels for delivering notifications.

- EmailChannel: Sends email notifications via SMTP

Usage:
    from src.infrastructure.notifications.channels import (
        EmailChannel,
        NotificationPayload,
    )

    email = EmailChannel()
    result = await email.send(
        NotificationPayload(
            notification_type="class_assignment",
            title="Class Assignment",
            message="You have been enrolled in the following class: ...",
            recipient_email="parent@example.com",
        )
    )
"""

from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    DeliveryStatus,
    NotificationPayload,
)
from src.infrastructure.notifications.channels.email import EmailChannel

__all__ = [
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "DeliveryStatus",
    "NotificationPayload",
    "EmailChannel",
]
