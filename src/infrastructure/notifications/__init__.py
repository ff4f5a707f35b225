# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification system for the academy backend.

Class assignment emails go to the class teacher, the student and the
parent, each only when an email address is on file.

Usage:
    from src.infrastructure.events import get_event_bus
    from src.infrastructure.notifications import get_class_assignment_notifier

    # At startup
    get_class_assignment_notifier().register(get_event_bus())

Configuration (environment variables):
- SMTP_HOST: SMTP server hostname
- SMTP_PORT: SMTP server port (default: 587)
- SMTP_USERNAME: SMTP authentication username
- SMTP_PASSWORD: SMTP authentication password
- SMTP_FROM_EMAIL: Sender email address
- SMTP_FROM_NAME: Sender display name
"""

from src.infrastructure.notifications.channels import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    DeliveryStatus,
    EmailChannel,
    NotificationPayload,
)
from src.infrastructure.notifications.service import (
    AssignmentRecipient,
    ClassAssignmentNotice,
    ClassAssignmentNotifier,
    ClassInfo,
    NotificationReport,
    ProgramInfo,
    RecipientResult,
    RecipientType,
    get_class_assignment_notifier,
    prepare_recipients,
    reset_class_assignment_notifier,
)

__all__ = [
    "AssignmentRecipient",
    "ClassAssignmentNotice",
    "ClassAssignmentNotifier",
    "ClassInfo",
    "NotificationReport",
    "ProgramInfo",
    "RecipientResult",
    "RecipientType",
    "get_class_assignment_notifier",
    "prepare_recipients",
    "reset_class_assignment_notifier",
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "DeliveryStatus",
    "NotificationPayload",
    "EmailChannel",
]
