# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class assignment notifications.

Handles the complete notification flow after a student is placed in a
class:
1. Preparing recipients (teacher, student, parent) from available emails
2. Rendering the assignment email for each recipient group
3. Sending through the email channel, one recipient at a time
4. Reporting per-recipient results

The notifier subscribes to ``enrollment.class.assigned`` on the event bus.
When any recipient fails it raises NotificationFailureError after every
recipient was attempted; the event bus records that as a handler error and
the assignment itself stays committed.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from html import escape
from typing import Any

from src.domains.enrollment.errors import NotificationFailureError
from src.infrastructure.events import EventBus, EventData, EventTypes
from src.infrastructure.notifications.channels import (
    ChannelResult,
    DeliveryStatus,
    EmailChannel,
    NotificationPayload,
)
from src.utils.datetime import format_long_date, utc_now

logger = logging.getLogger(__name__)

NOTIFICATION_TYPE = "class_assignment"


class RecipientType(str, Enum):
    """Recipient groups of an assignment email."""

    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"


@dataclass
class AssignmentRecipient:
    """One email recipient."""

    email: str
    recipient_type: RecipientType
    name: str | None = None


@dataclass
class ClassInfo:
    """Class details printed in the email."""

    class_name: str
    course_name: str
    batch: int
    slot: str
    schedule: str | None = None
    instructor_name: str | None = None
    meet_link: str | None = None


@dataclass
class ProgramInfo:
    """Program details printed in the email."""

    program_name: str


@dataclass
class ClassAssignmentNotice:
    """Everything needed to notify one class assignment."""

    recipients: list[AssignmentRecipient]
    class_info: ClassInfo
    program_info: ProgramInfo
    enrollment_date: date | datetime


@dataclass
class RecipientResult:
    """Delivery result for one recipient."""

    recipient: AssignmentRecipient
    result: ChannelResult


@dataclass
class NotificationReport:
    """Per-recipient outcome of one notice."""

    results: list[RecipientResult] = field(default_factory=list)

    @property
    def sent(self) -> list[RecipientResult]:
        return [r for r in self.results if r.result.status == DeliveryStatus.SENT]

    @property
    def failed(self) -> list[RecipientResult]:
        return [r for r in self.results if r.result.failed]

    @property
    def skipped(self) -> list[RecipientResult]:
        return [r for r in self.results if r.result.status == DeliveryStatus.SKIPPED]

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [
                {
                    "email": r.recipient.email,
                    "recipient_type": r.recipient.recipient_type.value,
                    **r.result.to_dict(),
                }
                for r in self.results
            ]
        }


def prepare_recipients(
    teacher_email: str | None = None,
    teacher_name: str | None = None,
    student_email: str | None = None,
    student_name: str | None = None,
    parent_email: str | None = None,
) -> list[AssignmentRecipient]:
    """Build the recipient list, keeping only groups with an email."""
    recipients: list[AssignmentRecipient] = []
    if teacher_email:
        recipients.append(AssignmentRecipient(teacher_email, RecipientType.TEACHER, teacher_name))
    if student_email:
        recipients.append(AssignmentRecipient(student_email, RecipientType.STUDENT, student_name))
    if parent_email:
        recipients.append(AssignmentRecipient(parent_email, RecipientType.PARENT))
    return recipients


class ClassAssignmentNotifier:
    """Sends class assignment emails to teacher, student and parent.

    Attributes:
        email: Email channel used for delivery.
    """

    def __init__(self, email: EmailChannel | None = None) -> None:
        self.email = email or EmailChannel()

    def register(self, event_bus: EventBus) -> None:
        """Subscribe the notifier to class assignment events."""
        event_bus.subscribe(EventTypes.Enrollment.CLASS_ASSIGNED, self.handle_class_assigned)

    async def handle_class_assigned(self, event: EventData) -> None:
        """Event bus handler for ``enrollment.class.assigned``."""
        notice = self.notice_from_payload(event.payload)
        if not notice.recipients:
            logger.info(
                "No notification recipients for enrollment %s",
                event.payload.get("enrollment_id"),
            )
            return
        await self.notify_class_assignment(notice)

    async def notify_class_assignment(self, notice: ClassAssignmentNotice) -> NotificationReport:
        """Send the assignment email to every recipient.

        Args:
            notice: Recipients and class details.

        Returns:
            NotificationReport when no recipient failed.

        Raises:
            NotificationFailureError: If at least one recipient failed. The
                report is attached to the error.
        """
        report = NotificationReport()

        for recipient in notice.recipients:
            payload = NotificationPayload(
                notification_type=NOTIFICATION_TYPE,
                title=self._subject(notice),
                message=self._render_text(notice, recipient),
                recipient_email=recipient.email,
                recipient_name=recipient.name,
                html_body=self._render_html(notice, recipient),
                data={"recipient_type": recipient.recipient_type.value},
            )
            result = await self.email.send(payload)
            report.results.append(RecipientResult(recipient=recipient, result=result))

        logger.info(
            "Class assignment notice for %s: %d sent, %d failed, %d skipped",
            notice.class_info.class_name,
            len(report.sent),
            len(report.failed),
            len(report.skipped),
        )

        if report.failed:
            failed = ", ".join(r.recipient.email for r in report.failed)
            raise NotificationFailureError(
                f"Assignment email failed for: {failed}",
                report=report,
            )
        return report

    @staticmethod
    def notice_from_payload(payload: dict[str, Any]) -> ClassAssignmentNotice:
        """Build a notice from a ``enrollment.class.assigned`` event payload."""
        enrollment_date = payload.get("enrollment_date")
        if isinstance(enrollment_date, str):
            enrollment_date = datetime.fromisoformat(enrollment_date)

        return ClassAssignmentNotice(
            recipients=prepare_recipients(
                teacher_email=payload.get("teacher_email"),
                teacher_name=payload.get("teacher_name"),
                student_email=payload.get("student_email"),
                student_name=payload.get("student_name"),
                parent_email=payload.get("parent_email"),
            ),
            class_info=ClassInfo(
                class_name=payload["class_name"],
                course_name=payload["course_name"],
                batch=payload["batch"],
                slot=payload["slot"],
                schedule=payload.get("schedule"),
                instructor_name=payload.get("teacher_name"),
                meet_link=payload.get("meet_link"),
            ),
            program_info=ProgramInfo(program_name=payload["program_name"]),
            enrollment_date=enrollment_date or utc_now(),
        )

    # Rendering

    @staticmethod
    def _subject(notice: ClassAssignmentNotice) -> str:
        return (
            f"Class Assignment - {notice.program_info.program_name} "
            f"Batch {notice.class_info.batch}"
        )

    @staticmethod
    def _greeting(recipient: AssignmentRecipient) -> str:
        if recipient.recipient_type == RecipientType.TEACHER:
            return f"Dear {recipient.name or 'Instructor'},"
        if recipient.recipient_type == RecipientType.STUDENT:
            return f"Dear {recipient.name or 'Student'},"
        return "Dear Parent/Guardian,"

    @staticmethod
    def _intro(recipient: AssignmentRecipient) -> str:
        if recipient.recipient_type == RecipientType.TEACHER:
            return "You have been assigned to teach the following class:"
        if recipient.recipient_type == RecipientType.STUDENT:
            return "You have been enrolled in the following class:"
        return "Your child/ward has been enrolled in the following class:"

    def _detail_lines(
        self,
        notice: ClassAssignmentNotice,
        recipient: AssignmentRecipient,
    ) -> list[tuple[str, str]]:
        info = notice.class_info
        lines = [
            ("Program", f"{notice.program_info.program_name} - Batch {info.batch}"),
            ("Class", info.class_name),
            ("Course", info.course_name),
            ("Schedule", f"{info.slot} {info.schedule or ''}".strip()),
        ]
        # Teachers don't need their own name
        if info.instructor_name and recipient.recipient_type != RecipientType.TEACHER:
            lines.append(("Instructor", info.instructor_name))
        lines.append(("Enrollment Date", format_long_date(notice.enrollment_date)))
        if info.meet_link:
            lines.append(("Meeting Link", info.meet_link))
        return lines

    def _render_text(self, notice: ClassAssignmentNotice, recipient: AssignmentRecipient) -> str:
        lines = [self._greeting(recipient), "", self._intro(recipient), ""]
        lines.extend(f"{label}: {value}" for label, value in self._detail_lines(notice, recipient))
        lines.extend(["", "---", "This is an automated message from the academy enrollment system."])
        return "\n".join(lines)

    def _render_html(self, notice: ClassAssignmentNotice, recipient: AssignmentRecipient) -> str:
        rows = "".join(
            f"<tr><td><strong>{escape(label)}</strong></td><td>{escape(value)}</td></tr>"
            for label, value in self._detail_lines(notice, recipient)
        )
        return (
            "<!DOCTYPE html>\n"
            '<html lang="en"><head><meta charset="utf-8">'
            f"<title>{escape(self._subject(notice))}</title></head><body>"
            f"<p>{escape(self._greeting(recipient))}</p>"
            f"<p>{escape(self._intro(recipient))}</p>"
            f"<table>{rows}</table>"
            "<p>This is an automated message from the academy enrollment system.</p>"
            "</body></html>"
        )


# Singleton instance management
_notifier_instance: ClassAssignmentNotifier | None = None


def get_class_assignment_notifier() -> ClassAssignmentNotifier:
    """Get or create the class assignment notifier singleton."""
    global _notifier_instance
    if _notifier_instance is None:
        _notifier_instance = ClassAssignmentNotifier()
    return _notifier_instance


def reset_class_assignment_notifier() -> None:
    """Reset the notifier singleton (used by tests)."""
    global _notifier_instance
    _notifier_instance = None
