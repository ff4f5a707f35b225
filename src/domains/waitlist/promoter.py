# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Waitlist promotion.

Ranks waiting enrollments and proposes a class for each while seats last.
Nothing here touches the database: ``promote`` is a pure function over
snapshots, and proposals are applied separately through the enrollment
engine.

Priority Calculation:
    returning student bonus + sibling bonus + waiting time bonus

    The waiting time bonus is ``points_per_waiting_day`` per full day since
    the enrollment was waitlisted, capped at ``max_waiting_bonus``.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime

from src.core.config.settings import WaitlistSettings, get_settings
from src.domains.enrollment.capacity import ClassSeat
from src.infrastructure.database.models import ProgramEnrollment, Student
from src.models.common import PaymentStatus
from src.utils.datetime import ensure_utc, utc_now, whole_days_since


@dataclass(frozen=True)
class WaitlistEntry:
    """Snapshot of an enrollment waiting for a class."""

    enrollment_id: str
    student_id: str
    program_id: str
    batch_number: int
    waitlisted_at: datetime
    payment_confirmed: bool = True

    @classmethod
    def from_enrollment(cls, enrollment: ProgramEnrollment) -> "WaitlistEntry":
        # Confirmed enrollments never waitlisted wait from their sign-up date
        waitlisted_at = enrollment.waitlisted_at or enrollment.enrollment_date
        return cls(
            enrollment_id=enrollment.id,
            student_id=enrollment.student_id,
            program_id=enrollment.program_id,
            batch_number=enrollment.batch_number,
            waitlisted_at=ensure_utc(waitlisted_at),
            payment_confirmed=enrollment.payment_status == PaymentStatus.CONFIRMED.value,
        )


@dataclass(frozen=True)
class PromotionProposal:
    """A proposed placement of a waiting enrollment."""

    enrollment_id: str
    student_id: str
    class_id: str
    priority: int


def calculate_priority(
    student: Student | None,
    waitlisted_at: datetime,
    now: datetime,
    settings: WaitlistSettings,
) -> int:
    """Priority score of a waiting student.

    Args:
        student: The student, or None if it could not be loaded.
        waitlisted_at: When the enrollment started waiting.
        now: Reference time.
        settings: Priority weights.

    Returns:
        Non-negative score; higher is served first.
    """
    score = 0
    if student is not None:
        if student.is_returning_student:
            score += settings.returning_student_bonus
        if student.has_siblings:
            score += settings.sibling_bonus

    waiting_days = whole_days_since(waitlisted_at, now)
    score += min(waiting_days * settings.points_per_waiting_day, settings.max_waiting_bonus)
    return score


def promote(
    seats: Iterable[ClassSeat],
    entries: Iterable[WaitlistEntry],
    students: Mapping[str, Student],
    now: datetime | None = None,
    settings: WaitlistSettings | None = None,
) -> list[PromotionProposal]:
    """Propose class placements for waiting enrollments.

    Entries are served by priority (descending), then earliest
    ``waitlisted_at``, then enrollment id. Each gets the first class of its
    program and batch, by class name then id, that still has room after the
    proposals already made in this run. Entries whose payment is not
    confirmed are ranked but never claim a seat.

    Args:
        seats: Capacity snapshot of the candidate classes.
        entries: Waiting enrollments.
        students: Students by id, for the priority bonuses.
        now: Reference time, defaults to now in UTC.
        settings: Priority weights, defaults to the configured ones.

    Returns:
        Proposals in the order they were made.
    """
    now = now or utc_now()
    settings = settings or get_settings().waitlist

    available: dict[str, int] = {}
    by_batch: dict[tuple[str, int], list[ClassSeat]] = {}
    for seat in sorted(seats, key=lambda s: (s.class_name, s.class_id)):
        available[seat.class_id] = seat.available
        by_batch.setdefault((seat.program_id, seat.batch), []).append(seat)

    ranked = sorted(
        (
            (
                calculate_priority(students.get(e.student_id), e.waitlisted_at, now, settings),
                e,
            )
            for e in entries
        ),
        key=lambda item: (-item[0], item[1].waitlisted_at, item[1].enrollment_id),
    )

    proposals: list[PromotionProposal] = []
    for priority, entry in ranked:
        if not entry.payment_confirmed:
            continue
        for seat in by_batch.get((entry.program_id, entry.batch_number), []):
            if available[seat.class_id] > 0:
                available[seat.class_id] -= 1
                proposals.append(
                    PromotionProposal(
                        enrollment_id=entry.enrollment_id,
                        student_id=entry.student_id,
                        class_id=seat.class_id,
                        priority=priority,
                    )
                )
                break

    return proposals
