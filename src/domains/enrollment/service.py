# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service: the program enrollment and class assignment engine.

This module provides the EnrollmentService class for:
- Program enrollment (waitlisted or confirmed)
- Payment confirmation and price edits
- Class assignment and unassignment
- Removal from a program
- Course completion and class archiving
- Capacity changes and overflow correction

Every transition runs in one transaction. Mutations are serialised per
student and per class with in-process locks, and the class/enrollment rows
are re-read with ``SELECT ... FOR UPDATE`` right before the write. Events
are published on the event bus after commit; subscriber failures never roll
back a transition.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from src.core.config.settings import EnrollmentSettings, get_settings
from src.domains.course_history import CourseHistoryLedger
from src.domains.enrollment.capacity import CapacityTracker, validate_class_placement
from src.domains.enrollment.errors import (
    BatchMismatchError,
    CapacityExceededError,
    ClassArchivedError,
    DuplicateEnrollmentError,
    EnrollmentServiceError,
    InvalidBatchError,
    InvalidCapacityError,
    InvalidTransitionError,
    NotFoundError,
    PaymentNotConfirmedError,
    RepeatCourseConfirmationRequired,
    WindowClosedError,
)
from src.domains.enrollment.locks import (
    LockRegistry,
    class_key,
    get_lock_registry,
    student_key,
)
from src.domains.enrollment.states import (
    TERMINAL_STATES,
    EnrollmentState,
    apply_state,
    derive_state,
    ensure_state,
    ensure_transition,
)
from src.domains.enrollment.window import EnrollmentWindowPolicy
from src.domains.pricing import InvalidPriceError, PricingService
from src.infrastructure.database.models import (
    Class,
    Course,
    CourseHistory,
    Program,
    ProgramEnrollment,
    Student,
)
from src.infrastructure.database.repository import AcademyRepository
from src.infrastructure.events import EventBus, EventTypes, get_event_bus
from src.models.common import EnrollmentStatus, PaymentStatus, PriceType
from src.utils.datetime import format_iso, utc_now

logger = logging.getLogger(__name__)

MIN_CLASS_CAPACITY = 1
MAX_CLASS_CAPACITY = 50


@dataclass
class AssignmentResult:
    """Outcome of a successful class assignment.

    Attributes:
        enrollment: The assigned enrollment.
        history_entry: The IN_PROGRESS course history entry.
        notes: Non-fatal problems, such as failed notifications.
    """

    enrollment: ProgramEnrollment
    history_entry: CourseHistory
    notes: list[str] = field(default_factory=list)


@dataclass
class CompletionResult:
    """Outcome of marking an enrollment completed."""

    enrollment_id: str
    student_id: str
    history_entry: CourseHistory


@dataclass
class ArchiveFailure:
    """A student the archive cascade could not complete."""

    enrollment_id: str
    student_id: str
    reason: str


@dataclass
class ArchiveResult:
    """Outcome of archiving a class."""

    class_id: str
    completed: list[str] = field(default_factory=list)
    failures: list[ArchiveFailure] = field(default_factory=list)
    archived: bool = False
    already_archived: bool = False


@dataclass
class CapacityResult:
    """Outcome of a capacity change or overflow correction."""

    class_id: str
    capacity: int
    occupancy: int
    evicted: list[str] = field(default_factory=list)


class EnrollmentService:
    """Service for program enrollments and class assignments.

    Attributes:
        repository: Persistence boundary.
        capacity: Occupancy derived from enrollments.
        history: Course history ledger.
        pricing: Price tier resolver.
        window_policy: Program enrollment window.
        event_bus: Bus receiving post-commit events.
        locks: Keyed in-process locks.
    """

    def __init__(
        self,
        repository: AcademyRepository,
        pricing: PricingService | None = None,
        window_policy: EnrollmentWindowPolicy | None = None,
        event_bus: EventBus | None = None,
        locks: LockRegistry | None = None,
        settings: EnrollmentSettings | None = None,
    ) -> None:
        self.repository = repository
        self.settings = settings or get_settings().enrollment
        self.capacity = CapacityTracker(repository)
        self.history = CourseHistoryLedger(repository)
        self.pricing = pricing or PricingService(repository)
        self.window_policy = window_policy or EnrollmentWindowPolicy(self.settings)
        self.event_bus = event_bus or get_event_bus()
        self.locks = locks or get_lock_registry()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_enrollment(self, enrollment_id: str) -> ProgramEnrollment:
        """Get an enrollment.

        Raises:
            NotFoundError: If the enrollment does not exist.
        """
        enrollment = await self.repository.get_enrollment(enrollment_id)
        if enrollment is None:
            raise NotFoundError("Enrollment", enrollment_id)
        return enrollment

    async def list_enrollments(
        self,
        program_id: str | None = None,
        status: EnrollmentStatus | None = None,
    ) -> list[ProgramEnrollment]:
        """List enrollments, optionally for one program and status."""
        statuses = [status] if status is not None else None
        return await self.repository.list_enrollments(program_id=program_id, statuses=statuses)

    async def class_roster(self, class_id: str) -> tuple[Class, list[ProgramEnrollment]]:
        """Get a class together with its derived roster.

        Raises:
            NotFoundError: If the class does not exist.
        """
        class_ = await self._get_class(class_id)
        return class_, await self.capacity.roster(class_id)

    # ------------------------------------------------------------------
    # Program enrollment
    # ------------------------------------------------------------------

    async def enroll_program(
        self,
        student_id: str,
        program_id: str,
        batch_number: int = 1,
        payment_confirmed: bool = False,
        price_type: PriceType = PriceType.FULL_PRICE,
        today: date | None = None,
    ) -> ProgramEnrollment:
        """Enroll a student in a program batch.

        A confirmed payment puts the enrollment in PENDING (awaiting class
        placement) with the current tier price captured. Otherwise the
        enrollment is waitlisted.

        Args:
            student_id: Student identifier.
            program_id: Program identifier.
            batch_number: Batch within the program, starting at 1.
            payment_confirmed: Whether payment is already confirmed.
            price_type: Pricing tier.
            today: Reference date for the enrollment window.

        Returns:
            The created (or reactivated) enrollment.

        Raises:
            NotFoundError: If the student or program does not exist.
            InvalidBatchError: If the batch is not one of the program's.
            WindowClosedError: If the enrollment window has passed.
            DuplicateEnrollmentError: If the student already holds or has
                completed this program batch.
        """
        price_type = PriceType(price_type)

        async with self.locks.hold(student_key(student_id)):
            try:
                async with self._transaction():
                    student = await self._get_student(student_id)
                    program = await self._get_program(program_id)

                    if not program.has_batch(batch_number):
                        raise InvalidBatchError(
                            f"Batch {batch_number} does not exist in program {program.name} "
                            f"(batches 1-{program.batches})"
                        )

                    decision = self.window_policy.can_enroll(program, today)
                    if not decision.allowed:
                        raise WindowClosedError(
                            decision.reason or "Enrollment window closed",
                            decision.days_passed,
                        )

                    existing = await self.repository.find_enrollment(
                        student.id, program.id, batch_number
                    )
                    existing_state = derive_state(existing)
                    if existing is not None and existing_state not in TERMINAL_STATES:
                        raise DuplicateEnrollmentError(
                            f"Student is already enrolled in {program.name} batch {batch_number}",
                            batch_numbers=[batch_number],
                        )
                    if await self.history.has_completed_batch(student.id, program.id, batch_number):
                        raise DuplicateEnrollmentError(
                            f"Student already completed {program.name} batch {batch_number}",
                            batch_numbers=[batch_number],
                        )

                    target = EnrollmentState.PENDING if payment_confirmed else EnrollmentState.WAITLIST
                    ensure_transition(None, target)

                    enrollment = existing or ProgramEnrollment(
                        student_id=student.id,
                        program_id=program.id,
                        batch_number=batch_number,
                    )
                    await self._reset_enrollment(enrollment, target, price_type, payment_confirmed)
                    if existing is None:
                        await self.repository.add(enrollment)
                    else:
                        await self.repository.flush()
            except IntegrityError as e:
                raise DuplicateEnrollmentError(
                    f"Student is already enrolled in this program batch ({batch_number})",
                    batch_numbers=[batch_number],
                ) from e

        logger.info(
            "%s enrollment: student=%s, program=%s, batch=%d, state=%s",
            "Reactivated" if existing is not None else "Created",
            student_id,
            program_id,
            batch_number,
            target.value,
        )

        await self._publish(
            EventTypes.Enrollment.PROGRAM_ENROLLED,
            self._enrollment_payload(enrollment),
        )
        return enrollment

    async def update_payment_status(
        self,
        enrollment_id: str,
        payment_status: PaymentStatus,
    ) -> ProgramEnrollment:
        """Change the payment status of an enrollment.

        Confirming payment captures the tier price if none was captured and
        moves a waitlisted enrollment to PENDING.

        Raises:
            NotFoundError: If the enrollment does not exist.
        """
        payment_status = PaymentStatus(payment_status)
        enrollment = await self.get_enrollment(enrollment_id)
        promoted = False

        async with self.locks.hold(student_key(enrollment.student_id)):
            async with self._transaction():
                enrollment = await self._get_enrollment(enrollment_id, for_update=True)
                enrollment.payment_status = payment_status.value

                if payment_status == PaymentStatus.CONFIRMED:
                    if enrollment.price_amount is None:
                        enrollment.price_amount = await self.pricing.amount_for(
                            PriceType(enrollment.price_type)
                        )
                    state = derive_state(enrollment)
                    if state == EnrollmentState.WAITLIST:
                        ensure_transition(state, EnrollmentState.PENDING)
                        apply_state(enrollment, EnrollmentState.PENDING)
                        promoted = True
                await self.repository.flush()

        logger.info(
            "Payment status updated: enrollment=%s, status=%s, promoted=%s",
            enrollment_id,
            payment_status.value,
            promoted,
        )

        if payment_status == PaymentStatus.CONFIRMED:
            await self._publish(
                EventTypes.Enrollment.PAYMENT_CONFIRMED,
                {**self._enrollment_payload(enrollment), "promoted": promoted},
            )
        return enrollment

    async def edit_price(
        self,
        enrollment_id: str,
        price_type: PriceType,
        amount: int | None = None,
    ) -> ProgramEnrollment:
        """Change the captured price of an enrollment.

        Args:
            enrollment_id: Enrollment identifier.
            price_type: New pricing tier.
            amount: Explicit amount; defaults to the tier's current amount.

        Raises:
            NotFoundError: If the enrollment does not exist.
            InvalidPriceError: If the amount is not positive.
        """
        price_type = PriceType(price_type)
        enrollment = await self.get_enrollment(enrollment_id)

        async with self.locks.hold(student_key(enrollment.student_id)):
            async with self._transaction():
                enrollment = await self._get_enrollment(enrollment_id, for_update=True)
                if amount is None:
                    amount = await self.pricing.amount_for(price_type)
                if amount <= 0:
                    raise InvalidPriceError("Amount must be a positive whole number of Naira")
                enrollment.price_type = price_type.value
                enrollment.price_amount = amount
                await self.repository.flush()

        logger.info(
            "Enrollment price edited: enrollment=%s, type=%s, amount=%d",
            enrollment_id,
            price_type.value,
            amount,
        )
        return enrollment

    # ------------------------------------------------------------------
    # Class assignment
    # ------------------------------------------------------------------

    async def assign_to_class(
        self,
        enrollment_id: str,
        class_id: str,
        confirm_repeat: bool = False,
    ) -> AssignmentResult:
        """Place a confirmed enrollment in a class.

        Args:
            enrollment_id: Enrollment identifier.
            class_id: Target class.
            confirm_repeat: Allow a course the student already completed.

        Returns:
            AssignmentResult with the new IN_PROGRESS history entry and any
            notification notes.

        Raises:
            NotFoundError: If the enrollment, class, course or program is missing.
            ClassArchivedError: If the class is archived.
            PaymentNotConfirmedError: If payment is not CONFIRMED.
            DuplicateEnrollmentError: If the student already sits in this class.
            InvalidTransitionError: If the enrollment is not PENDING.
            BatchMismatchError: If the class is in another program or batch.
            InvalidBatchError: If the class sits outside its program's batches
                or slots.
            RepeatCourseConfirmationRequired: If the course was completed before
                and ``confirm_repeat`` is False.
            CapacityExceededError: If the class is full.
        """
        enrollment = await self.get_enrollment(enrollment_id)

        async with self.locks.hold(student_key(enrollment.student_id), class_key(class_id)):
            async with self._transaction():
                enrollment = await self._get_enrollment(enrollment_id, for_update=True)
                class_ = await self._get_class(class_id)

                if class_.is_archived:
                    raise ClassArchivedError(f"Class {class_.name} is archived")

                if enrollment.payment_status != PaymentStatus.CONFIRMED.value:
                    raise PaymentNotConfirmedError(enrollment.id, enrollment.payment_status)

                state = derive_state(enrollment)
                if state == EnrollmentState.ASSIGNED and enrollment.class_id == class_id:
                    raise DuplicateEnrollmentError(
                        f"Enrollment is already assigned to class {class_.name}",
                        batch_numbers=[enrollment.batch_number],
                    )
                ensure_state(
                    state,
                    EnrollmentState.PENDING,
                    EnrollmentState.ASSIGNED,
                    self._not_pending_message(state),
                )

                if (
                    class_.program_id != enrollment.program_id
                    or class_.batch != enrollment.batch_number
                ):
                    raise BatchMismatchError(
                        f"Class {class_.name} is in batch {class_.batch} of program "
                        f"{class_.program_id}; enrollment is for batch "
                        f"{enrollment.batch_number} of program {enrollment.program_id}"
                    )

                conflicts = [
                    other
                    for other in await self.repository.list_student_enrollments(
                        enrollment.student_id
                    )
                    if other.id != enrollment.id
                    and other.class_id == class_id
                    and other.status == EnrollmentStatus.ASSIGNED.value
                ]
                if conflicts:
                    raise DuplicateEnrollmentError(
                        f"Student is already assigned to class {class_.name}",
                        batch_numbers=sorted({c.batch_number for c in conflicts}),
                    )

                course = await self._get_course(class_.course_id)
                program = await self._get_program(class_.program_id)
                validate_class_placement(program, class_.batch, class_.slot)

                prior = await self.history.completed_courses(enrollment.student_id, course.id)
                if prior and not confirm_repeat:
                    raise RepeatCourseConfirmationRequired(
                        course.id,
                        [self._history_summary(entry) for entry in prior],
                    )

                # Lock the class row, then re-check capacity
                class_ = await self._get_class(class_id, for_update=True)
                if class_.is_archived:
                    raise ClassArchivedError(f"Class {class_.name} is archived")
                occupancy = await self.capacity.occupancy(class_id)
                if occupancy >= class_.capacity:
                    raise CapacityExceededError(class_id, class_.capacity, occupancy)

                now = utc_now()
                enrollment.class_id = class_id
                enrollment.assigned_at = now
                apply_state(enrollment, EnrollmentState.ASSIGNED)
                await self.repository.flush()

                entry = await self.history.open_entry(
                    enrollment.student_id, course, program, class_.batch, now
                )
                student = await self._get_student(enrollment.student_id)
                teacher = (
                    await self.repository.get_teacher(class_.teacher_id)
                    if class_.teacher_id
                    else None
                )

        logger.info(
            "Assigned enrollment to class: enrollment=%s, student=%s, class=%s (%d/%d)",
            enrollment_id,
            enrollment.student_id,
            class_id,
            occupancy + 1,
            class_.capacity,
        )

        event = await self._publish(
            EventTypes.Enrollment.CLASS_ASSIGNED,
            {
                **self._enrollment_payload(enrollment),
                "class_name": class_.name,
                "course_id": course.id,
                "course_name": course.name,
                "program_name": program.name,
                "batch": class_.batch,
                "slot": class_.slot,
                "schedule": class_.schedule,
                "meet_link": class_.meet_link,
                "teacher_name": teacher.full_name if teacher else None,
                "teacher_email": teacher.email if teacher else None,
                "student_name": student.full_name,
                "student_email": student.email,
                "parent_email": student.parent_email,
            },
        )
        notes = [f"Notification failed: {error}" for error in event.handler_errors]
        return AssignmentResult(enrollment=enrollment, history_entry=entry, notes=notes)

    async def unassign_from_class(self, enrollment_id: str) -> ProgramEnrollment:
        """Take an enrollment out of its class, back to PENDING.

        The matching IN_PROGRESS history entry is deleted; COMPLETED entries
        are never touched.

        Raises:
            NotFoundError: If the enrollment does not exist.
            InvalidTransitionError: If the enrollment has no class.
        """
        enrollment = await self.get_enrollment(enrollment_id)
        class_id = enrollment.class_id

        async with self.locks.hold(student_key(enrollment.student_id), class_key(class_id)):
            async with self._transaction():
                enrollment = await self._get_enrollment(enrollment_id, for_update=True)
                await self._unassign(enrollment)

        logger.info(
            "Unassigned enrollment from class: enrollment=%s, class=%s",
            enrollment_id,
            class_id,
        )
        await self._publish(
            EventTypes.Enrollment.CLASS_UNASSIGNED,
            {**self._enrollment_payload(enrollment), "class_id": class_id},
        )
        return enrollment

    async def unassign_from_program(self, enrollment_id: str) -> None:
        """Remove a student from a program batch.

        Deletes the enrollment; if it held a class seat, the IN_PROGRESS
        history entry is deleted too.

        Raises:
            NotFoundError: If the enrollment does not exist.
            InvalidTransitionError: If the enrollment is already terminal.
        """
        enrollment = await self.get_enrollment(enrollment_id)
        payload = self._enrollment_payload(enrollment)

        async with self.locks.hold(
            student_key(enrollment.student_id), class_key(enrollment.class_id)
        ):
            async with self._transaction():
                enrollment = await self._get_enrollment(enrollment_id, for_update=True)
                state = derive_state(enrollment)
                ensure_transition(state, EnrollmentState.REMOVED)

                if state == EnrollmentState.ASSIGNED:
                    await self._discard_class_history(enrollment)
                await self.repository.delete(enrollment)

        logger.info(
            "Removed enrollment from program: enrollment=%s, student=%s, program=%s",
            enrollment_id,
            payload["student_id"],
            payload["program_id"],
        )
        await self._publish(EventTypes.Enrollment.PROGRAM_REMOVED, payload)

    async def mark_completed(self, enrollment_id: str) -> CompletionResult:
        """Complete the course of an assigned enrollment.

        The IN_PROGRESS history entry becomes COMPLETED (or a COMPLETED entry
        is synthesised), the enrollment is deleted and the student becomes a
        returning student.

        Raises:
            NotFoundError: If the enrollment does not exist.
            InvalidTransitionError: If the enrollment has no class.
        """
        enrollment = await self.get_enrollment(enrollment_id)

        async with self.locks.hold(
            student_key(enrollment.student_id), class_key(enrollment.class_id)
        ):
            async with self._transaction():
                enrollment = await self._get_enrollment(enrollment_id, for_update=True)
                result = await self._complete(enrollment)

        logger.info(
            "Marked enrollment completed: enrollment=%s, student=%s",
            enrollment_id,
            result.student_id,
        )
        await self._publish(EventTypes.Enrollment.COMPLETED, self._completion_payload(result))
        return result

    # ------------------------------------------------------------------
    # Class administration
    # ------------------------------------------------------------------

    async def archive_class(self, class_id: str) -> ArchiveResult:
        """Archive a class, completing every student seated in it.

        Each student is completed in their own transaction and retried up to
        ``archive_retry_attempts`` times. The class is only marked archived
        when nobody is left in it. Archiving an archived class does nothing.

        Raises:
            NotFoundError: If the class does not exist.
        """
        class_ = await self._get_class(class_id)
        result = ArchiveResult(class_id=class_id)

        if class_.is_archived:
            logger.info("Class already archived: class=%s", class_id)
            result.archived = True
            result.already_archived = True
            return result

        attempts = 1 + self.settings.archive_retry_attempts

        for seated in await self.capacity.roster(class_id):
            reason = "unknown error"
            for attempt in range(1, attempts + 1):
                try:
                    completion = await self._complete_for_archive(seated.id, seated.student_id, class_id)
                except (EnrollmentServiceError, SQLAlchemyError) as e:
                    reason = str(e)
                    logger.warning(
                        "Archive could not complete enrollment %s (attempt %d/%d): %s",
                        seated.id,
                        attempt,
                        attempts,
                        reason,
                    )
                    continue
                if completion is not None:
                    result.completed.append(seated.id)
                    await self._publish(
                        EventTypes.Enrollment.COMPLETED,
                        self._completion_payload(completion),
                    )
                break
            else:
                result.failures.append(
                    ArchiveFailure(
                        enrollment_id=seated.id,
                        student_id=seated.student_id,
                        reason=reason,
                    )
                )

        async with self.locks.hold(class_key(class_id)):
            async with self._transaction():
                class_ = await self._get_class(class_id, for_update=True)
                # Occupancy must be zero under the class lock
                remaining = await self.capacity.occupancy(class_id)
                if not remaining:
                    class_.is_archived = True
                    await self.repository.flush()

        if remaining:
            logger.error(
                "Class %s not archived: %d students still assigned",
                class_id,
                remaining,
            )
            return result

        result.archived = True
        logger.info(
            "Archived class: class=%s, completed=%d",
            class_id,
            len(result.completed),
        )
        await self._publish(
            EventTypes.Class.ARCHIVED,
            {"class_id": class_id, "completed": list(result.completed)},
        )
        return result

    async def unarchive_class(self, class_id: str) -> Class:
        """Make an archived class assignable again.

        Completed students stay completed.

        Raises:
            NotFoundError: If the class does not exist.
        """
        async with self.locks.hold(class_key(class_id)):
            async with self._transaction():
                class_ = await self._get_class(class_id, for_update=True)
                class_.is_archived = False
                await self.repository.flush()

        logger.info("Unarchived class: class=%s", class_id)
        await self._publish(EventTypes.Class.UNARCHIVED, {"class_id": class_id})
        return class_

    async def update_class_capacity(self, class_id: str, capacity: int) -> CapacityResult:
        """Change a class capacity and evict any overflow.

        Raises:
            NotFoundError: If the class does not exist.
            InvalidCapacityError: If capacity is outside 1..50.
        """
        if not MIN_CLASS_CAPACITY <= capacity <= MAX_CLASS_CAPACITY:
            raise InvalidCapacityError(
                f"Capacity must be between {MIN_CLASS_CAPACITY} and {MAX_CLASS_CAPACITY}"
            )

        async with self.locks.hold(class_key(class_id)):
            async with self._transaction():
                class_ = await self._get_class(class_id, for_update=True)
                previous = class_.capacity
                class_.capacity = capacity
                await self.repository.flush()

        logger.info(
            "Class capacity changed: class=%s, %d -> %d",
            class_id,
            previous,
            capacity,
        )
        await self._publish(
            EventTypes.Class.CAPACITY_CHANGED,
            {"class_id": class_id, "previous": previous, "capacity": capacity},
        )
        return await self.reconcile_capacity(class_id)

    async def reconcile_capacity(self, class_id: str) -> CapacityResult:
        """Evict students beyond capacity, most recently assigned first.

        Evicted enrollments go back to PENDING through the normal unassign
        transition.

        Raises:
            NotFoundError: If the class does not exist.
        """
        evicted: list[str] = []

        for enrollment in await self.capacity.overflow(class_id):
            async with self.locks.hold(student_key(enrollment.student_id), class_key(class_id)):
                async with self._transaction():
                    fresh = await self._get_enrollment(enrollment.id, for_update=True)
                    if fresh.class_id != class_id:
                        continue
                    await self._unassign(fresh)
            evicted.append(enrollment.id)
            logger.warning(
                "Evicted enrollment %s from over-capacity class %s",
                enrollment.id,
                class_id,
            )

        class_ = await self._get_class(class_id)
        occupancy = await self.capacity.occupancy(class_id)

        if evicted:
            await self._publish(
                EventTypes.Class.OVERFLOW_EVICTED,
                {"class_id": class_id, "evicted": list(evicted)},
            )
        return CapacityResult(
            class_id=class_id,
            capacity=class_.capacity,
            occupancy=occupancy,
            evicted=evicted,
        )

    # ------------------------------------------------------------------
    # Transition internals (caller holds locks and the transaction)
    # ------------------------------------------------------------------

    async def _reset_enrollment(
        self,
        enrollment: ProgramEnrollment,
        target: EnrollmentState,
        price_type: PriceType,
        payment_confirmed: bool,
    ) -> None:
        now = utc_now()
        apply_state(enrollment, target)
        enrollment.class_id = None
        enrollment.assigned_at = None
        enrollment.enrollment_date = now
        enrollment.price_type = price_type.value
        if payment_confirmed:
            enrollment.payment_status = PaymentStatus.CONFIRMED.value
            enrollment.price_amount = await self.pricing.amount_for(price_type)
            enrollment.waitlisted_at = None
        else:
            enrollment.payment_status = PaymentStatus.PENDING.value
            enrollment.price_amount = None
            enrollment.waitlisted_at = now

    async def _unassign(self, enrollment: ProgramEnrollment) -> None:
        ensure_state(
            derive_state(enrollment),
            EnrollmentState.ASSIGNED,
            EnrollmentState.PENDING,
            "Enrollment is not assigned to a class",
        )
        await self._discard_class_history(enrollment)
        enrollment.class_id = None
        enrollment.assigned_at = None
        apply_state(enrollment, EnrollmentState.PENDING)
        await self.repository.flush()

    async def _discard_class_history(self, enrollment: ProgramEnrollment) -> None:
        class_ = await self.repository.get_class(enrollment.class_id)
        if class_ is None:
            return
        await self.history.discard_in_progress(
            enrollment.student_id,
            class_.course_id,
            enrollment.program_id,
            enrollment.batch_number,
        )

    async def _complete(self, enrollment: ProgramEnrollment) -> CompletionResult:
        ensure_state(
            derive_state(enrollment),
            EnrollmentState.ASSIGNED,
            EnrollmentState.COMPLETED,
            "Enrollment has no class; assign a class before marking it completed",
        )

        class_ = await self._get_class(enrollment.class_id)
        course = await self._get_course(class_.course_id)
        program = await self._get_program(enrollment.program_id)

        entry = await self.history.complete(
            enrollment.student_id, course, program, enrollment.batch_number
        )

        student = await self._get_student(enrollment.student_id, for_update=True)
        student.is_returning_student = True

        result = CompletionResult(
            enrollment_id=enrollment.id,
            student_id=enrollment.student_id,
            history_entry=entry,
        )
        await self.repository.delete(enrollment)
        return result

    async def _complete_for_archive(
        self,
        enrollment_id: str,
        student_id: str,
        class_id: str,
    ) -> CompletionResult | None:
        async with self.locks.hold(student_key(student_id), class_key(class_id)):
            async with self._transaction():
                enrollment = await self.repository.get_enrollment(enrollment_id, for_update=True)
                # Left the class since the roster was read
                if enrollment is None or enrollment.class_id != class_id:
                    return None
                return await self._complete(enrollment)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[None]:
        """Commit on success, roll back on any exception."""
        try:
            yield
            await self.repository.commit()
        except Exception:
            await self.repository.rollback()
            raise

    async def _publish(self, event_type: str, payload: dict[str, Any]):
        return await self.event_bus.publish(event_type, payload)

    async def _get_enrollment(self, enrollment_id: str, for_update: bool = False) -> ProgramEnrollment:
        enrollment = await self.repository.get_enrollment(enrollment_id, for_update=for_update)
        if enrollment is None:
            raise NotFoundError("Enrollment", enrollment_id)
        return enrollment

    async def _get_student(self, student_id: str, for_update: bool = False) -> Student:
        student = await self.repository.get_student(student_id, for_update=for_update)
        if student is None:
            raise NotFoundError("Student", student_id)
        return student

    async def _get_program(self, program_id: str) -> Program:
        program = await self.repository.get_program(program_id)
        if program is None:
            raise NotFoundError("Program", program_id)
        return program

    async def _get_course(self, course_id: str) -> Course:
        course = await self.repository.get_course(course_id)
        if course is None:
            raise NotFoundError("Course", course_id)
        return course

    async def _get_class(self, class_id: str, for_update: bool = False) -> Class:
        class_ = await self.repository.get_class(class_id, for_update=for_update)
        if class_ is None:
            raise NotFoundError("Class", class_id)
        return class_

    @staticmethod
    def _not_pending_message(state: EnrollmentState | None) -> str:
        if state == EnrollmentState.WAITLIST:
            return "Enrollment is waitlisted; confirm payment before assigning a class"
        if state == EnrollmentState.ASSIGNED:
            return "Enrollment is already assigned to another class; unassign it first"
        return "Enrollment is not awaiting class placement"

    @staticmethod
    def _history_summary(entry: CourseHistory) -> dict[str, Any]:
        return {
            "id": entry.id,
            "course_name": entry.course_name,
            "program_name": entry.program_name,
            "batch": entry.batch,
            "year": entry.year,
            "end_date": format_iso(entry.end_date),
        }

    @staticmethod
    def _enrollment_payload(enrollment: ProgramEnrollment) -> dict[str, Any]:
        enrollment_date = enrollment.enrollment_date
        return {
            "enrollment_id": enrollment.id,
            "student_id": enrollment.student_id,
            "program_id": enrollment.program_id,
            "batch_number": enrollment.batch_number,
            "class_id": enrollment.class_id,
            "status": enrollment.status,
            "payment_status": enrollment.payment_status,
            "enrollment_date": (
                format_iso(enrollment_date) if isinstance(enrollment_date, datetime) else None
            ),
        }

    @staticmethod
    def _completion_payload(result: CompletionResult) -> dict[str, Any]:
        return {
            "enrollment_id": result.enrollment_id,
            "student_id": result.student_id,
            "course_id": result.history_entry.course_id,
            "program_id": result.history_entry.program_id,
            "batch": result.history_entry.batch,
        }
