# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- An in-memory AcademyRepository for engine tests
- Builders for programs, classes, students and enrollments
- Singleton resets between tests
"""

from collections.abc import Generator, Iterable, Sequence
from datetime import date, datetime, timedelta
from typing import Any

import pytest

from src.core.config.settings import (
    EnrollmentSettings,
    WaitlistSettings,
    clear_settings_cache,
)
from src.domains.enrollment import EnrollmentService, LockRegistry, reset_lock_registry
from src.domains.pricing import PricingService
from src.infrastructure.database.models import (
    Class,
    Course,
    CourseHistory,
    PricingConfig,
    Program,
    ProgramEnrollment,
    Student,
    Teacher,
    new_id,
)
from src.infrastructure.events import EventBus, reset_event_bus
from src.infrastructure.notifications import reset_class_assignment_notifier
from src.models.common import (
    CompletionStatus,
    EnrollmentStatus,
    PaymentStatus,
    PriceType,
    ProgramType,
)
from src.utils.datetime import utc_now, utc_today


# =============================================================================
# In-memory repository
# =============================================================================


class FakeAcademyRepository:
    """In-memory stand-in for AcademyRepository.

    Implements the same query methods over dictionaries. Row locks are
    no-ops and ``rollback`` does not undo in-memory changes; tests only
    rely on it for failures raised before any mutation.
    """

    def __init__(self) -> None:
        self.programs: dict[str, Program] = {}
        self.courses: dict[str, Course] = {}
        self.teachers: dict[str, Teacher] = {}
        self.classes: dict[str, Class] = {}
        self.students: dict[str, Student] = {}
        self.enrollments: dict[str, ProgramEnrollment] = {}
        self.history: dict[str, CourseHistory] = {}
        self.pricing: dict[str, PricingConfig] = {}
        self.commits = 0
        self.rollbacks = 0

    def _store_for(self, entity: Any) -> dict[str, Any]:
        stores = {
            Program: self.programs,
            Course: self.courses,
            Teacher: self.teachers,
            Class: self.classes,
            Student: self.students,
            ProgramEnrollment: self.enrollments,
            CourseHistory: self.history,
            PricingConfig: self.pricing,
        }
        return stores[type(entity)]

    # Entity getters

    async def get_student(self, student_id: str, for_update: bool = False) -> Student | None:
        return self.students.get(student_id)

    async def get_program(self, program_id: str) -> Program | None:
        return self.programs.get(program_id)

    async def get_course(self, course_id: str) -> Course | None:
        return self.courses.get(course_id)

    async def get_teacher(self, teacher_id: str) -> Teacher | None:
        return self.teachers.get(teacher_id)

    async def get_class(self, class_id: str, for_update: bool = False) -> Class | None:
        return self.classes.get(class_id)

    async def get_enrollment(
        self,
        enrollment_id: str,
        for_update: bool = False,
    ) -> ProgramEnrollment | None:
        return self.enrollments.get(enrollment_id)

    async def get_students(self, student_ids: Iterable[str]) -> list[Student]:
        return [self.students[i] for i in set(student_ids) if i in self.students]

    # Enrollments

    async def find_enrollment(
        self,
        student_id: str,
        program_id: str,
        batch_number: int,
    ) -> ProgramEnrollment | None:
        for e in self.enrollments.values():
            if (e.student_id, e.program_id, e.batch_number) == (student_id, program_id, batch_number):
                return e
        return None

    async def list_student_enrollments(self, student_id: str) -> list[ProgramEnrollment]:
        return [e for e in self.enrollments.values() if e.student_id == student_id]

    async def list_enrollments(
        self,
        program_id: str | None = None,
        statuses: Sequence[EnrollmentStatus] | None = None,
        unplaced_only: bool = False,
    ) -> list[ProgramEnrollment]:
        wanted = {s.value for s in statuses} if statuses else None
        result = [
            e
            for e in self.enrollments.values()
            if (program_id is None or e.program_id == program_id)
            and (wanted is None or e.status in wanted)
            and (not unplaced_only or e.class_id is None)
        ]
        return sorted(result, key=lambda e: (e.enrollment_date, e.id))

    # Capacity queries

    def _seated(self, class_id: str) -> list[ProgramEnrollment]:
        return [
            e
            for e in self.enrollments.values()
            if e.class_id == class_id and e.status == EnrollmentStatus.ASSIGNED.value
        ]

    async def count_assigned(self, class_id: str) -> int:
        return len(self._seated(class_id))

    async def list_assigned(
        self,
        class_id: str,
        newest_first: bool = False,
    ) -> list[ProgramEnrollment]:
        seated = self._seated(class_id)
        if newest_first:
            return sorted(seated, key=lambda e: (e.assigned_at, e.id), reverse=True)
        return sorted(seated, key=lambda e: (e.assigned_at, e.id))

    async def list_classes(
        self,
        program_id: str | None = None,
        include_archived: bool = False,
    ) -> list[Class]:
        result = [
            c
            for c in self.classes.values()
            if (program_id is None or c.program_id == program_id)
            and (include_archived or not c.is_archived)
        ]
        return sorted(result, key=lambda c: (c.name, c.id))

    # Course history

    async def list_history(
        self,
        student_id: str,
        course_id: str | None = None,
        program_id: str | None = None,
        batch: int | None = None,
        completion_status: str | None = None,
    ) -> list[CourseHistory]:
        result = [
            h
            for h in self.history.values()
            if h.student_id == student_id
            and (course_id is None or h.course_id == course_id)
            and (program_id is None or h.program_id == program_id)
            and (batch is None or h.batch == batch)
            and (completion_status is None or h.completion_status == completion_status)
        ]
        return sorted(result, key=lambda h: (h.start_date, h.id))

    async def get_history_entry(self, entry_id: str) -> CourseHistory | None:
        return self.history.get(entry_id)

    # Pricing

    async def get_pricing_config(self, price_type: str) -> PricingConfig | None:
        return self.pricing.get(price_type)

    async def list_pricing_configs(self) -> list[PricingConfig]:
        return list(self.pricing.values())

    # Unit of work

    async def add(self, entity: Any) -> Any:
        if isinstance(entity, PricingConfig):
            self.pricing[entity.price_type] = entity
            return entity
        if entity.id is None:
            entity.id = new_id()
        self._store_for(entity)[entity.id] = entity
        return entity

    async def delete(self, entity: Any) -> None:
        self._store_for(entity).pop(entity.id, None)

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


# =============================================================================
# Builders
# =============================================================================


class AcademyBuilder:
    """Creates fully populated entities inside a FakeAcademyRepository."""

    def __init__(self, repository: FakeAcademyRepository) -> None:
        self.repository = repository
        self._clock = utc_now() - timedelta(days=30)

    def tick(self) -> datetime:
        """Strictly increasing timestamps for deterministic ordering."""
        self._clock += timedelta(minutes=1)
        return self._clock

    def program(
        self,
        name: str = "Summer Weekend Club",
        program_type: ProgramType = ProgramType.WEEKEND_CLUB,
        batches: int = 2,
        start_date: date | None = None,
        year: int = 2026,
    ) -> Program:
        program = Program(
            id=new_id(),
            name=name,
            program_type=program_type.value,
            season="Summer",
            year=year,
            batches=batches,
            slots=["Saturday 10:00", "Sunday 14:00"],
            start_date=start_date if start_date is not None else utc_today(),
        )
        self.repository.programs[program.id] = program
        return program

    def course(self, name: str = "Python Basics") -> Course:
        course = Course(id=new_id(), name=name, description=None)
        self.repository.courses[course.id] = course
        return course

    def teacher(self, email: str | None = "teacher@academy.test") -> Teacher:
        teacher = Teacher(id=new_id(), first_name="Ada", last_name="Obi", email=email)
        self.repository.teachers[teacher.id] = teacher
        return teacher

    def class_(
        self,
        program: Program,
        course: Course,
        name: str = "Python A",
        batch: int = 1,
        capacity: int = 10,
        teacher: Teacher | None = None,
        is_archived: bool = False,
    ) -> Class:
        class_ = Class(
            id=new_id(),
            name=name,
            program_id=program.id,
            course_id=course.id,
            teacher_id=teacher.id if teacher else None,
            batch=batch,
            slot=program.slots[0],
            schedule="10:00 - 12:00",
            meet_link=None,
            capacity=capacity,
            is_archived=is_archived,
        )
        self.repository.classes[class_.id] = class_
        return class_

    def student(
        self,
        first_name: str = "Tolu",
        email: str | None = None,
        parent_email: str | None = None,
        is_returning_student: bool = False,
        has_siblings: bool = False,
    ) -> Student:
        student = Student(
            id=new_id(),
            first_name=first_name,
            last_name="Adeyemi",
            email=email,
            phone=None,
            parent_email=parent_email,
            parent_phone=None,
            is_returning_student=is_returning_student,
            has_siblings=has_siblings,
        )
        self.repository.students[student.id] = student
        return student

    def enrollment(
        self,
        student: Student,
        program: Program,
        batch_number: int = 1,
        status: EnrollmentStatus = EnrollmentStatus.ASSIGNED,
        payment_status: PaymentStatus = PaymentStatus.CONFIRMED,
        class_: Class | None = None,
        waitlisted_at: datetime | None = None,
    ) -> ProgramEnrollment:
        now = self.tick()
        enrollment = ProgramEnrollment(
            id=new_id(),
            student_id=student.id,
            program_id=program.id,
            batch_number=batch_number,
            class_id=class_.id if class_ else None,
            status=status.value,
            payment_status=payment_status.value,
            price_type=PriceType.FULL_PRICE.value,
            price_amount=60000 if payment_status == PaymentStatus.CONFIRMED else None,
            enrollment_date=now,
            waitlisted_at=waitlisted_at
            if waitlisted_at is not None
            else (now if status == EnrollmentStatus.WAITLIST else None),
            assigned_at=now if class_ else None,
        )
        self.repository.enrollments[enrollment.id] = enrollment
        return enrollment

    def history(
        self,
        student: Student,
        course: Course,
        program: Program,
        batch: int = 1,
        completion_status: CompletionStatus = CompletionStatus.COMPLETED,
    ) -> CourseHistory:
        now = self.tick()
        entry = CourseHistory(
            id=new_id(),
            student_id=student.id,
            course_id=course.id,
            course_name=course.name,
            program_id=program.id,
            program_name=program.name,
            batch=batch,
            year=program.year,
            completion_status=completion_status.value,
            start_date=now,
            end_date=now if completion_status == CompletionStatus.COMPLETED else None,
            performance_notes=None,
        )
        self.repository.history[entry.id] = entry
        return entry


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Give each test fresh process-wide singletons."""
    clear_settings_cache()
    reset_event_bus()
    reset_lock_registry()
    reset_class_assignment_notifier()
    yield
    reset_event_bus()
    reset_lock_registry()
    reset_class_assignment_notifier()
    clear_settings_cache()


@pytest.fixture
def repository() -> FakeAcademyRepository:
    return FakeAcademyRepository()


@pytest.fixture
def builder(repository: FakeAcademyRepository) -> AcademyBuilder:
    return AcademyBuilder(repository)


@pytest.fixture
def enrollment_settings() -> EnrollmentSettings:
    return EnrollmentSettings(
        weekend_club_window_days=28,
        holiday_camp_window_days=5,
        archive_retry_attempts=1,
    )


@pytest.fixture
def waitlist_settings() -> WaitlistSettings:
    return WaitlistSettings(
        returning_student_bonus=100,
        sibling_bonus=50,
        points_per_waiting_day=10,
        max_waiting_bonus=100,
    )


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def enrollment_service(
    repository: FakeAcademyRepository,
    event_bus: EventBus,
    enrollment_settings: EnrollmentSettings,
) -> EnrollmentService:
    """Enrollment engine over the in-memory repository."""
    return EnrollmentService(
        repository,
        pricing=PricingService(repository),
        event_bus=event_bus,
        locks=LockRegistry(),
        settings=enrollment_settings,
    )


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
