# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Persistence boundary for the enrollment engine.

AcademyRepository wraps an AsyncSession and exposes the typed queries the
domain services need. Services never build SQL themselves; they go through
this class so the engine can run against any object with the same methods.

Row locking is opt-in through ``for_update=True`` and maps to
``SELECT ... FOR UPDATE``.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import (
    Class,
    Course,
    CourseHistory,
    PricingConfig,
    Program,
    ProgramEnrollment,
    Student,
    Teacher,
)
from src.models.common import EnrollmentStatus

logger = logging.getLogger(__name__)


class AcademyRepository:
    """SQLAlchemy-backed access to academy entities.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # Entity getters

    async def get_student(self, student_id: str, for_update: bool = False) -> Student | None:
        return await self._get(Student, student_id, for_update)

    async def get_program(self, program_id: str) -> Program | None:
        return await self._get(Program, program_id, False)

    async def get_course(self, course_id: str) -> Course | None:
        return await self._get(Course, course_id, False)

    async def get_teacher(self, teacher_id: str) -> Teacher | None:
        return await self._get(Teacher, teacher_id, False)

    async def get_class(self, class_id: str, for_update: bool = False) -> Class | None:
        return await self._get(Class, class_id, for_update)

    async def get_enrollment(
        self,
        enrollment_id: str,
        for_update: bool = False,
    ) -> ProgramEnrollment | None:
        return await self._get(ProgramEnrollment, enrollment_id, for_update)

    async def get_students(self, student_ids: Iterable[str]) -> list[Student]:
        """Load several students at once."""
        ids = list(set(student_ids))
        if not ids:
            return []
        result = await self.db.execute(select(Student).where(Student.id.in_(ids)))
        return list(result.scalars().all())

    # Enrollments

    async def find_enrollment(
        self,
        student_id: str,
        program_id: str,
        batch_number: int,
    ) -> ProgramEnrollment | None:
        """Look up the enrollment for a (student, program, batch) key."""
        stmt = select(ProgramEnrollment).where(
            ProgramEnrollment.student_id == student_id,
            ProgramEnrollment.program_id == program_id,
            ProgramEnrollment.batch_number == batch_number,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_student_enrollments(self, student_id: str) -> list[ProgramEnrollment]:
        stmt = (
            select(ProgramEnrollment)
            .where(ProgramEnrollment.student_id == student_id)
            .order_by(ProgramEnrollment.enrollment_date)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_enrollments(
        self,
        program_id: str | None = None,
        statuses: Sequence[EnrollmentStatus] | None = None,
        unplaced_only: bool = False,
    ) -> list[ProgramEnrollment]:
        """List enrollments with optional program/status filters.

        Args:
            program_id: Restrict to one program.
            statuses: Restrict to these stored statuses.
            unplaced_only: Only enrollments without a class.

        Returns:
            Enrollments ordered by enrollment date, then id.
        """
        stmt = select(ProgramEnrollment)
        if program_id is not None:
            stmt = stmt.where(ProgramEnrollment.program_id == program_id)
        if statuses:
            stmt = stmt.where(ProgramEnrollment.status.in_([s.value for s in statuses]))
        if unplaced_only:
            stmt = stmt.where(ProgramEnrollment.class_id.is_(None))
        stmt = stmt.order_by(ProgramEnrollment.enrollment_date, ProgramEnrollment.id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # Capacity queries

    async def count_assigned(self, class_id: str) -> int:
        """Count enrollments currently occupying a seat in the class."""
        stmt = select(func.count(ProgramEnrollment.id)).where(
            ProgramEnrollment.class_id == class_id,
            ProgramEnrollment.status == EnrollmentStatus.ASSIGNED.value,
        )
        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def list_assigned(
        self,
        class_id: str,
        newest_first: bool = False,
    ) -> list[ProgramEnrollment]:
        """List enrollments seated in the class.

        Args:
            class_id: Class to inspect.
            newest_first: Order by most recent assignment first
                (ties broken by id descending) instead of oldest first.
        """
        stmt = select(ProgramEnrollment).where(
            ProgramEnrollment.class_id == class_id,
            ProgramEnrollment.status == EnrollmentStatus.ASSIGNED.value,
        )
        if newest_first:
            stmt = stmt.order_by(
                ProgramEnrollment.assigned_at.desc().nulls_last(),
                ProgramEnrollment.id.desc(),
            )
        else:
            stmt = stmt.order_by(
                ProgramEnrollment.assigned_at.asc().nulls_first(),
                ProgramEnrollment.id,
            )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_classes(
        self,
        program_id: str | None = None,
        include_archived: bool = False,
    ) -> list[Class]:
        stmt = select(Class)
        if program_id is not None:
            stmt = stmt.where(Class.program_id == program_id)
        if not include_archived:
            stmt = stmt.where(Class.is_archived.is_(False))
        stmt = stmt.order_by(Class.name, Class.id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # Course history

    async def list_history(
        self,
        student_id: str,
        course_id: str | None = None,
        program_id: str | None = None,
        batch: int | None = None,
        completion_status: str | None = None,
    ) -> list[CourseHistory]:
        """List a student's course history with optional filters."""
        stmt = select(CourseHistory).where(CourseHistory.student_id == student_id)
        if course_id is not None:
            stmt = stmt.where(CourseHistory.course_id == course_id)
        if program_id is not None:
            stmt = stmt.where(CourseHistory.program_id == program_id)
        if batch is not None:
            stmt = stmt.where(CourseHistory.batch == batch)
        if completion_status is not None:
            stmt = stmt.where(CourseHistory.completion_status == completion_status)
        stmt = stmt.order_by(CourseHistory.start_date, CourseHistory.id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_history_entry(self, entry_id: str) -> CourseHistory | None:
        return await self.db.get(CourseHistory, entry_id)

    # Pricing

    async def get_pricing_config(self, price_type: str) -> PricingConfig | None:
        return await self.db.get(PricingConfig, price_type)

    async def list_pricing_configs(self) -> list[PricingConfig]:
        result = await self.db.execute(select(PricingConfig))
        return list(result.scalars().all())

    # Unit of work

    async def add(self, entity: Any) -> Any:
        """Stage a new entity and flush so generated defaults are populated."""
        self.db.add(entity)
        await self.db.flush()
        return entity

    async def delete(self, entity: Any) -> None:
        await self.db.delete(entity)
        await self.db.flush()

    async def flush(self) -> None:
        await self.db.flush()

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    async def _get(self, model: type, entity_id: str, for_update: bool) -> Any:
        if not for_update:
            return await self.db.get(model, entity_id)
        stmt = select(model).where(model.id == entity_id).with_for_update()
        # Refresh the identity map so the locked row's current values are used
        stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
