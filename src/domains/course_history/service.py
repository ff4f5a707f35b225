# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course history ledger.

The ledger keeps the durable record of courses a student has taken. An
entry is keyed by (student, course, program, batch):

- assignment opens an IN_PROGRESS entry
- unassignment deletes that IN_PROGRESS entry and nothing else
- completion flips it to COMPLETED, or synthesises a COMPLETED entry
  when none exists

COMPLETED entries are never deleted by the engine. The ledger only stages
changes; the enrollment engine owns the transaction.
"""

import logging
from datetime import datetime

from src.infrastructure.database.models import Course, CourseHistory, Program
from src.infrastructure.database.repository import AcademyRepository
from src.models.common import CompletionStatus
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class CourseHistoryServiceError(Exception):
    """Base exception for course history errors."""

    pass


class HistoryEntryNotFoundError(CourseHistoryServiceError):
    """Raised when a history entry does not exist."""

    pass


class CourseHistoryLedger:
    """Reads and stages course history changes.

    Attributes:
        repository: Persistence boundary.
    """

    def __init__(self, repository: AcademyRepository) -> None:
        self.repository = repository

    async def history_for(self, student_id: str) -> list[CourseHistory]:
        """All entries of a student, oldest first."""
        return await self.repository.list_history(student_id)

    async def find_in_progress(
        self,
        student_id: str,
        course_id: str,
        program_id: str,
        batch: int,
    ) -> CourseHistory | None:
        """The open entry for a (student, course, program, batch) key."""
        entries = await self.repository.list_history(
            student_id,
            course_id=course_id,
            program_id=program_id,
            batch=batch,
            completion_status=CompletionStatus.IN_PROGRESS.value,
        )
        return entries[0] if entries else None

    async def completed_courses(self, student_id: str, course_id: str) -> list[CourseHistory]:
        """COMPLETED entries of a course for a student."""
        return await self.repository.list_history(
            student_id,
            course_id=course_id,
            completion_status=CompletionStatus.COMPLETED.value,
        )

    async def has_completed_batch(self, student_id: str, program_id: str, batch: int) -> bool:
        """Check whether the student already completed a course in this program batch."""
        entries = await self.repository.list_history(
            student_id,
            program_id=program_id,
            batch=batch,
            completion_status=CompletionStatus.COMPLETED.value,
        )
        return bool(entries)

    async def open_entry(
        self,
        student_id: str,
        course: Course,
        program: Program,
        batch: int,
        started_at: datetime | None = None,
    ) -> CourseHistory:
        """Stage a new IN_PROGRESS entry.

        An existing open entry for the same key is returned unchanged, so
        there is never more than one.
        """
        existing = await self.find_in_progress(student_id, course.id, program.id, batch)
        if existing is not None:
            logger.warning(
                "IN_PROGRESS history already open: student=%s, course=%s, program=%s, batch=%d",
                student_id,
                course.id,
                program.id,
                batch,
            )
            return existing

        entry = CourseHistory(
            student_id=student_id,
            course_id=course.id,
            course_name=course.name,
            program_id=program.id,
            program_name=program.name,
            batch=batch,
            year=program.year,
            completion_status=CompletionStatus.IN_PROGRESS.value,
            start_date=started_at or utc_now(),
        )
        await self.repository.add(entry)
        return entry

    async def discard_in_progress(
        self,
        student_id: str,
        course_id: str,
        program_id: str,
        batch: int,
    ) -> bool:
        """Delete the matching IN_PROGRESS entry.

        Returns:
            True if an entry was deleted.
        """
        entry = await self.find_in_progress(student_id, course_id, program_id, batch)
        if entry is None:
            logger.debug(
                "No IN_PROGRESS history to discard: student=%s, course=%s",
                student_id,
                course_id,
            )
            return False
        await self.repository.delete(entry)
        return True

    async def complete(
        self,
        student_id: str,
        course: Course,
        program: Program,
        batch: int,
        completed_at: datetime | None = None,
    ) -> CourseHistory:
        """Mark the course completed for the student.

        Flips the open entry, or synthesises a COMPLETED entry when the
        student has none (data created before history tracking).
        """
        completed_at = completed_at or utc_now()
        entry = await self.find_in_progress(student_id, course.id, program.id, batch)

        if entry is None:
            entry = CourseHistory(
                student_id=student_id,
                course_id=course.id,
                course_name=course.name,
                program_id=program.id,
                program_name=program.name,
                batch=batch,
                year=program.year,
                completion_status=CompletionStatus.COMPLETED.value,
                start_date=completed_at,
                end_date=completed_at,
            )
            await self.repository.add(entry)
            logger.info(
                "Synthesised COMPLETED history: student=%s, course=%s",
                student_id,
                course.id,
            )
            return entry

        entry.completion_status = CompletionStatus.COMPLETED.value
        entry.end_date = completed_at
        await self.repository.flush()
        return entry

    async def update_performance_notes(self, entry_id: str, notes: str | None) -> CourseHistory:
        """Replace the performance notes of one entry and commit.

        Raises:
            HistoryEntryNotFoundError: If the entry does not exist.
        """
        entry = await self._get_entry(entry_id)
        entry.performance_notes = notes
        await self.repository.commit()
        return entry

    async def _get_entry(self, entry_id: str) -> CourseHistory:
        entry = await self.repository.get_history_entry(entry_id)
        if entry is None:
            raise HistoryEntryNotFoundError(f"Course history entry not found: {entry_id}")
        return entry
