# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the SQL issued by AcademyRepository.

The session is mocked and every executed statement is compiled against the
PostgreSQL dialect, so the queries behind occupancy, rosters and overflow
are checked without a database.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from src.infrastructure.database.repository import AcademyRepository
from src.models.common import EnrollmentStatus


def render(stmt) -> str:
    compiled = stmt.compile(
        dialect=postgresql.dialect(),
        compile_kwargs={"literal_binds": True},
    )
    return " ".join(str(compiled).split())


@pytest.fixture
def session() -> MagicMock:
    result = MagicMock()
    result.scalar_one.return_value = 2
    result.scalar_one_or_none.return_value = None
    result.scalars.return_value.all.return_value = []

    db = MagicMock()
    db.execute = AsyncMock(return_value=result)
    db.get = AsyncMock(return_value=None)
    return db


@pytest.fixture
def repo(session) -> AcademyRepository:
    return AcademyRepository(session)


def executed_sql(session) -> str:
    stmt = session.execute.await_args.args[0]
    return render(stmt)


class TestCapacityQueries:
    """Occupancy and roster statements."""

    @pytest.mark.asyncio
    async def test_count_assigned(self, repo, session):
        count = await repo.count_assigned("class-1")

        sql = executed_sql(session)
        assert count == 2
        assert sql.startswith("SELECT count(program_enrollments.id)")
        assert "program_enrollments.class_id = 'class-1'" in sql
        assert "program_enrollments.status = 'ASSIGNED'" in sql

    @pytest.mark.asyncio
    async def test_list_assigned_newest_first(self, repo, session):
        await repo.list_assigned("class-1", newest_first=True)

        sql = executed_sql(session)
        assert "program_enrollments.status = 'ASSIGNED'" in sql
        assert sql.endswith(
            "ORDER BY program_enrollments.assigned_at DESC NULLS LAST, "
            "program_enrollments.id DESC"
        )

    @pytest.mark.asyncio
    async def test_list_assigned_oldest_first(self, repo, session):
        await repo.list_assigned("class-1")

        sql = executed_sql(session)
        assert sql.endswith(
            "ORDER BY program_enrollments.assigned_at ASC NULLS FIRST, program_enrollments.id"
        )

    @pytest.mark.asyncio
    async def test_list_classes_skips_archived(self, repo, session):
        await repo.list_classes(program_id="program-1")

        sql = executed_sql(session)
        assert "classes.program_id = 'program-1'" in sql
        assert "classes.is_archived IS false" in sql
        assert sql.endswith("ORDER BY classes.name, classes.id")


class TestEnrollmentQueries:
    """Enrollment lookups."""

    @pytest.mark.asyncio
    async def test_find_enrollment_uses_composite_key(self, repo, session):
        assert await repo.find_enrollment("student-1", "program-1", 2) is None

        sql = executed_sql(session)
        assert "program_enrollments.student_id = 'student-1'" in sql
        assert "program_enrollments.program_id = 'program-1'" in sql
        assert "program_enrollments.batch_number = 2" in sql

    @pytest.mark.asyncio
    async def test_list_enrollments_unplaced(self, repo, session):
        await repo.list_enrollments(
            program_id="program-1",
            statuses=[EnrollmentStatus.WAITLIST, EnrollmentStatus.ASSIGNED],
            unplaced_only=True,
        )

        sql = executed_sql(session)
        assert "program_enrollments.status IN ('WAITLIST', 'ASSIGNED')" in sql
        assert "program_enrollments.class_id IS NULL" in sql
        assert sql.endswith(
            "ORDER BY program_enrollments.enrollment_date, program_enrollments.id"
        )

    @pytest.mark.asyncio
    async def test_list_enrollments_without_filters(self, repo, session):
        await repo.list_enrollments()

        sql = executed_sql(session)
        assert "WHERE" not in sql

    @pytest.mark.asyncio
    async def test_get_students_skips_query_for_no_ids(self, repo, session):
        assert await repo.get_students([]) == []

        session.execute.assert_not_awaited()


class TestRowLocking:
    """``for_update`` getters."""

    @pytest.mark.asyncio
    async def test_plain_get_uses_identity_map(self, repo, session):
        await repo.get_class("class-1")

        session.get.assert_awaited_once()
        session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_locked_get_selects_for_update(self, repo, session):
        await repo.get_class("class-1", for_update=True)

        stmt = session.execute.await_args.args[0]
        sql = render(stmt)
        assert "classes.id = 'class-1'" in sql
        assert sql.endswith("FOR UPDATE")
        assert stmt.get_execution_options()["populate_existing"] is True
