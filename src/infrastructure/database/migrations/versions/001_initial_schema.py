# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial academy schema.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-19

Creates programs, courses, teachers, classes, students, program
enrollments, course history and pricing overrides.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    """Create academy tables."""

    # ==========================================================================
    # 1. programs
    # ==========================================================================
    op.create_table(
        "programs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("season", sa.String(50), nullable=False),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("batches", sa.Integer, nullable=False, server_default="1"),
        sa.Column("slots", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("start_date", sa.Date, nullable=True),
        *_timestamps(),
        sa.CheckConstraint("batches >= 1", name="ck_programs_batches_positive"),
        sa.CheckConstraint(
            "type IN ('WEEKEND_CLUB', 'HOLIDAY_CAMP')",
            name="ck_programs_type",
        ),
    )

    # ==========================================================================
    # 2. courses / teachers
    # ==========================================================================
    op.create_table(
        "courses",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "teachers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        *_timestamps(),
    )

    # ==========================================================================
    # 3. classes
    # ==========================================================================
    op.create_table(
        "classes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column(
            "program_id",
            sa.String(36),
            sa.ForeignKey("programs.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "course_id",
            sa.String(36),
            sa.ForeignKey("courses.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "teacher_id",
            sa.String(36),
            sa.ForeignKey("teachers.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("batch", sa.Integer, nullable=False),
        sa.Column("slot", sa.String(100), nullable=False),
        sa.Column("schedule", sa.String(255), nullable=True),
        sa.Column("meet_link", sa.String(500), nullable=True),
        sa.Column("capacity", sa.Integer, nullable=False),
        sa.Column("is_archived", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.CheckConstraint(
            "capacity >= 1 AND capacity <= 50",
            name="ck_classes_capacity_range",
        ),
        sa.CheckConstraint("batch >= 1", name="ck_classes_batch_positive"),
    )
    op.create_index("ix_classes_program_batch", "classes", ["program_id", "batch"])

    # ==========================================================================
    # 4. students
    # ==========================================================================
    op.create_table(
        "students",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("date_of_birth", sa.Date, nullable=True),
        sa.Column("parent_email", sa.String(255), nullable=True),
        sa.Column("parent_phone", sa.String(30), nullable=True),
        sa.Column(
            "is_returning_student",
            sa.Boolean,
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column("has_siblings", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    # ==========================================================================
    # 5. program_enrollments
    # ==========================================================================
    op.create_table(
        "program_enrollments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "student_id",
            sa.String(36),
            sa.ForeignKey("students.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "program_id",
            sa.String(36),
            sa.ForeignKey("programs.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("batch_number", sa.Integer, nullable=False, server_default="1"),
        sa.Column(
            "class_id",
            sa.String(36),
            sa.ForeignKey("classes.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="WAITLIST"),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("price_type", sa.String(30), nullable=False, server_default="FULL_PRICE"),
        sa.Column("price_amount", sa.Integer, nullable=True),
        sa.Column(
            "enrollment_date",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("waitlisted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "student_id",
            "program_id",
            "batch_number",
            name="uq_enrollments_student_program_batch",
        ),
        sa.CheckConstraint("batch_number >= 1", name="ck_enrollments_batch_positive"),
        sa.CheckConstraint(
            "status IN ('WAITLIST', 'ASSIGNED', 'COMPLETED', 'DROPPED')",
            name="ck_enrollments_status",
        ),
        sa.CheckConstraint(
            "payment_status IN ('PENDING', 'CONFIRMED', 'COMPLETED')",
            name="ck_enrollments_payment_status",
        ),
        sa.CheckConstraint(
            "price_type IN ('FULL_PRICE', 'SIBLING_DISCOUNT', 'EARLY_BIRD')",
            name="ck_enrollments_price_type",
        ),
    )
    op.create_index(
        "ix_enrollments_class_status",
        "program_enrollments",
        ["class_id", "status"],
    )

    # ==========================================================================
    # 6. course_history
    # ==========================================================================
    op.create_table(
        "course_history",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "student_id",
            sa.String(36),
            sa.ForeignKey("students.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("course_id", sa.String(36), nullable=False),
        sa.Column("course_name", sa.String(200), nullable=False),
        sa.Column("program_id", sa.String(36), nullable=False),
        sa.Column("program_name", sa.String(200), nullable=False),
        sa.Column("batch", sa.Integer, nullable=False),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column(
            "completion_status",
            sa.String(20),
            nullable=False,
            server_default="IN_PROGRESS",
        ),
        sa.Column(
            "start_date",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("performance_notes", sa.Text, nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "completion_status IN ('IN_PROGRESS', 'COMPLETED')",
            name="ck_course_history_completion_status",
        ),
    )
    op.create_index(
        "ix_course_history_student_course",
        "course_history",
        ["student_id", "course_id"],
    )
    # One open entry per student/course/program/batch
    op.create_index(
        "uq_course_history_in_progress",
        "course_history",
        ["student_id", "course_id", "program_id", "batch"],
        unique=True,
        postgresql_where=sa.text("completion_status = 'IN_PROGRESS'"),
    )

    # ==========================================================================
    # 7. pricing_configs
    # ==========================================================================
    op.create_table(
        "pricing_configs",
        sa.Column("price_type", sa.String(30), primary_key=True),
        sa.Column("amount", sa.Integer, nullable=False),
        sa.Column("updated_by", sa.String(36), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.CheckConstraint("amount > 0", name="ck_pricing_configs_amount_positive"),
    )


def downgrade() -> None:
    """Drop academy tables."""

    op.drop_table("pricing_configs")
    op.drop_index("uq_course_history_in_progress", table_name="course_history")
    op.drop_index("ix_course_history_student_course", table_name="course_history")
    op.drop_table("course_history")
    op.drop_index("ix_enrollments_class_status", table_name="program_enrollments")
    op.drop_table("program_enrollments")
    op.drop_table("students")
    op.drop_index("ix_classes_program_batch", table_name="classes")
    op.drop_table("classes")
    op.drop_table("teachers")
    op.drop_table("courses")
    op.drop_table("programs")
