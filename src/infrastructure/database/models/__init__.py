# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models for the academy database."""

from src.infrastructure.database.models.academy import (
    Class,
    Course,
    CourseHistory,
    PricingConfig,
    Program,
    ProgramEnrollment,
    Student,
    Teacher,
)
from src.infrastructure.database.models.base import Base, IdMixin, TimestampMixin, new_id

__all__ = [
    "Base",
    "IdMixin",
    "TimestampMixin",
    "new_id",
    "Class",
    "Course",
    "CourseHistory",
    "PricingConfig",
    "Program",
    "ProgramEnrollment",
    "Student",
    "Teacher",
]
