# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academy ORM models.

Programs are split into numbered batches and time slots. Classes are
capacity-bounded instances of a course inside one program batch. A student
claims a program batch through a ProgramEnrollment and, once placed, occupies
a seat in one class of that batch. CourseHistory is the durable record of
courses a student started or completed.

A class has no stored roster: occupancy is always counted from enrollments
with ``status = ASSIGNED`` pointing at the class.
"""

from datetime import date, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, IdMixin, TimestampMixin
from src.models.common import (
    CompletionStatus,
    EnrollmentStatus,
    PaymentStatus,
    PriceType,
    ProgramType,
)
from src.utils.datetime import utc_now


class Program(IdMixin, TimestampMixin, Base):
    """A season/year scoped offering divided into batches and slots."""

    __tablename__ = "programs"
    __table_args__ = (
        CheckConstraint("batches >= 1", name="ck_programs_batches_positive"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    program_type: Mapped[str] = mapped_column("type", String(20), nullable=False)
    season: Mapped[str] = mapped_column(String(50), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    batches: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    slots: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    @property
    def type(self) -> ProgramType:
        """Program type as an enum."""
        return ProgramType(self.program_type)

    def has_batch(self, batch_number: int) -> bool:
        """Check whether ``batch_number`` is one of this program's batches."""
        return 1 <= batch_number <= self.batches

    def has_slot(self, slot: str) -> bool:
        """Check whether ``slot`` is one of this program's time slots."""
        return slot in (self.slots or [])


class Course(IdMixin, TimestampMixin, Base):
    """A curriculum unit taught by classes."""

    __tablename__ = "courses"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class Teacher(IdMixin, TimestampMixin, Base):
    """Instructor of a class."""

    __tablename__ = "teachers"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Class(IdMixin, TimestampMixin, Base):
    """A capacity-bounded, time-slotted instance of a course."""

    __tablename__ = "classes"
    __table_args__ = (
        CheckConstraint("capacity >= 1 AND capacity <= 50", name="ck_classes_capacity_range"),
        CheckConstraint("batch >= 1", name="ck_classes_batch_positive"),
        Index("ix_classes_program_batch", "program_id", "batch"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    program_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("programs.id", ondelete="CASCADE"), nullable=False
    )
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False
    )
    teacher_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True
    )
    batch: Mapped[int] = mapped_column(Integer, nullable=False)
    slot: Mapped[str] = mapped_column(String(100), nullable=False)
    schedule: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meet_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Student(IdMixin, TimestampMixin, Base):
    """An academy student with their enrollments and course history."""

    __tablename__ = "students"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    parent_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    parent_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    is_returning_student: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_siblings: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    enrollments: Mapped[list["ProgramEnrollment"]] = relationship(
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    course_history: Mapped[list["CourseHistory"]] = relationship(
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ProgramEnrollment(IdMixin, TimestampMixin, Base):
    """One student's claim on one program batch.

    ``class_id`` is set exactly while the enrollment occupies a class seat.
    """

    __tablename__ = "program_enrollments"
    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "program_id",
            "batch_number",
            name="uq_enrollments_student_program_batch",
        ),
        CheckConstraint("batch_number >= 1", name="ck_enrollments_batch_positive"),
        Index("ix_enrollments_class_status", "class_id", "status"),
    )

    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    program_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("programs.id", ondelete="CASCADE"), nullable=False
    )
    batch_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    class_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EnrollmentStatus.WAITLIST.value
    )
    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.PENDING.value
    )
    price_type: Mapped[str] = mapped_column(
        String(30), nullable=False, default=PriceType.FULL_PRICE.value
    )
    price_amount: Mapped[int | None] = mapped_column(Integer, nullable=True)
    enrollment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    waitlisted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    assigned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    student: Mapped[Student] = relationship(back_populates="enrollments")


class CourseHistory(IdMixin, TimestampMixin, Base):
    """A course a student started or completed.

    At most one IN_PROGRESS row exists per (student, course, program, batch).
    """

    __tablename__ = "course_history"
    __table_args__ = (
        Index(
            "uq_course_history_in_progress",
            "student_id",
            "course_id",
            "program_id",
            "batch",
            unique=True,
            postgresql_where=text("completion_status = 'IN_PROGRESS'"),
        ),
        Index("ix_course_history_student_course", "student_id", "course_id"),
    )

    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    course_id: Mapped[str] = mapped_column(String(36), nullable=False)
    course_name: Mapped[str] = mapped_column(String(200), nullable=False)
    program_id: Mapped[str] = mapped_column(String(36), nullable=False)
    program_name: Mapped[str] = mapped_column(String(200), nullable=False)
    batch: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    completion_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CompletionStatus.IN_PROGRESS.value
    )
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    performance_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    student: Mapped[Student] = relationship(back_populates="course_history")

    @property
    def is_in_progress(self) -> bool:
        return self.completion_status == CompletionStatus.IN_PROGRESS.value


class PricingConfig(Base):
    """Administrative override of a price tier amount."""

    __tablename__ = "pricing_configs"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_pricing_configs_amount_positive"),
    )

    price_type: Mapped[str] = mapped_column(String(30), primary_key=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    @property
    def tier(self) -> PriceType:
        return PriceType(self.price_type)
