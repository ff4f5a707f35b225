# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment request/response models.

This module defines Pydantic models for program enrollment, class
assignment, completion, archiving and capacity endpoints.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import CompletionStatus, EnrollmentStatus, PaymentStatus, PriceType

if TYPE_CHECKING:
    from src.infrastructure.database.models import ProgramEnrollment


# ============================================================================
# Requests
# ============================================================================


class EnrollProgramRequest(BaseModel):
    """Request to enroll a student in a program batch."""

    student_id: str = Field(description="Student ID")
    program_id: str = Field(description="Program ID")
    batch_number: int = Field(default=1, ge=1, description="Batch within the program")
    payment_confirmed: bool = Field(
        default=False,
        description="Enroll as confirmed (awaiting placement) instead of waitlisted",
    )
    price_type: PriceType = Field(default=PriceType.FULL_PRICE)


class UpdatePaymentStatusRequest(BaseModel):
    """Request to change the payment status of an enrollment."""

    payment_status: PaymentStatus


class EditPriceRequest(BaseModel):
    """Request to change the price captured on an enrollment."""

    price_type: PriceType
    amount: int | None = Field(
        default=None,
        gt=0,
        description="Explicit amount in Naira; defaults to the tier amount",
    )


class AssignClassRequest(BaseModel):
    """Request to place an enrollment in a class."""

    class_id: str = Field(description="Target class ID")
    confirm_repeat: bool = Field(
        default=False,
        description="Confirm placement in a course the student already completed",
    )


class CapacityUpdateRequest(BaseModel):
    """Request to change a class capacity."""

    capacity: int = Field(ge=1, le=50)


class UpdatePerformanceNotesRequest(BaseModel):
    """Request to replace the performance notes of a history entry."""

    performance_notes: str | None = Field(default=None, max_length=5000)


# ============================================================================
# Responses
# ============================================================================


class EnrollmentResponse(BaseModel):
    """Program enrollment with its derived lifecycle state."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    program_id: str
    batch_number: int
    class_id: str | None = None
    status: EnrollmentStatus
    state: str = Field(description="Derived state: WAITLIST, PENDING or ASSIGNED")
    payment_status: PaymentStatus
    price_type: PriceType
    price_amount: int | None = None
    enrollment_date: datetime | None = None
    waitlisted_at: datetime | None = None
    assigned_at: datetime | None = None

    @classmethod
    def from_enrollment(cls, enrollment: "ProgramEnrollment") -> "EnrollmentResponse":
        """Build a response from an ORM enrollment."""
        from src.domains.enrollment.states import derive_state

        state = derive_state(enrollment)
        return cls(
            id=enrollment.id,
            student_id=enrollment.student_id,
            program_id=enrollment.program_id,
            batch_number=enrollment.batch_number,
            class_id=enrollment.class_id,
            status=enrollment.status,
            state=state.value if state else "",
            payment_status=enrollment.payment_status,
            price_type=enrollment.price_type,
            price_amount=enrollment.price_amount,
            enrollment_date=enrollment.enrollment_date,
            waitlisted_at=enrollment.waitlisted_at,
            assigned_at=enrollment.assigned_at,
        )


class EnrollmentListResponse(BaseModel):
    """List of enrollments."""

    items: list[EnrollmentResponse]
    total: int


class CourseHistoryResponse(BaseModel):
    """Course history entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    course_id: str
    course_name: str
    program_id: str
    program_name: str
    batch: int
    year: int
    completion_status: CompletionStatus
    start_date: datetime
    end_date: datetime | None = None
    performance_notes: str | None = None


class AssignmentResponse(BaseModel):
    """Result of a class assignment."""

    enrollment: EnrollmentResponse
    history_entry: CourseHistoryResponse
    notes: list[str] = Field(
        default_factory=list,
        description="Non-fatal problems, e.g. notifications that could not be sent",
    )


class RepeatCourseResponse(BaseModel):
    """Body returned when a repeat placement needs confirmation."""

    detail: str
    course_id: str
    completions: list[dict[str, Any]]


class CompletionResponse(BaseModel):
    """Result of marking an enrollment completed."""

    enrollment_id: str
    student_id: str
    history_entry: CourseHistoryResponse


class ArchiveFailureResponse(BaseModel):
    """A student the archive cascade could not complete."""

    enrollment_id: str
    student_id: str
    reason: str


class ArchiveResponse(BaseModel):
    """Result of archiving a class."""

    class_id: str
    archived: bool
    already_archived: bool = False
    completed: list[str] = Field(default_factory=list)
    failures: list[ArchiveFailureResponse] = Field(default_factory=list)


class CapacityResponse(BaseModel):
    """Class capacity after a change or reconciliation."""

    class_id: str
    capacity: int
    occupancy: int
    evicted: list[str] = Field(default_factory=list)


class ClassRosterResponse(BaseModel):
    """Students seated in a class."""

    class_id: str
    class_name: str
    capacity: int
    occupancy: int
    is_archived: bool
    enrollments: list[EnrollmentResponse]
