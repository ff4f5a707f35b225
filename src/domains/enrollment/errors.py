# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain exceptions.

Every failure of the enrollment engine is an EnrollmentServiceError
subclass carrying the details a caller needs to explain the refusal.
Validation errors are raised before any mutation.
"""

from typing import Any


class EnrollmentServiceError(Exception):
    """Base exception for enrollment service errors."""

    pass


class NotFoundError(EnrollmentServiceError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class WindowClosedError(EnrollmentServiceError):
    """Raised when the program enrollment window has passed."""

    def __init__(self, reason: str, days_passed: int | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.days_passed = days_passed


class DuplicateEnrollmentError(EnrollmentServiceError):
    """Raised when the student already holds the requested place.

    Attributes:
        batch_numbers: Batches in which the conflicting enrollment exists.
    """

    def __init__(self, message: str, batch_numbers: list[int] | None = None) -> None:
        super().__init__(message)
        self.batch_numbers = batch_numbers or []


class PaymentNotConfirmedError(EnrollmentServiceError):
    """Raised when a class assignment is attempted without confirmed payment."""

    remediation = "Update the enrollment payment status to CONFIRMED before assigning a class."

    def __init__(self, enrollment_id: str, payment_status: str) -> None:
        super().__init__(
            f"Payment for enrollment {enrollment_id} is {payment_status}, not CONFIRMED. "
            f"{self.remediation}"
        )
        self.enrollment_id = enrollment_id
        self.payment_status = payment_status


class CapacityExceededError(EnrollmentServiceError):
    """Raised when a class is full at the moment of assignment."""

    def __init__(self, class_id: str, capacity: int, occupancy: int) -> None:
        super().__init__(f"Class {class_id} is full ({occupancy}/{capacity})")
        self.class_id = class_id
        self.capacity = capacity
        self.occupancy = occupancy


class BatchMismatchError(EnrollmentServiceError):
    """Raised when a class does not belong to the enrollment's program batch."""

    pass


class InvalidBatchError(EnrollmentServiceError):
    """Raised when a batch number is outside the program's batches."""

    pass


class ClassArchivedError(EnrollmentServiceError):
    """Raised when assigning to an archived class."""

    pass


class InvalidTransitionError(EnrollmentServiceError):
    """Raised when an enrollment state change is not allowed."""

    def __init__(self, from_state: Any, to_state: Any, message: str | None = None) -> None:
        from_value = getattr(from_state, "value", from_state)
        to_value = getattr(to_state, "value", to_state)
        super().__init__(message or f"Cannot move enrollment from {from_value} to {to_value}")
        self.from_state = from_state
        self.to_state = to_state


class RepeatCourseConfirmationRequired(EnrollmentServiceError):
    """Raised when a student is placed in a course they already completed.

    This is a warning: the caller may retry with ``confirm_repeat=True``.

    Attributes:
        course_id: The repeated course.
        completions: Prior COMPLETED history entries as dictionaries.
    """

    def __init__(self, course_id: str, completions: list[dict[str, Any]]) -> None:
        super().__init__(
            f"Student already completed course {course_id}; confirm to assign again"
        )
        self.course_id = course_id
        self.completions = completions


class NotificationFailureError(EnrollmentServiceError):
    """Raised by the notifier when at least one recipient was not reached.

    Never rolls back the assignment that triggered it.
    """

    def __init__(self, message: str, report: Any = None) -> None:
        super().__init__(message)
        self.report = report


class InvalidCapacityError(EnrollmentServiceError):
    """Raised when a class capacity is outside 1..50."""

    pass
