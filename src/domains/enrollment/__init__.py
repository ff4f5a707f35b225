# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides the enrollment and class assignment engine including:
- Program enrollment with the enrollment window and payment gate
- Class assignment with capacity and course history bookkeeping
- Completion, archiving and capacity reconciliation
"""

from src.domains.enrollment.capacity import CapacityTracker, ClassSeat, validate_class_placement
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
    NotificationFailureError,
    PaymentNotConfirmedError,
    RepeatCourseConfirmationRequired,
    WindowClosedError,
)
from src.domains.enrollment.locks import LockRegistry, get_lock_registry, reset_lock_registry
from src.domains.enrollment.service import (
    ArchiveFailure,
    ArchiveResult,
    AssignmentResult,
    CapacityResult,
    CompletionResult,
    EnrollmentService,
)
from src.domains.enrollment.states import EnrollmentState, derive_state
from src.domains.enrollment.window import EnrollmentWindowPolicy, WindowDecision

__all__ = [
    "ArchiveFailure",
    "ArchiveResult",
    "AssignmentResult",
    "BatchMismatchError",
    "CapacityExceededError",
    "CapacityResult",
    "CapacityTracker",
    "ClassArchivedError",
    "ClassSeat",
    "CompletionResult",
    "DuplicateEnrollmentError",
    "EnrollmentService",
    "EnrollmentServiceError",
    "EnrollmentState",
    "EnrollmentWindowPolicy",
    "InvalidBatchError",
    "InvalidCapacityError",
    "InvalidTransitionError",
    "LockRegistry",
    "NotFoundError",
    "NotificationFailureError",
    "PaymentNotConfirmedError",
    "RepeatCourseConfirmationRequired",
    "WindowClosedError",
    "WindowDecision",
    "derive_state",
    "get_lock_registry",
    "reset_lock_registry",
    "validate_class_placement",
]
