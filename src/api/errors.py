# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Mapping of domain exceptions to HTTP errors.

Endpoints catch the domain base exceptions and re-raise the result of
``to_http_error`` so every route reports the same failure the same way.
"""

from fastapi import HTTPException, status

from src.domains.course_history import HistoryEntryNotFoundError
from src.domains.enrollment import (
    BatchMismatchError,
    CapacityExceededError,
    ClassArchivedError,
    DuplicateEnrollmentError,
    InvalidBatchError,
    InvalidCapacityError,
    InvalidTransitionError,
    NotFoundError,
    PaymentNotConfirmedError,
    RepeatCourseConfirmationRequired,
    WindowClosedError,
)
from src.domains.pricing import InvalidPriceError

_BAD_REQUEST = (
    WindowClosedError,
    PaymentNotConfirmedError,
    BatchMismatchError,
    InvalidBatchError,
    InvalidCapacityError,
    InvalidPriceError,
)

_CONFLICT = (
    DuplicateEnrollmentError,
    CapacityExceededError,
    InvalidTransitionError,
    ClassArchivedError,
)


def to_http_error(error: Exception) -> HTTPException:
    """Translate a domain exception into an HTTPException.

    Args:
        error: Exception raised by a domain service.

    Returns:
        HTTPException carrying the reason string (and details where the
        caller needs them to act).
    """
    if isinstance(error, (NotFoundError, HistoryEntryNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))

    if isinstance(error, RepeatCourseConfirmationRequired):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "detail": str(error),
                "course_id": error.course_id,
                "completions": error.completions,
            },
        )

    if isinstance(error, WindowClosedError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"detail": error.reason, "days_passed": error.days_passed},
        )

    if isinstance(error, PaymentNotConfirmedError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"detail": str(error), "remediation": error.remediation},
        )

    if isinstance(error, _BAD_REQUEST):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))

    if isinstance(error, _CONFLICT):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )
