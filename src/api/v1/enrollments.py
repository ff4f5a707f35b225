# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Program enrollment API endpoints.

This module provides endpoints for the enrollment lifecycle:
- POST / - Enroll a student in a program batch
- GET / - List enrollments
- GET /{enrollment_id} - Get enrollment details
- PUT /{enrollment_id}/payment - Update payment status
- PUT /{enrollment_id}/price - Edit captured price
- POST /{enrollment_id}/assign - Assign to a class
- POST /{enrollment_id}/unassign - Unassign from the class
- POST /{enrollment_id}/complete - Mark the course completed
- DELETE /{enrollment_id} - Remove from the program
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import RequirePermission, get_enrollment_service
from src.api.errors import to_http_error
from src.domains.auth.permissions import CurrentUser, Permission
from src.domains.enrollment import EnrollmentService, EnrollmentServiceError
from src.domains.pricing import PricingServiceError
from src.models.common import EnrollmentStatus
from src.models.enrollment import (
    AssignClassRequest,
    AssignmentResponse,
    CompletionResponse,
    CourseHistoryResponse,
    EditPriceRequest,
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollProgramRequest,
    UpdatePaymentStatusRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll student in program",
)
async def enroll_program(
    data: EnrollProgramRequest,
    current_user: CurrentUser = Depends(RequirePermission(Permission.ENROLLMENTS_CREATE)),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentResponse:
    """Enroll a student in a program batch.

    The enrollment is waitlisted unless payment is already confirmed.

    Raises:
        HTTPException: 404 for unknown student/program, 400 when the
            window is closed or the batch is invalid, 409 on duplicates.
    """
    logger.info(
        "Enrolling student: student=%s, program=%s, batch=%d, by=%s",
        data.student_id,
        data.program_id,
        data.batch_number,
        current_user.id,
    )

    try:
        enrollment = await service.enroll_program(
            student_id=data.student_id,
            program_id=data.program_id,
            batch_number=data.batch_number,
            payment_confirmed=data.payment_confirmed,
            price_type=data.price_type,
        )
    except EnrollmentServiceError as e:
        raise to_http_error(e) from e

    return EnrollmentResponse.from_enrollment(enrollment)


@router.get(
    "",
    response_model=EnrollmentListResponse,
    summary="List enrollments",
)
async def list_enrollments(
    program_id: str | None = Query(None, description="Filter by program"),
    enrollment_status: EnrollmentStatus | None = Query(None, alias="status"),
    current_user: CurrentUser = Depends(RequirePermission(Permission.ENROLLMENTS_VIEW)),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentListResponse:
    enrollments = await service.list_enrollments(program_id=program_id, status=enrollment_status)
    items = [EnrollmentResponse.from_enrollment(e) for e in enrollments]
    return EnrollmentListResponse(items=items, total=len(items))


@router.get(
    "/{enrollment_id}",
    response_model=EnrollmentResponse,
    summary="Get enrollment",
)
async def get_enrollment(
    enrollment_id: str,
    current_user: CurrentUser = Depends(RequirePermission(Permission.ENROLLMENTS_VIEW)),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentResponse:
    try:
        enrollment = await service.get_enrollment(enrollment_id)
    except EnrollmentServiceError as e:
        raise to_http_error(e) from e
    return EnrollmentResponse.from_enrollment(enrollment)


@router.put(
    "/{enrollment_id}/payment",
    response_model=EnrollmentResponse,
    summary="Update payment status",
)
async def update_payment_status(
    enrollment_id: str,
    data: UpdatePaymentStatusRequest,
    current_user: CurrentUser = Depends(RequirePermission(Permission.ENROLLMENTS_PAYMENT)),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentResponse:
    """Update the payment status of an enrollment.

    Confirming payment moves a waitlisted enrollment to pending placement.
    """
    logger.info(
        "Updating payment status: enrollment=%s, status=%s, by=%s",
        enrollment_id,
        data.payment_status.value,
        current_user.id,
    )

    try:
        enrollment = await service.update_payment_status(enrollment_id, data.payment_status)
    except EnrollmentServiceError as e:
        raise to_http_error(e) from e
    return EnrollmentResponse.from_enrollment(enrollment)


@router.put(
    "/{enrollment_id}/price",
    response_model=EnrollmentResponse,
    summary="Edit enrollment price",
)
async def edit_price(
    enrollment_id: str,
    data: EditPriceRequest,
    current_user: CurrentUser = Depends(RequirePermission(Permission.ENROLLMENTS_EDIT_PRICE)),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentResponse:
    try:
        enrollment = await service.edit_price(enrollment_id, data.price_type, data.amount)
    except (EnrollmentServiceError, PricingServiceError) as e:
        raise to_http_error(e) from e
    return EnrollmentResponse.from_enrollment(enrollment)


@router.post(
    "/{enrollment_id}/assign",
    response_model=AssignmentResponse,
    summary="Assign to class",
)
async def assign_to_class(
    enrollment_id: str,
    data: AssignClassRequest,
    current_user: CurrentUser = Depends(RequirePermission(Permission.ENROLLMENTS_ASSIGN)),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> AssignmentResponse:
    """Place a confirmed enrollment in a class.

    Notification failures do not fail the request; they are returned as
    notes.

    Raises:
        HTTPException: 400 when payment is not confirmed or the class is in
            another batch, 409 when the class is full, the student is already
            placed, or a repeat course needs confirmation.
    """
    logger.info(
        "Assigning enrollment: enrollment=%s, class=%s, by=%s",
        enrollment_id,
        data.class_id,
        current_user.id,
    )

    try:
        result = await service.assign_to_class(
            enrollment_id,
            data.class_id,
            confirm_repeat=data.confirm_repeat,
        )
    except EnrollmentServiceError as e:
        raise to_http_error(e) from e

    return AssignmentResponse(
        enrollment=EnrollmentResponse.from_enrollment(result.enrollment),
        history_entry=CourseHistoryResponse.model_validate(result.history_entry),
        notes=result.notes,
    )


@router.post(
    "/{enrollment_id}/unassign",
    response_model=EnrollmentResponse,
    summary="Unassign from class",
)
async def unassign_from_class(
    enrollment_id: str,
    current_user: CurrentUser = Depends(RequirePermission(Permission.ENROLLMENTS_ASSIGN)),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> EnrollmentResponse:
    try:
        enrollment = await service.unassign_from_class(enrollment_id)
    except EnrollmentServiceError as e:
        raise to_http_error(e) from e
    return EnrollmentResponse.from_enrollment(enrollment)


@router.post(
    "/{enrollment_id}/complete",
    response_model=CompletionResponse,
    summary="Mark completed",
)
async def mark_completed(
    enrollment_id: str,
    current_user: CurrentUser = Depends(RequirePermission(Permission.ENROLLMENTS_COMPLETE)),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> CompletionResponse:
    """Complete the course of an assigned enrollment.

    The enrollment is removed; the completion is kept in course history.
    """
    try:
        result = await service.mark_completed(enrollment_id)
    except EnrollmentServiceError as e:
        raise to_http_error(e) from e

    return CompletionResponse(
        enrollment_id=result.enrollment_id,
        student_id=result.student_id,
        history_entry=CourseHistoryResponse.model_validate(result.history_entry),
    )


@router.delete(
    "/{enrollment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove from program",
)
async def unassign_from_program(
    enrollment_id: str,
    current_user: CurrentUser = Depends(RequirePermission(Permission.ENROLLMENTS_REMOVE)),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> None:
    logger.info(
        "Removing enrollment from program: enrollment=%s, by=%s",
        enrollment_id,
        current_user.id,
    )

    try:
        await service.unassign_from_program(enrollment_id)
    except EnrollmentServiceError as e:
        raise to_http_error(e) from e
