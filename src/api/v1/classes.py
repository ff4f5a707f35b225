# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class administration API endpoints.

This module provides endpoints for class-level operations:
- GET /{class_id}/roster - Students seated in the class
- POST /{class_id}/archive - Complete every student and archive the class
- POST /{class_id}/unarchive - Make the class assignable again
- PUT /{class_id}/capacity - Change capacity, evicting any overflow
- POST /{class_id}/reconcile - Evict students beyond capacity

Rosters are derived from enrollments; there is no endpoint that writes a
roster directly.
"""

import logging

from fastapi import APIRouter, Depends

from src.api.dependencies import RequirePermission, get_enrollment_service
from src.api.errors import to_http_error
from src.domains.auth.permissions import CurrentUser, Permission
from src.domains.enrollment import EnrollmentService, EnrollmentServiceError
from src.models.enrollment import (
    ArchiveFailureResponse,
    ArchiveResponse,
    CapacityResponse,
    CapacityUpdateRequest,
    ClassRosterResponse,
    EnrollmentResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/{class_id}/roster",
    response_model=ClassRosterResponse,
    summary="Get class roster",
)
async def get_roster(
    class_id: str,
    current_user: CurrentUser = Depends(RequirePermission(Permission.ENROLLMENTS_VIEW)),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> ClassRosterResponse:
    try:
        class_, enrollments = await service.class_roster(class_id)
    except EnrollmentServiceError as e:
        raise to_http_error(e) from e

    return ClassRosterResponse(
        class_id=class_.id,
        class_name=class_.name,
        capacity=class_.capacity,
        occupancy=len(enrollments),
        is_archived=class_.is_archived,
        enrollments=[EnrollmentResponse.from_enrollment(e) for e in enrollments],
    )


@router.post(
    "/{class_id}/archive",
    response_model=ArchiveResponse,
    summary="Archive class",
)
async def archive_class(
    class_id: str,
    current_user: CurrentUser = Depends(RequirePermission(Permission.CLASSES_ARCHIVE)),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> ArchiveResponse:
    """Archive a class.

    Every seated student is marked completed first. Students that could not
    be completed are listed in ``failures`` and the class then stays
    unarchived.
    """
    logger.info("Archiving class: class=%s, by=%s", class_id, current_user.id)

    try:
        result = await service.archive_class(class_id)
    except EnrollmentServiceError as e:
        raise to_http_error(e) from e

    return ArchiveResponse(
        class_id=result.class_id,
        archived=result.archived,
        already_archived=result.already_archived,
        completed=result.completed,
        failures=[
            ArchiveFailureResponse(
                enrollment_id=f.enrollment_id,
                student_id=f.student_id,
                reason=f.reason,
            )
            for f in result.failures
        ],
    )


@router.post(
    "/{class_id}/unarchive",
    response_model=ArchiveResponse,
    summary="Unarchive class",
)
async def unarchive_class(
    class_id: str,
    current_user: CurrentUser = Depends(RequirePermission(Permission.CLASSES_ARCHIVE)),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> ArchiveResponse:
    try:
        class_ = await service.unarchive_class(class_id)
    except EnrollmentServiceError as e:
        raise to_http_error(e) from e
    return ArchiveResponse(class_id=class_.id, archived=class_.is_archived)


@router.put(
    "/{class_id}/capacity",
    response_model=CapacityResponse,
    summary="Update class capacity",
)
async def update_capacity(
    class_id: str,
    data: CapacityUpdateRequest,
    current_user: CurrentUser = Depends(RequirePermission(Permission.CLASSES_CAPACITY)),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> CapacityResponse:
    """Change the capacity of a class.

    Students beyond the new capacity are unassigned, most recently
    assigned first.
    """
    logger.info(
        "Updating class capacity: class=%s, capacity=%d, by=%s",
        class_id,
        data.capacity,
        current_user.id,
    )

    try:
        result = await service.update_class_capacity(class_id, data.capacity)
    except EnrollmentServiceError as e:
        raise to_http_error(e) from e

    return CapacityResponse(
        class_id=result.class_id,
        capacity=result.capacity,
        occupancy=result.occupancy,
        evicted=result.evicted,
    )


@router.post(
    "/{class_id}/reconcile",
    response_model=CapacityResponse,
    summary="Reconcile class capacity",
)
async def reconcile_capacity(
    class_id: str,
    current_user: CurrentUser = Depends(RequirePermission(Permission.CLASSES_CAPACITY)),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> CapacityResponse:
    try:
        result = await service.reconcile_capacity(class_id)
    except EnrollmentServiceError as e:
        raise to_http_error(e) from e

    return CapacityResponse(
        class_id=result.class_id,
        capacity=result.capacity,
        occupancy=result.occupancy,
        evicted=result.evicted,
    )
