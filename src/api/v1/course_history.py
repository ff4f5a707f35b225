# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course history API endpoints.

- GET /students/{student_id} - A student's course history
- PUT /{entry_id}/notes - Replace the performance notes of an entry
"""

import logging

from fastapi import APIRouter, Depends

from src.api.dependencies import RequirePermission, get_history_ledger
from src.api.errors import to_http_error
from src.domains.auth.permissions import CurrentUser, Permission
from src.domains.course_history import CourseHistoryLedger, CourseHistoryServiceError
from src.models.enrollment import CourseHistoryResponse, UpdatePerformanceNotesRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/students/{student_id}",
    response_model=list[CourseHistoryResponse],
    summary="Get student course history",
)
async def get_student_history(
    student_id: str,
    current_user: CurrentUser = Depends(RequirePermission(Permission.ENROLLMENTS_VIEW)),
    ledger: CourseHistoryLedger = Depends(get_history_ledger),
) -> list[CourseHistoryResponse]:
    entries = await ledger.history_for(student_id)
    return [CourseHistoryResponse.model_validate(e) for e in entries]


@router.put(
    "/{entry_id}/notes",
    response_model=CourseHistoryResponse,
    summary="Update performance notes",
)
async def update_performance_notes(
    entry_id: str,
    data: UpdatePerformanceNotesRequest,
    current_user: CurrentUser = Depends(RequirePermission(Permission.HISTORY_NOTES)),
    ledger: CourseHistoryLedger = Depends(get_history_ledger),
) -> CourseHistoryResponse:
    try:
        entry = await ledger.update_performance_notes(entry_id, data.performance_notes)
    except CourseHistoryServiceError as e:
        raise to_http_error(e) from e
    return CourseHistoryResponse.model_validate(entry)
