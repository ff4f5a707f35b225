# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Waitlist API endpoints.

- GET /proposals - Compute placements for waiting enrollments
- POST /apply - Apply placements through the enrollment engine
"""

import logging

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import RequirePermission, get_waitlist_service
from src.domains.auth.permissions import CurrentUser, Permission
from src.domains.waitlist import PromotionProposal, WaitlistService
from src.models.waitlist import (
    ApplyPromotionsRequest,
    ApplyPromotionsResponse,
    PromotionFailureResponse,
    PromotionProposalResponse,
    WaitlistProposalListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/proposals",
    response_model=WaitlistProposalListResponse,
    summary="Propose waitlist placements",
)
async def propose(
    program_id: str | None = Query(None, description="Restrict to one program"),
    current_user: CurrentUser = Depends(RequirePermission(Permission.WAITLIST_VIEW)),
    service: WaitlistService = Depends(get_waitlist_service),
) -> WaitlistProposalListResponse:
    """Rank waiting enrollments and propose a class for each while seats last.

    Nothing is changed until the proposals are applied.
    """
    proposals = await service.propose(program_id)
    items = [
        PromotionProposalResponse(
            enrollment_id=p.enrollment_id,
            student_id=p.student_id,
            class_id=p.class_id,
            priority=p.priority,
        )
        for p in proposals
    ]
    return WaitlistProposalListResponse(proposals=items, total=len(items))


@router.post(
    "/apply",
    response_model=ApplyPromotionsResponse,
    summary="Apply waitlist placements",
)
async def apply(
    data: ApplyPromotionsRequest,
    current_user: CurrentUser = Depends(RequirePermission(Permission.WAITLIST_APPLY)),
    service: WaitlistService = Depends(get_waitlist_service),
) -> ApplyPromotionsResponse:
    logger.info(
        "Applying waitlist placements: count=%d, by=%s",
        len(data.proposals),
        current_user.id,
    )

    outcome = await service.apply(
        [
            PromotionProposal(
                enrollment_id=p.enrollment_id,
                student_id=p.student_id,
                class_id=p.class_id,
                priority=p.priority,
            )
            for p in data.proposals
        ],
        confirm_repeat=data.confirm_repeat,
    )

    return ApplyPromotionsResponse(
        assigned=outcome.assigned,
        failures=[
            PromotionFailureResponse(
                enrollment_id=f.enrollment_id,
                class_id=f.class_id,
                error=f.error,
                reason=f.reason,
            )
            for f in outcome.failures
        ],
        notes=outcome.notes,
    )
