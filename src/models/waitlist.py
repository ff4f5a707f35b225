# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Waitlist request/response models."""

from pydantic import BaseModel, Field


class PromotionProposalResponse(BaseModel):
    """A proposed class placement for a waiting enrollment."""

    enrollment_id: str
    student_id: str
    class_id: str
    priority: int


class WaitlistProposalListResponse(BaseModel):
    """Proposals computed for the current waitlist."""

    proposals: list[PromotionProposalResponse]
    total: int


class ApplyPromotionsRequest(BaseModel):
    """Proposals to apply, in order."""

    proposals: list[PromotionProposalResponse] = Field(min_length=1)
    confirm_repeat: bool = Field(
        default=False,
        description="Confirm placements in courses students already completed",
    )


class PromotionFailureResponse(BaseModel):
    """A proposal that could not be applied."""

    enrollment_id: str
    class_id: str
    error: str
    reason: str


class ApplyPromotionsResponse(BaseModel):
    """Outcome of applying proposals."""

    assigned: list[str] = Field(default_factory=list)
    failures: list[PromotionFailureResponse] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)
