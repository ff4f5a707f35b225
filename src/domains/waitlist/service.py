# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Waitlist service.

Loads waiting enrollments, asks the promoter for proposals and applies them
one by one through the enrollment engine. A proposal that fails is recorded
and the rest of the batch continues.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from src.core.config.settings import WaitlistSettings, get_settings
from src.domains.enrollment import EnrollmentService, EnrollmentServiceError, EnrollmentState
from src.domains.enrollment.capacity import CapacityTracker
from src.domains.enrollment.states import derive_state
from src.domains.waitlist.promoter import PromotionProposal, WaitlistEntry, promote
from src.infrastructure.database.repository import AcademyRepository
from src.models.common import EnrollmentStatus

logger = logging.getLogger(__name__)


@dataclass
class PromotionFailure:
    """A proposal the engine refused."""

    enrollment_id: str
    class_id: str
    error: str
    reason: str


@dataclass
class PromotionOutcome:
    """Outcome of applying a list of proposals."""

    assigned: list[str] = field(default_factory=list)
    failures: list[PromotionFailure] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class WaitlistService:
    """Service for waitlist promotion.

    Attributes:
        repository: Persistence boundary.
        enrollment_service: Engine used to apply proposals.
        capacity: Occupancy snapshots for the promoter.
    """

    def __init__(
        self,
        repository: AcademyRepository,
        enrollment_service: EnrollmentService | None = None,
        settings: WaitlistSettings | None = None,
    ) -> None:
        self.repository = repository
        self.enrollment_service = enrollment_service or EnrollmentService(repository)
        self.capacity = CapacityTracker(repository)
        self.settings = settings or get_settings().waitlist

    async def load_entries(self, program_id: str | None = None) -> list[WaitlistEntry]:
        """Waiting enrollments: waitlisted, or confirmed without a class."""
        enrollments = await self.repository.list_enrollments(
            program_id=program_id,
            statuses=[EnrollmentStatus.WAITLIST, EnrollmentStatus.ASSIGNED],
            unplaced_only=True,
        )
        return [
            WaitlistEntry.from_enrollment(e)
            for e in enrollments
            if derive_state(e) in (EnrollmentState.WAITLIST, EnrollmentState.PENDING)
        ]

    async def propose(
        self,
        program_id: str | None = None,
        now: datetime | None = None,
    ) -> list[PromotionProposal]:
        """Compute placements for the current waitlist without applying them."""
        entries = await self.load_entries(program_id)
        if not entries:
            return []

        classes = await self.repository.list_classes(program_id=program_id)
        seats = await self.capacity.seats(classes)
        students = {
            s.id: s
            for s in await self.repository.get_students(e.student_id for e in entries)
        }

        proposals = promote(seats, entries, students, now=now, settings=self.settings)
        logger.info(
            "Waitlist proposals: program=%s, waiting=%d, awaiting_payment=%d, proposed=%d",
            program_id,
            len(entries),
            sum(1 for e in entries if not e.payment_confirmed),
            len(proposals),
        )
        return proposals

    async def apply(
        self,
        proposals: list[PromotionProposal],
        confirm_repeat: bool = False,
    ) -> PromotionOutcome:
        """Apply proposals in order, each in its own transaction.

        Args:
            proposals: Proposals to apply.
            confirm_repeat: Passed to every assignment.

        Returns:
            Assigned enrollment ids, per-proposal failures and notification notes.
        """
        outcome = PromotionOutcome()

        for proposal in proposals:
            try:
                result = await self.enrollment_service.assign_to_class(
                    proposal.enrollment_id,
                    proposal.class_id,
                    confirm_repeat=confirm_repeat,
                )
            except EnrollmentServiceError as e:
                logger.warning(
                    "Waitlist promotion skipped: enrollment=%s, class=%s, %s: %s",
                    proposal.enrollment_id,
                    proposal.class_id,
                    type(e).__name__,
                    e,
                )
                outcome.failures.append(
                    PromotionFailure(
                        enrollment_id=proposal.enrollment_id,
                        class_id=proposal.class_id,
                        error=type(e).__name__,
                        reason=str(e),
                    )
                )
                continue

            outcome.assigned.append(proposal.enrollment_id)
            outcome.notes.extend(result.notes)

        logger.info(
            "Waitlist promotions applied: assigned=%d, failed=%d",
            len(outcome.assigned),
            len(outcome.failures),
        )
        return outcome
