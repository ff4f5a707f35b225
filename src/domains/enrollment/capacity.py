# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class capacity tracking.

Occupancy is always counted from enrollments (``status = ASSIGNED`` and
``class_id`` set). There is no stored roster to drift out of sync.
"""

import logging
from dataclasses import dataclass

from src.domains.enrollment.errors import InvalidBatchError, NotFoundError
from src.infrastructure.database.models import Class, Program, ProgramEnrollment
from src.infrastructure.database.repository import AcademyRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassSeat:
    """Capacity snapshot of one class."""

    class_id: str
    class_name: str
    program_id: str
    batch: int
    capacity: int
    occupancy: int

    @property
    def available(self) -> int:
        return max(self.capacity - self.occupancy, 0)


def validate_class_placement(program: Program, batch: int, slot: str) -> None:
    """Require a class to sit in one of its program's batches and slots.

    Raises:
        InvalidBatchError: If the batch or slot is not part of the program.
    """
    if not program.has_batch(batch):
        raise InvalidBatchError(
            f"Batch {batch} is not part of {program.name} (1..{program.batches})"
        )
    if not program.has_slot(slot):
        raise InvalidBatchError(f"Slot {slot!r} is not one of {program.name}'s slots")


class CapacityTracker:
    """Derives class occupancy and rosters from enrollments.

    Attributes:
        repository: Persistence boundary.
    """

    def __init__(self, repository: AcademyRepository) -> None:
        self.repository = repository

    async def occupancy(self, class_id: str) -> int:
        """Count students currently seated in the class."""
        return await self.repository.count_assigned(class_id)

    async def has_availability(self, class_id: str) -> bool:
        """Check whether the class has at least one free seat.

        Raises:
            NotFoundError: If the class does not exist.
        """
        class_ = await self._get_class(class_id)
        return await self.occupancy(class_id) < class_.capacity

    async def roster(self, class_id: str) -> list[ProgramEnrollment]:
        """Seated enrollments, oldest assignment first."""
        return await self.repository.list_assigned(class_id)

    async def overflow(self, class_id: str) -> list[ProgramEnrollment]:
        """Enrollments beyond capacity, most recently assigned first.

        Raises:
            NotFoundError: If the class does not exist.
        """
        class_ = await self._get_class(class_id)
        seated = await self.repository.list_assigned(class_id, newest_first=True)
        excess = len(seated) - class_.capacity
        if excess <= 0:
            return []
        logger.warning(
            "Class %s over capacity: %d/%d",
            class_id,
            len(seated),
            class_.capacity,
        )
        return seated[:excess]

    async def seats(self, classes: list[Class]) -> list[ClassSeat]:
        """Capacity snapshot for a list of classes."""
        snapshot = []
        for class_ in classes:
            snapshot.append(
                ClassSeat(
                    class_id=class_.id,
                    class_name=class_.name,
                    program_id=class_.program_id,
                    batch=class_.batch,
                    capacity=class_.capacity,
                    occupancy=await self.occupancy(class_.id),
                )
            )
        return snapshot

    async def _get_class(self, class_id: str) -> Class:
        class_ = await self.repository.get_class(class_id)
        if class_ is None:
            raise NotFoundError("Class", class_id)
        return class_
