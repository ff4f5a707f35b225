# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment state machine.

The stored row only has ``status`` and ``class_id``; the engine works with
the derived EnrollmentState instead:

    WAITLIST   status WAITLIST
    PENDING    status ASSIGNED, no class (confirmed, awaiting placement)
    ASSIGNED   status ASSIGNED, class set
    COMPLETED  terminal, row deleted, history finalised
    REMOVED    terminal, row deleted

DROPPED rows are legacy data and derive to REMOVED.
"""

from enum import Enum

from src.domains.enrollment.errors import InvalidTransitionError
from src.infrastructure.database.models import ProgramEnrollment
from src.models.common import EnrollmentStatus


class EnrollmentState(str, Enum):
    """Derived lifecycle state of a program enrollment."""

    WAITLIST = "WAITLIST"
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    COMPLETED = "COMPLETED"
    REMOVED = "REMOVED"


TERMINAL_STATES = frozenset({EnrollmentState.COMPLETED, EnrollmentState.REMOVED})

# Allowed (from, to) pairs; None is "no enrollment yet"
TRANSITIONS: dict[EnrollmentState | None, frozenset[EnrollmentState]] = {
    None: frozenset({EnrollmentState.WAITLIST, EnrollmentState.PENDING}),
    EnrollmentState.WAITLIST: frozenset({EnrollmentState.PENDING, EnrollmentState.REMOVED}),
    EnrollmentState.PENDING: frozenset({EnrollmentState.ASSIGNED, EnrollmentState.REMOVED}),
    EnrollmentState.ASSIGNED: frozenset(
        {EnrollmentState.PENDING, EnrollmentState.COMPLETED, EnrollmentState.REMOVED}
    ),
    EnrollmentState.COMPLETED: frozenset(),
    EnrollmentState.REMOVED: frozenset(),
}


def derive_state(enrollment: ProgramEnrollment | None) -> EnrollmentState | None:
    """Derive the lifecycle state of a stored enrollment row.

    Args:
        enrollment: The stored row, or None when there is no enrollment.

    Returns:
        The derived state, or None for a missing row.
    """
    if enrollment is None:
        return None

    status = EnrollmentStatus(enrollment.status)
    if status == EnrollmentStatus.WAITLIST:
        return EnrollmentState.WAITLIST
    if status == EnrollmentStatus.ASSIGNED:
        return EnrollmentState.ASSIGNED if enrollment.class_id else EnrollmentState.PENDING
    if status == EnrollmentStatus.COMPLETED:
        return EnrollmentState.COMPLETED
    return EnrollmentState.REMOVED


def can_transition(from_state: EnrollmentState | None, to_state: EnrollmentState) -> bool:
    """Check the transition table."""
    return to_state in TRANSITIONS.get(from_state, frozenset())


def ensure_transition(
    from_state: EnrollmentState | None,
    to_state: EnrollmentState,
) -> None:
    """Validate a transition against the table.

    Raises:
        InvalidTransitionError: If the pair is not listed.
    """
    if not can_transition(from_state, to_state):
        raise InvalidTransitionError(from_state or "NONE", to_state)


def apply_state(enrollment: ProgramEnrollment, to_state: EnrollmentState) -> None:
    """Write the stored fields for a live target state.

    Class placement (``class_id``, ``assigned_at``) is handled by the caller;
    terminal states delete the row instead.
    """
    if to_state == EnrollmentState.WAITLIST:
        enrollment.status = EnrollmentStatus.WAITLIST.value
    elif to_state in (EnrollmentState.PENDING, EnrollmentState.ASSIGNED):
        enrollment.status = EnrollmentStatus.ASSIGNED.value
    else:
        raise ValueError(f"{to_state.value} is terminal and has no stored form")


def ensure_state(
    current: EnrollmentState | None,
    expected: EnrollmentState,
    to_state: EnrollmentState,
    message: str | None = None,
) -> None:
    """Require a specific source state for an operation, then check the table.

    Raises:
        InvalidTransitionError: If ``current`` is not ``expected`` or the
            transition is not listed.
    """
    if current != expected:
        raise InvalidTransitionError(current or "NONE", to_state, message)
    ensure_transition(current, to_state)
