# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the enrollment state machine."""

import pytest

from src.domains.enrollment.errors import InvalidTransitionError
from src.domains.enrollment.states import (
    EnrollmentState,
    apply_state,
    can_transition,
    derive_state,
    ensure_state,
    ensure_transition,
)
from src.infrastructure.database.models import ProgramEnrollment
from src.models.common import EnrollmentStatus


def make_enrollment(status: EnrollmentStatus, class_id: str | None = None) -> ProgramEnrollment:
    return ProgramEnrollment(
        id="enrollment-1",
        student_id="student-1",
        program_id="program-1",
        batch_number=1,
        status=status.value,
        class_id=class_id,
    )


class TestDeriveState:
    """Tests for derive_state."""

    def test_missing_row(self):
        assert derive_state(None) is None

    def test_waitlist(self):
        assert derive_state(make_enrollment(EnrollmentStatus.WAITLIST)) == EnrollmentState.WAITLIST

    def test_assigned_without_class_is_pending(self):
        enrollment = make_enrollment(EnrollmentStatus.ASSIGNED)

        assert derive_state(enrollment) == EnrollmentState.PENDING

    def test_assigned_with_class(self):
        enrollment = make_enrollment(EnrollmentStatus.ASSIGNED, class_id="class-1")

        assert derive_state(enrollment) == EnrollmentState.ASSIGNED

    def test_dropped_is_removed(self):
        assert derive_state(make_enrollment(EnrollmentStatus.DROPPED)) == EnrollmentState.REMOVED


class TestTransitions:
    """Tests for the transition table."""

    @pytest.mark.parametrize(
        "from_state,to_state",
        [
            (None, EnrollmentState.WAITLIST),
            (None, EnrollmentState.PENDING),
            (EnrollmentState.WAITLIST, EnrollmentState.PENDING),
            (EnrollmentState.PENDING, EnrollmentState.ASSIGNED),
            (EnrollmentState.ASSIGNED, EnrollmentState.PENDING),
            (EnrollmentState.ASSIGNED, EnrollmentState.COMPLETED),
            (EnrollmentState.WAITLIST, EnrollmentState.REMOVED),
            (EnrollmentState.ASSIGNED, EnrollmentState.REMOVED),
        ],
    )
    def test_allowed(self, from_state, to_state):
        assert can_transition(from_state, to_state)

    @pytest.mark.parametrize(
        "from_state,to_state",
        [
            (None, EnrollmentState.ASSIGNED),
            (EnrollmentState.WAITLIST, EnrollmentState.ASSIGNED),
            (EnrollmentState.PENDING, EnrollmentState.COMPLETED),
            (EnrollmentState.COMPLETED, EnrollmentState.PENDING),
            (EnrollmentState.REMOVED, EnrollmentState.WAITLIST),
        ],
    )
    def test_rejected(self, from_state, to_state):
        with pytest.raises(InvalidTransitionError):
            ensure_transition(from_state, to_state)

    def test_ensure_state_requires_expected_source(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            ensure_state(
                EnrollmentState.WAITLIST,
                EnrollmentState.ASSIGNED,
                EnrollmentState.PENDING,
                "Enrollment is not assigned to a class",
            )

        assert str(exc_info.value) == "Enrollment is not assigned to a class"
        assert exc_info.value.from_state == EnrollmentState.WAITLIST


class TestApplyState:
    """Tests for apply_state."""

    def test_pending_stores_assigned_status(self):
        enrollment = make_enrollment(EnrollmentStatus.WAITLIST)

        apply_state(enrollment, EnrollmentState.PENDING)

        assert enrollment.status == EnrollmentStatus.ASSIGNED.value

    def test_terminal_state_has_no_stored_form(self):
        enrollment = make_enrollment(EnrollmentStatus.ASSIGNED, class_id="class-1")

        with pytest.raises(ValueError):
            apply_state(enrollment, EnrollmentState.COMPLETED)
