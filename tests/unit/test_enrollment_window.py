# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the enrollment window policy."""

from datetime import date, timedelta

import pytest

from src.core.config.settings import EnrollmentSettings
from src.domains.enrollment.window import EnrollmentWindowPolicy
from src.infrastructure.database.models import Program
from src.models.common import ProgramType


def make_program(program_type: ProgramType, start_date: date | None) -> Program:
    return Program(
        id="program-1",
        name="Test Program",
        program_type=program_type.value,
        season="Summer",
        year=2026,
        batches=1,
        slots=["Saturday 10:00"],
        start_date=start_date,
    )


@pytest.fixture
def policy() -> EnrollmentWindowPolicy:
    return EnrollmentWindowPolicy(EnrollmentSettings())


TODAY = date(2026, 10, 19)


class TestWeekendClubWindow:
    """Weekend clubs accept students for 28 days."""

    def test_day_28_is_open(self, policy):
        program = make_program(ProgramType.WEEKEND_CLUB, TODAY - timedelta(days=28))

        decision = policy.can_enroll(program, TODAY)

        assert decision.allowed is True
        assert decision.days_passed == 28

    def test_day_29_is_closed(self, policy):
        program = make_program(ProgramType.WEEKEND_CLUB, TODAY - timedelta(days=29))

        decision = policy.can_enroll(program, TODAY)

        assert decision.allowed is False
        assert decision.days_passed == 29
        assert "28 days" in decision.reason
        assert "29 days have passed" in decision.reason


class TestHolidayCampWindow:
    """Holiday camps accept students for 5 days."""

    def test_day_5_is_open(self, policy):
        program = make_program(ProgramType.HOLIDAY_CAMP, TODAY - timedelta(days=5))

        assert policy.can_enroll(program, TODAY).allowed is True

    def test_day_6_is_closed(self, policy):
        program = make_program(ProgramType.HOLIDAY_CAMP, TODAY - timedelta(days=6))

        decision = policy.can_enroll(program, TODAY)

        assert decision.allowed is False
        assert decision.days_passed == 6


class TestWindowEdgeCases:
    """Start date edge cases."""

    def test_missing_start_date_is_closed(self, policy):
        program = make_program(ProgramType.WEEKEND_CLUB, None)

        decision = policy.can_enroll(program, TODAY)

        assert decision.allowed is False
        assert decision.days_passed is None
        assert "no start date" in decision.reason

    def test_future_start_date_is_open(self, policy):
        program = make_program(ProgramType.HOLIDAY_CAMP, TODAY + timedelta(days=10))

        decision = policy.can_enroll(program, TODAY)

        assert decision.allowed is True
        assert decision.days_passed == -10

    def test_limits_come_from_settings(self):
        policy = EnrollmentWindowPolicy(EnrollmentSettings(holiday_camp_window_days=10))
        program = make_program(ProgramType.HOLIDAY_CAMP, TODAY - timedelta(days=8))

        assert policy.limit_for(ProgramType.HOLIDAY_CAMP) == 10
        assert policy.can_enroll(program, TODAY).allowed is True
