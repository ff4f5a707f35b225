# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment window policy.

New program enrollments are accepted for a limited number of days after a
program starts: 28 for weekend clubs and 5 for holiday camps by default.
A program without a start date is closed. The window is only evaluated at
program sign-up; class assignment within an enrolled program is never
time-gated.
"""

from dataclasses import dataclass
from datetime import date

from src.core.config.settings import EnrollmentSettings, get_settings
from src.infrastructure.database.models import Program
from src.models.common import ProgramType
from src.utils.datetime import days_between, utc_today


@dataclass(frozen=True)
class WindowDecision:
    """Outcome of an enrollment window check."""

    allowed: bool
    reason: str | None = None
    days_passed: int | None = None


class EnrollmentWindowPolicy:
    """Decides whether a program still accepts enrollments."""

    def __init__(self, settings: EnrollmentSettings | None = None) -> None:
        self.settings = settings or get_settings().enrollment

    def limit_for(self, program_type: ProgramType) -> int:
        """Days after the start date during which enrollment stays open."""
        if program_type == ProgramType.WEEKEND_CLUB:
            return self.settings.weekend_club_window_days
        return self.settings.holiday_camp_window_days

    def can_enroll(self, program: Program, today: date | None = None) -> WindowDecision:
        """Check the enrollment window of a program.

        Args:
            program: The program being joined.
            today: Reference date, defaults to today in UTC.

        Returns:
            WindowDecision with the days elapsed since the start date.
        """
        if program.start_date is None:
            return WindowDecision(
                allowed=False,
                reason=f"Program {program.name} has no start date; enrollment is closed",
            )

        today = today or utc_today()
        days_passed = days_between(program.start_date, today)
        limit = self.limit_for(program.type)

        if days_passed > limit:
            label = program.type.value.replace("_", " ").title()
            return WindowDecision(
                allowed=False,
                reason=(
                    f"Enrollment window closed: {label} programs accept new students "
                    f"for {limit} days after the start date ({days_passed} days have passed)"
                ),
                days_passed=days_passed,
            )

        return WindowDecision(allowed=True, days_passed=days_passed)
