# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enumerations shared across the academy backend.

The values are stored verbatim in the database, so they must not be
renamed without a migration.
"""

from enum import Enum


class ProgramType(str, Enum):
    """Kind of program, which decides its enrollment window."""

    WEEKEND_CLUB = "WEEKEND_CLUB"
    HOLIDAY_CAMP = "HOLIDAY_CAMP"


class EnrollmentStatus(str, Enum):
    """Stored status column of a program enrollment."""

    WAITLIST = "WAITLIST"
    ASSIGNED = "ASSIGNED"
    COMPLETED = "COMPLETED"
    DROPPED = "DROPPED"  # Legacy rows only


class PaymentStatus(str, Enum):
    """Payment state of a program enrollment."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"


class PriceType(str, Enum):
    """Pricing tier applied to an enrollment."""

    FULL_PRICE = "FULL_PRICE"
    SIBLING_DISCOUNT = "SIBLING_DISCOUNT"
    EARLY_BIRD = "EARLY_BIRD"


class CompletionStatus(str, Enum):
    """Completion state of a course history entry."""

    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class UserRole(str, Enum):
    """Operator roles recognised by the permission gate."""

    SUPERADMIN = "SUPERADMIN"
    ADMIN = "ADMIN"
    STAFF = "STAFF"
