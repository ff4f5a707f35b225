# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Centralized event type definitions for the academy backend.

Using constants instead of string literals keeps a single source of truth
for event names. Pattern subscribers pick up new events automatically.
"""


class EventTypes:
    """All event types organized by domain."""

    class Enrollment:
        """Enrollment lifecycle events, published after commit."""

        PROGRAM_ENROLLED = "enrollment.program.enrolled"
        PAYMENT_CONFIRMED = "enrollment.payment.confirmed"
        CLASS_ASSIGNED = "enrollment.class.assigned"
        CLASS_UNASSIGNED = "enrollment.class.unassigned"
        PROGRAM_REMOVED = "enrollment.program.removed"
        COMPLETED = "enrollment.completed"

    class Class:
        """Class administration events."""

        ARCHIVED = "class.archived"
        UNARCHIVED = "class.unarchived"
        CAPACITY_CHANGED = "class.capacity.changed"
        OVERFLOW_EVICTED = "class.overflow.evicted"

    class Pricing:
        """Price tier events."""

        TIER_UPDATED = "pricing.tier.updated"


class EventPatterns:
    """Wildcard patterns for subscribing to multiple events.

    The EventBus supports pattern matching like 'enrollment.*' which
    matches 'enrollment.class.assigned', 'enrollment.completed', etc.
    """

    ALL_ENROLLMENT = "enrollment.*"
    ALL_CLASS = "class.*"
    ALL_PRICING = "pricing.*"

    ALL_CLASS_SEAT_CHANGES = "enrollment.class.*"
