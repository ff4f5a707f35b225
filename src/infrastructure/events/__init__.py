# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Event infrastructure module for the academy backend.

Components:
- EventBus: In-memory pub/sub with pattern matching
- EventTypes: Centralized event type constants

Architecture:
    EnrollmentService (after commit) → EventBus.publish() → subscribers
    (assignment email notifier, logging)

Quick Start:
    from src.infrastructure.events import get_event_bus, EventTypes

    event_bus = get_event_bus()
    event_bus.subscribe(EventTypes.Enrollment.CLASS_ASSIGNED, my_handler)
"""

from src.infrastructure.events.bus import (
    EventBus,
    EventData,
    EventHandler,
    get_event_bus,
    reset_event_bus,
)
from src.infrastructure.events.types import EventPatterns, EventTypes

__all__ = [
    "EventBus",
    "EventData",
    "EventHandler",
    "get_event_bus",
    "reset_event_bus",
    "EventTypes",
    "EventPatterns",
]
