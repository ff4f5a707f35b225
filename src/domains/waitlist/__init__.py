# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Waitlist domain package.

Ranks waiting enrollments and places them in classes with free seats.
"""

from src.domains.waitlist.promoter import (
    PromotionProposal,
    WaitlistEntry,
    calculate_priority,
    promote,
)
from src.domains.waitlist.service import PromotionFailure, PromotionOutcome, WaitlistService

__all__ = [
    "PromotionFailure",
    "PromotionOutcome",
    "PromotionProposal",
    "WaitlistEntry",
    "WaitlistService",
    "calculate_priority",
    "promote",
]
