# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course history domain package."""

from src.domains.course_history.service import (
    CourseHistoryLedger,
    CourseHistoryServiceError,
    HistoryEntryNotFoundError,
)

__all__ = [
    "CourseHistoryLedger",
    "CourseHistoryServiceError",
    "HistoryEntryNotFoundError",
]
