# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for the academy enrollment backend.

This package contains domain services that encapsulate business logic.
Each domain module provides services that orchestrate operations
over the academy repository.

Domains:
    auth: Role-based permission checks.
    course_history: Course history ledger.
    enrollment: Program enrollment and class assignment engine.
    pricing: Price tiers and administrator overrides.
    waitlist: Waitlist priority and promotion.
"""
