# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    enrollments: Program enrollment and class assignment endpoints.
    classes: Class roster, archive and capacity endpoints.
    course_history: Course history endpoints.
    pricing: Price tier endpoints.
    waitlist: Waitlist promotion endpoints.
"""

from fastapi import APIRouter

from src.api.v1 import classes, course_history, enrollments, pricing, waitlist

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(enrollments.router, prefix="/enrollments", tags=["Enrollments"])
router.include_router(classes.router, prefix="/classes", tags=["Classes"])
router.include_router(course_history.router, prefix="/course-history", tags=["Course History"])
router.include_router(pricing.router, prefix="/pricing", tags=["Pricing"])
router.include_router(waitlist.router, prefix="/waitlist", tags=["Waitlist"])

__all__ = ["router"]
