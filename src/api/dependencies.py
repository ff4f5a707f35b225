# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions and the repository
- Get the authenticated operator
- Check permissions
- Get service instances

Example:
    @router.post("/enrollments")
    async def enroll(
        service: EnrollmentService = Depends(get_enrollment_service),
        current_user: CurrentUser = Depends(RequirePermission(Permission.ENROLLMENTS_CREATE)),
    ):
        ...
"""

import logging
from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.auth.permissions import CurrentUser, PermissionDeniedError, check_permission
from src.domains.course_history import CourseHistoryLedger
from src.domains.enrollment import EnrollmentService
from src.domains.pricing import PricingService
from src.domains.waitlist import WaitlistService
from src.infrastructure.database.connection import get_session
from src.infrastructure.database.repository import AcademyRepository

logger = logging.getLogger(__name__)


# =========================================================================
# Database Dependencies
# =========================================================================


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session.

    Yields:
        AsyncSession for the academy database.
    """
    async with get_session() as session:
        yield session


def get_repository(db: AsyncSession = Depends(get_db)) -> AcademyRepository:
    return AcademyRepository(db)


# =========================================================================
# Service Dependencies
# =========================================================================


def get_pricing_service(
    repository: AcademyRepository = Depends(get_repository),
) -> PricingService:
    return PricingService(repository)


def get_enrollment_service(
    repository: AcademyRepository = Depends(get_repository),
) -> EnrollmentService:
    return EnrollmentService(repository)


def get_history_ledger(
    repository: AcademyRepository = Depends(get_repository),
) -> CourseHistoryLedger:
    return CourseHistoryLedger(repository)


def get_waitlist_service(
    repository: AcademyRepository = Depends(get_repository),
    enrollment_service: EnrollmentService = Depends(get_enrollment_service),
) -> WaitlistService:
    return WaitlistService(repository, enrollment_service=enrollment_service)


# =========================================================================
# Authentication Dependencies
# =========================================================================


def get_current_user(request: Request) -> CurrentUser | None:
    """Get the operator placed on the request by the auth middleware.

    Args:
        request: HTTP request.

    Returns:
        CurrentUser or None.
    """
    user = getattr(request.state, "user", None)
    return user if isinstance(user, CurrentUser) else None


def require_auth(request: Request) -> CurrentUser:
    """Require authenticated user.

    Args:
        request: HTTP request.

    Returns:
        CurrentUser.

    Raises:
        HTTPException: If not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


class RequirePermission:
    """Dependency for requiring a specific permission.

    Example:
        @router.post("/classes/{class_id}/archive")
        async def archive(
            user: CurrentUser = Depends(RequirePermission(Permission.CLASSES_ARCHIVE)),
        ):
            ...
    """

    def __init__(self, permission: str) -> None:
        """Initialize permission requirement.

        Args:
            permission: Required permission code.
        """
        self.permission = permission

    def __call__(self, request: Request) -> CurrentUser:
        """Check the permission and return the user.

        Raises:
            HTTPException: 401 if not authenticated, 403 if not permitted.
        """
        user = require_auth(request)

        try:
            check_permission(user.role, self.permission)
        except PermissionDeniedError as e:
            logger.warning(
                "Permission denied: user=%s, role=%s, permission=%s",
                user.id,
                user.role,
                self.permission,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=str(e),
            ) from e

        return user
