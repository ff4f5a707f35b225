# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Role-based permission gate.

Operators have one role. Each role maps to a fixed set of permission codes;
ADMIN includes every STAFF permission and SUPERADMIN has all of them.

Example:
    >>> check_permission(UserRole.STAFF, Permission.ENROLLMENTS_ASSIGN)
    >>> check_permission(UserRole.STAFF, Permission.CLASSES_ARCHIVE)
    Traceback (most recent call last):
    ...
    PermissionDeniedError: Permission denied: classes.archive
"""

from dataclasses import dataclass

from src.models.common import UserRole


class Permission:
    """Permission codes checked by the API layer."""

    ENROLLMENTS_VIEW = "enrollments.view"
    ENROLLMENTS_CREATE = "enrollments.create"
    ENROLLMENTS_ASSIGN = "enrollments.assign"
    ENROLLMENTS_PAYMENT = "enrollments.payment"
    ENROLLMENTS_REMOVE = "enrollments.remove"
    ENROLLMENTS_COMPLETE = "enrollments.complete"
    ENROLLMENTS_EDIT_PRICE = "enrollments.edit_price"
    CLASSES_ARCHIVE = "classes.archive"
    CLASSES_CAPACITY = "classes.capacity"
    HISTORY_NOTES = "history.notes"
    WAITLIST_VIEW = "waitlist.view"
    WAITLIST_APPLY = "waitlist.apply"
    PRICING_MANAGE = "pricing.manage"


STAFF_PERMISSIONS = frozenset(
    {
        Permission.ENROLLMENTS_VIEW,
        Permission.ENROLLMENTS_CREATE,
        Permission.ENROLLMENTS_ASSIGN,
        Permission.ENROLLMENTS_PAYMENT,
        Permission.WAITLIST_VIEW,
    }
)

ADMIN_PERMISSIONS = STAFF_PERMISSIONS | frozenset(
    {
        Permission.ENROLLMENTS_REMOVE,
        Permission.ENROLLMENTS_COMPLETE,
        Permission.ENROLLMENTS_EDIT_PRICE,
        Permission.CLASSES_ARCHIVE,
        Permission.CLASSES_CAPACITY,
        Permission.HISTORY_NOTES,
        Permission.WAITLIST_APPLY,
    }
)

SUPERADMIN_PERMISSIONS = ADMIN_PERMISSIONS | frozenset({Permission.PRICING_MANAGE})

ROLE_PERMISSIONS: dict[UserRole, frozenset[str]] = {
    UserRole.STAFF: STAFF_PERMISSIONS,
    UserRole.ADMIN: ADMIN_PERMISSIONS,
    UserRole.SUPERADMIN: SUPERADMIN_PERMISSIONS,
}


class PermissionDeniedError(Exception):
    """Raised when a role lacks a permission."""

    def __init__(self, permission: str, role: str | None = None) -> None:
        super().__init__(f"Permission denied: {permission}")
        self.permission = permission
        self.role = role


def permissions_for(role: UserRole | str) -> frozenset[str]:
    """Permission codes granted to a role; unknown roles get none."""
    try:
        return ROLE_PERMISSIONS[UserRole(role)]
    except ValueError:
        return frozenset()


def has_permission(role: UserRole | str, permission: str) -> bool:
    return permission in permissions_for(role)


def check_permission(role: UserRole | str, permission: str) -> None:
    """Require a permission.

    Raises:
        PermissionDeniedError: If the role does not grant the permission.
    """
    if not has_permission(role, permission):
        raise PermissionDeniedError(permission, role=getattr(role, "value", role))


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated operator, as placed on ``request.state.user``.

    Attributes:
        id: Operator id.
        role: Operator role.
        email: Operator email, if known.
    """

    id: str
    role: UserRole
    email: str | None = None

    def has_permission(self, permission: str) -> bool:
        return has_permission(self.role, permission)
