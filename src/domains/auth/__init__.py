# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authorization domain.

Operators are authenticated by the surrounding application; this package
only decides what an authenticated role may do.

Exports:
    Permission: Permission codes.
    ROLE_PERMISSIONS: Role to permission mapping.
    CurrentUser: Authenticated operator.
    check_permission: Permission gate.
    PermissionDeniedError: Raised by the gate.
"""

from src.domains.auth.permissions import (
    ROLE_PERMISSIONS,
    CurrentUser,
    Permission,
    PermissionDeniedError,
    check_permission,
    has_permission,
    permissions_for,
)

__all__ = [
    "ROLE_PERMISSIONS",
    "CurrentUser",
    "Permission",
    "PermissionDeniedError",
    "check_permission",
    "has_permission",
    "permissions_for",
]
