# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for role permissions."""

import pytest

from src.domains.auth import (
    CurrentUser,
    Permission,
    PermissionDeniedError,
    check_permission,
    has_permission,
    permissions_for,
)
from src.models.common import UserRole


class TestRolePermissions:
    """Tests for the role to permission mapping."""

    @pytest.mark.parametrize(
        "permission",
        [
            Permission.ENROLLMENTS_VIEW,
            Permission.ENROLLMENTS_CREATE,
            Permission.ENROLLMENTS_ASSIGN,
            Permission.ENROLLMENTS_PAYMENT,
        ],
    )
    def test_staff_can_run_enrollment_desk(self, permission):
        assert has_permission(UserRole.STAFF, permission)

    @pytest.mark.parametrize(
        "permission",
        [
            Permission.ENROLLMENTS_REMOVE,
            Permission.CLASSES_ARCHIVE,
            Permission.CLASSES_CAPACITY,
            Permission.PRICING_MANAGE,
        ],
    )
    def test_staff_cannot_administer(self, permission):
        assert not has_permission(UserRole.STAFF, permission)

    def test_admin_includes_staff(self):
        assert permissions_for(UserRole.STAFF) < permissions_for(UserRole.ADMIN)
        assert not has_permission(UserRole.ADMIN, Permission.PRICING_MANAGE)

    def test_superadmin_has_everything(self):
        codes = {
            value
            for name, value in vars(Permission).items()
            if name.isupper()
        }

        assert permissions_for(UserRole.SUPERADMIN) == codes

    def test_role_given_as_string(self):
        assert has_permission("ADMIN", Permission.CLASSES_ARCHIVE)

    def test_unknown_role_has_nothing(self):
        assert permissions_for("TEACHER") == frozenset()


class TestCheckPermission:
    """Tests for check_permission."""

    def test_allowed(self):
        check_permission(UserRole.ADMIN, Permission.CLASSES_ARCHIVE)

    def test_denied(self):
        with pytest.raises(PermissionDeniedError) as exc_info:
            check_permission(UserRole.STAFF, Permission.CLASSES_ARCHIVE)

        assert exc_info.value.permission == Permission.CLASSES_ARCHIVE
        assert exc_info.value.role == "STAFF"
        assert str(exc_info.value) == "Permission denied: classes.archive"

    def test_current_user(self):
        user = CurrentUser(id="u1", role=UserRole.STAFF)

        assert user.has_permission(Permission.ENROLLMENTS_ASSIGN)
        assert not user.has_permission(Permission.ENROLLMENTS_COMPLETE)
