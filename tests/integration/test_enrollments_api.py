# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for Enrollments API endpoints."""

from datetime import timedelta

import pytest

from src.domains.enrollment import NotificationFailureError
from src.infrastructure.events import EventTypes, get_event_bus
from src.models.common import EnrollmentStatus, PaymentStatus, ProgramType
from src.utils.datetime import utc_today

STAFF = {"X-Test-Role": "STAFF"}
ADMIN = {"X-Test-Role": "ADMIN"}


@pytest.fixture
def program(builder):
    return builder.program()


@pytest.fixture
def class_(builder, program):
    return builder.class_(program, builder.course(), capacity=1)


class TestEnrollmentsAPIRouting:
    """Tests for enrollments API routing."""

    def test_routes_registered(self, app):
        """Test that enrollment routes are registered."""
        routes = [route.path for route in app.routes]

        assert "/api/v1/enrollments" in routes
        assert "/api/v1/enrollments/{enrollment_id}" in routes
        assert "/api/v1/enrollments/{enrollment_id}/payment" in routes
        assert "/api/v1/enrollments/{enrollment_id}/price" in routes
        assert "/api/v1/enrollments/{enrollment_id}/assign" in routes
        assert "/api/v1/enrollments/{enrollment_id}/unassign" in routes
        assert "/api/v1/enrollments/{enrollment_id}/complete" in routes


class TestEnrollmentsAPIAuth:
    """Tests for authentication and permissions."""

    def test_requires_authentication(self, client):
        response = client.get("/api/v1/enrollments")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_staff_cannot_remove(self, client, builder, program):
        enrollment = builder.enrollment(builder.student(), program)

        response = client.delete(f"/api/v1/enrollments/{enrollment.id}", headers=STAFF)

        assert response.status_code == 403
        assert response.json()["detail"] == "Permission denied: enrollments.remove"


class TestEnrollProgram:
    """Tests for POST /enrollments."""

    def test_enroll_waitlisted(self, client, builder, program):
        student = builder.student()

        response = client.post(
            "/api/v1/enrollments",
            json={"student_id": student.id, "program_id": program.id},
            headers=STAFF,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == EnrollmentStatus.WAITLIST.value
        assert body["state"] == "WAITLIST"
        assert body["price_amount"] is None

    def test_enroll_confirmed(self, client, builder, program):
        student = builder.student()

        response = client.post(
            "/api/v1/enrollments",
            json={
                "student_id": student.id,
                "program_id": program.id,
                "batch_number": 2,
                "payment_confirmed": True,
                "price_type": "SIBLING_DISCOUNT",
            },
            headers=STAFF,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["state"] == "PENDING"
        assert body["price_amount"] == 56000

    def test_duplicate(self, client, builder, program):
        student = builder.student()
        builder.enrollment(student, program)

        response = client.post(
            "/api/v1/enrollments",
            json={"student_id": student.id, "program_id": program.id},
            headers=STAFF,
        )

        assert response.status_code == 409

    def test_window_closed(self, client, builder):
        camp = builder.program(
            program_type=ProgramType.HOLIDAY_CAMP,
            start_date=utc_today() - timedelta(days=9),
        )

        response = client.post(
            "/api/v1/enrollments",
            json={"student_id": builder.student().id, "program_id": camp.id},
            headers=STAFF,
        )

        assert response.status_code == 400
        assert response.json()["detail"]["days_passed"] == 9

    def test_unknown_student(self, client, program):
        response = client.post(
            "/api/v1/enrollments",
            json={"student_id": "missing", "program_id": program.id},
            headers=STAFF,
        )

        assert response.status_code == 404

    def test_batch_must_be_positive(self, client, builder, program):
        response = client.post(
            "/api/v1/enrollments",
            json={"student_id": builder.student().id, "program_id": program.id, "batch_number": 0},
            headers=STAFF,
        )

        assert response.status_code == 422


class TestReadEnrollments:
    """Tests for GET endpoints."""

    def test_list_filtered_by_status(self, client, builder, program):
        builder.enrollment(builder.student("A"), program, status=EnrollmentStatus.WAITLIST)
        builder.enrollment(builder.student("B"), program)

        response = client.get(
            "/api/v1/enrollments",
            params={"program_id": program.id, "status": "WAITLIST"},
            headers=STAFF,
        )

        assert response.status_code == 200
        assert response.json()["total"] == 1

    def test_get_unknown(self, client):
        response = client.get("/api/v1/enrollments/missing", headers=STAFF)

        assert response.status_code == 404


class TestPaymentAndPrice:
    """Tests for payment and price endpoints."""

    def test_confirm_payment_promotes(self, client, builder, program):
        enrollment = builder.enrollment(
            builder.student(),
            program,
            status=EnrollmentStatus.WAITLIST,
            payment_status=PaymentStatus.PENDING,
        )

        response = client.put(
            f"/api/v1/enrollments/{enrollment.id}/payment",
            json={"payment_status": "CONFIRMED"},
            headers=STAFF,
        )

        assert response.status_code == 200
        assert response.json()["state"] == "PENDING"

    def test_edit_price_requires_admin(self, client, builder, program):
        enrollment = builder.enrollment(builder.student(), program)
        body = {"price_type": "EARLY_BIRD"}

        assert client.put(
            f"/api/v1/enrollments/{enrollment.id}/price", json=body, headers=STAFF
        ).status_code == 403

        response = client.put(
            f"/api/v1/enrollments/{enrollment.id}/price", json=body, headers=ADMIN
        )

        assert response.status_code == 200
        assert response.json()["price_amount"] == 54000


class TestAssignment:
    """Tests for assignment endpoints."""

    def test_assign_success(self, client, builder, program, class_):
        enrollment = builder.enrollment(builder.student(), program)

        response = client.post(
            f"/api/v1/enrollments/{enrollment.id}/assign",
            json={"class_id": class_.id},
            headers=STAFF,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["enrollment"]["state"] == "ASSIGNED"
        assert body["history_entry"]["completion_status"] == "IN_PROGRESS"
        assert body["notes"] == []

    def test_assign_full_class(self, client, builder, program, class_):
        builder.enrollment(builder.student("Seated"), program, class_=class_)
        enrollment = builder.enrollment(builder.student(), program)

        response = client.post(
            f"/api/v1/enrollments/{enrollment.id}/assign",
            json={"class_id": class_.id},
            headers=STAFF,
        )

        assert response.status_code == 409

    def test_assign_unpaid(self, client, builder, program, class_):
        enrollment = builder.enrollment(
            builder.student(), program, payment_status=PaymentStatus.PENDING
        )

        response = client.post(
            f"/api/v1/enrollments/{enrollment.id}/assign",
            json={"class_id": class_.id},
            headers=STAFF,
        )

        assert response.status_code == 400
        assert "CONFIRMED" in response.json()["detail"]["remediation"]

    def test_repeat_course_needs_confirmation(self, client, builder, program, class_):
        student = builder.student()
        course = builder.repository.courses[class_.course_id]
        builder.history(student, course, builder.program(name="Spring Club"))
        enrollment = builder.enrollment(student, program)
        url = f"/api/v1/enrollments/{enrollment.id}/assign"

        response = client.post(url, json={"class_id": class_.id}, headers=STAFF)

        assert response.status_code == 409
        assert response.json()["detail"]["course_id"] == course.id

        response = client.post(
            url, json={"class_id": class_.id, "confirm_repeat": True}, headers=STAFF
        )

        assert response.status_code == 200

    def test_notification_failure_is_a_note(self, client, builder, program, class_):
        async def failing(event):
            raise NotificationFailureError("Assignment email failed for: parent@example.com")

        get_event_bus().subscribe(EventTypes.Enrollment.CLASS_ASSIGNED, failing)
        enrollment = builder.enrollment(builder.student(), program)

        response = client.post(
            f"/api/v1/enrollments/{enrollment.id}/assign",
            json={"class_id": class_.id},
            headers=STAFF,
        )

        assert response.status_code == 200
        assert response.json()["notes"] == [
            "Notification failed: Assignment email failed for: parent@example.com"
        ]

    def test_unassign_pending(self, client, builder, program):
        enrollment = builder.enrollment(builder.student(), program)

        response = client.post(f"/api/v1/enrollments/{enrollment.id}/unassign", headers=STAFF)

        assert response.status_code == 409


class TestCompletionAndRemoval:
    """Tests for completion and removal."""

    def test_complete(self, client, builder, repository, program, class_):
        enrollment = builder.enrollment(builder.student(), program, class_=class_)

        response = client.post(f"/api/v1/enrollments/{enrollment.id}/complete", headers=ADMIN)

        assert response.status_code == 200
        assert response.json()["history_entry"]["completion_status"] == "COMPLETED"
        assert enrollment.id not in repository.enrollments

    def test_remove(self, client, builder, repository, program):
        enrollment = builder.enrollment(builder.student(), program)

        response = client.delete(f"/api/v1/enrollments/{enrollment.id}", headers=ADMIN)

        assert response.status_code == 204
        assert repository.enrollments == {}
