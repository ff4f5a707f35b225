# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for pricing, waitlist and course history endpoints."""

from src.models.common import EnrollmentStatus, PaymentStatus

STAFF = {"X-Test-Role": "STAFF"}
ADMIN = {"X-Test-Role": "ADMIN"}
SUPERADMIN = {"X-Test-Role": "SUPERADMIN"}


class TestPricingAPI:
    """Tests for /pricing."""

    def test_list_prices(self, client):
        response = client.get("/api/v1/pricing", headers=STAFF)

        assert response.status_code == 200
        tiers = {t["price_type"]: t["amount"] for t in response.json()["tiers"]}
        assert tiers == {"FULL_PRICE": 60000, "SIBLING_DISCOUNT": 56000, "EARLY_BIRD": 54000}

    def test_only_superadmin_changes_prices(self, client, repository):
        body = {"price_type": "FULL_PRICE", "amount": 65000}

        assert client.put("/api/v1/pricing", json=body, headers=ADMIN).status_code == 403

        response = client.put("/api/v1/pricing", json=body, headers=SUPERADMIN)

        assert response.status_code == 200
        assert response.json()["is_override"] is True
        assert response.json()["updated_by"] == "superadmin-1"
        assert repository.pricing["FULL_PRICE"].amount == 65000

    def test_amount_must_be_positive(self, client):
        response = client.put(
            "/api/v1/pricing",
            json={"price_type": "FULL_PRICE", "amount": 0},
            headers=SUPERADMIN,
        )

        assert response.status_code == 422


class TestWaitlistAPI:
    """Tests for /waitlist."""

    def test_propose_and_apply(self, client, builder):
        program = builder.program()
        class_ = builder.class_(program, builder.course(), capacity=1)
        favoured = builder.enrollment(builder.student("Ret", is_returning_student=True), program)
        builder.enrollment(builder.student("New"), program)

        response = client.get(
            "/api/v1/waitlist/proposals", params={"program_id": program.id}, headers=STAFF
        )

        assert response.status_code == 200
        proposals = response.json()["proposals"]
        assert [p["enrollment_id"] for p in proposals] == [favoured.id]

        assert client.post(
            "/api/v1/waitlist/apply", json={"proposals": proposals}, headers=STAFF
        ).status_code == 403

        response = client.post("/api/v1/waitlist/apply", json={"proposals": proposals}, headers=ADMIN)

        assert response.status_code == 200
        assert response.json()["assigned"] == [favoured.id]
        assert favoured.class_id == class_.id

    def test_apply_reports_failures(self, client, builder):
        program = builder.program()
        class_ = builder.class_(program, builder.course())
        unpaid = builder.enrollment(
            builder.student(),
            program,
            status=EnrollmentStatus.WAITLIST,
            payment_status=PaymentStatus.PENDING,
        )
        proposal = {
            "enrollment_id": unpaid.id,
            "student_id": unpaid.student_id,
            "class_id": class_.id,
            "priority": 0,
        }

        response = client.post("/api/v1/waitlist/apply", json={"proposals": [proposal]}, headers=ADMIN)

        assert response.status_code == 200
        body = response.json()
        assert body["assigned"] == []
        assert body["failures"][0]["error"] == "PaymentNotConfirmedError"

    def test_apply_needs_proposals(self, client):
        response = client.post("/api/v1/waitlist/apply", json={"proposals": []}, headers=ADMIN)

        assert response.status_code == 422


class TestCourseHistoryAPI:
    """Tests for /course-history."""

    def test_student_history(self, client, builder):
        student = builder.student()
        program = builder.program()
        entry = builder.history(student, builder.course(), program)

        response = client.get(f"/api/v1/course-history/students/{student.id}", headers=STAFF)

        assert response.status_code == 200
        assert [e["id"] for e in response.json()] == [entry.id]

    def test_update_notes(self, client, builder):
        entry = builder.history(builder.student(), builder.course(), builder.program())

        assert client.put(
            f"/api/v1/course-history/{entry.id}/notes",
            json={"performance_notes": "Great progress"},
            headers=STAFF,
        ).status_code == 403

        response = client.put(
            f"/api/v1/course-history/{entry.id}/notes",
            json={"performance_notes": "Great progress"},
            headers=ADMIN,
        )

        assert response.status_code == 200
        assert entry.performance_notes == "Great progress"

    def test_update_notes_unknown_entry(self, client):
        response = client.put(
            "/api/v1/course-history/missing/notes",
            json={"performance_notes": "x"},
            headers=ADMIN,
        )

        assert response.status_code == 404
