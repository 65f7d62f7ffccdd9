"""End-to-end tests through the FastAPI app with an in-memory database."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime, timedelta, timezone

ADMIN = ("admin@miningcompany.com", "admin123")
L1 = ("john.supervisor@miningcompany.com", "approver123")
L2 = ("sarah.manager@miningcompany.com", "approver123")
MIKE = ("mike.employee@miningcompany.com", "employee123")
LISA = ("lisa.worker@miningcompany.com", "employee123")


def booking_body(window, vehicle_id=1, driver_id=1, **extra):
    start, end = window
    body = {"vehicle_id": vehicle_id, "driver_id": driver_id,
            "start_date": start.isoformat(), "end_date": end.isoformat()}
    body.update(extra)
    return body


def assert_error(resp, status_code, kind):
    assert resp.status_code == status_code, resp.text
    body = resp.json()
    assert body["error"] == kind
    assert body["message"]


class TestAuthEndpoints:
    def test_login_and_verify(self, client, login):
        headers = login(*MIKE)
        resp = client.get("/api/auth/verify-token", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {
            "valid": True,
            "user": {"id": 4, "name": "Mike Employee", "email": "mike.employee@miningcompany.com",
                     "role": "employee", "department": "Mining"},
        }

    def test_bad_password(self, client):
        resp = client.post("/api/auth/login", json={"email": ADMIN[0], "password": "nope"})
        assert_error(resp, 401, "auth_error")
        assert resp.json()["message"] == "Invalid email or password"

    def test_missing_and_garbage_token(self, client):
        assert_error(client.get("/api/bookings"), 401, "auth_error")
        assert_error(client.get("/api/bookings", headers={"Authorization": "Bearer xyz"}), 401, "auth_error")

    def test_logout_revokes_token(self, client, login):
        headers = login(*LISA)
        assert client.post("/api/auth/logout", headers=headers).status_code == 200
        assert_error(client.get("/api/auth/profile", headers=headers), 401, "auth_error")

    def test_profile_hides_password(self, client, login):
        resp = client.get("/api/auth/profile", headers=login(*ADMIN))
        assert resp.status_code == 200
        assert resp.json()["role"] == "admin"
        assert "password_hash" not in resp.json()


class TestBookingFlow:
    def test_two_level_approval(self, client, login, window):
        resp = client.post("/api/bookings", json=booking_body(window, purpose="Ore survey"),
                           headers=login(*ADMIN))
        assert resp.status_code == 201, resp.text
        booking = resp.json()
        assert booking["status"] == "pending"
        assert booking["notes"] == "Ore survey"
        assert [a["status"] for a in booking["approvals"]] == ["pending", "pending"]

        resp = client.patch(f"/api/bookings/{booking['id']}/approvals/1",
                            json={"decision": "approve"}, headers=login(*L1))
        assert resp.status_code == 200, resp.text
        assert resp.json()["status"] == "pending"

        resp = client.patch(f"/api/bookings/{booking['id']}/approvals/2",
                            json={"decision": "approve", "comments": "Go"}, headers=login(*L2))
        assert resp.status_code == 200, resp.text
        assert resp.json()["status"] == "approved"
        assert [a["status"] for a in resp.json()["approvals"]] == ["approved", "approved"]

    def test_level1_rejection(self, client, login, window):
        booking = client.post("/api/bookings", json=booking_body(window), headers=login(*MIKE)).json()

        resp = client.patch(f"/api/bookings/{booking['id']}/approvals/1",
                            json={"decision": "reject", "comments": "Not needed"}, headers=login(*L1))
        body = resp.json()
        assert body["status"] == "rejected"
        assert body["rejection_reason"] == "Not needed"
        assert [a["status"] for a in body["approvals"]] == ["rejected", "cancelled"]

        again = client.patch(f"/api/bookings/{booking['id']}/approvals/1",
                             json={"decision": "approve"}, headers=login(*L1))
        assert_error(again, 409, "invalid_state")

    def test_admin_cannot_resolve(self, client, login, window):
        headers = login(*ADMIN)
        booking = client.post("/api/bookings", json=booking_body(window), headers=headers).json()
        resp = client.patch(f"/api/bookings/{booking['id']}/approvals/1",
                            json={"decision": "approve"}, headers=headers)
        assert_error(resp, 403, "forbidden")

    def test_bad_level_and_decision(self, client, login, window):
        booking = client.post("/api/bookings", json=booking_body(window), headers=login(*MIKE)).json()
        headers = login(*L1)
        assert_error(client.patch(f"/api/bookings/{booking['id']}/approvals/3",
                                  json={"decision": "approve"}, headers=headers), 400, "validation_error")
        assert_error(client.patch(f"/api/bookings/{booking['id']}/approvals/1",
                                  json={"decision": "maybe"}, headers=headers), 400, "validation_error")

    def test_start_in_the_past(self, client, login):
        start = datetime.utcnow() - timedelta(days=30)
        resp = client.post("/api/bookings", json=booking_body((start, start + timedelta(hours=2))),
                           headers=login(*MIKE))
        assert_error(resp, 400, "validation_error")
        assert resp.json()["message"] == "Start date cannot be in the past"

    def test_edit_booking(self, client, login, window):
        start, end = window
        headers = login(*MIKE)
        booking = client.post("/api/bookings", json=booking_body(window), headers=headers).json()

        resp = client.put(f"/api/bookings/{booking['id']}", json={"purpose": "Drill site", "vehicle_id": 3},
                          headers=headers)
        assert resp.status_code == 200, resp.text
        assert (resp.json()["notes"], resp.json()["vehicle_id"]) == ("Drill site", 3)

        other = client.post("/api/bookings", json=booking_body((end, end + timedelta(hours=1))),
                            headers=login(*LISA)).json()
        later_end = (end + timedelta(minutes=30)).isoformat()
        clash = client.put(f"/api/bookings/{booking['id']}", json={"end_date": later_end}, headers=headers)
        assert_error(clash, 409, "conflict")
        assert_error(client.put(f"/api/bookings/{other['id']}", json={"notes": "x"}, headers=headers),
                     403, "forbidden")

    def test_edit_after_approval(self, client, login, window):
        headers = login(*MIKE)
        booking = client.post("/api/bookings", json=booking_body(window), headers=headers).json()
        for level, creds in ((1, L1), (2, L2)):
            client.patch(f"/api/bookings/{booking['id']}/approvals/{level}",
                         json={"decision": "approve"}, headers=login(*creds))

        resp = client.put(f"/api/bookings/{booking['id']}", json={"notes": "x"}, headers=headers)
        assert_error(resp, 409, "invalid_state")

    def test_date_filters_accept_timezones(self, client, login, window):
        start, end = window
        headers = login(*MIKE)
        client.post("/api/bookings", json=booking_body(window), headers=headers)

        # 09:00+02:00 is 07:00 UTC, before the 08:00 UTC start
        plus_two = timezone(timedelta(hours=2))
        early = (start + timedelta(hours=1)).replace(tzinfo=plus_two).isoformat()
        late = (start + timedelta(hours=1)).replace(tzinfo=timezone.utc).isoformat()

        found = client.get("/api/bookings", params={"start_from": early}, headers=headers).json()
        assert found["pagination"]["total"] == 1
        missed = client.get("/api/bookings", params={"start_from": late}, headers=headers).json()
        assert missed["pagination"]["total"] == 0


    def test_overlap_conflict(self, client, login, window):
        start, end = window
        assert client.post("/api/bookings", json=booking_body(window), headers=login(*MIKE)).status_code == 201

        resp = client.post("/api/bookings", json=booking_body((start + timedelta(minutes=30), end), driver_id=3),
                           headers=login(*LISA))
        assert_error(resp, 409, "conflict")

    def test_end_before_start(self, client, login, window):
        start, end = window
        resp = client.post("/api/bookings", json=booking_body((end, start)), headers=login(*MIKE))
        assert_error(resp, 400, "validation_error")

    def test_cancel(self, client, login, window):
        headers = login(*MIKE)
        booking = client.post("/api/bookings", json=booking_body(window), headers=headers).json()

        assert_error(client.patch(f"/api/bookings/{booking['id']}/cancel", headers=login(*LISA)), 403, "forbidden")
        resp = client.patch(f"/api/bookings/{booking['id']}/cancel", json={"reason": "Plans changed"},
                            headers=headers)
        assert resp.status_code == 200, resp.text
        assert resp.json()["status"] == "cancelled"
        assert_error(client.patch(f"/api/bookings/{booking['id']}/cancel", headers=headers), 409, "invalid_state")

    def test_unknown_booking(self, client, login):
        assert_error(client.get("/api/bookings/999", headers=login(*ADMIN)), 404, "not_found")

    def test_approval_queue(self, client, login, window):
        client.post("/api/bookings", json=booking_body(window), headers=login(*MIKE))
        resp = client.get("/api/approvals?status=pending", headers=login(*L1))
        assert resp.status_code == 200
        assert resp.json()["pagination"]["total"] == 1
        assert resp.json()["items"][0]["level"] == 1


class TestFleetEndpoints:
    def test_vehicle_pagination(self, client, login):
        headers = login(*MIKE)
        first = client.get("/api/vehicles?page=1&limit=2", headers=headers).json()
        assert first["pagination"] == {"page": 1, "limit": 2, "total": 5, "pages": 3}
        assert [v["plate_number"] for v in first["items"]] == ["MIN-001", "MIN-002"]

        last = client.get("/api/vehicles?page=3&limit=2", headers=headers).json()
        assert [v["plate_number"] for v in last["items"]] == ["MIN-005"]

    @pytest.mark.parametrize("query", ["page=0", "limit=0", "limit=101", "page=abc"])
    def test_bad_pagination(self, client, login, query):
        assert_error(client.get(f"/api/vehicles?{query}", headers=login(*MIKE)), 400, "validation_error")

    def test_employee_cannot_register_vehicle(self, client, login):
        resp = client.post("/api/vehicles", json={"plate_number": "MIN-900", "type": "truck"},
                           headers=login(*MIKE))
        assert_error(resp, 403, "forbidden")

    def test_admin_registers_and_updates_vehicle(self, client, login):
        headers = login(*ADMIN)
        resp = client.post("/api/vehicles", json={"plate_number": "MIN-900", "type": "truck"}, headers=headers)
        assert resp.status_code == 201, resp.text
        vehicle_id = resp.json()["id"]

        dup = client.post("/api/vehicles", json={"plate_number": "MIN-900", "type": "van"}, headers=headers)
        assert_error(dup, 409, "conflict")

        resp = client.put(f"/api/vehicles/{vehicle_id}", json={"status": "maintenance"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == "maintenance"
        assert resp.json()["type"] == "truck"

    def test_driver_filter_by_vehicle_type(self, client, login):
        resp = client.get("/api/drivers?vehicle_type=excavator", headers=login(*MIKE))
        assert resp.status_code == 200
        assert {d["name"] for d in resp.json()} == {"Robert Miller", "Carlos Rodriguez"}


class TestAdminEndpoints:
    def test_users_and_audit_logs(self, client, login):
        headers = login(*ADMIN)
        resp = client.post("/api/users", json={"name": "New Hire", "email": "new.hire@miningcompany.com",
                                               "password": "secret1", "role": "employee"}, headers=headers)
        assert resp.status_code == 201, resp.text
        assert "password" not in resp.json() and "password_hash" not in resp.json()

        assert client.get("/api/users", headers=headers).json()["pagination"]["total"] == 6
        logs = client.get("/api/audit-logs?entity_type=user&action=create", headers=headers).json()
        assert logs["pagination"]["total"] == 1

        assert_error(client.get("/api/users", headers=login(*MIKE)), 403, "forbidden")
        assert_error(client.get("/api/audit-logs", headers=login(*L1)), 403, "forbidden")

    def test_get_and_update_user(self, client, login, sessions):
        admin = login(*ADMIN)
        mike = login(*MIKE)

        resp = client.get("/api/users/4", headers=admin)
        assert resp.status_code == 200
        assert resp.json()["email"] == MIKE[0]
        assert_error(client.get("/api/users/999", headers=admin), 404, "not_found")

        resp = client.put("/api/users/4", json={"phone": "+15550100", "password": "fresh-pass"}, headers=admin)
        assert resp.status_code == 200, resp.text
        assert resp.json()["phone"] == "+15550100"
        assert client.post("/api/auth/login", json={"email": MIKE[0], "password": "fresh-pass"}).status_code == 200

        dup = client.put("/api/users/4", json={"email": LISA[0]}, headers=admin)
        assert_error(dup, 409, "conflict")

        live = len(sessions)
        resp = client.put("/api/users/4", json={"status": "inactive"}, headers=admin)
        assert resp.status_code == 200
        assert resp.json()["status"] == "inactive"
        assert len(sessions) == live - 2
        assert_error(client.get("/api/auth/profile", headers=mike), 401, "auth_error")

    def test_user_endpoints_are_admin_only(self, client, login):
        headers = login(*MIKE)
        assert_error(client.get("/api/users/4", headers=headers), 403, "forbidden")
        assert_error(client.put("/api/users/4", json={"role": "admin"}, headers=headers), 403, "forbidden")


    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["database"] == "ok"
        assert resp.json()["active_sessions"] == 0
