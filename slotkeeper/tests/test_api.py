"""HTTP tests for the appointments and availability routers over in-memory stores."""
from __future__ import annotations

import unittest
import uuid
from decimal import Decimal

from fastapi import FastAPI
from fastapi.testclient import TestClient
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from slotkeeper.api.dependencies import (
    get_appointment_service,
    get_availability_service,
    get_schedule_config_store,
)
from slotkeeper.api.errors import register_error_handlers
from slotkeeper.api.routers import appointments, availability
from slotkeeper.services.appointment_service import AppointmentService
from slotkeeper.services.availability_service import AvailabilityService
from slotkeeper.tests.fakes import (
    FakeClock,
    InMemoryAppointmentStore,
    InMemoryScheduleConfigStore,
    RecordingPublisher,
    at,
    weekday_config,
)

SCOPE = uuid.uuid4()


# ─── helpers ─────────────────────────────────────────────────────────────────

def _make_test_app(store, schedules, publisher, clock):
    """Minimal app with both routers; services are wired to in-memory stores."""
    app = FastAPI()
    app.state.limiter = appointments.limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_error_handlers(app)
    app.include_router(appointments.router, prefix="/api/v1")
    app.include_router(availability.router, prefix="/api/v1")

    app.dependency_overrides[get_appointment_service] = lambda: AppointmentService(
        store, publisher, clock=clock
    )
    app.dependency_overrides[get_availability_service] = lambda: AvailabilityService(
        store, schedules, clock=clock
    )
    app.dependency_overrides[get_schedule_config_store] = lambda: schedules
    return app


def _booking(start="2030-01-07T10:00:00Z", end="2030-01-07T10:30:00Z", **overrides):
    body = {
        "resource_scope_id": str(SCOPE),
        "subject_id": str(uuid.uuid4()),
        "service_id": 5,
        "start_time": start,
        "end_time": end,
        "price": "45.00",
        "currency": "USD",
    }
    body.update(overrides)
    return body


class _ApiCase(unittest.TestCase):
    def setUp(self):
        appointments.limiter.reset()
        self.store = InMemoryAppointmentStore()
        self.schedules = InMemoryScheduleConfigStore(
            {SCOPE: weekday_config(opens="10:00", closes="11:00")}
        )
        self.publisher = RecordingPublisher()
        self.clock = FakeClock(at(2030, 1, 6, 12, 0))
        app = _make_test_app(self.store, self.schedules, self.publisher, self.clock)
        self.client = TestClient(app, raise_server_exceptions=False)

    def book(self, **kwargs):
        resp = self.client.post("/api/v1/appointments", json=_booking(**kwargs))
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()


# ─── booking ─────────────────────────────────────────────────────────────────

class TestBookingEndpoint(_ApiCase):
    def test_book_returns_created(self):
        data = self.book(user_notes="first time")
        self.assertEqual(data["status"], "pending")
        self.assertEqual(data["duration_minutes"], 30)
        self.assertEqual(Decimal(data["price"]), Decimal("45"))
        self.assertEqual(data["currency"], "USD")
        self.assertEqual(data["user_notes"], "first time")
        self.assertEqual(self.publisher.names, ["appointment.booked"])

    def test_overlap_is_conflict(self):
        self.book()
        resp = self.client.post(
            "/api/v1/appointments",
            json=_booking("2030-01-07T10:15:00Z", "2030-01-07T10:45:00Z"),
        )
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"]["code"], "SLOT_UNAVAILABLE")

    def test_past_start_is_bad_request(self):
        resp = self.client.post(
            "/api/v1/appointments",
            json=_booking("2030-01-05T10:00:00Z", "2030-01-05T10:30:00Z"),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"]["code"], "INVALID_APPOINTMENT")

    def test_inverted_interval_is_bad_request(self):
        resp = self.client.post(
            "/api/v1/appointments",
            json=_booking("2030-01-07T11:00:00Z", "2030-01-07T10:00:00Z"),
        )
        self.assertEqual(resp.status_code, 400)

    def test_schema_errors_are_bad_request(self):
        for bad in (
            {"currency": "US"},
            {"price": "-1"},
            {"price": "10.005"},
            {"price": "1e12"},
            {"service_id": 0},
        ):
            with self.subTest(body=bad):
                resp = self.client.post("/api/v1/appointments", json=_booking(**bad))
                self.assertEqual(resp.status_code, 400)
                self.assertEqual(resp.json()["error"]["code"], "VALIDATION_ERROR")


# ─── reads ───────────────────────────────────────────────────────────────────

class TestReadEndpoints(_ApiCase):
    def test_get_and_not_found(self):
        created = self.book()
        resp = self.client.get(f"/api/v1/appointments/{created['id']}")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["id"], created["id"])

        resp = self.client.get(f"/api/v1/appointments/{uuid.uuid4()}")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"]["code"], "NOT_FOUND")

    def test_list_filters(self):
        first = self.book()
        self.book(start="2030-01-07T10:30:00Z", end="2030-01-07T11:00:00Z")
        self.client.post(f"/api/v1/appointments/{first['id']}/cancel")

        resp = self.client.get("/api/v1/appointments", params={"resource_scope_id": str(SCOPE)})
        self.assertEqual(len(resp.json()), 2)

        resp = self.client.get(
            "/api/v1/appointments",
            params={"resource_scope_id": str(SCOPE), "status": "cancelled"},
        )
        self.assertEqual([a["id"] for a in resp.json()], [first["id"]])

        resp = self.client.get("/api/v1/appointments")
        self.assertEqual(resp.json(), [])

    def test_subject_active(self):
        subject = str(uuid.uuid4())
        kept = self.book(subject_id=subject)
        gone = self.book(subject_id=subject, start="2030-01-07T10:30:00Z", end="2030-01-07T11:00:00Z")
        self.client.post(f"/api/v1/appointments/{gone['id']}/cancel")

        resp = self.client.get(f"/api/v1/appointments/subjects/{subject}/active")
        self.assertEqual([a["id"] for a in resp.json()], [kept["id"]])


# ─── lifecycle ───────────────────────────────────────────────────────────────

class TestLifecycleEndpoints(_ApiCase):
    def test_cancel_with_reason_then_again(self):
        created = self.book()
        url = f"/api/v1/appointments/{created['id']}/cancel"

        resp = self.client.post(url, json={"reason": "travelling"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "cancelled")
        self.assertEqual(resp.json()["admin_notes"], "travelling")

        resp = self.client.post(url)
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json()["error"]["code"], "INVALID_TRANSITION")

    def test_start_complete(self):
        created = self.book()
        base = f"/api/v1/appointments/{created['id']}"
        resp = self.client.post(f"{base}/start", json={"meeting_link": "https://meet.example/r"})
        self.assertEqual(resp.json()["status"], "in_progress")
        self.assertEqual(resp.json()["meeting_link"], "https://meet.example/r")
        resp = self.client.post(f"{base}/complete")
        self.assertEqual(resp.json()["status"], "completed")

    def test_reschedule(self):
        created = self.book()
        resp = self.client.post(
            f"/api/v1/appointments/{created['id']}/reschedule",
            json={"start_time": "2030-01-07T10:30:00Z", "end_time": "2030-01-07T11:00:00Z"},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["start_time"], "2030-01-07T10:30:00Z")

    def test_admin_notes_and_delete(self):
        created = self.book()
        base = f"/api/v1/appointments/{created['id']}"
        resp = self.client.put(f"{base}/admin-notes", json={"admin_notes": "called twice"})
        self.assertEqual(resp.json()["admin_notes"], "called twice")

        self.assertEqual(self.client.delete(base).status_code, 204)
        self.assertEqual(self.client.delete(base).status_code, 404)


# ─── availability ────────────────────────────────────────────────────────────

class TestAvailabilityEndpoints(_ApiCase):
    def test_available_slots_exclude_bookings(self):
        self.book()
        resp = self.client.get(
            f"/api/v1/scopes/{SCOPE}/available-slots", params={"date": "2030-01-07"}
        )
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["total_slots"], 1)
        self.assertEqual(data["available_slots"][0]["start_time"], "2030-01-07T10:30:00Z")

    def test_missing_config_is_server_error(self):
        resp = self.client.get(
            f"/api/v1/scopes/{uuid.uuid4()}/available-slots", params={"date": "2030-01-07"}
        )
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["error"]["code"], "CONFIGURATION_ERROR")

    def test_working_hours(self):
        self.clock.set(at(2030, 1, 7, 10, 15))
        resp = self.client.get(f"/api/v1/scopes/{SCOPE}/working-hours", params={"date": "2030-01-07"})
        self.assertEqual(
            resp.json(),
            {"date": "2030-01-07", "opening_time": "10:00:00", "closing_time": "11:00:00", "is_open": True},
        )

    def test_schedule_config_round_trip(self):
        scope = uuid.uuid4()
        url = f"/api/v1/scopes/{scope}/schedule-config"
        self.assertEqual(self.client.get(url).status_code, 404)

        payload = weekday_config(slot=20, buffer=10).to_payload()
        resp = self.client.put(url, json=payload)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.client.get(url).json(), payload)

    def test_invalid_schedule_config_is_bad_request(self):
        resp = self.client.put(
            f"/api/v1/scopes/{SCOPE}/schedule-config", json={"slotDuration": 0}
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"]["code"], "VALIDATION_ERROR")


class TestHealth(unittest.TestCase):
    def test_health(self):
        from slotkeeper.api.main import app

        resp = TestClient(app).get("/health")
        self.assertEqual(resp.json(), {"status": "ok"})


if __name__ == "__main__":
    unittest.main()
