"""Tests for outbound appointment webhooks: signing and fire-and-forget delivery."""
from __future__ import annotations

import json
import unittest
import uuid
from dataclasses import replace
from decimal import Decimal

import httpx

from slotkeeper.config.webhook import WebhookConfig
from slotkeeper.domain.appointment import Appointment
from slotkeeper.domain.events import AppointmentEvent, AppointmentEventType
from slotkeeper.domain.interval import Interval
from slotkeeper.services.appointment_webhook_service import (
    EVENT_HEADER,
    SIGNATURE_HEADER,
    WebhookEventPublisher,
    sign,
    verify_signature,
)
from slotkeeper.tests.fakes import _run, at

SECRET = "s3cret"
URL = "https://hooks.example.com/appointments"


def _event(event_type=AppointmentEventType.BOOKED):
    appt = Appointment.create(
        resource_scope_id=uuid.uuid4(),
        subject_id=uuid.uuid4(),
        service_id=4,
        interval=Interval(at(2030, 1, 7, 10), at(2030, 1, 7, 11)),
        price=Decimal("30"),
        currency="USD",
        now=at(2030, 1, 6),
    )
    persisted = Appointment.restore(replace(appt.snapshot(), id=uuid.uuid4()))
    return AppointmentEvent.from_appointment(event_type, persisted, occurred_at=at(2030, 1, 6))


def _publisher(handler, **config):
    cfg = WebhookConfig(url=config.get("url", URL), secret=config.get("secret", SECRET))
    return WebhookEventPublisher(cfg, transport=httpx.MockTransport(handler))


# ─── signatures ──────────────────────────────────────────────────────────────

class TestSignature(unittest.TestCase):
    def test_sign_and_verify(self):
        body = b'{"event":"appointment.booked"}'
        signature = sign(body, SECRET)
        self.assertTrue(signature.startswith("sha256="))
        self.assertTrue(verify_signature(body, SECRET, signature))
        self.assertTrue(verify_signature(body, SECRET, signature.removeprefix("sha256=")))

    def test_tampered_body_fails(self):
        signature = sign(b"original", SECRET)
        self.assertFalse(verify_signature(b"tampered", SECRET, signature))
        self.assertFalse(verify_signature(b"original", "other", signature))

    def test_missing_inputs_fail(self):
        self.assertFalse(verify_signature(b"x", "", "sha256=abc"))
        self.assertFalse(verify_signature(b"x", SECRET, ""))


# ─── dispatch ────────────────────────────────────────────────────────────────

class TestDispatch(unittest.TestCase):
    def test_posts_signed_json(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(204)

        event = _event(AppointmentEventType.CANCELLED)
        ok = _run(_publisher(handler).dispatch(event))

        self.assertTrue(ok)
        request = seen[0]
        self.assertEqual(str(request.url), URL)
        self.assertEqual(request.headers[EVENT_HEADER], "appointment.cancelled")
        self.assertTrue(verify_signature(request.content, SECRET, request.headers[SIGNATURE_HEADER]))
        payload = json.loads(request.content)
        self.assertEqual(payload["appointment"]["id"], str(event.appointment_id))

    def test_error_status_returns_false(self):
        publisher = _publisher(lambda request: httpx.Response(500))
        with self.assertLogs("slotkeeper.services.appointment_webhook_service", level="WARNING"):
            self.assertFalse(_run(publisher.dispatch(_event())))

    def test_transport_error_returns_false(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with self.assertLogs("slotkeeper.services.appointment_webhook_service", level="WARNING"):
            self.assertFalse(_run(_publisher(handler).dispatch(_event())))


# ─── publish ─────────────────────────────────────────────────────────────────

class TestPublish(unittest.TestCase):
    def test_disabled_without_secret(self):
        calls = []
        publisher = _publisher(lambda r: calls.append(r) or httpx.Response(200), secret=None)
        self.assertFalse(publisher.enabled)

        async def scenario():
            publisher.publish(_event())
            await publisher.drain()

        _run(scenario())
        self.assertEqual(calls, [])

    def test_publish_schedules_delivery(self):
        calls = []
        publisher = _publisher(lambda r: calls.append(r) or httpx.Response(200))

        async def scenario():
            publisher.publish(_event(AppointmentEventType.STARTED))
            publisher.publish(_event(AppointmentEventType.COMPLETED))
            await publisher.drain()

        _run(scenario())
        self.assertEqual(
            sorted(r.headers[EVENT_HEADER] for r in calls),
            ["appointment.completed", "appointment.started"],
        )

    def test_publish_outside_loop_is_dropped(self):
        calls = []
        publisher = _publisher(lambda r: calls.append(r) or httpx.Response(200))
        with self.assertLogs("slotkeeper.services.appointment_webhook_service", level="WARNING"):
            publisher.publish(_event())
        self.assertEqual(calls, [])


if __name__ == "__main__":
    unittest.main()
