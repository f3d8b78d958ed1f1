"""WebhookEventPublisher: outbound HMAC-signed appointment events.

Outbound security model
-----------------------
Every event body is signed with HMAC-SHA256 using ``APPOINTMENT_WEBHOOK_SECRET``.
The hex digest is sent in the ``X-Slotkeeper-Signature: sha256=<hex>`` header
and the event name in ``X-Slotkeeper-Event``.

Typical verification on the receiving side::

    from slotkeeper.services.appointment_webhook_service import verify_signature
    assert verify_signature(request_body, secret, request.headers["X-Slotkeeper-Signature"])

Events fired
------------
- ``appointment.booked``     : new appointment saved
- ``appointment.cancelled``  : cancelled, with the reason when given
- ``appointment.rescheduled``: interval changed
- ``appointment.started``    : pending → in_progress (sweeper or manual)
- ``appointment.completed``  : in_progress → completed (sweeper or manual)
"""
from __future__ import annotations

import asyncio
import hashlib
import hmac
import json
import logging
from typing import Optional, Set

import httpx

from slotkeeper.config.webhook import WebhookConfig
from slotkeeper.domain.events import AppointmentEvent
from slotkeeper.domain.ports import EventPublisher

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Slotkeeper-Signature"
EVENT_HEADER = "X-Slotkeeper-Event"


def sign(body: bytes, secret: str) -> str:
    """Return ``sha256=<hex>`` HMAC signature for *body* using *secret*."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def verify_signature(body: bytes, secret: str, provided_sig: str) -> bool:
    """Check *provided_sig* (bare hex or ``sha256=<hex>``) against *body*.

    Uses ``hmac.compare_digest`` to prevent timing attacks.
    """
    if not secret or not provided_sig:
        return False
    expected = sign(body, secret).removeprefix("sha256=")
    return hmac.compare_digest(expected, provided_sig.removeprefix("sha256="))


def encode_event(event: AppointmentEvent) -> bytes:
    return json.dumps(event.to_dict(), ensure_ascii=False, separators=(",", ":")).encode("utf-8")


class WebhookEventPublisher(EventPublisher):
    """
    Fire-and-forget delivery: ``publish`` schedules a background POST and
    returns at once. Failures are logged at WARNING and never raised.
    """

    def __init__(
        self,
        config: WebhookConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._pending: Set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    def publish(self, event: AppointmentEvent) -> None:
        if not self.enabled:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("AppointmentWebhook: no running loop, dropping %s", event.event_type.value)
            return
        task = loop.create_task(self.dispatch(event))
        # The loop holds only weak references to tasks
        self._pending.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning("AppointmentWebhook: delivery task failed: %r", task.exception())

    async def dispatch(self, event: AppointmentEvent) -> bool:
        """POST one signed event. Returns True on a 2xx/3xx response."""
        name = event.event_type.value
        body = encode_event(event)
        headers = {
            "Content-Type": "application/json",
            SIGNATURE_HEADER: sign(body, self._config.secret or ""),
            EVENT_HEADER: name,
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds, transport=self._transport
            ) as client:
                resp = await client.post(self._config.url, content=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("AppointmentWebhook: %s → %s failed: %s", name, self._config.url, exc)
            return False

        if resp.status_code >= 400:
            logger.warning(
                "AppointmentWebhook: %s → %s returned HTTP %d",
                name, self._config.url, resp.status_code,
            )
            return False
        logger.info(
            "AppointmentWebhook: %s dispatched → %s (%d)",
            name, self._config.url, resp.status_code,
        )
        return True

    async def drain(self) -> None:
        """Wait for in-flight deliveries. Call on shutdown."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
