"""LifecycleSweeper: periodic pass that moves appointments whose time boundary has passed.

Each tick, at ``now``:
    1. pending with start <= now      → start()     (earliest start first)
    2. in_progress with end <= now    → complete()  (earliest end first)

Every appointment is re-read under ``FOR UPDATE SKIP LOCKED`` in its own
transaction and re-checked before it is touched. One failing appointment is
logged and skipped; it is retried on the next tick.
"""
from __future__ import annotations

import asyncio
import datetime as _dt
import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from slotkeeper.config.sweeper import SweeperConfig
from slotkeeper.domain.appointment import Appointment, utcnow
from slotkeeper.domain.events import AppointmentEvent, AppointmentEventType
from slotkeeper.domain.ports import Clock, EventPublisher, NullEventPublisher, RepositoryScope
from slotkeeper.domain.status import AppointmentStatus, status_for_instant

logger = logging.getLogger(__name__)

_STARTED = "started"
_COMPLETED = "completed"
_SKIPPED = "skipped"
_FAILED = "failed"


@dataclass
class SweepResult:
    started: int = 0
    completed: int = 0
    failed: int = 0
    skipped: int = 0
    # False when the tick was dropped because a previous one was still running
    ran: bool = True

    @property
    def transitioned(self) -> int:
        return self.started + self.completed

    def record(self, outcome: str) -> None:
        setattr(self, outcome, getattr(self, outcome) + 1)


def _due_to_start(appointment: Appointment, now: _dt.datetime) -> bool:
    return (
        appointment.status is AppointmentStatus.PENDING
        and status_for_instant(now, appointment.interval) is not AppointmentStatus.PENDING
    )


def _due_to_complete(appointment: Appointment, now: _dt.datetime) -> bool:
    return (
        appointment.status is AppointmentStatus.IN_PROGRESS
        and status_for_instant(now, appointment.interval) is AppointmentStatus.COMPLETED
    )


class LifecycleSweeper:
    def __init__(
        self,
        repository_scope: RepositoryScope,
        publisher: Optional[EventPublisher] = None,
        clock: Clock = utcnow,
        config: Optional[SweeperConfig] = None,
    ) -> None:
        self._repository_scope = repository_scope
        self._publisher = publisher or NullEventPublisher()
        self._clock = clock
        self._config = config or SweeperConfig()
        self._run_lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self, now: Optional[_dt.datetime] = None) -> SweepResult:
        """One sweep. An overlapping call returns immediately with ``ran=False``."""
        if self._run_lock.locked():
            logger.warning("LifecycleSweeper: previous sweep still running, skipping tick")
            return SweepResult(ran=False)

        async with self._run_lock:
            now = now or self._clock()
            result = SweepResult()
            limit = self._config.batch_size

            async with self._repository_scope() as store:
                due = await store.find_due_to_start(now, limit)
            ids = [a.id for a in due]
            if ids:
                logger.info("LifecycleSweeper: %d appointment(s) due to start", len(ids))
            for appointment_id in ids:
                result.record(await self._advance(appointment_id, now, _STARTED))

            async with self._repository_scope() as store:
                due = await store.find_due_to_complete(now, limit)
            ids = [a.id for a in due]
            if ids:
                logger.info("LifecycleSweeper: %d appointment(s) due to complete", len(ids))
            for appointment_id in ids:
                result.record(await self._advance(appointment_id, now, _COMPLETED))

            if result.transitioned or result.failed:
                logger.info(
                    "LifecycleSweeper: sweep done started=%d completed=%d failed=%d skipped=%d",
                    result.started, result.completed, result.failed, result.skipped,
                )
            return result

    async def _advance(self, appointment_id: UUID, now: _dt.datetime, target: str) -> str:
        try:
            async with self._repository_scope() as store:
                appointment = await store.get_for_update(appointment_id, skip_locked=True)
                # Locked by a booking-side write, or moved on since the batch query
                if appointment is None:
                    return _SKIPPED
                if target == _STARTED:
                    if not _due_to_start(appointment, now):
                        return _SKIPPED
                    appointment.start(None, now=now)
                else:
                    if not _due_to_complete(appointment, now):
                        return _SKIPPED
                    appointment.complete(now=now)
                saved = await store.save(appointment)
        except Exception:
            logger.exception(
                "LifecycleSweeper: failed to move %s to %s",
                appointment_id, target,
                extra={"context": {"appointment_id": str(appointment_id), "target": target}},
            )
            return _FAILED

        logger.info(
            "LifecycleSweeper: %s %s",
            target, appointment_id,
            extra={"context": {"appointment_id": str(appointment_id), "status": saved.status.value}},
        )
        event_type = AppointmentEventType.STARTED if target == _STARTED else AppointmentEventType.COMPLETED
        self._publisher.publish(AppointmentEvent.from_appointment(event_type, saved, occurred_at=now))
        return target

    # ── Periodic task ────────────────────────────────────────────────────────

    def start(self) -> None:
        """Schedule the periodic loop on the running event loop."""
        if not self._config.enabled:
            logger.info("LifecycleSweeper: disabled (SWEEPER_ENABLED=false)")
            return
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="lifecycle-sweeper")
        logger.info(
            "LifecycleSweeper: started (interval=%ss, batch=%d)",
            self._config.interval_seconds, self._config.batch_size,
        )

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("LifecycleSweeper: stopped")

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception:
                # Batch query failed (e.g. database unreachable); retry next tick
                logger.exception("LifecycleSweeper: sweep failed")
            await asyncio.sleep(self._config.interval_seconds)
