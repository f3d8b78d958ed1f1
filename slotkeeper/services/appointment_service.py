"""AppointmentService: booking and manual lifecycle operations on appointments."""
from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from slotkeeper.core.exceptions import (
    InvalidAppointmentError,
    NotFoundError,
    SlotUnavailableError,
)
from slotkeeper.domain.appointment import Appointment, utcnow
from slotkeeper.domain.events import AppointmentEvent, AppointmentEventType
from slotkeeper.domain.interval import Interval
from slotkeeper.domain.ports import AppointmentStore, Clock, EventPublisher, NullEventPublisher
from slotkeeper.domain.status import AppointmentStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookAppointmentCommand:
    resource_scope_id: UUID
    subject_id: UUID
    service_id: int
    start_time: _dt.datetime
    end_time: _dt.datetime
    price: Decimal
    currency: str
    assignee_id: Optional[UUID] = None
    user_notes: Optional[str] = None

    def __post_init__(self) -> None:
        required = ("resource_scope_id", "subject_id", "service_id", "start_time", "end_time", "price", "currency")
        missing = [name for name in required if getattr(self, name) is None]
        if missing:
            raise InvalidAppointmentError(
                f"Missing required fields: {', '.join(missing)}", details={"missing": missing}
            )

    @property
    def interval(self) -> Interval:
        return Interval(self.start_time, self.end_time)


class AppointmentService:
    def __init__(
        self,
        appointments: AppointmentStore,
        publisher: Optional[EventPublisher] = None,
        clock: Clock = utcnow,
    ) -> None:
        self._appointments = appointments
        self._publisher = publisher or NullEventPublisher()
        self._clock = clock

    async def book(self, command: BookAppointmentCommand) -> Appointment:
        """
        Reserve ``command.interval`` in the scope and persist a pending appointment.

        The conflict check and the insert run under the scope lock so two
        concurrent bookings for the same scope cannot both pass the check.
        """
        interval = command.interval
        scope = command.resource_scope_id
        async with self._appointments.scope_lock(scope):
            if await self._appointments.has_conflict(
                scope, interval, assignee_id=command.assignee_id
            ):
                logger.info(
                    "AppointmentService: slot %s to %s unavailable in scope %s",
                    interval.start.isoformat(), interval.end.isoformat(), scope,
                )
                raise SlotUnavailableError(
                    "The selected time slot is not available",
                    details={
                        "resource_scope_id": str(scope),
                        "start_time": interval.start.isoformat(),
                        "end_time": interval.end.isoformat(),
                    },
                )
            appointment = Appointment.create(
                resource_scope_id=scope,
                subject_id=command.subject_id,
                service_id=command.service_id,
                assignee_id=command.assignee_id,
                interval=interval,
                price=command.price,
                currency=command.currency,
                user_notes=command.user_notes,
                now=self._clock(),
            )
            saved = await self._appointments.save(appointment)

        logger.info(
            "AppointmentService: booked %s in scope %s at %s",
            saved.id, scope, interval.start.isoformat(),
            extra={"context": {"appointment_id": str(saved.id), "resource_scope_id": str(scope)}},
        )
        self._emit(AppointmentEventType.BOOKED, saved)
        return saved

    async def get(self, appointment_id: UUID) -> Appointment:
        appointment = await self._appointments.get(appointment_id)
        if appointment is None:
            raise _not_found(appointment_id)
        return appointment

    async def list_by_resource(
        self, resource_scope_id: UUID, status: Optional[AppointmentStatus] = None
    ) -> List[Appointment]:
        return list(await self._appointments.list_by_resource(resource_scope_id, status))

    async def list_by_subject(
        self, subject_id: UUID, status: Optional[AppointmentStatus] = None
    ) -> List[Appointment]:
        return list(await self._appointments.list_by_subject(subject_id, status))

    async def list_active_by_subject(self, subject_id: UUID) -> List[Appointment]:
        """Upcoming appointments of a subject: those still pending."""
        return await self.list_by_subject(subject_id, AppointmentStatus.PENDING)

    async def cancel(self, appointment_id: UUID, reason: Optional[str] = None) -> Appointment:
        appointment = await self._load_for_update(appointment_id)
        appointment.cancel(reason, now=self._clock())
        saved = await self._appointments.save(appointment)
        logger.info("AppointmentService: cancelled %s", appointment_id)
        self._emit(AppointmentEventType.CANCELLED, saved, reason=reason)
        return saved

    async def reschedule(self, appointment_id: UUID, interval: Interval) -> Appointment:
        appointment = await self._load_for_update(appointment_id)
        scope = appointment.resource_scope_id
        async with self._appointments.scope_lock(scope):
            # Validates status and future start before touching storage
            appointment.reschedule(interval, now=self._clock())
            if await self._appointments.has_conflict(
                scope, interval, exclude_id=appointment_id, assignee_id=appointment.assignee_id
            ):
                raise SlotUnavailableError(
                    "The selected time slot is not available",
                    details={
                        "appointment_id": str(appointment_id),
                        "start_time": interval.start.isoformat(),
                        "end_time": interval.end.isoformat(),
                    },
                )
            saved = await self._appointments.save(appointment)
        logger.info(
            "AppointmentService: rescheduled %s to %s", appointment_id, interval.start.isoformat()
        )
        self._emit(AppointmentEventType.RESCHEDULED, saved)
        return saved

    async def start(self, appointment_id: UUID, meeting_link: Optional[str] = None) -> Appointment:
        appointment = await self._load_for_update(appointment_id)
        appointment.start(meeting_link, now=self._clock())
        saved = await self._appointments.save(appointment)
        logger.info("AppointmentService: started %s", appointment_id)
        self._emit(AppointmentEventType.STARTED, saved)
        return saved

    async def complete(self, appointment_id: UUID) -> Appointment:
        appointment = await self._load_for_update(appointment_id)
        appointment.complete(now=self._clock())
        saved = await self._appointments.save(appointment)
        logger.info("AppointmentService: completed %s", appointment_id)
        self._emit(AppointmentEventType.COMPLETED, saved)
        return saved

    async def add_admin_notes(self, appointment_id: UUID, notes: Optional[str]) -> Appointment:
        appointment = await self._load_for_update(appointment_id)
        appointment.add_admin_notes(notes, now=self._clock())
        return await self._appointments.save(appointment)

    async def delete(self, appointment_id: UUID) -> None:
        """Administrative hard delete. Normal closure is cancel or complete."""
        if not await self._appointments.delete(appointment_id):
            raise _not_found(appointment_id)
        logger.warning("AppointmentService: deleted %s", appointment_id)

    async def _load_for_update(self, appointment_id: UUID) -> Appointment:
        appointment = await self._appointments.get_for_update(appointment_id)
        if appointment is None:
            raise _not_found(appointment_id)
        return appointment

    def _emit(
        self, event_type: AppointmentEventType, appointment: Appointment, *, reason: Optional[str] = None
    ) -> None:
        event = AppointmentEvent.from_appointment(
            event_type, appointment, reason=reason, occurred_at=self._clock()
        )
        self._publisher.publish(event)


def _not_found(appointment_id: UUID) -> NotFoundError:
    return NotFoundError(
        "Appointment not found", details={"appointment_id": str(appointment_id)}
    )
