"""Outbound notifications emitted after a successful appointment state change."""
from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from slotkeeper.core.exceptions import ValidationError
from slotkeeper.domain.appointment import Appointment, utcnow


class AppointmentEventType(str, enum.Enum):
    BOOKED = "appointment.booked"
    CANCELLED = "appointment.cancelled"
    RESCHEDULED = "appointment.rescheduled"
    STARTED = "appointment.started"
    COMPLETED = "appointment.completed"


@dataclass(frozen=True)
class AppointmentEvent:
    event_type: AppointmentEventType
    appointment_id: uuid.UUID
    resource_scope_id: uuid.UUID
    subject_id: uuid.UUID
    service_id: int
    assignee_id: Optional[uuid.UUID]
    start_time: datetime
    end_time: datetime
    status: str
    reason: Optional[str] = None
    occurred_at: datetime = field(default_factory=utcnow)
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)

    @classmethod
    def from_appointment(
        cls,
        event_type: AppointmentEventType,
        appointment: Appointment,
        *,
        reason: Optional[str] = None,
        occurred_at: Optional[datetime] = None,
    ) -> AppointmentEvent:
        """Build an event for a persisted appointment. Unsaved appointments are rejected."""
        if appointment.id is None:
            raise ValidationError(
                "Cannot build an event for an appointment without an id",
                details={"event_type": event_type.value},
            )
        interval = appointment.interval
        return cls(
            event_type=event_type,
            appointment_id=appointment.id,
            resource_scope_id=appointment.resource_scope_id,
            subject_id=appointment.subject_id,
            service_id=appointment.service_id,
            assignee_id=appointment.assignee_id,
            start_time=interval.start,
            end_time=interval.end,
            status=appointment.status.value,
            reason=reason,
            occurred_at=occurred_at or utcnow(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": str(self.event_id),
            "event": self.event_type.value,
            "occurred_at": self.occurred_at.isoformat(),
            "appointment": {
                "id": str(self.appointment_id),
                "resource_scope_id": str(self.resource_scope_id),
                "subject_id": str(self.subject_id),
                "service_id": self.service_id,
                "assignee_id": str(self.assignee_id) if self.assignee_id else None,
                "start_time": self.start_time.isoformat(),
                "end_time": self.end_time.isoformat(),
                "status": self.status,
            },
            "reason": self.reason,
        }
