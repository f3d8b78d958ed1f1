"""
Scheduling domain: value types, the Appointment aggregate, events and ports.

Pure and synchronous; no I/O happens here.
"""
from slotkeeper.domain.appointment import Appointment, AppointmentSnapshot, utcnow
from slotkeeper.domain.events import AppointmentEvent, AppointmentEventType
from slotkeeper.domain.interval import Interval, overlaps
from slotkeeper.domain.ports import (
    AppointmentStore,
    Clock,
    EventPublisher,
    NullEventPublisher,
    RepositoryScope,
    ScheduleConfigStore,
)
from slotkeeper.domain.schedule import DEFAULT_TIMEZONE, WEEKDAYS, DaySchedule, ScheduleConfig
from slotkeeper.domain.status import ACTIVE_STATUSES, AppointmentStatus, status_for_instant
from slotkeeper.domain.working_hours import WorkingHours

__all__ = [
    "Appointment",
    "AppointmentSnapshot",
    "utcnow",
    "AppointmentEvent",
    "AppointmentEventType",
    "Interval",
    "overlaps",
    "AppointmentStore",
    "EventPublisher",
    "NullEventPublisher",
    "RepositoryScope",
    "Clock",
    "ScheduleConfigStore",
    "DEFAULT_TIMEZONE",
    "WEEKDAYS",
    "DaySchedule",
    "ScheduleConfig",
    "ACTIVE_STATUSES",
    "AppointmentStatus",
    "status_for_instant",
    "WorkingHours",
]
