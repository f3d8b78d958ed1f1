"""Appointment lifecycle status codes and the time-derived status guess."""
from __future__ import annotations

import enum
from datetime import datetime

from slotkeeper.core.exceptions import ValidationError
from slotkeeper.domain.interval import Interval


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_active(self) -> bool:
        return self in _ACTIVE

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL

    @property
    def can_start(self) -> bool:
        return self is AppointmentStatus.PENDING

    @property
    def can_complete(self) -> bool:
        return self is AppointmentStatus.IN_PROGRESS

    @property
    def can_cancel(self) -> bool:
        return not self.is_terminal

    @classmethod
    def from_value(cls, value: str) -> AppointmentStatus:
        """Parse a stored or user-supplied code, ignoring case and whitespace."""
        if isinstance(value, cls):
            return value
        normalized = (value or "").strip().lower()
        for status in cls:
            if status.value == normalized:
                return status
        raise ValidationError(
            f"Unknown appointment status: {value!r}",
            details={"allowed": [s.value for s in cls]},
        )


_ACTIVE = frozenset({AppointmentStatus.PENDING, AppointmentStatus.IN_PROGRESS})
_TERMINAL = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED})

ACTIVE_STATUSES: tuple[AppointmentStatus, ...] = (
    AppointmentStatus.PENDING,
    AppointmentStatus.IN_PROGRESS,
)


def status_for_instant(now: datetime, interval: Interval) -> AppointmentStatus:
    """
    The status an appointment *should* have at ``now`` judging by time alone.

    Never returns CANCELLED. Callers use it to decide whether a transition is
    due; it must not be assigned over a stored status.
    """
    if now < interval.start:
        return AppointmentStatus.PENDING
    if now < interval.end:
        return AppointmentStatus.IN_PROGRESS
    return AppointmentStatus.COMPLETED
