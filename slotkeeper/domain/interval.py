"""
Half-open time ranges ``[start, end)`` shared by candidate slots and bookings.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from slotkeeper.core.exceptions import InvalidAppointmentError


@dataclass(frozen=True)
class Interval:
    """
    An absolute time range with timezone-aware endpoints, stored in UTC.

    Touching endpoints do not overlap, so back-to-back bookings are allowed.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start is None or self.end is None:
            raise InvalidAppointmentError("Start time and end time are required")
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise InvalidAppointmentError(
                "Interval endpoints must be timezone-aware",
                details={"start": str(self.start), "end": str(self.end)},
            )
        # Same-tzinfo datetimes compare by wall clock, which breaks across DST
        object.__setattr__(self, "start", self.start.astimezone(timezone.utc))
        object.__setattr__(self, "end", self.end.astimezone(timezone.utc))
        if self.start >= self.end:
            raise InvalidAppointmentError(
                "Start time must be before end time",
                details={"start": self.start.isoformat(), "end": self.end.isoformat()},
            )

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, other: Interval) -> bool:
        return self.start < other.end and self.end > other.start

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


def overlaps(a: Interval, b: Interval) -> bool:
    """True when ``a`` and ``b`` share at least one instant."""
    return a.overlaps(b)
