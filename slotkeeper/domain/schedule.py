"""
Per-scope business hours and the slot policy that expands them into candidates.

The stored payload is the JSON blob each scope carries::

    {
        "slotDuration": 30,
        "bufferBetweenAppointments": 10,
        "appointmentEnabled": true,
        "timezone": "America/Bogota",
        "businessHours": {
            "monday": {"start": "09:00:00", "end": "18:00:00", "closed": false},
            "sunday": {"closed": true}
        }
    }
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from slotkeeper.core.exceptions import ConfigurationError
from slotkeeper.domain.interval import Interval

DEFAULT_TIMEZONE = "America/Bogota"

WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

_TIME_FORMATS = ("%H:%M:%S", "%H:%M")


def _parse_time(value: Any, *, day: str, key: str) -> time:
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise ConfigurationError(
            f"businessHours.{day}.{key} must be a time string",
            details={"day": day, "value": value},
        )
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue
    raise ConfigurationError(
        f"businessHours.{day}.{key} is not HH:MM[:SS]: {value!r}",
        details={"day": day, "value": value},
    )


def _load_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(
            f"Unknown timezone: {name!r}", details={"timezone": name}, cause=exc
        ) from exc


def _resolve_local(day: date, t: time, zone: ZoneInfo) -> datetime:
    """The UTC instant of wall time ``t`` on ``day`` in ``zone``."""
    return datetime.combine(day, t, tzinfo=zone).astimezone(timezone.utc)


def _bool_field(data: Mapping[str, Any], key: str, *, default: bool, where: str) -> bool:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigurationError(f"{where} must be a boolean", details={"field": where, "value": value})
    return value


def _int_field(data: Mapping[str, Any], key: str, *, default: Optional[int], minimum: int) -> int:
    value = data.get(key)
    if value is None:
        if default is None:
            raise ConfigurationError(f"{key} is required", details={"field": key})
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{key} must be an integer", details={"field": key, "value": value})
    if value < minimum:
        raise ConfigurationError(
            f"{key} must be >= {minimum}", details={"field": key, "value": value}
        )
    return value


@dataclass(frozen=True)
class DaySchedule:
    """One weekday's business hours. Closed or half-specified days yield no slots."""

    opens: Optional[time] = None
    closes: Optional[time] = None
    closed: bool = False

    @property
    def is_open(self) -> bool:
        return not self.closed and self.opens is not None and self.closes is not None

    @classmethod
    def from_payload(cls, day: str, data: Any) -> DaySchedule:
        if data is None:
            return cls(closed=True)
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"businessHours.{day} must be an object", details={"day": day}
            )
        closed = _bool_field(data, "closed", default=False, where=f"businessHours.{day}.closed")
        if closed:
            return cls(closed=True)
        start, end = data.get("start"), data.get("end")
        return cls(
            opens=_parse_time(start, day=day, key="start") if start is not None else None,
            closes=_parse_time(end, day=day, key="end") if end is not None else None,
        )

    def to_payload(self) -> dict[str, Any]:
        out: dict[str, Any] = {"closed": self.closed}
        if self.opens is not None:
            out["start"] = self.opens.strftime("%H:%M:%S")
        if self.closes is not None:
            out["end"] = self.closes.strftime("%H:%M:%S")
        return out


@dataclass(frozen=True)
class ScheduleConfig:
    """
    Slot policy and weekly business hours for one resource scope.

    ``per_weekday`` is keyed by lowercase English weekday name; a missing day
    is closed.
    """

    slot_duration_minutes: int
    buffer_minutes: int = 0
    per_weekday: Mapping[str, DaySchedule] = field(default_factory=dict)
    timezone: str = DEFAULT_TIMEZONE
    appointments_enabled: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.slot_duration_minutes, bool) or not isinstance(self.slot_duration_minutes, int) \
                or self.slot_duration_minutes <= 0:
            raise ConfigurationError(
                "slotDuration must be a positive integer",
                details={"value": self.slot_duration_minutes},
            )
        if isinstance(self.buffer_minutes, bool) or not isinstance(self.buffer_minutes, int) \
                or self.buffer_minutes < 0:
            raise ConfigurationError(
                "bufferBetweenAppointments must be a non-negative integer",
                details={"value": self.buffer_minutes},
            )
        unknown = set(self.per_weekday) - set(WEEKDAYS)
        if unknown:
            raise ConfigurationError(
                "Unknown weekday keys in businessHours", details={"keys": sorted(unknown)}
            )
        _load_zone(self.timezone)

    @property
    def zone(self) -> ZoneInfo:
        return _load_zone(self.timezone)

    def day_schedule(self, day: date) -> Optional[DaySchedule]:
        return self.per_weekday.get(WEEKDAYS[day.weekday()])

    def generate_candidates(self, day: date) -> list[Interval]:
        """
        Expand ``day``'s business hours into back-to-back candidate slots.

        Opening and closing times are resolved to instants in the scope
        timezone, then the cursor steps in absolute time: a slot is emitted
        while ``cursor + slot <= closes`` and the cursor then moves by
        ``slot + buffer``. No partial trailing slot is produced. Local times
        inside a DST gap resolve with the offset in force before the gap.
        """
        schedule = self.day_schedule(day)
        if schedule is None or not schedule.is_open:
            return []

        zone = self.zone
        slot = timedelta(minutes=self.slot_duration_minutes)
        step = timedelta(minutes=self.slot_duration_minutes + self.buffer_minutes)
        cursor = _resolve_local(day, schedule.opens, zone)
        closes = _resolve_local(day, schedule.closes, zone)

        candidates: list[Interval] = []
        while cursor + slot <= closes:
            candidates.append(Interval(cursor, cursor + slot))
            cursor += step
        return candidates

    @classmethod
    def from_payload(cls, data: Any) -> ScheduleConfig:
        """Parse the stored JSON payload. Raises ConfigurationError when malformed."""
        if not isinstance(data, Mapping):
            raise ConfigurationError("Schedule configuration must be a JSON object")

        hours = data.get("businessHours") or {}
        if not isinstance(hours, Mapping):
            raise ConfigurationError("businessHours must be an object")
        per_weekday = {
            str(day).lower(): DaySchedule.from_payload(str(day).lower(), value)
            for day, value in hours.items()
            if str(day).lower() in WEEKDAYS
        }

        tz = data.get("timezone") or DEFAULT_TIMEZONE
        if not isinstance(tz, str):
            raise ConfigurationError("timezone must be a string", details={"value": tz})

        return cls(
            slot_duration_minutes=_int_field(data, "slotDuration", default=None, minimum=1),
            buffer_minutes=_int_field(data, "bufferBetweenAppointments", default=0, minimum=0),
            per_weekday=per_weekday,
            timezone=tz,
            appointments_enabled=_bool_field(
                data, "appointmentEnabled", default=False, where="appointmentEnabled"
            ),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "slotDuration": self.slot_duration_minutes,
            "bufferBetweenAppointments": self.buffer_minutes,
            "appointmentEnabled": self.appointments_enabled,
            "timezone": self.timezone,
            "businessHours": {day: sched.to_payload() for day, sched in self.per_weekday.items()},
        }
