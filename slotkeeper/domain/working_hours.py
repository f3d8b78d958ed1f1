"""Opening hours of one scope on one calendar date."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from slotkeeper.domain.schedule import ScheduleConfig


@dataclass(frozen=True)
class WorkingHours:
    date: date
    opens: Optional[time] = None
    closes: Optional[time] = None
    is_open: bool = False

    @classmethod
    def closed(cls, day: date) -> WorkingHours:
        return cls(date=day)

    @classmethod
    def for_date(cls, config: ScheduleConfig, day: date, now: datetime) -> WorkingHours:
        """
        Resolve ``day`` against ``config``.

        ``is_open`` is true only when ``day`` is today in the scope's timezone and
        the local time is strictly between opening and closing.
        """
        if not config.appointments_enabled:
            return cls.closed(day)
        schedule = config.day_schedule(day)
        if schedule is None or not schedule.is_open:
            return cls.closed(day)
        local_now = now.astimezone(config.zone)
        current = local_now.time().replace(tzinfo=None)
        open_now = (
            local_now.date() == day
            and schedule.opens < current < schedule.closes
        )
        return cls(date=day, opens=schedule.opens, closes=schedule.closes, is_open=open_now)
