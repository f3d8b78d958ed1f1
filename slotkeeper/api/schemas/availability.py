"""Pydantic schemas for slot availability, working hours and schedule config."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel

from slotkeeper.domain.interval import Interval
from slotkeeper.domain.working_hours import WorkingHours


class TimeSlotResponse(BaseModel):
    start_time: datetime
    end_time: datetime
    duration_minutes: int

    @classmethod
    def from_interval(cls, interval: Interval) -> "TimeSlotResponse":
        return cls(
            start_time=interval.start,
            end_time=interval.end,
            duration_minutes=interval.duration_minutes,
        )


class AvailableSlotsResponse(BaseModel):
    date: date
    total_slots: int
    available_slots: List[TimeSlotResponse]


class WorkingHoursResponse(BaseModel):
    date: date
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    is_open: bool = False

    @classmethod
    def from_domain(cls, hours: WorkingHours) -> "WorkingHoursResponse":
        return cls(
            date=hours.date,
            opening_time=hours.opens.strftime("%H:%M:%S") if hours.opens else None,
            closing_time=hours.closes.strftime("%H:%M:%S") if hours.closes else None,
            is_open=hours.is_open,
        )
