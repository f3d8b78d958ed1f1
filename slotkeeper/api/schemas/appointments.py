"""Pydantic schemas for the Appointments API."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from slotkeeper.domain.appointment import Appointment


class BookAppointmentRequest(BaseModel):
    resource_scope_id: UUID
    subject_id: UUID
    service_id: int = Field(..., gt=0)
    assignee_id: Optional[UUID] = None
    start_time: datetime
    end_time: datetime
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    currency: str = Field(..., min_length=3, max_length=3)
    user_notes: Optional[str] = Field(None, max_length=1000)


class CancelAppointmentRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class RescheduleAppointmentRequest(BaseModel):
    start_time: datetime
    end_time: datetime


class StartAppointmentRequest(BaseModel):
    meeting_link: Optional[str] = Field(None, max_length=2048)


class AdminNotesRequest(BaseModel):
    admin_notes: Optional[str] = None


class AppointmentResponse(BaseModel):
    id: UUID
    resource_scope_id: UUID
    subject_id: UUID
    service_id: int
    assignee_id: Optional[UUID] = None
    start_time: datetime
    end_time: datetime
    status: str
    price: Decimal
    currency: str
    meeting_link: Optional[str] = None
    user_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    duration_minutes: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, a: Appointment) -> "AppointmentResponse":
        interval = a.interval
        return cls(
            id=a.id,
            resource_scope_id=a.resource_scope_id,
            subject_id=a.subject_id,
            service_id=a.service_id,
            assignee_id=a.assignee_id,
            start_time=interval.start,
            end_time=interval.end,
            status=a.status.value,
            price=a.price_snapshot,
            currency=a.currency_snapshot,
            meeting_link=a.meeting_link,
            user_notes=a.user_notes,
            admin_notes=a.admin_notes,
            duration_minutes=a.duration_minutes,
            created_at=a.created_at,
            updated_at=a.updated_at,
        )
