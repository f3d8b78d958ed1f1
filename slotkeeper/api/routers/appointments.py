"""Appointments API: book, get, list, cancel, reschedule, start, complete, notes, delete."""
from __future__ import annotations

import logging
import os
import uuid
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, Response, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from slotkeeper.api.dependencies import get_appointment_service
from slotkeeper.api.schemas.appointments import (
    AdminNotesRequest,
    AppointmentResponse,
    BookAppointmentRequest,
    CancelAppointmentRequest,
    RescheduleAppointmentRequest,
    StartAppointmentRequest,
)
from slotkeeper.domain.interval import Interval
from slotkeeper.domain.status import AppointmentStatus
from slotkeeper.services.appointment_service import AppointmentService, BookAppointmentCommand

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["appointments"])

# Booking is the only write open to end users; limit is BOOKING_RATE_LIMIT (default 30/minute)
BOOKING_RATE_LIMIT = os.environ.get("BOOKING_RATE_LIMIT", "30/minute")
limiter = Limiter(key_func=get_remote_address)


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(BOOKING_RATE_LIMIT)
async def book_appointment(
    request: Request,
    body: BookAppointmentRequest,
    svc: AppointmentService = Depends(get_appointment_service),
):
    appointment = await svc.book(
        BookAppointmentCommand(
            resource_scope_id=body.resource_scope_id,
            subject_id=body.subject_id,
            service_id=body.service_id,
            assignee_id=body.assignee_id,
            start_time=body.start_time,
            end_time=body.end_time,
            price=body.price,
            currency=body.currency,
            user_notes=body.user_notes,
        )
    )
    return AppointmentResponse.from_domain(appointment)


@router.get("", response_model=List[AppointmentResponse])
async def list_appointments(
    resource_scope_id: Optional[uuid.UUID] = Query(None),
    subject_id: Optional[uuid.UUID] = Query(None),
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    svc: AppointmentService = Depends(get_appointment_service),
):
    """Filter by subject, or by scope (optionally with status). No filter returns nothing."""
    if subject_id is not None:
        items = await svc.list_by_subject(subject_id, status_filter)
    elif resource_scope_id is not None:
        items = await svc.list_by_resource(resource_scope_id, status_filter)
    else:
        return []
    return [AppointmentResponse.from_domain(a) for a in items]


@router.get("/subjects/{subject_id}/active", response_model=List[AppointmentResponse])
async def list_active_for_subject(
    subject_id: uuid.UUID,
    svc: AppointmentService = Depends(get_appointment_service),
):
    items = await svc.list_active_by_subject(subject_id)
    return [AppointmentResponse.from_domain(a) for a in items]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: uuid.UUID,
    svc: AppointmentService = Depends(get_appointment_service),
):
    return AppointmentResponse.from_domain(await svc.get(appointment_id))


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: uuid.UUID,
    body: Optional[CancelAppointmentRequest] = Body(None),
    svc: AppointmentService = Depends(get_appointment_service),
):
    reason = body.reason if body is not None else None
    return AppointmentResponse.from_domain(await svc.cancel(appointment_id, reason))


@router.post("/{appointment_id}/reschedule", response_model=AppointmentResponse)
async def reschedule_appointment(
    appointment_id: uuid.UUID,
    body: RescheduleAppointmentRequest,
    svc: AppointmentService = Depends(get_appointment_service),
):
    interval = Interval(body.start_time, body.end_time)
    return AppointmentResponse.from_domain(await svc.reschedule(appointment_id, interval))


@router.post("/{appointment_id}/start", response_model=AppointmentResponse)
async def start_appointment(
    appointment_id: uuid.UUID,
    body: Optional[StartAppointmentRequest] = Body(None),
    svc: AppointmentService = Depends(get_appointment_service),
):
    link = body.meeting_link if body is not None else None
    return AppointmentResponse.from_domain(await svc.start(appointment_id, link))


@router.post("/{appointment_id}/complete", response_model=AppointmentResponse)
async def complete_appointment(
    appointment_id: uuid.UUID,
    svc: AppointmentService = Depends(get_appointment_service),
):
    return AppointmentResponse.from_domain(await svc.complete(appointment_id))


@router.put("/{appointment_id}/admin-notes", response_model=AppointmentResponse)
async def update_admin_notes(
    appointment_id: uuid.UUID,
    body: AdminNotesRequest,
    svc: AppointmentService = Depends(get_appointment_service),
):
    return AppointmentResponse.from_domain(await svc.add_admin_notes(appointment_id, body.admin_notes))


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(
    appointment_id: uuid.UUID,
    svc: AppointmentService = Depends(get_appointment_service),
):
    await svc.delete(appointment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
