"""Scope availability API: free slots, working hours and the schedule config itself."""
from __future__ import annotations

import datetime as _dt
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from slotkeeper.api.dependencies import get_availability_service, get_schedule_config_store
from slotkeeper.api.schemas.availability import (
    AvailableSlotsResponse,
    TimeSlotResponse,
    WorkingHoursResponse,
)
from slotkeeper.core.exceptions import ConfigurationError, NotFoundError, ValidationError
from slotkeeper.domain.ports import ScheduleConfigStore
from slotkeeper.domain.schedule import ScheduleConfig
from slotkeeper.services.availability_service import AvailabilityService

router = APIRouter(prefix="/scopes", tags=["availability"])


@router.get("/{scope_id}/available-slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
    scope_id: uuid.UUID,
    date: _dt.date = Query(..., description="yyyy-mm-dd"),
    assignee_id: Optional[uuid.UUID] = Query(None),
    svc: AvailabilityService = Depends(get_availability_service),
):
    slots = await svc.available_slots(scope_id, date, assignee_id=assignee_id)
    return AvailableSlotsResponse(
        date=date,
        total_slots=len(slots),
        available_slots=[TimeSlotResponse.from_interval(s) for s in slots],
    )


@router.get("/{scope_id}/working-hours", response_model=WorkingHoursResponse)
async def get_working_hours(
    scope_id: uuid.UUID,
    date: _dt.date = Query(..., description="yyyy-mm-dd"),
    svc: AvailabilityService = Depends(get_availability_service),
):
    return WorkingHoursResponse.from_domain(await svc.working_hours(scope_id, date))


@router.get("/{scope_id}/schedule-config")
async def get_schedule_config(
    scope_id: uuid.UUID,
    store: ScheduleConfigStore = Depends(get_schedule_config_store),
) -> Dict[str, Any]:
    config = await store.get_for_scope(scope_id)
    if config is None:
        raise NotFoundError(
            "Schedule configuration not found for scope", details={"resource_scope_id": str(scope_id)}
        )
    return config.to_payload()


@router.put("/{scope_id}/schedule-config")
async def put_schedule_config(
    scope_id: uuid.UUID,
    payload: Dict[str, Any] = Body(...),
    store: ScheduleConfigStore = Depends(get_schedule_config_store),
) -> Dict[str, Any]:
    try:
        config = ScheduleConfig.from_payload(payload)
    except ConfigurationError as exc:
        # Caller-supplied payload: 400
        raise ValidationError(exc.message, details=exc.details, cause=exc) from exc
    await store.save_for_scope(scope_id, config)
    return config.to_payload()
