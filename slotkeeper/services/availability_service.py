"""AvailabilityService: free slots and opening hours from schedule config minus bookings."""
from __future__ import annotations

import datetime as _dt
import logging
from typing import List, Optional
from uuid import UUID

from slotkeeper.core.exceptions import ConfigurationError
from slotkeeper.domain.appointment import utcnow
from slotkeeper.domain.interval import Interval
from slotkeeper.domain.ports import AppointmentStore, Clock, ScheduleConfigStore
from slotkeeper.domain.schedule import ScheduleConfig
from slotkeeper.domain.working_hours import WorkingHours

logger = logging.getLogger(__name__)


class AvailabilityService:
    def __init__(
        self,
        appointments: AppointmentStore,
        schedules: ScheduleConfigStore,
        clock: Clock = utcnow,
    ) -> None:
        self._appointments = appointments
        self._schedules = schedules
        self._clock = clock

    async def available_slots(
        self,
        resource_scope_id: UUID,
        date: _dt.date,
        assignee_id: Optional[UUID] = None,
    ) -> List[Interval]:
        """Return the bookable slots of ``date``, earliest first.

        1. Load the scope's schedule config (ConfigurationError if missing)
        2. Disabled appointments or a closed day yield no slots
        3. Generate candidates from the day's business hours
        4. Drop every candidate overlapping an active booking; with
           ``assignee_id`` only that assignee's bookings count
        """
        config = await self._require_config(resource_scope_id)
        if not config.appointments_enabled:
            logger.debug("AvailabilityService: appointments disabled for scope %s", resource_scope_id)
            return []

        candidates = config.generate_candidates(date)
        if not candidates:
            return []

        booked = await self._appointments.list_active_between(
            resource_scope_id,
            candidates[0].start,
            candidates[-1].end,
            assignee_id=assignee_id,
        )
        busy = [a.interval for a in booked]
        return [slot for slot in candidates if not any(slot.overlaps(b) for b in busy)]

    async def working_hours(self, resource_scope_id: UUID, date: _dt.date) -> WorkingHours:
        config = await self._require_config(resource_scope_id)
        return WorkingHours.for_date(config, date, self._clock())

    async def is_available(
        self,
        resource_scope_id: UUID,
        interval: Interval,
        exclude_id: Optional[UUID] = None,
        assignee_id: Optional[UUID] = None,
    ) -> bool:
        return not await self._appointments.has_conflict(
            resource_scope_id, interval, exclude_id=exclude_id, assignee_id=assignee_id
        )

    async def _require_config(self, resource_scope_id: UUID) -> ScheduleConfig:
        config = await self._schedules.get_for_scope(resource_scope_id)
        if config is None:
            raise ConfigurationError(
                "Schedule configuration not found for scope",
                details={"resource_scope_id": str(resource_scope_id)},
            )
        return config
