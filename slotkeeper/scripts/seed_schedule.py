#!/usr/bin/env python3
"""Seed a demo scope's schedule configuration.

Writes a weekday 09:00–18:00 / Saturday 09:00–13:00 schedule with 30 minute
slots and a 10 minute buffer for one resource scope, creating the database and
tables first if needed.

Run:
    python -m slotkeeper.scripts.seed_schedule [SCOPE_UUID]
"""
from __future__ import annotations

import asyncio
import sys
import uuid

from slotkeeper.core.logger import get_logger
from slotkeeper.domain.schedule import ScheduleConfig
from slotkeeper.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
    session_scope,
)
from slotkeeper.infra.database.repositories import ScheduleConfigRepository

logger = get_logger(__name__)

DEMO_SCOPE_ID = uuid.UUID("00000000-0000-4000-8000-000000000001")

_WEEKDAY_HOURS = {"start": "09:00:00", "end": "18:00:00", "closed": False}

DEMO_SCHEDULE = {
    "slotDuration": 30,
    "bufferBetweenAppointments": 10,
    "appointmentEnabled": True,
    "timezone": "America/Bogota",
    "businessHours": {
        "monday": _WEEKDAY_HOURS,
        "tuesday": _WEEKDAY_HOURS,
        "wednesday": _WEEKDAY_HOURS,
        "thursday": _WEEKDAY_HOURS,
        "friday": _WEEKDAY_HOURS,
        "saturday": {"start": "09:00", "end": "13:00", "closed": False},
        "sunday": {"closed": True},
    },
}


async def seed(scope_id: uuid.UUID = DEMO_SCOPE_ID) -> None:
    config = ScheduleConfig.from_payload(DEMO_SCHEDULE)

    await ensure_database_exists()
    engine = build_engine()
    session_factory = build_session_factory(engine)
    await init_db()

    async with session_scope(session_factory) as session:
        await ScheduleConfigRepository(session).save_for_scope(scope_id, config)

    logger.info(
        "Schedule seeded for scope %s: %d-minute slots, %d-minute buffer, %d configured days.",
        scope_id,
        config.slot_duration_minutes,
        config.buffer_minutes,
        len(config.per_weekday),
    )
    await close_engine()


if __name__ == "__main__":
    target = uuid.UUID(sys.argv[1]) if len(sys.argv) > 1 else DEMO_SCOPE_ID
    asyncio.run(seed(target))
