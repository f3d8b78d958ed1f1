"""FastAPI dependency providers."""
from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from slotkeeper.domain.appointment import utcnow
from slotkeeper.domain.ports import NullEventPublisher, ScheduleConfigStore
from slotkeeper.infra.database.repositories import AppointmentRepository, ScheduleConfigRepository
from slotkeeper.services.appointment_service import AppointmentService
from slotkeeper.services.availability_service import AvailabilityService


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a transactional AsyncSession from the app-level session factory."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_appointment_service(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> AppointmentService:
    publisher = getattr(request.app.state, "event_publisher", None) or NullEventPublisher()
    return AppointmentService(AppointmentRepository(session), publisher, clock=utcnow)


def get_availability_service(session: AsyncSession = Depends(get_session)) -> AvailabilityService:
    return AvailabilityService(
        AppointmentRepository(session), ScheduleConfigRepository(session), clock=utcnow
    )


def get_schedule_config_store(session: AsyncSession = Depends(get_session)) -> ScheduleConfigStore:
    return ScheduleConfigRepository(session)
