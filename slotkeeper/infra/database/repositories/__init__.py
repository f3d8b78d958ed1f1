"""Repositories for the slotkeeper database."""
from slotkeeper.infra.database.repositories.appointment import AppointmentRepository
from slotkeeper.infra.database.repositories.base import BaseRepository
from slotkeeper.infra.database.repositories.schedule_config import ScheduleConfigRepository

__all__ = [
    "BaseRepository",
    "AppointmentRepository",
    "ScheduleConfigRepository",
]
