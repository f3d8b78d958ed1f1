"""
slotkeeper.infra.database.models – SQLAlchemy 2.0 ORM models.

Exports Base, mixins, and all model classes.
"""
from slotkeeper.infra.database.models.appointment import AppointmentModel
from slotkeeper.infra.database.models.base import Base, TimestampMixin, _uuid_pk
from slotkeeper.infra.database.models.schedule_config import ScheduleConfigModel

__all__ = [
    "Base",
    "TimestampMixin",
    "_uuid_pk",
    "AppointmentModel",
    "ScheduleConfigModel",
]
