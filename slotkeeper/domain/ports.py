"""
Contracts the engine needs from its collaborators.

Storage implements AppointmentStore and ScheduleConfigStore; delivery implements
EventPublisher. The PostgreSQL versions live in slotkeeper.infra.database, the
in-memory ones used by tests in slotkeeper.tests.fakes.
"""
from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Callable, Optional, Sequence

from slotkeeper.domain.appointment import Appointment
from slotkeeper.domain.events import AppointmentEvent
from slotkeeper.domain.interval import Interval
from slotkeeper.domain.schedule import ScheduleConfig
from slotkeeper.domain.status import AppointmentStatus


class AppointmentStore(ABC):
    """Persistence and queries for the Appointment aggregate."""

    @abstractmethod
    async def save(self, appointment: Appointment) -> Appointment:
        """Insert or update. Returns the stored aggregate (with its id)."""

    @abstractmethod
    async def get(self, appointment_id: uuid.UUID) -> Optional[Appointment]:
        ...

    @abstractmethod
    async def get_for_update(
        self, appointment_id: uuid.UUID, *, skip_locked: bool = False
    ) -> Optional[Appointment]:
        """
        Read with a row lock held until the transaction ends.

        With ``skip_locked`` a row locked by someone else reads as missing.
        """

    @abstractmethod
    async def delete(self, appointment_id: uuid.UUID) -> bool:
        ...

    @abstractmethod
    async def list_by_resource(
        self, resource_scope_id: uuid.UUID, status: Optional[AppointmentStatus] = None
    ) -> Sequence[Appointment]:
        """Newest start first."""

    @abstractmethod
    async def list_by_subject(
        self, subject_id: uuid.UUID, status: Optional[AppointmentStatus] = None
    ) -> Sequence[Appointment]:
        """Newest start first."""

    @abstractmethod
    async def list_active_between(
        self,
        resource_scope_id: uuid.UUID,
        window_start: datetime,
        window_end: datetime,
        assignee_id: Optional[uuid.UUID] = None,
    ) -> Sequence[Appointment]:
        """Active appointments overlapping ``[window_start, window_end)``."""

    @abstractmethod
    async def has_conflict(
        self,
        resource_scope_id: uuid.UUID,
        interval: Interval,
        *,
        exclude_id: Optional[uuid.UUID] = None,
        assignee_id: Optional[uuid.UUID] = None,
    ) -> bool:
        """True if an active appointment in the scope overlaps ``interval``."""

    @abstractmethod
    async def find_due_to_start(self, now: datetime, limit: int) -> Sequence[Appointment]:
        """Pending with start <= now, earliest start first."""

    @abstractmethod
    async def find_due_to_complete(self, now: datetime, limit: int) -> Sequence[Appointment]:
        """In progress with end <= now, earliest end first."""

    @abstractmethod
    def scope_lock(self, resource_scope_id: uuid.UUID) -> AbstractAsyncContextManager[None]:
        """Serialize check-then-write sequences for one scope."""


class ScheduleConfigStore(ABC):
    @abstractmethod
    async def get_for_scope(self, resource_scope_id: uuid.UUID) -> Optional[ScheduleConfig]:
        """Parsed config, or None when the scope has none."""

    @abstractmethod
    async def save_for_scope(self, resource_scope_id: uuid.UUID, config: ScheduleConfig) -> None:
        ...


class EventPublisher(ABC):
    @abstractmethod
    def publish(self, event: AppointmentEvent) -> None:
        """Hand off for delivery. Must not block on delivery or raise."""


class NullEventPublisher(EventPublisher):
    """Drops every event. Used when no delivery channel is configured."""

    def publish(self, event: AppointmentEvent) -> None:
        return None


RepositoryScope = Callable[[], AbstractAsyncContextManager[AppointmentStore]]
"""Opens one transaction and yields a store bound to it (commit on success)."""

Clock = Callable[[], datetime]
"""Returns the current timezone-aware instant. Injected so tests control time."""
