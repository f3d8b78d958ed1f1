"""
Appointment repository: the PostgreSQL AppointmentStore.

Statement builders are module-level so they can be compiled and inspected
without a database.
"""
from __future__ import annotations

import datetime as _dt
import hashlib
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Optional
from uuid import UUID

from sqlalchemy import Select, and_, or_, select, text

from slotkeeper.core.exceptions import NotFoundError
from slotkeeper.domain.appointment import Appointment, AppointmentSnapshot
from slotkeeper.domain.interval import Interval
from slotkeeper.domain.ports import AppointmentStore
from slotkeeper.domain.status import ACTIVE_STATUSES, AppointmentStatus
from slotkeeper.infra.database.models.appointment import AppointmentModel
from slotkeeper.infra.database.repositories.base import BaseRepository

_ACTIVE_CODES = [s.value for s in ACTIVE_STATUSES]

_SCOPE_LOCK_SQL = text("SELECT pg_advisory_xact_lock(:key)")


def scope_lock_key(resource_scope_id: UUID) -> int:
    """Signed 63-bit advisory lock key derived from the scope id."""
    digest = hashlib.sha256(f"appointments:{resource_scope_id}".encode()).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=False) & ((1 << 63) - 1)


def _to_row(snapshot: AppointmentSnapshot) -> dict[str, Any]:
    return {
        "resource_scope_id": snapshot.resource_scope_id,
        "subject_id": snapshot.subject_id,
        "service_id": snapshot.service_id,
        "assignee_id": snapshot.assignee_id,
        "start_time": snapshot.start_time,
        "end_time": snapshot.end_time,
        "status": snapshot.status.value,
        "price_snapshot": snapshot.price_snapshot,
        "currency_snapshot": snapshot.currency_snapshot,
        "meeting_link": snapshot.meeting_link,
        "user_notes": snapshot.user_notes,
        "admin_notes": snapshot.admin_notes,
        "created_at": snapshot.created_at,
        "updated_at": snapshot.updated_at,
    }


def _to_domain(row: AppointmentModel) -> Appointment:
    return Appointment.restore(
        AppointmentSnapshot(
            id=row.id,
            resource_scope_id=row.resource_scope_id,
            subject_id=row.subject_id,
            service_id=row.service_id,
            assignee_id=row.assignee_id,
            start_time=row.start_time,
            end_time=row.end_time,
            status=AppointmentStatus.from_value(row.status),
            price_snapshot=row.price_snapshot,
            currency_snapshot=row.currency_snapshot,
            meeting_link=row.meeting_link,
            user_notes=row.user_notes,
            admin_notes=row.admin_notes,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
    )


# ── Statement builders ───────────────────────────────────────────────────────

def overlap_filter(
    resource_scope_id: UUID,
    interval: Interval,
    *,
    exclude_id: Optional[UUID] = None,
    assignee_id: Optional[UUID] = None,
) -> list:
    conditions = [
        AppointmentModel.resource_scope_id == resource_scope_id,
        AppointmentModel.status.in_(_ACTIVE_CODES),
        AppointmentModel.start_time < interval.end,
        AppointmentModel.end_time > interval.start,
    ]
    if exclude_id is not None:
        conditions.append(AppointmentModel.id != exclude_id)
    if assignee_id is not None:
        # Unassigned bookings hold the whole scope
        conditions.append(
            or_(AppointmentModel.assignee_id == assignee_id, AppointmentModel.assignee_id.is_(None))
        )
    return conditions


def conflict_stmt(
    resource_scope_id: UUID,
    interval: Interval,
    *,
    exclude_id: Optional[UUID] = None,
    assignee_id: Optional[UUID] = None,
) -> Select:
    conditions = overlap_filter(
        resource_scope_id, interval, exclude_id=exclude_id, assignee_id=assignee_id
    )
    return select(AppointmentModel.id).where(and_(*conditions)).limit(1)


def due_to_start_stmt(now: _dt.datetime, limit: int) -> Select:
    return (
        select(AppointmentModel)
        .where(
            AppointmentModel.status == AppointmentStatus.PENDING.value,
            AppointmentModel.start_time <= now,
        )
        .order_by(AppointmentModel.start_time.asc())
        .limit(limit)
    )


def due_to_complete_stmt(now: _dt.datetime, limit: int) -> Select:
    return (
        select(AppointmentModel)
        .where(
            AppointmentModel.status == AppointmentStatus.IN_PROGRESS.value,
            AppointmentModel.end_time <= now,
        )
        .order_by(AppointmentModel.end_time.asc())
        .limit(limit)
    )


def for_update_stmt(appointment_id: UUID, *, skip_locked: bool = False) -> Select:
    return (
        select(AppointmentModel)
        .where(AppointmentModel.id == appointment_id)
        .with_for_update(skip_locked=skip_locked)
    )


class AppointmentRepository(BaseRepository[AppointmentModel], AppointmentStore):
    model = AppointmentModel

    async def save(self, appointment: Appointment) -> Appointment:
        snapshot = appointment.snapshot()
        data = _to_row(snapshot)
        if snapshot.id is None:
            row = await self.create(data)
        else:
            row = await self.update(snapshot.id, data)
            if row is None:
                raise NotFoundError(
                    "Appointment not found", details={"appointment_id": str(snapshot.id)}
                )
        return _to_domain(row)

    async def get(self, appointment_id: UUID) -> Optional[Appointment]:
        row = await self.get_by_id(appointment_id)
        return _to_domain(row) if row is not None else None

    async def get_for_update(
        self, appointment_id: UUID, *, skip_locked: bool = False
    ) -> Optional[Appointment]:
        result = await self.session.execute(
            for_update_stmt(appointment_id, skip_locked=skip_locked)
        )
        row = result.scalar_one_or_none()
        return _to_domain(row) if row is not None else None

    async def list_by_resource(
        self, resource_scope_id: UUID, status: Optional[AppointmentStatus] = None
    ) -> List[Appointment]:
        stmt = select(AppointmentModel).where(AppointmentModel.resource_scope_id == resource_scope_id)
        if status is not None:
            stmt = stmt.where(AppointmentModel.status == status.value)
        stmt = stmt.order_by(AppointmentModel.start_time.desc())
        return await self._fetch(stmt)

    async def list_by_subject(
        self, subject_id: UUID, status: Optional[AppointmentStatus] = None
    ) -> List[Appointment]:
        stmt = select(AppointmentModel).where(AppointmentModel.subject_id == subject_id)
        if status is not None:
            stmt = stmt.where(AppointmentModel.status == status.value)
        stmt = stmt.order_by(AppointmentModel.start_time.desc())
        return await self._fetch(stmt)

    async def list_active_between(
        self,
        resource_scope_id: UUID,
        window_start: _dt.datetime,
        window_end: _dt.datetime,
        assignee_id: Optional[UUID] = None,
    ) -> List[Appointment]:
        conditions = overlap_filter(
            resource_scope_id, Interval(window_start, window_end), assignee_id=assignee_id
        )
        stmt = (
            select(AppointmentModel)
            .where(and_(*conditions))
            .order_by(AppointmentModel.start_time.asc())
        )
        return await self._fetch(stmt)

    async def has_conflict(
        self,
        resource_scope_id: UUID,
        interval: Interval,
        *,
        exclude_id: Optional[UUID] = None,
        assignee_id: Optional[UUID] = None,
    ) -> bool:
        result = await self.session.execute(
            conflict_stmt(resource_scope_id, interval, exclude_id=exclude_id, assignee_id=assignee_id)
        )
        return result.first() is not None

    async def find_due_to_start(self, now: _dt.datetime, limit: int) -> List[Appointment]:
        return await self._fetch(due_to_start_stmt(now, limit))

    async def find_due_to_complete(self, now: _dt.datetime, limit: int) -> List[Appointment]:
        return await self._fetch(due_to_complete_stmt(now, limit))

    @asynccontextmanager
    async def scope_lock(self, resource_scope_id: UUID) -> AsyncIterator[None]:
        # Transaction-scoped: released on commit/rollback, not on exit
        await self.session.execute(_SCOPE_LOCK_SQL, {"key": scope_lock_key(resource_scope_id)})
        yield

    async def _fetch(self, stmt: Select) -> List[Appointment]:
        result = await self.session.execute(stmt)
        return [_to_domain(row) for row in result.scalars().all()]
