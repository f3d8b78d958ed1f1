"""
The Appointment aggregate.

Appointments are built only through ``Appointment.create`` (validating factory,
always ``pending``) or ``Appointment.restore`` (rehydration from storage). Status
changes go through the transition methods; there are no public setters.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from slotkeeper.core.exceptions import InvalidAppointmentError, InvalidTransitionError
from slotkeeper.domain.interval import Interval
from slotkeeper.domain.status import AppointmentStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AppointmentSnapshot:
    """Flat, immutable record of every persisted field of an appointment."""

    id: Optional[uuid.UUID]
    resource_scope_id: uuid.UUID
    subject_id: uuid.UUID
    service_id: int
    assignee_id: Optional[uuid.UUID]
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    price_snapshot: Decimal
    currency_snapshot: str
    meeting_link: Optional[str]
    user_notes: Optional[str]
    admin_notes: Optional[str]
    created_at: datetime
    updated_at: datetime


# Matches the NUMERIC(12, 2) price column
_PRICE_QUANTUM = Decimal("0.01")
_PRICE_LIMIT = Decimal(10) ** 10


def _validate_price(price: Any) -> Decimal:
    if price is None:
        raise InvalidAppointmentError("Price is required")
    try:
        value = price if isinstance(price, Decimal) else Decimal(str(price))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidAppointmentError(f"Price is not a number: {price!r}", cause=exc) from exc
    if not value.is_finite():
        raise InvalidAppointmentError(f"Price is not a number: {price!r}")
    if value < 0:
        raise InvalidAppointmentError("Price cannot be negative", details={"price": str(value)})
    if value >= _PRICE_LIMIT:
        raise InvalidAppointmentError("Price must be below 10^10", details={"price": str(value)})
    if value != value.quantize(_PRICE_QUANTUM):
        raise InvalidAppointmentError(
            "Price allows at most 2 decimal places", details={"price": str(value)}
        )
    return value


def _validate_currency(currency: Any) -> str:
    code = (currency or "").strip() if isinstance(currency, str) else ""
    if len(code) != 3 or not code.isalpha() or not code.isascii():
        raise InvalidAppointmentError(
            "Currency must be a 3-letter code", details={"currency": currency}
        )
    return code.upper()


def _validate_future(interval: Interval, now: datetime) -> None:
    if interval.start < now:
        raise InvalidAppointmentError(
            "Cannot book appointments in the past",
            details={"start_time": interval.start.isoformat(), "now": now.isoformat()},
        )


class Appointment:
    """A time-bound reservation of a resource scope by a subject."""

    __slots__ = ("_state",)

    def __init__(self, state: AppointmentSnapshot) -> None:
        self._state = state

    # ── Construction ─────────────────────────────────────────────────────────

    @classmethod
    def create(
        cls,
        *,
        resource_scope_id: uuid.UUID,
        subject_id: uuid.UUID,
        service_id: int,
        interval: Interval,
        price: Decimal,
        currency: str,
        assignee_id: Optional[uuid.UUID] = None,
        user_notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Appointment:
        """
        Validate and build a new ``pending`` appointment with no id.

        Raises InvalidAppointmentError when a reference is missing, the price is
        missing or negative, the currency is not a 3-letter code, or the
        interval starts before ``now``.
        """
        now = now or utcnow()
        missing = [
            name
            for name, value in (
                ("resource_scope_id", resource_scope_id),
                ("subject_id", subject_id),
                ("service_id", service_id),
                ("interval", interval),
            )
            if value is None
        ]
        if missing:
            raise InvalidAppointmentError(
                f"Missing required fields: {', '.join(missing)}", details={"missing": missing}
            )
        _validate_future(interval, now)
        return cls(
            AppointmentSnapshot(
                id=None,
                resource_scope_id=resource_scope_id,
                subject_id=subject_id,
                service_id=service_id,
                assignee_id=assignee_id,
                start_time=interval.start,
                end_time=interval.end,
                status=AppointmentStatus.PENDING,
                price_snapshot=_validate_price(price),
                currency_snapshot=_validate_currency(currency),
                meeting_link=None,
                user_notes=user_notes,
                admin_notes=None,
                created_at=now,
                updated_at=now,
            )
        )

    @classmethod
    def restore(cls, snapshot: AppointmentSnapshot) -> Appointment:
        """Rehydrate from storage. Skips the future-start check."""
        interval = Interval(snapshot.start_time, snapshot.end_time)
        return cls(
            replace(
                snapshot,
                start_time=interval.start,
                end_time=interval.end,
                status=AppointmentStatus.from_value(snapshot.status),
            )
        )

    def snapshot(self) -> AppointmentSnapshot:
        return self._state

    # ── Read-only view ───────────────────────────────────────────────────────

    @property
    def id(self) -> Optional[uuid.UUID]:
        return self._state.id

    @property
    def resource_scope_id(self) -> uuid.UUID:
        return self._state.resource_scope_id

    @property
    def subject_id(self) -> uuid.UUID:
        return self._state.subject_id

    @property
    def service_id(self) -> int:
        return self._state.service_id

    @property
    def assignee_id(self) -> Optional[uuid.UUID]:
        return self._state.assignee_id

    @property
    def interval(self) -> Interval:
        return Interval(self._state.start_time, self._state.end_time)

    @property
    def status(self) -> AppointmentStatus:
        return self._state.status

    @property
    def price_snapshot(self) -> Decimal:
        return self._state.price_snapshot

    @property
    def currency_snapshot(self) -> str:
        return self._state.currency_snapshot

    @property
    def meeting_link(self) -> Optional[str]:
        return self._state.meeting_link

    @property
    def user_notes(self) -> Optional[str]:
        return self._state.user_notes

    @property
    def admin_notes(self) -> Optional[str]:
        return self._state.admin_notes

    @property
    def created_at(self) -> datetime:
        return self._state.created_at

    @property
    def updated_at(self) -> datetime:
        return self._state.updated_at

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def can_be_modified(self) -> bool:
        return not self.status.is_terminal

    @property
    def duration_minutes(self) -> int:
        return self.interval.duration_minutes

    # ── Transitions ──────────────────────────────────────────────────────────

    def start(self, meeting_link: Optional[str] = None, *, now: Optional[datetime] = None) -> None:
        if not self.status.can_start:
            raise self._refuse("start", "Only pending appointments can be started")
        self._mutate(now, status=AppointmentStatus.IN_PROGRESS, meeting_link=meeting_link)

    def complete(self, *, now: Optional[datetime] = None) -> None:
        if not self.status.can_complete:
            raise self._refuse("complete", "Only in_progress appointments can be completed")
        self._mutate(now, status=AppointmentStatus.COMPLETED)

    def cancel(self, reason: Optional[str] = None, *, now: Optional[datetime] = None) -> None:
        """Cancel a pending or in-progress appointment; ``reason`` goes to admin notes."""
        if self.status is AppointmentStatus.CANCELLED:
            raise self._refuse("cancel", "The appointment is already cancelled")
        if self.status is AppointmentStatus.COMPLETED:
            raise self._refuse("cancel", "Cannot cancel an already completed appointment")
        changes: dict[str, Any] = {"status": AppointmentStatus.CANCELLED}
        if reason is not None:
            changes["admin_notes"] = reason
        self._mutate(now, **changes)

    def reschedule(self, interval: Interval, *, now: Optional[datetime] = None) -> None:
        if not self.can_be_modified:
            raise self._refuse("reschedule", "Cannot reschedule a cancelled or completed appointment")
        if interval is None:
            raise InvalidAppointmentError("Start time and end time are required")
        now = now or utcnow()
        _validate_future(interval, now)
        self._mutate(now, start_time=interval.start, end_time=interval.end)

    def add_admin_notes(self, notes: Optional[str], *, now: Optional[datetime] = None) -> None:
        """Allowed in every status, terminal ones included."""
        self._mutate(now, admin_notes=notes)

    # ── Internals ────────────────────────────────────────────────────────────

    def _mutate(self, now: Optional[datetime], **changes: Any) -> None:
        self._state = replace(self._state, updated_at=now or utcnow(), **changes)

    def _refuse(self, action: str, message: str) -> InvalidTransitionError:
        return InvalidTransitionError(
            f"{message}. Current status: {self.status.value}",
            details={
                "appointment_id": str(self.id) if self.id else None,
                "action": action,
                "status": self.status.value,
            },
        )

    def __repr__(self) -> str:
        return (
            f"Appointment(id={self.id!s}, scope={self.resource_scope_id!s}, "
            f"status={self.status.value}, start={self.interval.start.isoformat()})"
        )
