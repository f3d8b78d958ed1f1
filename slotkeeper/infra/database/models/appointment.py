"""Appointment ORM model."""
from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from slotkeeper.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class AppointmentModel(Base, TimestampMixin):
    """One reservation row. Timestamps are written from the aggregate, not the server."""

    __tablename__ = "appointments"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed', 'cancelled')",
            name="status_valid",
        ),
        CheckConstraint("start_time < end_time", name="interval_ordered"),
        CheckConstraint("price_snapshot >= 0", name="price_nonnegative"),
        Index("ix_appointments_scope_status_start", "resource_scope_id", "status", "start_time"),
        Index("ix_appointments_status_start", "status", "start_time"),
        Index("ix_appointments_status_end", "status", "end_time"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()

    resource_scope_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    subject_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    service_id: Mapped[int] = mapped_column(Integer, nullable=False)
    assignee_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)

    start_time: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # pending | in_progress | completed | cancelled
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")

    price_snapshot: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency_snapshot: Mapped[str] = mapped_column(String(3), nullable=False)

    meeting_link: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    user_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
