"""Per-scope schedule configuration (business hours + slot policy) as raw JSON."""
from __future__ import annotations

import uuid

from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from slotkeeper.infra.database.models.base import Base, TimestampMixin


class ScheduleConfigModel(Base, TimestampMixin):
    __tablename__ = "schedule_configs"

    resource_scope_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    # Parsed by ScheduleConfig.from_payload on read
    config_json: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
