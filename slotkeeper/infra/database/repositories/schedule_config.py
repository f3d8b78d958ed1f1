"""Schedule config repository: the PostgreSQL ScheduleConfigStore."""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert

from slotkeeper.domain.ports import ScheduleConfigStore
from slotkeeper.domain.schedule import ScheduleConfig
from slotkeeper.infra.database.models.schedule_config import ScheduleConfigModel
from slotkeeper.infra.database.repositories.base import BaseRepository


def upsert_stmt(resource_scope_id: UUID, payload: dict):
    stmt = insert(ScheduleConfigModel).values(
        resource_scope_id=resource_scope_id, config_json=payload
    )
    return stmt.on_conflict_do_update(
        index_elements=[ScheduleConfigModel.resource_scope_id],
        set_={"config_json": stmt.excluded.config_json, "updated_at": func.now()},
    )


class ScheduleConfigRepository(BaseRepository[ScheduleConfigModel], ScheduleConfigStore):
    model = ScheduleConfigModel

    async def get_for_scope(self, resource_scope_id: UUID) -> Optional[ScheduleConfig]:
        row = await self.get_by_id(resource_scope_id)
        if row is None:
            return None
        # Malformed payloads surface as ConfigurationError
        return ScheduleConfig.from_payload(row.config_json)

    async def save_for_scope(self, resource_scope_id: UUID, config: ScheduleConfig) -> None:
        await self.session.execute(upsert_stmt(resource_scope_id, config.to_payload()))
        await self.session.flush()
