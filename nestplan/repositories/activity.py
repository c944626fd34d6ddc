"""Activity log persistence."""

import json
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from nestplan.models.activity import ActivityEntry


class ActivityRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def append(
        self,
        workspace_id: uuid.UUID,
        type: str,
        entity: str,
        entity_id: uuid.UUID | None = None,
        payload: dict | None = None,
    ) -> ActivityEntry:
        entry = ActivityEntry(
            workspace_id=workspace_id,
            type=type,
            entity=entity,
            entity_id=entity_id,
            payload=json.dumps(payload or {}, default=str),
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def recent(self, workspace_id: uuid.UUID, limit: int = 50) -> list[ActivityEntry]:
        stmt = (
            select(ActivityEntry)
            .where(ActivityEntry.workspace_id == workspace_id)
            .order_by(ActivityEntry.created_at.desc())  # type: ignore[attr-defined]
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
