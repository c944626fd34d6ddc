"""Read-only activity feed."""

import json

from fastapi import APIRouter, Query

from nestplan.api.deps import Auth, Session
from nestplan.models.activity import ActivityRead
from nestplan.repositories.activity import ActivityRepository

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("", response_model=list[ActivityRead])
async def list_activity(
    auth: Auth,
    session: Session,
    limit: int = Query(default=50, ge=1, le=200),
) -> list[ActivityRead]:
    """Most recent entries first."""
    entries = await ActivityRepository(session).recent(auth.workspace_id, limit=limit)
    return [
        ActivityRead(
            id=e.id,
            type=e.type,
            entity=e.entity,
            entity_id=e.entity_id,
            payload=json.loads(e.payload or "{}"),
            created_at=e.created_at,
        )
        for e in entries
    ]
