"""Activity log entries written by mutating endpoints."""

import logging
import uuid
from typing import Any

from nestplan.models.activity import ActivityEntry
from nestplan.repositories.activity import ActivityRepository

logger = logging.getLogger(__name__)


class ActivityType:
    WORKSPACE_CREATED = "workspace.created"
    FEE_RULE_PUBLISHED = "fee_rule.published"
    FEE_RULE_UPDATED = "fee_rule.updated"
    BUDGETS_INITIALIZED = "budgets.initialized"
    DEPOSIT_RECORDED = "savings.deposit_recorded"
    ITEM_PURCHASED = "item.purchased"


async def record_activity(
    activity: ActivityRepository,
    workspace_id: uuid.UUID,
    type: str,
    entity: str,
    entity_id: uuid.UUID | None = None,
    **payload: Any,
) -> ActivityEntry:
    entry = await activity.append(workspace_id, type, entity, entity_id, payload)
    logger.debug("Activity %s on %s %s", type, entity, entity_id)
    return entry
