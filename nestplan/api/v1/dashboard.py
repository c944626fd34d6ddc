"""Workspace dashboard endpoint."""

import uuid
from datetime import date

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from nestplan.api.deps import Auth, Session
from nestplan.core.config import get_settings
from nestplan.repositories.budgets import RoomBudgetRepository, SavingsDepositRepository
from nestplan.repositories.items import ItemRepository
from nestplan.repositories.rooms import RoomRepository
from nestplan.repositories.tasks import TaskRepository
from nestplan.repositories.workspaces import WorkspaceRepository
from nestplan.services.budget_tracking import budget_overview, item_lines
from nestplan.services.dashboard import TaskLine, build_dashboard

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class UpcomingTaskRead(BaseModel):
    id: uuid.UUID
    title: str
    due_date: date | None
    priority: int
    done: bool


class RiskFlagRead(BaseModel):
    kind: str
    severity: str
    message: str
    count: int
    entity_ids: list[uuid.UUID]


class DashboardRead(BaseModel):
    total_budget_cents: int
    total_spent_cents: int
    total_estimated_cents: int
    total_savings_cents: int
    pending_items: int
    purchased_items: int
    tasks_done: int
    tasks_total: int
    days_until_move: int | None
    upcoming_tasks: list[UpcomingTaskRead]
    risks: list[RiskFlagRead]


@router.get("", response_model=DashboardRead)
async def get_dashboard(auth: Auth, session: Session) -> DashboardRead:
    settings = get_settings()
    workspace = await WorkspaceRepository(session).get(auth.workspace_id)
    if workspace is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")

    items = ItemRepository(session)
    overview = await budget_overview(
        RoomRepository(session),
        RoomBudgetRepository(session),
        items,
        SavingsDepositRepository(session),
        auth.workspace_id,
        near_limit_ratio=settings.near_limit_ratio,
    )
    await session.commit()

    tasks = [
        TaskLine(id=t.id, title=t.title, due_date=t.due_date, priority=t.priority, done=t.done)
        for t in await TaskRepository(session).for_workspace(auth.workspace_id)
    ]
    dashboard = build_dashboard(
        overview,
        await item_lines(items, auth.workspace_id, with_room_only=False),
        tasks,
        workspace.move_in_date,
        window_days=settings.upcoming_task_window_days,
    )
    return DashboardRead.model_validate(dashboard, from_attributes=True)
