"""Room budgets: initialization, editing, spend overview and savings goals."""

import uuid
from datetime import date

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from nestplan.api.deps import Auth, Session
from nestplan.core.config import get_settings
from nestplan.models.budget import RoomBudget, RoomBudgetRead, RoomBudgetUpdate
from nestplan.repositories.activity import ActivityRepository
from nestplan.repositories.budgets import RoomBudgetRepository, SavingsDepositRepository
from nestplan.repositories.items import ItemRepository
from nestplan.repositories.rooms import RoomRepository
from nestplan.services import budget_tracking
from nestplan.services.activity import ActivityType, record_activity
from nestplan.services.budget import UNKNOWN_ROOM, BudgetValidationError

router = APIRouter(prefix="/budgets", tags=["budgets"])


# ── Response schemas ─────────────────────────────────────────

class RoomSummaryRead(BaseModel):
    budget_id: uuid.UUID
    room_id: uuid.UUID
    room_name: str
    planned_cents: int
    spent_cents: int
    estimated_cents: int
    actual_cents: int
    target_date: date | None
    savings_target_source: str
    spent_ratio: float
    over_budget: bool
    near_limit: bool
    overage_cents: int


class BudgetSummaryRead(BaseModel):
    rooms: list[RoomSummaryRead]
    total_budget_cents: int
    total_spent_cents: int
    total_estimated_cents: int
    total_actual_cents: int
    total_savings_cents: int
    over_budget: list[RoomSummaryRead]
    near_limit: list[RoomSummaryRead]


class SavingsGoalRead(BaseModel):
    room_id: uuid.UUID
    room_name: str
    target_cents: int
    current_cents: int
    progress_pct: float
    remaining_cents: int
    met: bool
    status: str


class BudgetInitResponse(BaseModel):
    created: int
    budgets: list[RoomBudgetRead]


def _to_read(budget: RoomBudget, room_names: dict[uuid.UUID, str]) -> RoomBudgetRead:
    return RoomBudgetRead(
        id=budget.id,
        workspace_id=budget.workspace_id,
        room_id=budget.room_id,
        room_name=room_names.get(budget.room_id, UNKNOWN_ROOM),
        planned_cents=budget.planned_cents,
        target_date=budget.target_date,
        savings_target_source=budget.savings_target_source,
    )


async def _list_budgets(session, workspace_id: uuid.UUID) -> list[RoomBudgetRead]:
    names = {r.id: r.name for r in await RoomRepository(session).for_workspace(workspace_id)}
    budgets = await RoomBudgetRepository(session).for_workspace(workspace_id)
    return [_to_read(b, names) for b in budgets]


# ── Routes ────────────────────────────────────────────────────

@router.get("", response_model=list[RoomBudgetRead])
async def list_budgets(auth: Auth, session: Session) -> list[RoomBudgetRead]:
    """Budgets for every room; rooms without one get a zero budget first."""
    await budget_tracking.initialize_room_budgets(
        RoomRepository(session), RoomBudgetRepository(session), auth.workspace_id
    )
    await session.commit()
    return await _list_budgets(session, auth.workspace_id)


@router.post("/initialize", response_model=BudgetInitResponse)
async def initialize_budgets(auth: Auth, session: Session) -> BudgetInitResponse:
    """Create zero budgets for rooms that lack one. Repeating it is harmless."""
    created = await budget_tracking.initialize_room_budgets(
        RoomRepository(session), RoomBudgetRepository(session), auth.workspace_id
    )
    if created:
        await record_activity(
            ActivityRepository(session),
            auth.workspace_id,
            ActivityType.BUDGETS_INITIALIZED,
            "room_budget",
            rooms=len(created),
        )
    await session.commit()
    return BudgetInitResponse(
        created=len(created),
        budgets=await _list_budgets(session, auth.workspace_id),
    )


@router.get("/summary", response_model=BudgetSummaryRead)
async def get_budget_summary(auth: Auth, session: Session) -> BudgetSummaryRead:
    try:
        overview = await budget_tracking.budget_overview(
            RoomRepository(session),
            RoomBudgetRepository(session),
            ItemRepository(session),
            SavingsDepositRepository(session),
            auth.workspace_id,
            near_limit_ratio=get_settings().near_limit_ratio,
        )
    except BudgetValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    await session.commit()
    return BudgetSummaryRead.model_validate(overview, from_attributes=True)


@router.get("/savings", response_model=list[SavingsGoalRead])
async def get_savings_goals(auth: Auth, session: Session) -> list[SavingsGoalRead]:
    """Savings progress per room against its planned budget."""
    goals = await budget_tracking.savings_progress(
        RoomRepository(session),
        RoomBudgetRepository(session),
        SavingsDepositRepository(session),
        auth.workspace_id,
    )
    return [SavingsGoalRead.model_validate(g, from_attributes=True) for g in goals]


@router.patch("/{budget_id}", response_model=RoomBudgetRead)
async def update_budget(
    budget_id: uuid.UUID,
    body: RoomBudgetUpdate,
    auth: Auth,
    session: Session,
) -> RoomBudgetRead:
    budget = await RoomBudgetRepository(session).get(budget_id, auth.workspace_id)
    if budget is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found")

    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None and field in ("planned_cents", "savings_target_source"):
            continue
        setattr(budget, field, value)

    budget.touch()
    session.add(budget)
    await session.commit()
    await session.refresh(budget)
    room = await RoomRepository(session).get(budget.room_id, auth.workspace_id)
    return _to_read(budget, {room.id: room.name} if room else {})
