"""Workspace dashboard: KPIs, upcoming tasks and risk flags."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from nestplan.services.budget import BudgetOverview, ItemLine, days_until

UPCOMING_TASK_LIMIT = 5


@dataclass(frozen=True)
class TaskLine:
    id: uuid.UUID
    title: str
    due_date: date | None
    priority: int
    done: bool


@dataclass(frozen=True)
class RiskFlag:
    kind: str
    severity: str  # "high" | "medium"
    message: str
    count: int
    entity_ids: list[uuid.UUID] = field(default_factory=list)


@dataclass
class Dashboard:
    total_budget_cents: int
    total_spent_cents: int
    total_estimated_cents: int
    total_savings_cents: int
    pending_items: int
    purchased_items: int
    tasks_done: int
    tasks_total: int
    days_until_move: int | None
    upcoming_tasks: list[TaskLine] = field(default_factory=list)
    risks: list[RiskFlag] = field(default_factory=list)


def upcoming_tasks(
    tasks: Iterable[TaskLine],
    today: date,
    window_days: int,
    limit: int = UPCOMING_TASK_LIMIT,
) -> list[TaskLine]:
    """Open tasks due between today and today + window, soonest first."""
    horizon = today + timedelta(days=window_days)
    due = [t for t in tasks if not t.done and t.due_date is not None and today <= t.due_date <= horizon]
    due.sort(key=lambda t: (t.due_date, t.priority))
    return due[:limit]


def risk_flags(
    overview: BudgetOverview,
    items: Iterable[ItemLine],
    tasks: Iterable[TaskLine],
    today: date,
) -> list[RiskFlag]:
    flags = []

    over_estimate = [
        r for r in overview.rooms
        if r.planned_cents > 0 and r.estimated_cents > r.planned_cents
    ]
    if over_estimate:
        names = ", ".join(r.room_name for r in over_estimate)
        flags.append(RiskFlag(
            kind="rooms_over_budget",
            severity="high",
            message=f"Estimated spend exceeds the planned budget in: {names}",
            count=len(over_estimate),
            entity_ids=[r.room_id for r in over_estimate],
        ))

    overdue = [t for t in tasks if not t.done and t.due_date is not None and t.due_date < today]
    if overdue:
        flags.append(RiskFlag(
            kind="overdue_tasks",
            severity="high" if any(t.priority == 1 for t in overdue) else "medium",
            message=f"{len(overdue)} task(s) past their due date",
            count=len(overdue),
            entity_ids=[t.id for t in overdue],
        ))

    orphaned = [i for i in items if not i.purchased and i.company_id is None]
    if orphaned:
        flags.append(RiskFlag(
            kind="items_without_company",
            severity="medium",
            message=f"{len(orphaned)} unpurchased item(s) have no company assigned",
            count=len(orphaned),
        ))
    return flags


def build_dashboard(
    overview: BudgetOverview,
    items: Iterable[ItemLine],
    tasks: Iterable[TaskLine],
    move_in_date: date | None,
    now: datetime | None = None,
    window_days: int = 7,
) -> Dashboard:
    if now is None:
        now = datetime.now(timezone.utc)
    today = now.date()
    items = list(items)
    tasks = list(tasks)
    purchased = sum(1 for i in items if i.purchased)

    return Dashboard(
        total_budget_cents=overview.total_budget_cents,
        total_spent_cents=overview.total_spent_cents,
        total_estimated_cents=overview.total_estimated_cents,
        total_savings_cents=overview.total_savings_cents,
        pending_items=len(items) - purchased,
        purchased_items=purchased,
        tasks_done=sum(1 for t in tasks if t.done),
        tasks_total=len(tasks),
        days_until_move=days_until(move_in_date, now) if move_in_date else None,
        upcoming_tasks=upcoming_tasks(tasks, today, window_days),
        risks=risk_flags(overview, items, tasks, today),
    )
