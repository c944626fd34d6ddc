"""Budget aggregation: per-room spend figures, workspace totals and savings progress.

Pure functions over snapshots already fetched from the database.

Per room, each item contributes through its latest price record (the last
one in insertion order):

  estimated += quantity * est_unit
  actual    += quantity * actual_unit        (purchased with an actual price)
  spent     += quantity * actual_unit        (same case)
  spent     += quantity * est_unit           (otherwise)

Ratios against a zero planned budget are defined as 0.0.
"""

from __future__ import annotations

import math
import uuid
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone

from nestplan.core.money import MoneyValidationError, require_cents

SECONDS_PER_DAY = 86400
DEFAULT_NEAR_LIMIT_RATIO = 0.8
UNKNOWN_ROOM = "Unknown Room"


class BudgetValidationError(ValueError):
    pass


@dataclass(frozen=True)
class PricePoint:
    est_unit_cents: int
    actual_unit_cents: int | None = None


@dataclass(frozen=True)
class ItemLine:
    room_id: uuid.UUID | None
    quantity: int
    purchased: bool
    prices: Sequence[PricePoint] = ()  # insertion order, oldest first
    company_id: uuid.UUID | None = None


@dataclass(frozen=True)
class BudgetLine:
    budget_id: uuid.UUID
    room_id: uuid.UUID
    planned_cents: int
    room_name: str = UNKNOWN_ROOM
    target_date: date | None = None
    savings_target_source: str = "planned"


@dataclass(frozen=True)
class RoomSummary:
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


@dataclass
class BudgetOverview:
    rooms: list[RoomSummary]
    total_budget_cents: int = 0
    total_spent_cents: int = 0
    total_estimated_cents: int = 0
    total_actual_cents: int = 0
    total_savings_cents: int = 0
    over_budget: list[RoomSummary] = field(default_factory=list)
    near_limit: list[RoomSummary] = field(default_factory=list)


@dataclass(frozen=True)
class SavingsGoal:
    room_id: uuid.UUID
    room_name: str
    target_cents: int
    current_cents: int
    progress_pct: float
    remaining_cents: int
    met: bool
    status: str


def _cents(value: int, name: str, *, allow_negative: bool = False) -> int:
    try:
        return require_cents(value, name, allow_negative=allow_negative)
    except MoneyValidationError as exc:
        raise BudgetValidationError(str(exc)) from exc


def latest_price(prices: Sequence[PricePoint]) -> PricePoint | None:
    """Most recently recorded price: last by insertion, not the largest value."""
    return prices[-1] if prices else None


def item_totals(item: ItemLine) -> tuple[int, int, int]:
    """(estimated, actual, spent) contributed by one item."""
    price = latest_price(item.prices)
    if price is None:
        return 0, 0, 0
    quantity = item.quantity or 1
    if quantity < 0:
        raise BudgetValidationError(f"quantity must not be negative, got {quantity}")
    est_unit = _cents(price.est_unit_cents or 0, "est_unit_cents")
    estimated = quantity * est_unit

    if item.purchased and price.actual_unit_cents is not None:
        actual = quantity * _cents(price.actual_unit_cents, "actual_unit_cents")
        return estimated, actual, actual
    return estimated, 0, estimated


def spent_ratio(spent_cents: int, planned_cents: int) -> float:
    """spent / planned, or 0.0 when nothing is planned."""
    if planned_cents <= 0:
        return 0.0
    return spent_cents / planned_cents


def is_over_budget(spent_cents: int, planned_cents: int) -> bool:
    return spent_cents > planned_cents


def is_near_limit(
    spent_cents: int, planned_cents: int, ratio: float = DEFAULT_NEAR_LIMIT_RATIO
) -> bool:
    if planned_cents <= 0:
        return False
    return spent_cents <= planned_cents and spent_ratio(spent_cents, planned_cents) > ratio


def summarize_room(
    budget: BudgetLine,
    items: Iterable[ItemLine],
    near_limit_ratio: float = DEFAULT_NEAR_LIMIT_RATIO,
) -> RoomSummary:
    planned = _cents(budget.planned_cents, "planned_cents")
    estimated = actual = spent = 0
    for item in items:
        if item.room_id != budget.room_id:
            continue
        est, act, spt = item_totals(item)
        estimated += est
        actual += act
        spent += spt

    return RoomSummary(
        budget_id=budget.budget_id,
        room_id=budget.room_id,
        room_name=budget.room_name,
        planned_cents=planned,
        spent_cents=spent,
        estimated_cents=estimated,
        actual_cents=actual,
        target_date=budget.target_date,
        savings_target_source=budget.savings_target_source,
        spent_ratio=spent_ratio(spent, planned),
        over_budget=is_over_budget(spent, planned),
        near_limit=is_near_limit(spent, planned, near_limit_ratio),
        overage_cents=max(0, spent - planned),
    )


def summarize_budgets(
    budgets: Iterable[BudgetLine],
    items: Iterable[ItemLine],
    deposits: Iterable[tuple[uuid.UUID, int]] = (),
    near_limit_ratio: float = DEFAULT_NEAR_LIMIT_RATIO,
) -> BudgetOverview:
    """One summary row per budgeted room plus workspace-wide rollups.

    ``deposits`` are ``(room_id, amount_cents)`` pairs from the savings ledger.
    """
    by_room: dict[uuid.UUID | None, list[ItemLine]] = defaultdict(list)
    for item in items:
        if item.room_id is not None:
            by_room[item.room_id].append(item)

    budgets = list(budgets)
    rooms = [
        summarize_room(budget, by_room.get(budget.room_id, ()), near_limit_ratio)
        for budget in budgets
    ]
    ledger: dict[uuid.UUID, list[int]] = defaultdict(list)
    for room_id, amount in deposits:
        ledger[room_id].append(amount)
    # Same rooms as savings_goals: budgeted, or holding a positive balance
    budgeted = {b.room_id for b in budgets}
    savings = 0
    for room_id, amounts in ledger.items():
        balance = current_savings(amounts)
        if room_id in budgeted or balance > 0:
            savings += balance
    overview = BudgetOverview(
        rooms=rooms,
        total_budget_cents=sum(r.planned_cents for r in rooms),
        total_spent_cents=sum(r.spent_cents for r in rooms),
        total_estimated_cents=sum(r.estimated_cents for r in rooms),
        total_actual_cents=sum(r.actual_cents for r in rooms),
        total_savings_cents=savings,
    )
    overview.over_budget = [r for r in rooms if r.over_budget]
    overview.near_limit = [r for r in rooms if r.near_limit]
    return overview


@dataclass(frozen=True)
class ShoppingSummary:
    total_estimated_cents: int
    total_spent_cents: int
    pending_items: int
    purchased_items: int


def shopping_summary(items: Iterable[ItemLine]) -> ShoppingSummary:
    """Shopping-list totals over every item, with or without a room.

    Spent uses the current actual unit price when one is recorded and the
    estimate otherwise.
    """
    estimated = spent = purchased = pending = 0
    for item in items:
        if item.purchased:
            purchased += 1
        else:
            pending += 1
        price = latest_price(item.prices)
        if price is None:
            continue
        quantity = item.quantity or 1
        est_unit = _cents(price.est_unit_cents or 0, "est_unit_cents")
        estimated += quantity * est_unit
        if price.actual_unit_cents is not None:
            spent += quantity * _cents(price.actual_unit_cents, "actual_unit_cents")
        else:
            spent += quantity * est_unit
    return ShoppingSummary(estimated, spent, pending, purchased)


# ── Savings ──────────────────────────────────────────────────

def current_savings(amounts: Iterable[int]) -> int:
    """Net balance of a signed deposit ledger."""
    return sum(_cents(a, "amount_cents", allow_negative=True) for a in amounts)


def savings_status(target_cents: int, progress_pct: float, met: bool) -> str:
    if target_cents == 0:
        return "no-goal"
    if met:
        return "complete"
    if progress_pct >= 80:
        return "close"
    if progress_pct >= 50:
        return "halfway"
    return "starting"


def savings_goal(
    room_id: uuid.UUID,
    room_name: str,
    target_cents: int,
    amounts: Iterable[int],
) -> SavingsGoal:
    """Progress of a room's savings against its planned budget."""
    target = _cents(target_cents, "target_cents")
    current = current_savings(amounts)
    progress = round(current / target * 100, 1) if target > 0 else 0.0
    met = current >= target and target > 0
    return SavingsGoal(
        room_id=room_id,
        room_name=room_name,
        target_cents=target,
        current_cents=current,
        progress_pct=progress,
        remaining_cents=max(0, target - current),
        met=met,
        status=savings_status(target, progress, met),
    )


def savings_goals(
    budgets: Iterable[BudgetLine],
    rooms: Iterable[tuple[uuid.UUID, str]],
    deposits: Iterable[tuple[uuid.UUID, int]],
) -> list[SavingsGoal]:
    """One goal per room that has a budget or a positive balance, in room order."""
    planned = {b.room_id: b.planned_cents for b in budgets}
    ledger: dict[uuid.UUID, list[int]] = defaultdict(list)
    for room_id, amount in deposits:
        ledger[room_id].append(amount)

    goals = []
    for room_id, name in rooms:
        amounts = ledger.get(room_id, [])
        if room_id not in planned and current_savings(amounts) <= 0:
            continue
        goals.append(savings_goal(room_id, name, planned.get(room_id, 0), amounts))
    return goals


# ── Calendar ─────────────────────────────────────────────────

def days_until(target: date | None, now: datetime | None = None) -> int:
    """Whole days left until ``target`` (midnight UTC), rounded up, never negative."""
    if target is None:
        return 0
    if now is None:
        now = datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    deadline = datetime.combine(target, time.min, tzinfo=timezone.utc)
    seconds = (deadline - now).total_seconds()
    return max(0, math.ceil(seconds / SECONDS_PER_DAY))
