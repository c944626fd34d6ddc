"""Budget tracking use cases: initialization, overview, savings ledger."""

import logging
import uuid
from datetime import date

from nestplan.models.budget import RoomBudget, SavingsDeposit
from nestplan.repositories.budgets import RoomBudgetRepository, SavingsDepositRepository
from nestplan.repositories.items import ItemRepository
from nestplan.repositories.rooms import RoomRepository
from nestplan.services.budget import (
    UNKNOWN_ROOM,
    BudgetLine,
    BudgetOverview,
    BudgetValidationError,
    ItemLine,
    PricePoint,
    SavingsGoal,
    savings_goals,
    summarize_budgets,
)

logger = logging.getLogger(__name__)


class InsufficientSavingsError(BudgetValidationError):
    """A withdrawal would take a room's savings below zero."""


async def initialize_room_budgets(
    rooms: RoomRepository,
    budgets: RoomBudgetRepository,
    workspace_id: uuid.UUID,
) -> list[uuid.UUID]:
    """Give every room without a budget a zero budget. Safe to repeat.

    Returns the ids of the rooms that were missing a budget.
    """
    existing = await budgets.room_ids(workspace_id)
    missing = [room.id for room in await rooms.for_workspace(workspace_id) if room.id not in existing]
    if missing:
        await budgets.add_missing(workspace_id, missing)
        logger.info("Initialized %d room budget(s) for workspace %s", len(missing), workspace_id)
    return missing


async def budget_lines(
    rooms: RoomRepository,
    budgets: RoomBudgetRepository,
    workspace_id: uuid.UUID,
) -> list[BudgetLine]:
    names = {room.id: room.name for room in await rooms.for_workspace(workspace_id)}
    return [to_budget_line(b, names.get(b.room_id, UNKNOWN_ROOM)) for b in await budgets.for_workspace(workspace_id)]


def to_budget_line(budget: RoomBudget, room_name: str) -> BudgetLine:
    return BudgetLine(
        budget_id=budget.id,
        room_id=budget.room_id,
        planned_cents=budget.planned_cents,
        room_name=room_name,
        target_date=budget.target_date,
        savings_target_source=str(budget.savings_target_source),
    )


async def item_lines(
    items: ItemRepository, workspace_id: uuid.UUID, *, with_room_only: bool = True
) -> list[ItemLine]:
    rows = await items.for_workspace(workspace_id, with_room_only=with_room_only)
    history = await items.price_history(item.id for item in rows)
    return [
        ItemLine(
            room_id=item.room_id,
            quantity=item.quantity,
            purchased=item.purchased,
            prices=tuple(
                PricePoint(p.est_unit_cents, p.actual_unit_cents) for p in history.get(item.id, [])
            ),
            company_id=item.company_id,
        )
        for item in rows
    ]


async def budget_overview(
    rooms: RoomRepository,
    budgets: RoomBudgetRepository,
    items: ItemRepository,
    deposits: SavingsDepositRepository,
    workspace_id: uuid.UUID,
    near_limit_ratio: float,
) -> BudgetOverview:
    """Per-room spend summary plus workspace totals; creates missing budgets first."""
    await initialize_room_budgets(rooms, budgets, workspace_id)
    lines = await budget_lines(rooms, budgets, workspace_id)
    ledger = [(d.room_id, d.amount_cents) for d in await deposits.for_workspace(workspace_id)]
    return summarize_budgets(
        lines,
        await item_lines(items, workspace_id),
        ledger,
        near_limit_ratio=near_limit_ratio,
    )


async def savings_progress(
    rooms: RoomRepository,
    budgets: RoomBudgetRepository,
    deposits: SavingsDepositRepository,
    workspace_id: uuid.UUID,
) -> list[SavingsGoal]:
    room_rows = await rooms.for_workspace(workspace_id)
    lines = await budget_lines(rooms, budgets, workspace_id)
    ledger = [(d.room_id, d.amount_cents) for d in await deposits.for_workspace(workspace_id)]
    return savings_goals(lines, [(r.id, r.name) for r in room_rows], ledger)


async def record_deposit(
    deposits: SavingsDepositRepository,
    workspace_id: uuid.UUID,
    room_id: uuid.UUID,
    amount_cents: int,
    on: date,
    note: str | None = None,
) -> SavingsDeposit:
    """Append a signed ledger entry; withdrawals cannot exceed the balance."""
    if amount_cents == 0:
        raise BudgetValidationError("amount_cents must not be zero")
    if amount_cents < 0:
        balance = await deposits.balance(workspace_id, room_id)
        if balance + amount_cents < 0:
            logger.warning(
                "Rejected withdrawal of %d from room %s (balance %d)",
                -amount_cents, room_id, balance,
            )
            raise InsufficientSavingsError(
                f"Cannot withdraw {-amount_cents} cents; only {balance} cents saved"
            )
    deposit = await deposits.add(workspace_id, room_id, amount_cents, on, note)
    logger.info("Recorded savings entry of %d cents for room %s", amount_cents, room_id)
    return deposit


async def amend_deposit(
    deposits: SavingsDepositRepository,
    deposit: SavingsDeposit,
    amount_cents: int | None = None,
    on: date | None = None,
    note: str | None = None,
) -> SavingsDeposit:
    """Edit a ledger entry without letting the room balance go negative."""
    if amount_cents is not None:
        if amount_cents == 0:
            raise BudgetValidationError("amount_cents must not be zero")
        balance = await deposits.balance(deposit.workspace_id, deposit.room_id)
        new_balance = balance - deposit.amount_cents + amount_cents
        if new_balance < 0:
            raise InsufficientSavingsError(
                f"Change would leave room savings at {new_balance} cents"
            )
        deposit.amount_cents = amount_cents
    if on is not None:
        deposit.date = on
    if note is not None:
        deposit.note = note
    return deposit


async def remove_deposit(deposits: SavingsDepositRepository, deposit: SavingsDeposit) -> None:
    """Delete a ledger entry unless that would leave the room overdrawn."""
    balance = await deposits.balance(deposit.workspace_id, deposit.room_id)
    if balance - deposit.amount_cents < 0:
        raise InsufficientSavingsError(
            f"Removing this entry would leave room savings at {balance - deposit.amount_cents} cents"
        )
    await deposits.delete(deposit)
