"""Budget tracking service tests against in-memory fake repositories."""

import uuid
from datetime import date
from types import SimpleNamespace

import pytest

from nestplan.services.budget import BudgetValidationError
from nestplan.services.budget_tracking import (
    InsufficientSavingsError,
    amend_deposit,
    initialize_room_budgets,
    record_deposit,
    remove_deposit,
)

WORKSPACE = uuid.uuid4()


class FakeRooms:
    def __init__(self, *names: str) -> None:
        self.rooms = [SimpleNamespace(id=uuid.uuid4(), name=n) for n in names]

    async def for_workspace(self, workspace_id):
        return list(self.rooms)


class FakeBudgets:
    def __init__(self) -> None:
        self.rows: dict[uuid.UUID, SimpleNamespace] = {}

    async def room_ids(self, workspace_id):
        return set(self.rows)

    async def add_missing(self, workspace_id, room_ids):
        for room_id in room_ids:
            self.rows.setdefault(room_id, SimpleNamespace(room_id=room_id, planned_cents=0))


class FakeDeposits:
    def __init__(self) -> None:
        self.rows: list[SimpleNamespace] = []

    async def balance(self, workspace_id, room_id):
        return sum(d.amount_cents for d in self.rows if d.room_id == room_id)

    async def add(self, workspace_id, room_id, amount_cents, on, note=None):
        deposit = SimpleNamespace(
            workspace_id=workspace_id, room_id=room_id, amount_cents=amount_cents, date=on, note=note
        )
        self.rows.append(deposit)
        return deposit

    async def delete(self, deposit):
        self.rows.remove(deposit)


# ── Initialization ───────────────────────────────────────────

@pytest.mark.asyncio
async def test_initialize_is_idempotent():
    rooms, budgets = FakeRooms("Kitchen", "Bath"), FakeBudgets()

    created = await initialize_room_budgets(rooms, budgets, WORKSPACE)
    assert len(created) == 2
    assert await initialize_room_budgets(rooms, budgets, WORKSPACE) == []
    assert len(budgets.rows) == 2


@pytest.mark.asyncio
async def test_initialize_only_fills_gaps():
    rooms, budgets = FakeRooms("Kitchen", "Bath"), FakeBudgets()
    kitchen = rooms.rooms[0]
    budgets.rows[kitchen.id] = SimpleNamespace(room_id=kitchen.id, planned_cents=50000)

    created = await initialize_room_budgets(rooms, budgets, WORKSPACE)
    assert created == [rooms.rooms[1].id]
    assert budgets.rows[kitchen.id].planned_cents == 50000


# ── Savings ledger ───────────────────────────────────────────

@pytest.mark.asyncio
async def test_deposits_and_withdrawals_net_out():
    deposits, room = FakeDeposits(), uuid.uuid4()
    for amount in (10000, -2000, 5000):
        await record_deposit(deposits, WORKSPACE, room, amount, date(2025, 1, 1))
    assert await deposits.balance(WORKSPACE, room) == 13000


@pytest.mark.asyncio
async def test_overdrawn_withdrawal_rejected():
    deposits, room = FakeDeposits(), uuid.uuid4()
    await record_deposit(deposits, WORKSPACE, room, 3000, date(2025, 1, 1))

    with pytest.raises(InsufficientSavingsError):
        await record_deposit(deposits, WORKSPACE, room, -3001, date(2025, 1, 2))
    assert len(deposits.rows) == 1

    await record_deposit(deposits, WORKSPACE, room, -3000, date(2025, 1, 2))
    assert await deposits.balance(WORKSPACE, room) == 0


@pytest.mark.asyncio
async def test_zero_amount_rejected():
    with pytest.raises(BudgetValidationError):
        await record_deposit(FakeDeposits(), WORKSPACE, uuid.uuid4(), 0, date(2025, 1, 1))


@pytest.mark.asyncio
async def test_amend_cannot_overdraw():
    deposits, room = FakeDeposits(), uuid.uuid4()
    first = await record_deposit(deposits, WORKSPACE, room, 5000, date(2025, 1, 1))
    await record_deposit(deposits, WORKSPACE, room, -4000, date(2025, 1, 2))

    with pytest.raises(InsufficientSavingsError):
        await amend_deposit(deposits, first, amount_cents=3000)

    await amend_deposit(deposits, first, amount_cents=4500, note="adjusted")
    assert first.amount_cents == 4500
    assert first.note == "adjusted"


@pytest.mark.asyncio
async def test_remove_cannot_overdraw():
    deposits, room = FakeDeposits(), uuid.uuid4()
    first = await record_deposit(deposits, WORKSPACE, room, 5000, date(2025, 1, 1))
    withdrawal = await record_deposit(deposits, WORKSPACE, room, -1000, date(2025, 1, 2))

    with pytest.raises(InsufficientSavingsError):
        await remove_deposit(deposits, first)

    await remove_deposit(deposits, withdrawal)
    await remove_deposit(deposits, first)
    assert deposits.rows == []
