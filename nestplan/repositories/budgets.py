"""Room budget and savings ledger persistence."""

import datetime as dt
import uuid
from collections.abc import Iterable

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from nestplan.models.base import new_uuid, utcnow
from nestplan.models.budget import RoomBudget, SavingsDeposit, SavingsTargetSource

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class RoomBudgetRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def for_workspace(self, workspace_id: uuid.UUID) -> list[RoomBudget]:
        stmt = (
            select(RoomBudget)
            .where(RoomBudget.workspace_id == workspace_id)
            .order_by(RoomBudget.created_at.asc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, budget_id: uuid.UUID, workspace_id: uuid.UUID) -> RoomBudget | None:
        stmt = select(RoomBudget).where(
            RoomBudget.id == budget_id,
            RoomBudget.workspace_id == workspace_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def room_ids(self, workspace_id: uuid.UUID) -> set[uuid.UUID]:
        stmt = select(RoomBudget.room_id).where(RoomBudget.workspace_id == workspace_id)
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def add_missing(self, workspace_id: uuid.UUID, room_ids: Iterable[uuid.UUID]) -> None:
        """Insert zero budgets for ``room_ids``; rows that already exist are left alone.

        Uses INSERT .. ON CONFLICT DO NOTHING on the (workspace_id, room_id)
        unique key, so racing initializers cannot create duplicates.
        """
        now = utcnow()
        rows = [
            {
                "id": new_uuid(),
                "workspace_id": workspace_id,
                "room_id": room_id,
                "planned_cents": 0,
                "target_date": None,
                "savings_target_source": SavingsTargetSource.PLANNED,
                "created_at": now,
                "updated_at": now,
            }
            for room_id in room_ids
        ]
        if not rows:
            return

        insert = _UPSERT_DIALECTS.get(self.session.bind.dialect.name)
        if insert is None:
            # No native upsert: fall back to plain inserts
            for row in rows:
                self.session.add(RoomBudget(**row))
            await self.session.flush()
            return

        stmt = insert(RoomBudget).values(rows).on_conflict_do_nothing(
            index_elements=["workspace_id", "room_id"]
        )
        await self.session.execute(stmt)


class SavingsDepositRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def for_workspace(
        self, workspace_id: uuid.UUID, room_id: uuid.UUID | None = None
    ) -> list[SavingsDeposit]:
        """Ledger entries, most recent date first."""
        stmt = select(SavingsDeposit).where(SavingsDeposit.workspace_id == workspace_id)
        if room_id is not None:
            stmt = stmt.where(SavingsDeposit.room_id == room_id)
        stmt = stmt.order_by(
            SavingsDeposit.date.desc(),  # type: ignore[attr-defined]
            SavingsDeposit.created_at.desc(),  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, deposit_id: uuid.UUID, workspace_id: uuid.UUID) -> SavingsDeposit | None:
        stmt = select(SavingsDeposit).where(
            SavingsDeposit.id == deposit_id,
            SavingsDeposit.workspace_id == workspace_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def balance(self, workspace_id: uuid.UUID, room_id: uuid.UUID) -> int:
        stmt = select(func.coalesce(func.sum(SavingsDeposit.amount_cents), 0)).where(
            SavingsDeposit.workspace_id == workspace_id,
            SavingsDeposit.room_id == room_id,
        )
        return int((await self.session.execute(stmt)).scalar_one())

    async def add(
        self,
        workspace_id: uuid.UUID,
        room_id: uuid.UUID,
        amount_cents: int,
        on: dt.date,
        note: str | None = None,
    ) -> SavingsDeposit:
        deposit = SavingsDeposit(
            workspace_id=workspace_id,
            room_id=room_id,
            amount_cents=amount_cents,
            date=on,
            note=note,
        )
        self.session.add(deposit)
        await self.session.flush()
        return deposit

    async def delete(self, deposit: SavingsDeposit) -> None:
        await self.session.delete(deposit)
        await self.session.flush()
