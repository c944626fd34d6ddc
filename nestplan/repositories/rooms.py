"""Room and category persistence."""

import uuid

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from nestplan.models.budget import RoomBudget, SavingsDeposit
from nestplan.models.item import Item
from nestplan.models.room import Category, Room
from nestplan.models.task import Task


class RoomRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def for_workspace(self, workspace_id: uuid.UUID) -> list[Room]:
        stmt = (
            select(Room)
            .where(Room.workspace_id == workspace_id)
            .order_by(Room.name.asc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, room_id: uuid.UUID, workspace_id: uuid.UUID) -> Room | None:
        stmt = select(Room).where(Room.id == room_id, Room.workspace_id == workspace_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add(self, room: Room) -> Room:
        self.session.add(room)
        await self.session.flush()
        return room

    async def delete(self, room: Room) -> None:
        """Drop the room's budget and savings ledger and detach its items."""
        await self.session.execute(delete(RoomBudget).where(RoomBudget.room_id == room.id))
        await self.session.execute(delete(SavingsDeposit).where(SavingsDeposit.room_id == room.id))
        await self.session.execute(
            update(Item).where(Item.room_id == room.id).values(room_id=None)
        )
        await self.session.delete(room)
        await self.session.flush()


class CategoryRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def for_workspace(self, workspace_id: uuid.UUID) -> list[Category]:
        stmt = (
            select(Category)
            .where(Category.workspace_id == workspace_id)
            .order_by(Category.name.asc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, category_id: uuid.UUID, workspace_id: uuid.UUID) -> Category | None:
        stmt = select(Category).where(
            Category.id == category_id,
            Category.workspace_id == workspace_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add(self, category: Category) -> Category:
        self.session.add(category)
        await self.session.flush()
        return category

    async def delete(self, category: Category) -> None:
        await self.session.execute(
            update(Item).where(Item.category_id == category.id).values(category_id=None)
        )
        await self.session.execute(
            update(Task).where(Task.category_id == category.id).values(category_id=None)
        )
        await self.session.delete(category)
        await self.session.flush()
