"""Shopping items and their price history."""

import uuid
from collections import defaultdict
from collections.abc import Iterable

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from nestplan.models.item import Item, ItemPrice


class ItemRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def for_workspace(
        self, workspace_id: uuid.UUID, *, with_room_only: bool = False
    ) -> list[Item]:
        stmt = select(Item).where(Item.workspace_id == workspace_id)
        if with_room_only:
            stmt = stmt.where(Item.room_id.is_not(None))  # type: ignore[union-attr]
        stmt = stmt.order_by(Item.created_at.desc())  # type: ignore[attr-defined]
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, item_id: uuid.UUID, workspace_id: uuid.UUID) -> Item | None:
        stmt = select(Item).where(Item.id == item_id, Item.workspace_id == workspace_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add(self, item: Item) -> Item:
        self.session.add(item)
        await self.session.flush()
        return item

    async def delete(self, item: Item) -> None:
        await self.session.execute(delete(ItemPrice).where(ItemPrice.item_id == item.id))
        await self.session.delete(item)
        await self.session.flush()

    # ── Price history ────────────────────────────────────────

    async def price_history(
        self, item_ids: Iterable[uuid.UUID]
    ) -> dict[uuid.UUID, list[ItemPrice]]:
        """Prices grouped by item in insertion order (oldest first)."""
        ids = list(item_ids)
        grouped: dict[uuid.UUID, list[ItemPrice]] = defaultdict(list)
        if not ids:
            return grouped
        stmt = (
            select(ItemPrice)
            .where(ItemPrice.item_id.in_(ids))  # type: ignore[attr-defined]
            .order_by(ItemPrice.revision.asc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        for price in result.scalars().all():
            grouped[price.item_id].append(price)
        return grouped

    async def latest_price(self, item_id: uuid.UUID) -> ItemPrice | None:
        stmt = (
            select(ItemPrice)
            .where(ItemPrice.item_id == item_id)
            .order_by(ItemPrice.revision.desc())  # type: ignore[attr-defined]
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_price(
        self,
        item_id: uuid.UUID,
        est_unit_cents: int,
        actual_unit_cents: int | None = None,
    ) -> ItemPrice:
        """Append a price record; it becomes the item's current price."""
        stmt = select(func.coalesce(func.max(ItemPrice.revision), 0)).where(
            ItemPrice.item_id == item_id
        )
        revision = int((await self.session.execute(stmt)).scalar_one()) + 1
        price = ItemPrice(
            item_id=item_id,
            revision=revision,
            est_unit_cents=est_unit_cents,
            actual_unit_cents=actual_unit_cents,
        )
        self.session.add(price)
        await self.session.flush()
        return price
