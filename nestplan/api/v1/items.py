"""Shopping items, their price history and purchase state."""

import uuid

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from nestplan.api.deps import Auth, Session
from nestplan.models.item import (
    Item,
    ItemCreate,
    ItemPrice,
    ItemPriceCreate,
    ItemPriceRead,
    ItemPurchase,
    ItemRead,
    ItemUpdate,
)
from nestplan.repositories.activity import ActivityRepository
from nestplan.repositories.companies import CompanyRepository
from nestplan.repositories.items import ItemRepository
from nestplan.repositories.rooms import CategoryRepository, RoomRepository
from nestplan.services.activity import ActivityType, record_activity
from nestplan.services.budget import shopping_summary
from nestplan.services.budget_tracking import item_lines

router = APIRouter(prefix="/items", tags=["items"])


class ShoppingSummaryRead(BaseModel):
    total_estimated_cents: int
    total_spent_cents: int
    pending_items: int
    purchased_items: int


def _to_read(item: Item, prices: list[ItemPrice]) -> ItemRead:
    current = prices[-1] if prices else None
    return ItemRead(
        id=item.id,
        workspace_id=item.workspace_id,
        name=item.name,
        link=item.link,
        image_url=item.image_url,
        category_id=item.category_id,
        room_id=item.room_id,
        company_id=item.company_id,
        quantity=item.quantity,
        priority=item.priority,
        purchased=item.purchased,
        notes=item.notes,
        est_unit_cents=current.est_unit_cents if current else 0,
        actual_unit_cents=current.actual_unit_cents if current else None,
        prices=[ItemPriceRead.model_validate(p) for p in prices],
        created_at=item.created_at,
    )


async def _check_refs(session: AsyncSession, workspace_id: uuid.UUID, data: dict) -> None:
    """Linked room / category / company must belong to the same workspace."""
    lookups = (
        ("room_id", RoomRepository(session), "room"),
        ("category_id", CategoryRepository(session), "category"),
        ("company_id", CompanyRepository(session), "company"),
    )
    for key, repo, label in lookups:
        ref = data.get(key)
        if ref is not None and await repo.get(ref, workspace_id) is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unknown {label}: {ref}",
            )


async def _read_one(items: ItemRepository, item: Item) -> ItemRead:
    history = await items.price_history([item.id])
    return _to_read(item, history.get(item.id, []))


# ── Routes ────────────────────────────────────────────────────

@router.post("", response_model=ItemRead, status_code=status.HTTP_201_CREATED)
async def create_item(body: ItemCreate, auth: Auth, session: Session) -> ItemRead:
    """Create an item together with its first price record."""
    data = body.model_dump(exclude={"est_unit_cents"})
    await _check_refs(session, auth.workspace_id, data)

    items = ItemRepository(session)
    item = await items.add(Item(workspace_id=auth.workspace_id, **data))
    await items.add_price(item.id, body.est_unit_cents)
    await session.commit()
    await session.refresh(item)
    return await _read_one(items, item)


@router.get("", response_model=list[ItemRead])
async def list_items(
    auth: Auth,
    session: Session,
    room_id: uuid.UUID | None = Query(default=None),
    purchased: bool | None = Query(default=None),
) -> list[ItemRead]:
    items = ItemRepository(session)
    rows = await items.for_workspace(auth.workspace_id)
    if room_id is not None:
        rows = [i for i in rows if i.room_id == room_id]
    if purchased is not None:
        rows = [i for i in rows if i.purchased == purchased]
    history = await items.price_history(i.id for i in rows)
    return [_to_read(i, history.get(i.id, [])) for i in rows]


@router.get("/summary", response_model=ShoppingSummaryRead)
async def get_shopping_summary(auth: Auth, session: Session) -> ShoppingSummaryRead:
    lines = await item_lines(ItemRepository(session), auth.workspace_id, with_room_only=False)
    summary = shopping_summary(lines)
    return ShoppingSummaryRead(
        total_estimated_cents=summary.total_estimated_cents,
        total_spent_cents=summary.total_spent_cents,
        pending_items=summary.pending_items,
        purchased_items=summary.purchased_items,
    )


@router.get("/{item_id}", response_model=ItemRead)
async def get_item(item_id: uuid.UUID, auth: Auth, session: Session) -> ItemRead:
    items = ItemRepository(session)
    item = await _get_or_404(items, item_id, auth.workspace_id)
    return await _read_one(items, item)


@router.patch("/{item_id}", response_model=ItemRead)
async def update_item(
    item_id: uuid.UUID,
    body: ItemUpdate,
    auth: Auth,
    session: Session,
) -> ItemRead:
    items = ItemRepository(session)
    item = await _get_or_404(items, item_id, auth.workspace_id)

    update_data = body.model_dump(exclude_unset=True)
    await _check_refs(session, auth.workspace_id, update_data)
    for field, value in update_data.items():
        if value is None and field in ("name", "quantity", "priority"):
            continue
        setattr(item, field, value)

    item.touch()
    session.add(item)
    await session.commit()
    await session.refresh(item)
    return await _read_one(items, item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: uuid.UUID, auth: Auth, session: Session) -> None:
    items = ItemRepository(session)
    item = await _get_or_404(items, item_id, auth.workspace_id)
    await items.delete(item)
    await session.commit()


@router.post("/{item_id}/prices", response_model=ItemRead, status_code=status.HTTP_201_CREATED)
async def add_item_price(
    item_id: uuid.UUID,
    body: ItemPriceCreate,
    auth: Auth,
    session: Session,
) -> ItemRead:
    """Append a price record; it becomes the item's current price."""
    items = ItemRepository(session)
    item = await _get_or_404(items, item_id, auth.workspace_id)
    await items.add_price(item.id, body.est_unit_cents, body.actual_unit_cents)
    await session.commit()
    return await _read_one(items, item)


@router.post("/{item_id}/purchase", response_model=ItemRead)
async def set_item_purchased(
    item_id: uuid.UUID,
    body: ItemPurchase,
    auth: Auth,
    session: Session,
) -> ItemRead:
    """Mark an item purchased (optionally with the price paid) or not purchased.

    The actual unit price lives on the current price record. Un-marking an
    item clears it.
    """
    items = ItemRepository(session)
    item = await _get_or_404(items, item_id, auth.workspace_id)
    current = await items.latest_price(item.id)

    if body.purchased:
        if body.actual_unit_cents is not None:
            if current is None:
                await items.add_price(item.id, 0, body.actual_unit_cents)
            else:
                current.actual_unit_cents = body.actual_unit_cents
                session.add(current)
    elif current is not None:
        current.actual_unit_cents = None
        session.add(current)

    item.purchased = body.purchased
    item.touch()
    session.add(item)
    if body.purchased:
        await record_activity(
            ActivityRepository(session),
            auth.workspace_id,
            ActivityType.ITEM_PURCHASED,
            "item",
            item.id,
            actual_unit_cents=body.actual_unit_cents,
        )
    await session.commit()
    await session.refresh(item)
    return await _read_one(items, item)


async def _get_or_404(items: ItemRepository, item_id: uuid.UUID, workspace_id: uuid.UUID) -> Item:
    item = await items.get(item_id, workspace_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return item
