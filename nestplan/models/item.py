"""Shopping item model with its unit-price history."""

import uuid
from datetime import datetime

from sqlalchemy import Text
from sqlmodel import Column, Field, SQLModel

from nestplan.models.base import TimestampMixin, new_uuid, utcnow


class Item(TimestampMixin, SQLModel, table=True):
    __tablename__ = "items"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)
    name: str = Field(max_length=255, nullable=False)
    link: str | None = Field(default=None, max_length=2048)
    image_url: str | None = Field(default=None, max_length=2048)

    category_id: uuid.UUID | None = Field(default=None, foreign_key="categories.id", index=True)
    room_id: uuid.UUID | None = Field(default=None, foreign_key="rooms.id", index=True)
    company_id: uuid.UUID | None = Field(default=None, foreign_key="companies.id", index=True)

    quantity: int = Field(default=1, ge=1)
    priority: int = Field(default=2, ge=1, le=3)  # 1 = high, 3 = low
    purchased: bool = Field(default=False)
    notes: str | None = Field(default=None, sa_column=Column(Text))


class ItemPrice(SQLModel, table=True):
    """One price observation. The record with the highest ``revision`` is current."""

    __tablename__ = "item_prices"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    item_id: uuid.UUID = Field(foreign_key="items.id", nullable=False, index=True)
    # Insertion counter per item, 1-based
    revision: int = Field(default=1, nullable=False)
    est_unit_cents: int = Field(default=0, ge=0)
    actual_unit_cents: int | None = Field(default=None, ge=0)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)


# ── Pydantic schemas ─────────────────────────────────────────

class ItemCreate(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    link: str | None = Field(default=None, max_length=2048)
    image_url: str | None = Field(default=None, max_length=2048)
    category_id: uuid.UUID | None = None
    room_id: uuid.UUID | None = None
    company_id: uuid.UUID | None = None
    quantity: int = Field(default=1, ge=1)
    priority: int = Field(default=2, ge=1, le=3)
    notes: str | None = None
    est_unit_cents: int = Field(default=0, ge=0)


class ItemUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    link: str | None = Field(default=None, max_length=2048)
    image_url: str | None = Field(default=None, max_length=2048)
    category_id: uuid.UUID | None = None
    room_id: uuid.UUID | None = None
    company_id: uuid.UUID | None = None
    quantity: int | None = Field(default=None, ge=1)
    priority: int | None = Field(default=None, ge=1, le=3)
    notes: str | None = None


class ItemPriceCreate(SQLModel):
    est_unit_cents: int = Field(ge=0)
    actual_unit_cents: int | None = Field(default=None, ge=0)


class ItemPurchase(SQLModel):
    purchased: bool
    actual_unit_cents: int | None = Field(default=None, ge=0)


class ItemPriceRead(SQLModel):
    id: uuid.UUID
    revision: int
    est_unit_cents: int
    actual_unit_cents: int | None
    created_at: datetime


class ItemRead(SQLModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    name: str
    link: str | None
    image_url: str | None
    category_id: uuid.UUID | None
    room_id: uuid.UUID | None
    company_id: uuid.UUID | None
    quantity: int
    priority: int
    purchased: bool
    notes: str | None
    est_unit_cents: int = Field(description="From the current price record, 0 if none")
    actual_unit_cents: int | None = None
    prices: list[ItemPriceRead] = Field(default_factory=list)
    created_at: datetime
