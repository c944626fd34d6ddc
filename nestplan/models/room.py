"""Rooms and categories: named tags used for grouping items, tasks and budgets."""

import uuid

from sqlmodel import Field, SQLModel

from nestplan.models.base import TimestampMixin, new_uuid


class Room(TimestampMixin, SQLModel, table=True):
    __tablename__ = "rooms"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)
    name: str = Field(max_length=255, nullable=False)


class Category(TimestampMixin, SQLModel, table=True):
    __tablename__ = "categories"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)
    name: str = Field(max_length=255, nullable=False)
    color: str | None = Field(default=None, max_length=20)


# ── Pydantic schemas ─────────────────────────────────────────

class RoomCreate(SQLModel):
    name: str = Field(min_length=1, max_length=255)


class RoomUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)


class RoomRead(SQLModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    name: str


class CategoryCreate(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    color: str | None = Field(default=None, max_length=20)


class CategoryUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    color: str | None = Field(default=None, max_length=20)


class CategoryRead(SQLModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    name: str
    color: str | None


DEFAULT_CATEGORIES: list[tuple[str, str]] = [
    ("Essentials", "#ef4444"),
    ("Decor", "#f97316"),
    ("Appliances", "#eab308"),
    ("Furniture", "#22c55e"),
    ("Cleaning", "#06b6d4"),
    ("Pantry", "#8b5cf6"),
    ("Storage", "#ec4899"),
]

DEFAULT_ROOMS: list[str] = [
    "Bedroom",
    "Bedroom Closet",
    "Bath",
    "Kitchen",
    "Dining Room",
    "Patio",
    "Den",
    "Den Closet",
    "Living Room",
    "None",
]
