"""Task model: a to-do entry shared between collaborators."""

import uuid
from datetime import date, datetime
from enum import StrEnum

from sqlalchemy import Text
from sqlmodel import Column, Field, SQLModel

from nestplan.models.base import TimestampMixin, new_uuid


class AssignedTo(StrEnum):
    ME = "me"
    HIM = "him"
    BOTH = "both"


class Task(TimestampMixin, SQLModel, table=True):
    __tablename__ = "tasks"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)
    title: str = Field(max_length=255, nullable=False)
    assigned_to: AssignedTo = Field(default=AssignedTo.BOTH)
    category_id: uuid.UUID | None = Field(default=None, foreign_key="categories.id", index=True)
    due_date: date | None = Field(default=None)
    priority: int = Field(default=2, ge=1, le=3)  # 1 = high, 3 = low
    notes: str | None = Field(default=None, sa_column=Column(Text))
    done: bool = Field(default=False)


# ── Pydantic schemas ─────────────────────────────────────────

class TaskCreate(SQLModel):
    title: str = Field(min_length=1, max_length=255)
    assigned_to: AssignedTo = AssignedTo.BOTH
    category_id: uuid.UUID | None = None
    due_date: date | None = None
    priority: int = Field(default=2, ge=1, le=3)
    notes: str | None = None


class TaskUpdate(SQLModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    assigned_to: AssignedTo | None = None
    category_id: uuid.UUID | None = None
    due_date: date | None = None
    priority: int | None = Field(default=None, ge=1, le=3)
    notes: str | None = None
    done: bool | None = None


class TaskRead(SQLModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    title: str
    assigned_to: AssignedTo
    category_id: uuid.UUID | None
    due_date: date | None
    priority: int
    notes: str | None
    done: bool
    created_at: datetime
