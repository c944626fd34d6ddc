"""Workspace model: the tenant boundary shared by collaborators."""

import uuid
from datetime import date, datetime

from sqlmodel import Field, SQLModel

from nestplan.models.base import TimestampMixin, new_uuid


class Workspace(TimestampMixin, SQLModel, table=True):
    __tablename__ = "workspaces"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    zip: str | None = Field(default=None, max_length=20)
    currency: str = Field(default="USD", max_length=3)

    # Workspace-default sales tax as a decimal fraction (0.0825 == 8.25%)
    sales_tax_rate_pct: float = Field(default=0.0, ge=0.0, le=1.0)
    move_in_date: date | None = Field(default=None)


# ── Pydantic schemas ─────────────────────────────────────────

class WorkspaceUpdate(SQLModel):
    name: str | None = Field(default=None, max_length=255)
    zip: str | None = Field(default=None, max_length=20)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    sales_tax_rate_pct: float | None = Field(default=None, ge=0.0, le=1.0)
    move_in_date: date | None = None


class WorkspaceRead(SQLModel):
    id: uuid.UUID
    name: str
    zip: str | None
    currency: str
    sales_tax_rate_pct: float
    move_in_date: date | None
    created_at: datetime
