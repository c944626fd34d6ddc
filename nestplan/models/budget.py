"""Room budgets and the savings ledger."""

import uuid
from datetime import date as date_type
from enum import StrEnum

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from nestplan.models.base import TimestampMixin, new_uuid


class SavingsTargetSource(StrEnum):
    PLANNED = "planned"
    EST = "est"
    ACTUAL = "actual"


class RoomBudget(TimestampMixin, SQLModel, table=True):
    __tablename__ = "room_budgets"
    __table_args__ = (
        UniqueConstraint("workspace_id", "room_id", name="uq_room_budgets_workspace_room"),
    )

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)
    room_id: uuid.UUID = Field(foreign_key="rooms.id", nullable=False, index=True)
    planned_cents: int = Field(default=0, ge=0)
    target_date: date_type | None = Field(default=None)
    savings_target_source: SavingsTargetSource = Field(default=SavingsTargetSource.PLANNED)


class SavingsDeposit(TimestampMixin, SQLModel, table=True):
    """Signed ledger entry: positive deposits, negative withdrawals."""

    __tablename__ = "savings_deposits"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)
    room_id: uuid.UUID = Field(foreign_key="rooms.id", nullable=False, index=True)
    date: date_type = Field(nullable=False)
    amount_cents: int = Field(nullable=False)
    note: str | None = Field(default=None, max_length=1000)


# ── Pydantic schemas ─────────────────────────────────────────

class RoomBudgetUpdate(SQLModel):
    planned_cents: int | None = Field(default=None, ge=0)
    target_date: date_type | None = None
    savings_target_source: SavingsTargetSource | None = None


class RoomBudgetRead(SQLModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    room_id: uuid.UUID
    room_name: str
    planned_cents: int
    target_date: date_type | None
    savings_target_source: SavingsTargetSource


class SavingsDepositCreate(SQLModel):
    room_id: uuid.UUID
    amount_cents: int = Field(description="Positive to deposit, negative to withdraw")
    date: date_type | None = None
    note: str | None = Field(default=None, max_length=1000)


class SavingsDepositUpdate(SQLModel):
    amount_cents: int | None = None
    date: date_type | None = None
    note: str | None = Field(default=None, max_length=1000)


class SavingsDepositRead(SQLModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    room_id: uuid.UUID
    date: date_type
    amount_cents: int
    note: str | None
