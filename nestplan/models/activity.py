"""Append-only activity log per workspace."""

import uuid
from datetime import datetime

from sqlalchemy import Text
from sqlmodel import Column, Field, SQLModel

from nestplan.models.base import new_uuid, utcnow


class ActivityEntry(SQLModel, table=True):
    __tablename__ = "activity_log"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)
    type: str = Field(max_length=100, nullable=False)  # e.g. "fee_rule.published"
    entity: str = Field(max_length=100, nullable=False)  # e.g. "company_fee_rule"
    entity_id: uuid.UUID | None = Field(default=None)
    payload: str = Field(default="{}", sa_column=Column(Text, nullable=False, server_default="{}"))
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)


class ActivityRead(SQLModel):
    id: uuid.UUID
    type: str
    entity: str
    entity_id: uuid.UUID | None
    payload: dict
    created_at: datetime
