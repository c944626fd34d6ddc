"""Company (vendor) model with its versioned delivery-fee rules."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlmodel import Field, SQLModel

from nestplan.models.base import TimestampMixin, new_uuid


class FeeRuleType(StrEnum):
    FLAT = "flat"
    PERCENT = "percent"
    TIERED = "tiered"


class Company(TimestampMixin, SQLModel, table=True):
    __tablename__ = "companies"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)
    name: str = Field(max_length=255, nullable=False)
    website: str | None = Field(default=None, max_length=2048)

    # Whether delivery / other fees are part of the taxable base
    fees_taxable: bool = Field(default=False)
    # Decimal fraction; overrides the workspace sales tax rate when set
    tax_override_pct: float | None = Field(default=None, ge=0.0, le=1.0)


class FeeRule(TimestampMixin, SQLModel, table=True):
    """At most one active rule per company; enforced by the fee policy service."""

    __tablename__ = "company_fee_rules"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    company_id: uuid.UUID = Field(foreign_key="companies.id", nullable=False, index=True)
    type: FeeRuleType = Field(nullable=False)
    flat_cents: int | None = Field(default=None, ge=0)
    percent_rate: float | None = Field(default=None, ge=0.0, le=1.0)
    version: int = Field(default=1, nullable=False)
    active: bool = Field(default=True, index=True)


class FeeTier(SQLModel, table=True):
    __tablename__ = "company_fee_tiers"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    fee_rule_id: uuid.UUID = Field(foreign_key="company_fee_rules.id", nullable=False, index=True)
    # Inclusive upper bound of the subtotal range this tier covers
    threshold_cents: int = Field(nullable=False, ge=0)
    fee_cents: int = Field(nullable=False, ge=0)


# ── Pydantic schemas ─────────────────────────────────────────

class CompanyCreate(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    website: str | None = Field(default=None, max_length=2048)
    fees_taxable: bool = False
    tax_override_pct: float | None = Field(default=None, ge=0.0, le=1.0)


class CompanyUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    website: str | None = Field(default=None, max_length=2048)
    fees_taxable: bool | None = None
    tax_override_pct: float | None = Field(default=None, ge=0.0, le=1.0)


class CompanyRead(SQLModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    name: str
    website: str | None
    fees_taxable: bool
    tax_override_pct: float | None
    created_at: datetime


class FeeTierCreate(SQLModel):
    threshold_cents: int = Field(ge=0)
    fee_cents: int = Field(ge=0)


class FeeTierRead(SQLModel):
    id: uuid.UUID
    threshold_cents: int
    fee_cents: int


class FeeRuleCreate(SQLModel):
    type: FeeRuleType
    flat_cents: int | None = Field(default=None, ge=0)
    percent_rate: float | None = Field(
        default=None, ge=0.0, le=1.0, description="Decimal fraction, 0.05 for 5%"
    )
    tiers: list[FeeTierCreate] = Field(default_factory=list)
    active: bool = True


class FeeRuleUpdate(SQLModel):
    active: bool | None = None
    flat_cents: int | None = Field(default=None, ge=0)
    percent_rate: float | None = Field(default=None, ge=0.0, le=1.0)


class FeeRuleRead(SQLModel):
    id: uuid.UUID
    company_id: uuid.UUID
    type: FeeRuleType
    flat_cents: int | None
    percent_rate: float | None
    version: int
    active: bool
    tiers: list[FeeTierRead] = Field(default_factory=list)
    created_at: datetime
