"""Companies, their versioned fee rules and order quotes."""

import uuid

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from nestplan.api.deps import Auth, Session
from nestplan.core.money import format_cents
from nestplan.models.company import (
    Company,
    CompanyCreate,
    CompanyRead,
    CompanyUpdate,
    FeeRule,
    FeeRuleCreate,
    FeeRuleRead,
    FeeRuleType,
    FeeRuleUpdate,
    FeeTier,
    FeeTierRead,
)
from nestplan.repositories.activity import ActivityRepository
from nestplan.repositories.companies import CompanyRepository, FeeRuleRepository
from nestplan.repositories.workspaces import WorkspaceRepository
from nestplan.services import fee_policy
from nestplan.services.activity import ActivityType, record_activity
from nestplan.services.fees import FeeValidationError

router = APIRouter(prefix="/companies", tags=["companies"])


# ── Quote schemas ────────────────────────────────────────────

class QuoteRequest(BaseModel):
    subtotal_cents: int = Field(ge=0)
    other_fees_cents: int = Field(default=0, ge=0)


class QuoteRead(BaseModel):
    company_id: uuid.UUID
    subtotal_cents: int
    delivery_fee_cents: int
    other_fees_cents: int
    taxable_base_cents: int
    tax_rate: float
    tax_cents: int
    total_cents: int
    rule_type: FeeRuleType | None
    notes: list[str]
    total_display: str


def _rule_read(rule: FeeRule, tiers: list[FeeTier]) -> FeeRuleRead:
    return FeeRuleRead(
        id=rule.id,
        company_id=rule.company_id,
        type=rule.type,
        flat_cents=rule.flat_cents,
        percent_rate=rule.percent_rate,
        version=rule.version,
        active=rule.active,
        tiers=[FeeTierRead.model_validate(t) for t in tiers],
        created_at=rule.created_at,
    )


# ── Companies ────────────────────────────────────────────────

@router.post("", response_model=CompanyRead, status_code=status.HTTP_201_CREATED)
async def create_company(body: CompanyCreate, auth: Auth, session: Session) -> CompanyRead:
    company = await CompanyRepository(session).add(
        Company(workspace_id=auth.workspace_id, **body.model_dump())
    )
    await session.commit()
    await session.refresh(company)
    return CompanyRead.model_validate(company)


@router.get("", response_model=list[CompanyRead])
async def list_companies(auth: Auth, session: Session) -> list[CompanyRead]:
    companies = await CompanyRepository(session).for_workspace(auth.workspace_id)
    return [CompanyRead.model_validate(c) for c in companies]


@router.get("/{company_id}", response_model=CompanyRead)
async def get_company(company_id: uuid.UUID, auth: Auth, session: Session) -> CompanyRead:
    company = await _get_or_404(session, company_id, auth.workspace_id)
    return CompanyRead.model_validate(company)


@router.patch("/{company_id}", response_model=CompanyRead)
async def update_company(
    company_id: uuid.UUID,
    body: CompanyUpdate,
    auth: Auth,
    session: Session,
) -> CompanyRead:
    company = await _get_or_404(session, company_id, auth.workspace_id)
    # Explicit null clears website or tax override only
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None and field in ("name", "fees_taxable"):
            continue
        setattr(company, field, value)

    company.touch()
    session.add(company)
    await session.commit()
    await session.refresh(company)
    return CompanyRead.model_validate(company)


@router.delete("/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company(company_id: uuid.UUID, auth: Auth, session: Session) -> None:
    """Deletes the company with all its fee rules; linked items are detached."""
    company = await _get_or_404(session, company_id, auth.workspace_id)
    await CompanyRepository(session).delete(company)
    await session.commit()


# ── Fee rules ────────────────────────────────────────────────

@router.get("/{company_id}/fee-rules", response_model=list[FeeRuleRead])
async def list_fee_rules(company_id: uuid.UUID, auth: Auth, session: Session) -> list[FeeRuleRead]:
    """All rule versions, newest first."""
    await _get_or_404(session, company_id, auth.workspace_id)
    rows = await fee_policy.rules_with_tiers(FeeRuleRepository(session), company_id)
    return [_rule_read(rule, tiers) for rule, tiers in rows]


@router.post(
    "/{company_id}/fee-rules",
    response_model=FeeRuleRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_fee_rule(
    company_id: uuid.UUID,
    body: FeeRuleCreate,
    auth: Auth,
    session: Session,
) -> FeeRuleRead:
    """Publish a new rule version. An active rule replaces the current active one."""
    company = await _get_or_404(session, company_id, auth.workspace_id)
    try:
        rule, tiers = await fee_policy.publish_fee_rule(FeeRuleRepository(session), company, body)
    except FeeValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc

    await record_activity(
        ActivityRepository(session),
        auth.workspace_id,
        ActivityType.FEE_RULE_PUBLISHED,
        "company_fee_rule",
        rule.id,
        company_id=company.id,
        version=rule.version,
        rule_type=rule.type,
        active=rule.active,
    )
    await session.commit()
    await session.refresh(rule)
    return _rule_read(rule, tiers)


@router.patch("/{company_id}/fee-rules/{rule_id}", response_model=FeeRuleRead)
async def update_fee_rule(
    company_id: uuid.UUID,
    rule_id: uuid.UUID,
    body: FeeRuleUpdate,
    auth: Auth,
    session: Session,
) -> FeeRuleRead:
    company = await _get_or_404(session, company_id, auth.workspace_id)
    rules = FeeRuleRepository(session)
    rule = await _get_rule_or_404(rules, rule_id, company.id)
    try:
        rule = await fee_policy.update_fee_rule(rules, company, rule, body)
    except FeeValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc

    rule.touch()
    session.add(rule)
    await record_activity(
        ActivityRepository(session),
        auth.workspace_id,
        ActivityType.FEE_RULE_UPDATED,
        "company_fee_rule",
        rule.id,
        company_id=company.id,
        version=rule.version,
        active=rule.active,
    )
    await session.commit()
    await session.refresh(rule)
    tiers = (await rules.tiers_for([rule.id])).get(rule.id, [])
    return _rule_read(rule, tiers)


@router.delete("/{company_id}/fee-rules/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_fee_rule(
    company_id: uuid.UUID,
    rule_id: uuid.UUID,
    auth: Auth,
    session: Session,
) -> None:
    company = await _get_or_404(session, company_id, auth.workspace_id)
    rules = FeeRuleRepository(session)
    rule = await _get_rule_or_404(rules, rule_id, company.id)
    await rules.delete(rule)
    await session.commit()


# ── Quote ────────────────────────────────────────────────────

@router.post("/{company_id}/quote", response_model=QuoteRead)
async def quote_order(
    company_id: uuid.UUID,
    body: QuoteRequest,
    auth: Auth,
    session: Session,
) -> QuoteRead:
    """Delivery fee, tax and total for an order subtotal at this company."""
    company = await _get_or_404(session, company_id, auth.workspace_id)
    workspace = await WorkspaceRepository(session).get(auth.workspace_id)
    if workspace is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")
    try:
        quote = await fee_policy.quote(
            FeeRuleRepository(session),
            workspace,
            company,
            body.subtotal_cents,
            other_fees_cents=body.other_fees_cents,
        )
    except FeeValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc

    return QuoteRead(
        company_id=company.id,
        subtotal_cents=quote.subtotal_cents,
        delivery_fee_cents=quote.delivery_fee_cents,
        other_fees_cents=quote.other_fees_cents,
        taxable_base_cents=quote.taxable_base_cents,
        tax_rate=float(quote.tax_rate),
        tax_cents=quote.tax_cents,
        total_cents=quote.total_cents,
        rule_type=quote.rule_type,
        notes=quote.notes,
        total_display=format_cents(quote.total_cents, workspace.currency),
    )


async def _get_or_404(
    session: AsyncSession, company_id: uuid.UUID, workspace_id: uuid.UUID
) -> Company:
    company = await CompanyRepository(session).get(company_id, workspace_id)
    if company is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")
    return company


async def _get_rule_or_404(
    rules: FeeRuleRepository, rule_id: uuid.UUID, company_id: uuid.UUID
) -> FeeRule:
    rule = await rules.get(rule_id, company_id)
    if rule is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee rule not found")
    return rule
