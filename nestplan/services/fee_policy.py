"""Versioned fee-rule lifecycle for companies.

At most one rule per company is active. Activating a rule first switches off
every other active rule of the company, then writes the new state.
"""

import logging
import uuid

from nestplan.models.company import (
    Company,
    FeeRule,
    FeeRuleCreate,
    FeeRuleType,
    FeeRuleUpdate,
    FeeTier,
)
from nestplan.models.workspace import Workspace
from nestplan.repositories.companies import FeeRuleRepository
from nestplan.services.fees import FeeQuote, FeeSchedule, Tier, quote_for_company, validate_schedule

logger = logging.getLogger(__name__)


async def publish_fee_rule(
    rules: FeeRuleRepository,
    company: Company,
    body: FeeRuleCreate,
) -> tuple[FeeRule, list[FeeTier]]:
    """Create the next version of a company's fee rule."""
    schedule = validate_schedule(
        FeeSchedule(
            type=body.type,
            active=body.active,
            flat_cents=body.flat_cents if body.type == FeeRuleType.FLAT else None,
            percent_rate=body.percent_rate if body.type == FeeRuleType.PERCENT else None,
            tiers=tuple(
                Tier(t.threshold_cents, t.fee_cents) for t in body.tiers
            ) if body.type == FeeRuleType.TIERED else (),
        )
    )

    if schedule.active:
        switched_off = await rules.deactivate_all(company.id)
        if switched_off:
            logger.info("Deactivated %d fee rule(s) for company %s", switched_off, company.id)

    rule = FeeRule(
        company_id=company.id,
        type=schedule.type,
        flat_cents=schedule.flat_cents,
        percent_rate=float(schedule.percent_rate) if schedule.percent_rate is not None else None,
        version=await rules.next_version(company.id),
        active=schedule.active,
    )
    tiers = [
        FeeTier(threshold_cents=t.threshold_cents, fee_cents=t.fee_cents)
        for t in sorted(schedule.tiers, key=lambda t: t.threshold_cents)
    ]
    await rules.add(rule, tiers)
    logger.info(
        "Published %s fee rule v%d for company %s (active=%s)",
        rule.type, rule.version, company.id, rule.active,
    )
    return rule, tiers


async def update_fee_rule(
    rules: FeeRuleRepository,
    company: Company,
    rule: FeeRule,
    body: FeeRuleUpdate,
) -> FeeRule:
    """Edit rule amounts and/or toggle it; activation keeps the single-active invariant."""
    changes = body.model_dump(exclude_unset=True)
    activate = changes.pop("active", None)

    tiers = (await rules.tiers_for([rule.id])).get(rule.id, [])
    candidate = FeeSchedule.from_rule(rule, tiers)
    validate_schedule(
        FeeSchedule(
            type=candidate.type,
            active=candidate.active,
            flat_cents=changes.get("flat_cents", candidate.flat_cents),
            percent_rate=changes.get("percent_rate", candidate.percent_rate),
            tiers=candidate.tiers,
        )
    )
    for field, value in changes.items():
        setattr(rule, field, value)

    if activate is True and not rule.active:
        await rules.deactivate_all(company.id, keep=rule.id)
        logger.info("Re-activated fee rule v%d for company %s", rule.version, company.id)
    if activate is not None:
        rule.active = activate
    return rule


async def rules_with_tiers(
    rules: FeeRuleRepository, company_id: uuid.UUID
) -> list[tuple[FeeRule, list[FeeTier]]]:
    versions = await rules.for_company(company_id)
    tiers = await rules.tiers_for(r.id for r in versions)
    return [(rule, tiers.get(rule.id, [])) for rule in versions]


async def active_schedule(rules: FeeRuleRepository, company_id: uuid.UUID) -> FeeSchedule | None:
    rule = await rules.active_rule(company_id)
    if rule is None:
        return None
    tiers = (await rules.tiers_for([rule.id])).get(rule.id, [])
    return FeeSchedule.from_rule(rule, tiers)


async def quote(
    rules: FeeRuleRepository,
    workspace: Workspace,
    company: Company,
    subtotal_cents: int,
    other_fees_cents: int = 0,
) -> FeeQuote:
    """Price an order with the company's active rule and applicable tax rate."""
    schedule = await active_schedule(rules, company.id)
    return quote_for_company(
        subtotal_cents,
        company,
        schedule,
        workspace.sales_tax_rate_pct,
        other_fees_cents=other_fees_cents,
    )
