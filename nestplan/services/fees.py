"""Delivery-fee and tax arithmetic for vendor companies.

Pure functions over plain dataclasses: no database access, no hidden state.

Neutral fallbacks (fee 0, never an exception):
  * no rule, or a rule that is not active
  * a tiered rule without tiers
  * a subtotal larger than every tier threshold (there is no implicit
    catch-all tier above the highest threshold)

Everything else that is malformed (negative subtotal, rates outside [0, 1],
non-integer cents) raises ``FeeValidationError``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from nestplan.core.money import MoneyValidationError, apply_rate, require_cents, require_rate
from nestplan.models.company import Company, FeeRule, FeeRuleType, FeeTier


class FeeValidationError(ValueError):
    pass


@dataclass(frozen=True)
class Tier:
    threshold_cents: int  # inclusive upper bound
    fee_cents: int


@dataclass(frozen=True)
class FeeSchedule:
    """Snapshot of a company fee rule, detached from the ORM session."""
    type: FeeRuleType
    active: bool = True
    flat_cents: int | None = None
    percent_rate: float | Decimal | None = None
    tiers: tuple[Tier, ...] = ()

    @classmethod
    def from_rule(cls, rule: FeeRule, tiers: Iterable[FeeTier] = ()) -> FeeSchedule:
        return cls(
            type=FeeRuleType(rule.type),
            active=rule.active,
            flat_cents=rule.flat_cents,
            percent_rate=rule.percent_rate,
            tiers=tuple(Tier(t.threshold_cents, t.fee_cents) for t in tiers),
        )


@dataclass(frozen=True)
class FeeQuote:
    subtotal_cents: int
    delivery_fee_cents: int
    other_fees_cents: int
    taxable_base_cents: int
    tax_rate: Decimal
    tax_cents: int
    total_cents: int
    rule_type: FeeRuleType | None = None
    notes: list[str] = field(default_factory=list)


def _checked(fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except MoneyValidationError as exc:
        raise FeeValidationError(str(exc)) from exc


def resolve_tier(subtotal_cents: int, tiers: Iterable[Tier]) -> int:
    """Fee of the tier with the smallest threshold >= subtotal.

    Tiers may arrive in any order. Duplicate thresholds resolve to the
    cheaper fee. Returns 0 when the subtotal exceeds every threshold.
    """
    _checked(require_cents, subtotal_cents, "subtotal_cents")
    candidates = []
    for tier in tiers:
        _checked(require_cents, tier.threshold_cents, "threshold_cents")
        _checked(require_cents, tier.fee_cents, "fee_cents")
        if subtotal_cents <= tier.threshold_cents:
            candidates.append(tier)
    if not candidates:
        return 0
    best = min(candidates, key=lambda t: (t.threshold_cents, t.fee_cents))
    return best.fee_cents


def delivery_fee(subtotal_cents: int, schedule: FeeSchedule | None) -> int:
    """Delivery fee in cents for an order subtotal under ``schedule``."""
    _checked(require_cents, subtotal_cents, "subtotal_cents")
    if schedule is None or not schedule.active:
        return 0

    if schedule.type == FeeRuleType.FLAT:
        if schedule.flat_cents is None:
            return 0
        return _checked(require_cents, schedule.flat_cents, "flat_cents")

    if schedule.type == FeeRuleType.PERCENT:
        rate = _checked(require_rate, schedule.percent_rate, "percent_rate")
        return apply_rate(subtotal_cents, rate)

    if schedule.type == FeeRuleType.TIERED:
        if not schedule.tiers:
            return 0
        return resolve_tier(subtotal_cents, schedule.tiers)

    raise FeeValidationError(f"Unknown fee rule type: {schedule.type!r}")


def resolve_tax_rate(
    tax_override_pct: float | Decimal | None,
    workspace_rate_pct: float | Decimal | None,
) -> Decimal:
    """Company override when present (0 included), else workspace default, else 0."""
    if tax_override_pct is not None:
        return _checked(require_rate, tax_override_pct, "tax_override_pct")
    return _checked(require_rate, workspace_rate_pct, "sales_tax_rate_pct")


def compute_tax(
    subtotal_cents: int,
    delivery_fee_cents: int,
    other_fees_cents: int,
    *,
    fees_taxable: bool,
    tax_rate: float | Decimal,
) -> int:
    _checked(require_cents, subtotal_cents, "subtotal_cents")
    _checked(require_cents, delivery_fee_cents, "delivery_fee_cents")
    _checked(require_cents, other_fees_cents, "other_fees_cents")
    rate = _checked(require_rate, tax_rate, "tax_rate")
    base = taxable_base(subtotal_cents, delivery_fee_cents, other_fees_cents, fees_taxable)
    return apply_rate(base, rate)


def taxable_base(
    subtotal_cents: int,
    delivery_fee_cents: int,
    other_fees_cents: int,
    fees_taxable: bool,
) -> int:
    if fees_taxable:
        return subtotal_cents + delivery_fee_cents + other_fees_cents
    return subtotal_cents


def quote_order(
    subtotal_cents: int,
    schedule: FeeSchedule | None,
    *,
    fees_taxable: bool,
    tax_rate: float | Decimal,
    other_fees_cents: int = 0,
) -> FeeQuote:
    """Full order breakdown: delivery fee, other fees, tax and grand total."""
    fee = delivery_fee(subtotal_cents, schedule)
    rate = _checked(require_rate, tax_rate, "tax_rate")
    tax = compute_tax(
        subtotal_cents, fee, other_fees_cents, fees_taxable=fees_taxable, tax_rate=rate
    )

    notes = []
    if schedule is None or not schedule.active:
        notes.append("no active fee rule; delivery fee is 0")
    elif schedule.type == FeeRuleType.TIERED and schedule.tiers and fee == 0:
        if subtotal_cents > max(t.threshold_cents for t in schedule.tiers):
            notes.append("subtotal exceeds every tier threshold; delivery fee is 0")

    return FeeQuote(
        subtotal_cents=subtotal_cents,
        delivery_fee_cents=fee,
        other_fees_cents=other_fees_cents,
        taxable_base_cents=taxable_base(subtotal_cents, fee, other_fees_cents, fees_taxable),
        tax_rate=rate,
        tax_cents=tax,
        total_cents=subtotal_cents + fee + other_fees_cents + tax,
        rule_type=schedule.type if schedule is not None else None,
        notes=notes,
    )


def quote_for_company(
    subtotal_cents: int,
    company: Company,
    schedule: FeeSchedule | None,
    workspace_rate_pct: float | Decimal | None,
    other_fees_cents: int = 0,
) -> FeeQuote:
    return quote_order(
        subtotal_cents,
        schedule,
        fees_taxable=company.fees_taxable,
        tax_rate=resolve_tax_rate(company.tax_override_pct, workspace_rate_pct),
        other_fees_cents=other_fees_cents,
    )


def validate_schedule(schedule: FeeSchedule) -> FeeSchedule:
    """Reject rule terms that can never produce a sensible fee.

    Used when a rule is created or edited; the calculator itself stays
    forgiving about missing configuration.
    """
    if schedule.flat_cents is not None:
        _checked(require_cents, schedule.flat_cents, "flat_cents")
    if schedule.percent_rate is not None:
        _checked(require_rate, schedule.percent_rate, "percent_rate")

    if schedule.type == FeeRuleType.FLAT and schedule.flat_cents is None:
        raise FeeValidationError("flat rules require flat_cents")
    if schedule.type == FeeRuleType.PERCENT and schedule.percent_rate is None:
        raise FeeValidationError("percent rules require percent_rate")
    if schedule.type == FeeRuleType.TIERED:
        if not schedule.tiers:
            raise FeeValidationError("tiered rules require at least one tier")
        seen: set[int] = set()
        for tier in schedule.tiers:
            _checked(require_cents, tier.threshold_cents, "threshold_cents")
            _checked(require_cents, tier.fee_cents, "fee_cents")
            if tier.threshold_cents in seen:
                raise FeeValidationError(
                    f"duplicate tier threshold: {tier.threshold_cents}"
                )
            seen.add(tier.threshold_cents)
    return schedule
