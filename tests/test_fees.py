"""Fee calculator tests: flat / percent / tiered fees, tax and quotes."""

from decimal import Decimal

import pytest

from nestplan.models.company import Company, FeeRuleType
from nestplan.services.fees import (
    FeeSchedule,
    FeeValidationError,
    Tier,
    compute_tax,
    delivery_fee,
    quote_for_company,
    quote_order,
    resolve_tax_rate,
    resolve_tier,
    validate_schedule,
)

TIERS = (Tier(5000, 999), Tier(10000, 799), Tier(0, 1500))


# ── Delivery fee ─────────────────────────────────────────────

def test_flat_fee_ignores_subtotal():
    schedule = FeeSchedule(type=FeeRuleType.FLAT, flat_cents=1299)
    assert delivery_fee(0, schedule) == 1299
    assert delivery_fee(50000, schedule) == 1299
    assert delivery_fee(10**9, schedule) == 1299


def test_flat_fee_without_amount_is_zero():
    assert delivery_fee(1000, FeeSchedule(type=FeeRuleType.FLAT)) == 0


def test_percent_fee():
    schedule = FeeSchedule(type=FeeRuleType.PERCENT, percent_rate=0.05)
    assert delivery_fee(50000, schedule) == 2500
    assert delivery_fee(0, schedule) == 0


def test_percent_fee_rounds_half_up():
    schedule = FeeSchedule(type=FeeRuleType.PERCENT, percent_rate=0.05)
    # 10 * 0.05 = 0.5 cents
    assert delivery_fee(10, schedule) == 1
    assert delivery_fee(9, schedule) == 0


def test_no_rule_or_inactive_rule_is_free():
    assert delivery_fee(50000, None) == 0
    inactive = FeeSchedule(type=FeeRuleType.FLAT, flat_cents=1299, active=False)
    assert delivery_fee(50000, inactive) == 0


def test_tiered_without_tiers_is_free():
    assert delivery_fee(50000, FeeSchedule(type=FeeRuleType.TIERED)) == 0


# ── Tier resolution ──────────────────────────────────────────

@pytest.mark.parametrize(
    ("subtotal", "expected"),
    [
        (0, 1500),
        (1, 999),
        (5000, 999),
        (5001, 799),
        (7500, 799),
        (10000, 799),
        (12000, 0),
    ],
)
def test_resolve_tier_thresholds_are_inclusive(subtotal, expected):
    assert resolve_tier(subtotal, TIERS) == expected


def test_resolve_tier_duplicate_threshold_picks_cheaper_fee():
    tiers = [Tier(5000, 999), Tier(5000, 499)]
    assert resolve_tier(4000, tiers) == 499


def test_tier_order_does_not_matter():
    assert resolve_tier(7500, reversed(TIERS)) == resolve_tier(7500, TIERS)


def test_negative_subtotal_rejected():
    with pytest.raises(FeeValidationError):
        delivery_fee(-1, FeeSchedule(type=FeeRuleType.FLAT, flat_cents=100))
    with pytest.raises(FeeValidationError):
        resolve_tier(-1, TIERS)


# ── Tax ──────────────────────────────────────────────────────

def test_tax_rate_override_wins_even_when_zero():
    assert resolve_tax_rate(0.0, 0.0825) == Decimal(0)
    assert resolve_tax_rate(0.1, 0.0825) == Decimal("0.1")
    assert resolve_tax_rate(None, 0.0825) == Decimal("0.0825")
    assert resolve_tax_rate(None, None) == Decimal(0)


def test_tax_on_fees_only_when_taxable():
    kwargs = {"tax_rate": Decimal("0.0825")}
    assert compute_tax(50000, 799, 0, fees_taxable=True, **kwargs) == 4191
    assert compute_tax(50000, 799, 0, fees_taxable=False, **kwargs) == 4125


def test_rate_must_be_a_fraction():
    with pytest.raises(FeeValidationError):
        compute_tax(1000, 0, 0, fees_taxable=False, tax_rate=8.25)


# ── Quotes ───────────────────────────────────────────────────

def test_quote_with_taxable_fees():
    quote = quote_order(
        50000,
        FeeSchedule(type=FeeRuleType.FLAT, flat_cents=799),
        fees_taxable=True,
        tax_rate=0.0825,
    )
    assert quote.delivery_fee_cents == 799
    assert quote.taxable_base_cents == 50799
    assert quote.tax_cents == 4191
    assert quote.total_cents == 54990
    assert quote.rule_type == FeeRuleType.FLAT
    assert quote.notes == []


def test_quote_without_rule_notes_free_delivery():
    quote = quote_order(10000, None, fees_taxable=False, tax_rate=0)
    assert quote.delivery_fee_cents == 0
    assert quote.total_cents == 10000
    assert quote.rule_type is None
    assert quote.notes


def test_quote_above_every_tier_is_free_with_note():
    quote = quote_order(
        12000,
        FeeSchedule(type=FeeRuleType.TIERED, tiers=TIERS),
        fees_taxable=False,
        tax_rate=0,
    )
    assert quote.delivery_fee_cents == 0
    assert any("tier" in note for note in quote.notes)


def test_quote_includes_other_fees():
    quote = quote_order(
        10000,
        FeeSchedule(type=FeeRuleType.FLAT, flat_cents=500),
        fees_taxable=True,
        tax_rate=0.1,
        other_fees_cents=250,
    )
    assert quote.taxable_base_cents == 10750
    assert quote.tax_cents == 1075
    assert quote.total_cents == 10000 + 500 + 250 + 1075


def test_quote_for_company_uses_override():
    company = Company(name="Movers", fees_taxable=False, tax_override_pct=0.0)
    quote = quote_for_company(
        20000, company, FeeSchedule(type=FeeRuleType.FLAT, flat_cents=1000), 0.0825
    )
    assert quote.tax_cents == 0
    assert quote.total_cents == 21000


# ── Schedule validation ──────────────────────────────────────

def test_validate_schedule_requires_terms():
    with pytest.raises(FeeValidationError):
        validate_schedule(FeeSchedule(type=FeeRuleType.FLAT))
    with pytest.raises(FeeValidationError):
        validate_schedule(FeeSchedule(type=FeeRuleType.PERCENT))
    with pytest.raises(FeeValidationError):
        validate_schedule(FeeSchedule(type=FeeRuleType.TIERED))


def test_validate_schedule_rejects_duplicate_thresholds():
    with pytest.raises(FeeValidationError, match="duplicate"):
        validate_schedule(
            FeeSchedule(type=FeeRuleType.TIERED, tiers=(Tier(5000, 999), Tier(5000, 499)))
        )


def test_validate_schedule_rejects_percent_out_of_range():
    with pytest.raises(FeeValidationError):
        validate_schedule(FeeSchedule(type=FeeRuleType.PERCENT, percent_rate=5))


def test_validate_schedule_accepts_good_tiers():
    schedule = FeeSchedule(type=FeeRuleType.TIERED, tiers=TIERS)
    assert validate_schedule(schedule) is schedule


def test_two_tier_schedule():
    schedule = FeeSchedule(
        type=FeeRuleType.TIERED, tiers=(Tier(5000, 599), Tier(10000, 799))
    )
    assert delivery_fee(4000, schedule) == 599
    assert delivery_fee(7500, schedule) == 799
    assert delivery_fee(12000, schedule) == 0
