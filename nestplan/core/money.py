"""Money helpers: integer cents in, integer cents out.

All amounts cross module boundaries as integer minor units ("cents").
Rates (percent fees, sales tax) are decimal fractions: 5% is 0.05, never 5.
Rounding to a whole cent is ROUND_HALF_UP on Decimal, i.e. half away from
zero, so 0.5 -> 1 and -0.5 -> -1.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

ONE_CENT = Decimal(1)
CENTS_PER_UNIT = 100

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "CAD": "$",
    "EUR": "€",
    "GBP": "£",
}


class MoneyValidationError(ValueError):
    pass


def to_decimal(value: int | float | str | Decimal, field: str = "value") -> Decimal:
    """Convert a number to Decimal without inheriting binary float noise."""
    if isinstance(value, bool):
        raise MoneyValidationError(f"{field} must be a number, got a boolean")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value))
        except InvalidOperation as exc:
            raise MoneyValidationError(f"{field} is not a number: {value!r}") from exc
    else:
        raise MoneyValidationError(f"{field} must be a number, got {type(value).__name__}")
    if not result.is_finite():
        raise MoneyValidationError(f"{field} must be finite, got {value!r}")
    return result


def round_cents(value: int | float | str | Decimal) -> int:
    """Round a fractional cent amount to the nearest whole cent."""
    return int(to_decimal(value).quantize(ONE_CENT, rounding=ROUND_HALF_UP))


def require_cents(value: int, field: str, *, allow_negative: bool = False) -> int:
    """Validate an integer cent amount; never clamps."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise MoneyValidationError(f"{field} must be integer cents, got {value!r}")
    if value < 0 and not allow_negative:
        raise MoneyValidationError(f"{field} must not be negative, got {value}")
    return value


def require_rate(value: float | Decimal | None, field: str) -> Decimal:
    """Validate a decimal-fraction rate in [0, 1]. ``None`` means "no rate" (0)."""
    if value is None:
        return Decimal(0)
    rate = to_decimal(value, field)
    if rate < 0 or rate > 1:
        raise MoneyValidationError(
            f"{field} must be a fraction between 0 and 1 (5% is 0.05), got {value}"
        )
    return rate


def apply_rate(amount_cents: int, rate: Decimal) -> int:
    """``round(amount × rate)`` to whole cents."""
    return round_cents(Decimal(amount_cents) * rate)


def dollars_to_cents(amount: int | float | str | Decimal) -> int:
    """Major currency units -> cents, e.g. 19.99 -> 1999."""
    return round_cents(to_decimal(amount, "amount") * CENTS_PER_UNIT)


def cents_to_dollars(cents: int) -> Decimal:
    """Cents -> major currency units with two decimal places."""
    require_cents(cents, "cents", allow_negative=True)
    return (Decimal(cents) / CENTS_PER_UNIT).quantize(Decimal("0.01"))


def format_cents(cents: int, currency: str = "USD") -> str:
    """Human readable amount, e.g. ``format_cents(-123456) == "-$1,234.56"``."""
    amount = cents_to_dollars(cents)
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    sign = "-" if amount < 0 else ""
    body = f"{abs(amount):,.2f}"
    if symbol is None:
        return f"{sign}{body} {currency.upper()}"
    return f"{sign}{symbol}{body}"
