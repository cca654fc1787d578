"""Fixed-point money helpers.

All prices, fees and payouts are ``Decimal`` with two fraction digits.
No float ever touches a monetary value.
"""

from decimal import ROUND_HALF_UP, Decimal

from config.settings import settings

CENT = Decimal("0.01")
UNIT = Decimal("1")
_BPS_DENOMINATOR = Decimal(10000)


def to_money(value: Decimal | int | str) -> Decimal:
    """Normalise to a two-digit Decimal. Floats are rejected outright."""
    if isinstance(value, float):
        raise TypeError("float is not accepted for money values")
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_half_up_unit(value: Decimal) -> Decimal:
    """Round to the nearest whole currency unit, halves away from zero: 2.5 -> 3."""
    return value.quantize(UNIT, rounding=ROUND_HALF_UP).quantize(CENT)


def apply_bps(amount: Decimal, bps: int) -> Decimal:
    """amount * bps / 10000, rounded half-up to the whole currency unit."""
    return round_half_up_unit(amount * Decimal(bps) / _BPS_DENOMINATOR)


def money_to_display(amount: Decimal, currency: str | None = None) -> str:
    """Render for humans: Decimal('10000') -> 'HKD 10,000.00'."""
    code = currency or settings.CURRENCY
    value = to_money(amount)
    if value < 0:
        return f"-{code} {-value:,.2f}"
    return f"{code} {value:,.2f}"
