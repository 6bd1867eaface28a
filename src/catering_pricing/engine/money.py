"""
Integer paise arithmetic.

Every multiplication or division that yields a currency amount is rounded to
the nearest paise immediately, half away from zero.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[int, float, Decimal, str]

_ONE = Decimal("1")


def to_decimal(value: Number) -> Decimal:
    """Convert via str() so binary floats like 0.05 stay exact."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_paise(value: Number) -> int:
    """Round to whole paise, half away from zero."""
    return int(to_decimal(value).quantize(_ONE, rounding=ROUND_HALF_UP))


def percent_of(amount: int, pct: Number) -> int:
    """round(amount * pct / 100)"""
    return round_paise(Decimal(amount) * to_decimal(pct) / Decimal(100))


def apply_rate(amount: int, rate: Number) -> int:
    """round(amount * rate) for a fractional rate such as 0.05."""
    return round_paise(Decimal(amount) * to_decimal(rate))


def format_number(value: Number) -> str:
    """Render 10, 12.5 or 0.05 without trailing zeros."""
    d = to_decimal(value)
    if d == d.to_integral_value():
        return str(int(d))
    return format(d.normalize(), "f")


def format_rupees(paise: int) -> str:
    """₹219 for 21900 paise, ₹219.50 for 21950."""
    rupees, rem = divmod(abs(int(paise)), 100)
    sign = "-" if paise < 0 else ""
    if rem:
        return f"{sign}₹{rupees}.{rem:02d}"
    return f"{sign}₹{rupees}"
