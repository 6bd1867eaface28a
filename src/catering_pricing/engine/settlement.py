"""
Discount, tax and advance/balance calculator.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .errors import InvalidInput
from .money import apply_rate, format_number, percent_of
from .models import BreakdownLine, LineKind


@dataclass(frozen=True)
class Settlement:
    discount_pct: int
    discount_amount: int
    subtotal_after_discount: int
    tax_amount: int
    total: int
    advance_pct: int
    advance_amount: int
    balance_amount: int
    lines: tuple


def check_advance_pct(advance_pct) -> int:
    if isinstance(advance_pct, bool) or not isinstance(advance_pct, int) or not 1 <= advance_pct <= 100:
        raise InvalidInput(f"Advance percent must be an integer between 1 and 100, got {advance_pct!r}", field="advance_pct")
    return advance_pct


def split_advance(total: int, advance_pct: int) -> tuple[int, int]:
    """
    Returns (advance, balance) with advance + balance == total.

    The advance is at least 1 paise for any positive total.
    """
    check_advance_pct(advance_pct)
    if total <= 0:
        return 0, 0
    advance = min(total, max(1, percent_of(total, advance_pct)))
    return advance, max(0, total - advance)


def settle(
    food_cost: int,
    subtotal: int,
    discount_pct: int,
    tax_rate: Decimal,
    advance_pct: int,
    discount_base: Optional[int] = None,
) -> Settlement:
    """
    Apply the bulk discount (food cost only), tax and the advance split.

    `subtotal` already includes delivery fee and weekend surge.
    """
    base = food_cost if discount_base is None else discount_base
    lines = []

    discount = percent_of(base, discount_pct) if discount_pct > 0 else 0
    discount = max(0, discount)
    if discount > 0:
        lines.append(BreakdownLine(
            LineKind.BULK_DISCOUNT,
            -discount,
            {"pct": discount_pct, "base": base},
        ))

    after_discount = max(0, subtotal - discount)

    tax = max(0, apply_rate(after_discount, tax_rate))
    if tax_rate > 0:
        lines.append(BreakdownLine(
            LineKind.TAX,
            tax,
            {"pct": format_number(tax_rate * 100), "rate": format_number(tax_rate), "base": after_discount},
        ))

    total = after_discount + tax
    advance, balance = split_advance(total, advance_pct)

    return Settlement(
        discount_pct=discount_pct if discount > 0 else 0,
        discount_amount=discount,
        subtotal_after_discount=after_discount,
        tax_amount=tax,
        total=total,
        advance_pct=advance_pct,
        advance_amount=advance,
        balance_amount=balance,
        lines=tuple(lines),
    )
