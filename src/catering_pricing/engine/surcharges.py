"""
Surcharge Calculator - delivery fee, then weekend surge.

Both run before the discount step; the bulk discount never applies to them.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from .money import percent_of, round_paise, to_decimal
from .models import BreakdownLine, LineKind


@dataclass(frozen=True)
class DeliveryTerms:
    """Delivery pricing resolved for one offering."""
    free_km: Decimal
    per_km_fee: int
    flat_fee: Optional[int] = None
    free_delivery_qty: Optional[int] = None


def _plain(value: Decimal):
    """int when integral, else float, so details stay JSON friendly."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def delivery_fee_line(terms: DeliveryTerms, distance_km, qty: int, unit_noun: str = "units") -> BreakdownLine:
    """
    Delivery fee line; always emitted so a zero fee can be shown as free.
    """
    if terms.free_delivery_qty is not None and terms.free_delivery_qty > 0 and qty >= terms.free_delivery_qty:
        return BreakdownLine(
            LineKind.DELIVERY_FEE,
            0,
            {"mode": "waived", "free_delivery_qty": terms.free_delivery_qty, "unit_noun": unit_noun},
        )

    if terms.flat_fee is not None:
        return BreakdownLine(LineKind.DELIVERY_FEE, max(0, terms.flat_fee), {"mode": "flat"})

    if terms.per_km_fee <= 0:
        return BreakdownLine(LineKind.DELIVERY_FEE, 0, {"mode": "none"})

    distance = to_decimal(distance_km)
    chargeable = max(Decimal(0), distance - terms.free_km)
    if chargeable == 0:
        return BreakdownLine(
            LineKind.DELIVERY_FEE, 0, {"mode": "within_free_radius", "free_km": _plain(terms.free_km)}
        )

    fee = round_paise(chargeable * terms.per_km_fee)
    return BreakdownLine(
        LineKind.DELIVERY_FEE,
        fee,
        {
            "mode": "distance",
            "distance_km": _plain(distance),
            "free_km": _plain(terms.free_km),
            "chargeable_km": _plain(chargeable),
            "per_km_fee": terms.per_km_fee,
        },
    )


def is_weekend(day: date) -> bool:
    """Saturday or Sunday on the local calendar."""
    return day.weekday() >= 5


def weekend_surge_line(running_subtotal: int, event_day: date, surge_pct: int) -> Optional[BreakdownLine]:
    """Surge on the running subtotal (delivery fee included), or None."""
    if surge_pct <= 0 or not is_weekend(event_day):
        return None
    return BreakdownLine(
        LineKind.WEEKEND_SURGE,
        percent_of(running_subtotal, surge_pct),
        {"pct": surge_pct, "base": running_subtotal},
    )
