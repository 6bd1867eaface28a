"""
Subtotal Calculator - food cost before delivery, surge, discount and tax.
"""
from dataclasses import dataclass
from typing import Iterable

from .errors import InvalidInput, MissingCatalogReference
from .menu_rules import (
    check_composition,
    extra_items_per_plate,
    premium_per_plate,
    resolve_items,
)
from .models import BreakdownLine, LineKind, PricingFacts, PricingMode


@dataclass(frozen=True)
class SubtotalResult:
    lines: tuple
    food_cost: int


def _base_lines(facts: PricingFacts, qty: int) -> list[BreakdownLine]:
    if facts.pricing_mode == PricingMode.BASE_PLUS_EXTRA:
        lines = [BreakdownLine(LineKind.BASE_COST, facts.base_price, {"min_qty": facts.min_qty})]
        if qty > facts.min_qty:
            extra_qty = qty - facts.min_qty
            lines.append(BreakdownLine(
                LineKind.EXTRA_PAX,
                extra_qty * facts.per_unit,
                {"extra_qty": extra_qty, "per_unit": facts.per_unit},
            ))
        return lines

    unit_price = facts.per_unit or facts.base_price
    return [BreakdownLine(
        LineKind.PER_UNIT,
        qty * unit_price,
        {"qty": qty, "unit_price": unit_price, "unit_noun": facts.unit_noun},
    )]


def calculate_subtotal(
    facts: PricingFacts,
    qty: int,
    item_ids: Iterable[str] = (),
    add_on_ids: Iterable[str] = (),
) -> SubtotalResult:
    """
    Compute the food cost lines for an order.

    `item_ids` and `add_on_ids` must already be deduplicated; a repeated id
    would otherwise be charged twice.
    """
    if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
        raise InvalidInput(f"Quantity must be a positive integer, got {qty!r}", field="qty")
    # For base+extra packages min_qty is the pax covered by the base price, not a floor
    if facts.pricing_mode != PricingMode.BASE_PLUS_EXTRA and qty < facts.min_qty:
        raise InvalidInput(f"Minimum order is {facts.min_qty} {facts.unit_noun}", field="qty")

    items = resolve_items(facts, item_ids)
    check_composition(facts, items)

    lines = _base_lines(facts, qty)

    extra_count, extra_per_plate = extra_items_per_plate(facts, items)
    if extra_per_plate > 0:
        lines.append(BreakdownLine(
            LineKind.EXTRA_ITEMS,
            extra_per_plate * qty,
            {"count": extra_count, "per_plate": extra_per_plate, "qty": qty, "unit_noun": facts.unit_noun},
        ))

    premium_count, premium_delta = premium_per_plate(items)
    if premium_delta > 0:
        lines.append(BreakdownLine(
            LineKind.PREMIUM_ADD_ONS,
            premium_delta * qty,
            {"count": premium_count, "per_plate": premium_delta, "qty": qty, "unit_noun": facts.unit_noun},
        ))

    add_on_per_unit = 0
    add_on_count = 0
    for add_on_id in add_on_ids:
        add_on = facts.add_ons.get(add_on_id)
        if add_on is None:
            raise MissingCatalogReference("add-on", add_on_id, field="add_ons")
        if add_on.price_per_unit > 0:
            add_on_per_unit += add_on.price_per_unit
            add_on_count += 1
    if add_on_per_unit > 0:
        lines.append(BreakdownLine(
            LineKind.ADD_ONS,
            add_on_per_unit * qty,
            {"count": add_on_count, "per_unit": add_on_per_unit, "qty": qty, "unit_noun": facts.unit_noun},
        ))

    return SubtotalResult(lines=tuple(lines), food_cost=sum(line.amount for line in lines))
