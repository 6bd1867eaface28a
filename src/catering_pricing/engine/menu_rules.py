"""
Menu Rules - tier composition checks, plate allowances and bulk discount tiers.

Used by the pricing engine on top of the offering's base price.
"""
from typing import Iterable

from .errors import InconsistentTierRules, InvalidInput, MissingCatalogReference
from .models import MenuItem, PricingFacts


def resolve_items(facts: PricingFacts, item_ids: Iterable[str]) -> list[MenuItem]:
    """Map unique selected ids to menu items, in selection order."""
    items = []
    for item_id in item_ids:
        item = facts.items.get(item_id)
        if item is None:
            raise MissingCatalogReference("menu item", item_id, field="selected_items")
        items.append(item)
    return items


def check_composition(facts: PricingFacts, items: list[MenuItem]) -> None:
    """
    Enforce fixed menu composition ("exactly 2 Starters").

    Only sections whose rule sets `required` are checked; anything else may be
    selected freely.
    """
    if facts.requires_selection and not items:
        raise InvalidInput(f"{facts.title} needs at least one menu item", field="selected_items")

    counts: dict[str, int] = {}
    for item in items:
        counts[item.section] = counts.get(item.section, 0) + 1

    for section, rule in facts.section_rules.items():
        if rule.required is None:
            continue
        actual = counts.get(section, 0)
        if actual != rule.required:
            raise InconsistentTierRules(section, rule.required, actual)


def extra_items_per_plate(facts: PricingFacts, items: list[MenuItem]) -> tuple[int, int]:
    """
    Charge items beyond the base plate allowance.

    Items share an allowance by group (rice and biryani count together); within
    a group the earliest selections are the included ones. Each extra item costs
    its own `extra_price` if set, else its section rule's price.

    Returns (extra_item_count, extra_paise_per_plate).
    """
    allowances: dict[str, int] = {}
    for rule in facts.section_rules.values():
        if rule.included is not None:
            allowances[rule.section] = rule.included

    if not allowances:
        return 0, 0

    used: dict[str, int] = {}
    count = 0
    per_plate = 0
    for item in items:
        group = item.allowance_group
        if group not in allowances:
            continue
        used[group] = used.get(group, 0) + 1
        if used[group] <= allowances[group]:
            continue

        price = item.extra_price
        if price is None:
            rule = facts.section_rules.get(item.section)
            price = rule.extra_price if rule else 0
        if price <= 0:
            continue
        count += 1
        per_plate += price

    return count, per_plate


def premium_per_plate(items: list[MenuItem]) -> tuple[int, int]:
    """Returns (premium_item_count, premium_paise_per_plate)."""
    count = 0
    per_plate = 0
    for item in items:
        if item.premium_delta > 0:
            count += 1
            per_plate += item.premium_delta
    return count, per_plate


def bulk_discount_pct(qty: int, tiers: Iterable[tuple[int, int]]) -> int:
    """Percent of the highest threshold not exceeding qty; 0 below all thresholds."""
    pct = 0
    best = None
    for threshold, tier_pct in tiers:
        if threshold <= qty and (best is None or threshold > best):
            best = threshold
            pct = tier_pct
    return pct
