import pytest

from catering_pricing.engine import InconsistentTierRules, MenuItem, PricingFacts, PricingMode, SectionRule
from catering_pricing.engine.menu_rules import (
    bulk_discount_pct,
    check_composition,
    extra_items_per_plate,
    premium_per_plate,
)


@pytest.fixture
def lunch_facts():
    items = {
        "st1": MenuItem("st1", "Gobi 65", "Starters"),
        "st2": MenuItem("st2", "Chicken 65", "Starters"),
        "st3": MenuItem("st3", "Fish Fry", "Starters", extra_price=6000),
        "ri1": MenuItem("ri1", "Bagara Rice", "Rice", group="Rice or Biryani"),
        "bi1": MenuItem("bi1", "Veg Biryani", "Biryani", group="Rice or Biryani"),
    }
    rules = {
        "Starters": SectionRule("Starters", included=1, extra_price=2500),
        "Rice": SectionRule("Rice", extra_price=2000),
        "Biryani": SectionRule("Biryani", extra_price=4000),
        "Rice or Biryani": SectionRule("Rice or Biryani", included=1),
    }
    return PricingFacts(
        ref="plate-lunch", kind="catering", title="Lunch", pricing_mode=PricingMode.PER_PLATE,
        per_unit=24900, items=items, section_rules=rules,
    )


def test_extra_items_beyond_allowance(lunch_facts):
    items = [lunch_facts.items[i] for i in ("st1", "st2", "st3")]
    count, per_plate = extra_items_per_plate(lunch_facts, items)
    # st2 uses the section price, st3 its own
    assert (count, per_plate) == (2, 2500 + 6000)


def test_rice_and_biryani_share_one_allowance(lunch_facts):
    rice_first = [lunch_facts.items["ri1"], lunch_facts.items["bi1"]]
    biryani_first = [lunch_facts.items["bi1"], lunch_facts.items["ri1"]]

    assert extra_items_per_plate(lunch_facts, rice_first) == (1, 4000)
    assert extra_items_per_plate(lunch_facts, biryani_first) == (1, 2000)


def test_no_allowances_means_no_extras():
    facts = PricingFacts(ref="x", kind="party_box", title="Box", pricing_mode=PricingMode.PER_PLATE)
    assert extra_items_per_plate(facts, [MenuItem("a", "A", "Starters")]) == (0, 0)


def test_premium_per_plate():
    items = [
        MenuItem("s1", "Gobi 65", "Starters"),
        MenuItem("s6", "Chicken 65", "Starters", premium_delta=1500),
        MenuItem("m7", "Butter Chicken", "Main Course", premium_delta=2000),
    ]
    assert premium_per_plate(items) == (2, 3500)


def test_composition_checks_only_required_sections():
    facts = PricingFacts(
        ref="standard", kind="party_box", title="Standard", pricing_mode=PricingMode.PER_PLATE,
        section_rules={"Starters": SectionRule("Starters", required=2)},
    )
    items = [MenuItem("s1", "A", "Starters"), MenuItem("s2", "B", "Starters"), MenuItem("x", "C", "Extras")]
    check_composition(facts, items)

    with pytest.raises(InconsistentTierRules):
        check_composition(facts, items + [MenuItem("s3", "D", "Starters")])


@pytest.mark.parametrize("qty,expected", [
    (10, 0),
    (49, 0),
    (50, 5),
    (100, 5),
    (101, 10),
    (199, 10),
    (200, 15),
    (1000, 15),
])
def test_bulk_discount_tiers(qty, expected):
    tiers = ((50, 5), (101, 10), (200, 15))
    assert bulk_discount_pct(qty, tiers) == expected


def test_bulk_discount_tiers_unordered():
    assert bulk_discount_pct(150, ((200, 15), (50, 5), (101, 10))) == 10
