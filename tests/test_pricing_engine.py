"""
Worked pricing scenarios for every offering kind.
Amounts are integer paise; these should fail if pricing logic changes unexpectedly.
"""
from datetime import timedelta

import pytest

from catering_pricing.engine import (
    InconsistentTierRules,
    InvalidInput,
    LineKind,
    MissingCatalogReference,
    OrderSpecification,
    PricingEngine,
)
from conftest import NOW, SATURDAY, STANDARD_BOX, WEDNESDAY


def test_package_base_plus_extra_pax(engine):
    """500000 base for 100 pax, 20 extra pax at 4500, GST 5%, no discount."""
    quote = engine.quote_package("pkg-andhra-feast", 120, WEDNESDAY, now=NOW)

    assert quote.food_cost == 590000
    assert quote.subtotal == 590000
    assert quote.discount_amount == 0
    assert quote.tax_amount == 29500
    assert quote.total == 619500
    assert quote.advance_pct == 30
    assert quote.advance_amount == 185850
    assert quote.balance_amount == 433650

    labels = [line.label for line in quote.breakdown]
    assert labels == [
        "Base (min 100)",
        "Extra 20 pax × ₹45",
        "Delivery fee",
        "GST 5%",
    ], f"Unexpected breakdown {labels}"


def test_package_at_min_pax_has_no_extra_line(engine):
    quote = engine.quote_package("pkg-andhra-feast", 100, WEDNESDAY, now=NOW)
    assert quote.line(LineKind.EXTRA_PAX) is None
    assert quote.food_cost == 500000


def test_bowls_free_delivery_above_threshold(engine):
    """30 bowls at ₹219 clears the 25-bowl free delivery threshold; bowls carry no tax."""
    quote = engine.quote_bowls("bowl-classic-veg", 30, WEDNESDAY, now=NOW)

    assert quote.food_cost == 657000
    delivery = quote.line(LineKind.DELIVERY_FEE)
    assert delivery.amount == 0
    assert delivery.label == "Delivery fee (free above 25 bowls)"
    assert quote.line(LineKind.TAX) is None
    assert quote.tax_amount == 0
    assert quote.total == 657000
    # Bowls are paid in full up front
    assert quote.advance_amount == 657000
    assert quote.balance_amount == 0


def test_bowls_flat_delivery_and_add_ons(engine):
    quote = engine.quote_bowls("bowl-classic-veg", 10, WEDNESDAY, add_ons=["addon-sweet", "addon-curd"], now=NOW)

    assert quote.line(LineKind.PER_UNIT).label == "10 bowls × ₹219"
    add_ons = quote.line(LineKind.ADD_ONS)
    assert add_ons.amount == 60000
    assert add_ons.label == "Add-ons +₹60/bowl"
    assert quote.line(LineKind.DELIVERY_FEE).amount == 9900
    assert quote.total == 219000 + 60000 + 9900


def test_party_box_with_bulk_discount(engine):
    """200 plates of the standard box with one ₹10 premium item crosses the 15% tier."""
    quote = engine.quote_party_box("standard", 200, WEDNESDAY, selected_items=STANDARD_BOX, now=NOW)

    assert quote.food_cost == 5180000
    assert quote.discount_pct == 15
    assert quote.discount_amount == 777000
    assert quote.subtotal_after_discount == 4403000
    assert quote.tax_amount == 220150
    assert quote.total == 4623150
    assert quote.advance_pct == 50
    assert quote.advance_amount == 2311575
    assert quote.balance_amount == 2311575

    premium = quote.line(LineKind.PREMIUM_ADD_ONS)
    assert premium.amount == 200000
    assert premium.label == "Premium add-ons (1 items) +₹10/plate"
    discount = quote.line(LineKind.BULK_DISCOUNT)
    assert discount.amount == -777000
    assert discount.label == "Bulk discount (15%)"


def test_distance_fee_is_not_discounted(catalog, config):
    """35 km at ₹20/km after 10 free km; the fee stays out of the discount base."""
    engine = PricingEngine(catalog, config.replace(per_km_fee=2000))
    quote = engine.quote_package("pkg-andhra-feast", 200, WEDNESDAY, distance_km=35, now=NOW)

    delivery = quote.line(LineKind.DELIVERY_FEE)
    assert delivery.amount == 50000
    assert delivery.label == "Delivery fee (25 km × ₹20/km after 10 km)"
    assert quote.food_cost == 950000
    assert quote.subtotal == 1000000
    assert quote.discount_amount == 142500
    assert quote.subtotal_after_discount == 857500
    assert quote.total == 857500 + 42875


def test_distance_within_free_radius(catalog, config):
    engine = PricingEngine(catalog, config.replace(per_km_fee=2000))
    quote = engine.quote_package("pkg-andhra-feast", 100, WEDNESDAY, distance_km=8, now=NOW)
    delivery = quote.line(LineKind.DELIVERY_FEE)
    assert delivery.amount == 0
    assert delivery.label == "Delivery fee (free within 10 km)"


def test_duplicate_selection_counted_once(engine):
    with_duplicate = ["s1", "s2", "s2", "m3", "m4", "r1", "b1", "a1", "d1", "s2"]
    quote = engine.quote_party_box("standard", 20, WEDNESDAY, selected_items=with_duplicate, now=NOW)
    baseline = engine.quote_party_box("standard", 20, WEDNESDAY, selected_items=STANDARD_BOX, now=NOW)

    assert quote.line(LineKind.PREMIUM_ADD_ONS).amount == 20 * 1000
    assert quote.total == baseline.total


def test_duplicate_add_ons_counted_once(engine):
    quote = engine.quote_bowls("bowl-classic-veg", 10, WEDNESDAY, add_ons=["addon-sweet", "addon-sweet"], now=NOW)
    assert quote.line(LineKind.ADD_ONS).amount == 35000


def test_weekend_surge_applies_to_running_subtotal(catalog, config):
    engine = PricingEngine(catalog, config.replace(weekend_surge_pct=10, per_km_fee=2000))
    weekday = engine.quote_package("pkg-andhra-feast", 100, WEDNESDAY, distance_km=15, now=NOW)
    weekend = engine.quote_package("pkg-andhra-feast", 100, SATURDAY, distance_km=15, now=NOW)

    assert weekday.line(LineKind.WEEKEND_SURGE) is None
    surge = weekend.line(LineKind.WEEKEND_SURGE)
    # 10% of food 500000 + delivery 10000
    assert surge.amount == 51000
    assert surge.label == "Weekend surge 10%"
    assert weekend.subtotal == 561000


def test_catering_lunch_extra_items(engine):
    """Second starter (+₹25) and biryani beyond the shared rice allowance (+₹40)."""
    selection = ["cl-st1", "cl-st2", "cl-cu1", "cl-ri1", "cl-bi1", "cl-br1", "cl-de1"]
    quote = engine.quote_catering("plate-lunch", 50, WEDNESDAY, selected_items=selection, now=NOW)

    extra = quote.line(LineKind.EXTRA_ITEMS)
    assert extra.amount == 6500 * 50
    assert extra.label == "Extra items (2) +₹65/plate"
    assert quote.food_cost == 1245000 + 325000
    assert quote.tax_amount == 78500
    assert quote.total == 1648500
    assert quote.advance_amount == 824250


def test_catering_within_allowance_has_no_extra_line(engine):
    quote = engine.quote_catering("plate-lunch", 50, WEDNESDAY, selected_items=["cl-st1", "cl-cu2", "cl-bi2"], now=NOW)
    assert quote.line(LineKind.EXTRA_ITEMS) is None
    assert quote.food_cost == 1245000


def test_catering_item_level_extra_price(engine):
    quote = engine.quote_catering("plate-snacks", 20, WEDNESDAY, selected_items=["cs-sn1", "cs-sn3"], now=NOW)
    assert quote.line(LineKind.EXTRA_ITEMS).amount == 5000 * 20


def test_meal_boxes(engine):
    quote = engine.quote_meal_boxes("veg", 10, WEDNESDAY, now=NOW)
    assert quote.line(LineKind.PER_UNIT).label == "10 boxes × ₹249"
    assert quote.total == 249000
    assert quote.advance_amount == 124500
    assert quote.balance_amount == 124500


def test_advance_override(engine):
    quote = engine.quote_package("pkg-andhra-feast", 120, WEDNESDAY, now=NOW, advance_pct=100)
    assert quote.advance_amount == quote.total
    assert quote.balance_amount == 0


def test_expiry_window(engine):
    quote = engine.quote_package("pkg-andhra-feast", 120, WEDNESDAY, now=NOW)
    assert quote.expires_at == NOW + timedelta(minutes=45)
    assert not quote.is_expired(NOW + timedelta(minutes=44))
    assert quote.is_expired(NOW + timedelta(minutes=45))


def test_event_date_as_iso_string(engine):
    quote = engine.quote_package("pkg-andhra-feast", 120, "2025-06-11", now=NOW)
    assert quote.total == 619500


def test_legacy_dict_matches_breakdown(engine):
    quote = engine.quote_party_box("standard", 200, WEDNESDAY, selected_items=STANDARD_BOX, now=NOW)
    legacy = quote.to_legacy_dict()

    assert legacy["subtotal"] == quote.subtotal_after_discount
    assert legacy["gst"] == quote.tax_amount
    assert legacy["total"] == quote.total
    assert legacy["breakdown"][0] == {"label": "200 plates × ₹249", "amount": 4980000}
    assert legacy["expiresAt"] == quote.expires_at.isoformat()


def test_trace_covers_each_stage(engine):
    quote = engine.quote_package("pkg-andhra-feast", 120, WEDNESDAY, now=NOW)
    steps = [t.step for t in quote.trace]
    assert steps == ["Offering", "Food Cost", "Delivery", "Bulk Discount", "Tax", "Total", "Advance"]
    assert "Total: Subtotal after discount + tax = ₹6195" in quote.get_trace_text()


# Validation failures

@pytest.mark.parametrize("qty", [0, -5, 2.5, True, "10"])
def test_invalid_quantity(engine, qty):
    with pytest.raises(InvalidInput) as exc:
        engine.quote(OrderSpecification("package", "pkg-andhra-feast", qty, WEDNESDAY), now=NOW)
    assert exc.value.field == "qty"


@pytest.mark.parametrize("distance", [-1, float("nan"), float("inf"), "far"])
def test_invalid_distance(engine, distance):
    with pytest.raises(InvalidInput) as exc:
        engine.quote_package("pkg-andhra-feast", 120, WEDNESDAY, distance_km=distance, now=NOW)
    assert exc.value.field == "distance_km"


@pytest.mark.parametrize("event_date", ["", "2025-02-30", "next week", None, 20250611])
def test_invalid_event_date(engine, event_date):
    with pytest.raises(InvalidInput) as exc:
        engine.quote_package("pkg-andhra-feast", 120, event_date, now=NOW)
    assert exc.value.field == "event_date"


@pytest.mark.parametrize("advance_pct", [0, 101, -10])
def test_invalid_advance_pct(engine, advance_pct):
    with pytest.raises(InvalidInput):
        engine.quote_package("pkg-andhra-feast", 120, WEDNESDAY, now=NOW, advance_pct=advance_pct)


def test_unknown_package(engine):
    with pytest.raises(MissingCatalogReference) as exc:
        engine.quote_package("pkg-does-not-exist", 120, WEDNESDAY, now=NOW)
    assert exc.value.ref == "pkg-does-not-exist"


def test_inactive_package_is_unknown(engine):
    with pytest.raises(MissingCatalogReference):
        engine.quote_package("pkg-hyderabadi-biryani", 120, WEDNESDAY, now=NOW)


def test_inactive_add_on_is_unknown(engine):
    with pytest.raises(MissingCatalogReference) as exc:
        engine.quote_bowls("bowl-classic-veg", 10, WEDNESDAY, add_ons=["addon-papad"], now=NOW)
    assert exc.value.field == "add_ons"


def test_unknown_menu_item(engine):
    selection = STANDARD_BOX[:-1] + ["d99"]
    with pytest.raises(MissingCatalogReference) as exc:
        engine.quote_party_box("standard", 20, WEDNESDAY, selected_items=selection, now=NOW)
    assert exc.value.ref == "d99"


def test_party_box_wrong_composition(engine):
    selection = ["s1", "m3", "m4", "r1", "b1", "a1", "d1"]
    with pytest.raises(InconsistentTierRules) as exc:
        engine.quote_party_box("standard", 20, WEDNESDAY, selected_items=selection, now=NOW)
    assert exc.value.section == "Starters"
    assert exc.value.expected == 2
    assert exc.value.actual == 1


def test_party_box_requires_selection(engine):
    with pytest.raises(InvalidInput):
        engine.quote_party_box("standard", 20, WEDNESDAY, now=NOW)


def test_settle_total_computed_elsewhere(engine):
    assert engine.settle(619500) == (185850, 433650)
    assert engine.settle(619500, advance_pct=50) == (309750, 309750)
    assert engine.settle(0) == (0, 0)
    with pytest.raises(InvalidInput):
        engine.settle(-1)


@pytest.mark.parametrize("kind,ref,qty", [
    ("bowl", "bowl-classic-veg", 1),
    ("bowl", "bowl-classic-veg", 9),
    ("meal_box", "veg", 5),
    ("catering", "plate-breakfast", 9),
])
def test_below_minimum_order(engine, kind, ref, qty):
    with pytest.raises(InvalidInput) as exc:
        engine.quote(OrderSpecification(kind, ref, qty, WEDNESDAY), now=NOW)
    assert exc.value.field == "qty"
    assert "Minimum order is 10" in exc.value.message


def test_party_box_below_minimum_order(engine):
    with pytest.raises(InvalidInput) as exc:
        engine.quote_party_box("standard", 9, WEDNESDAY, selected_items=STANDARD_BOX, now=NOW)
    assert exc.value.field == "qty"


def test_minimum_order_is_inclusive(engine):
    quote = engine.quote_bowls("bowl-classic-veg", 10, WEDNESDAY, now=NOW)
    assert quote.food_cost == 219000


def test_package_below_base_pax_still_pays_base(engine):
    quote = engine.quote_package("pkg-andhra-feast", 40, WEDNESDAY, now=NOW)
    assert quote.food_cost == 500000
