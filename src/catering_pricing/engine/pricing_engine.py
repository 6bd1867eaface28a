"""
Pricing Engine - turns an order selection into an itemised quote.

Every call site (quote creation, order creation, display previews) goes
through this module instead of re-deriving totals:
- Structured Quote/BreakdownLine output with labels generated from data
- Execution trace for every calculation stage
- Line-by-line rounding to whole paise
"""
import logging
import math
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional, Protocol

from ..config.settings import PricingConfig
from .errors import InvalidInput
from .menu_rules import bulk_discount_pct
from .models import OrderSpecification, PricingFacts, PricingMode, Quote, TraceStep
from .money import format_rupees, to_decimal
from .settlement import check_advance_pct, settle, split_advance
from .subtotal import calculate_subtotal
from .surcharges import DeliveryTerms, delivery_fee_line, weekend_surge_line

logger = logging.getLogger(__name__)


class CatalogProvider(Protocol):
    def get(self, kind: str, ref: str) -> PricingFacts:
        ...


def parse_event_date(value) -> date:
    """Accept a date, a datetime or an ISO string; anything else is invalid."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            pass
    raise InvalidInput(f"Event date must be a calendar date, got {value!r}", field="event_date")


def _check_distance(value) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise InvalidInput(f"Distance must be a number, got {value!r}", field="distance_km")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidInput("Distance must be finite", field="distance_km")
    distance = to_decimal(value)
    if not distance.is_finite() or distance < 0:
        raise InvalidInput(f"Distance must not be negative, got {value!r}", field="distance_km")
    return distance


def _tax_rate(facts: PricingFacts, config: PricingConfig) -> Decimal:
    if facts.tax_rate is not None:
        return to_decimal(facts.tax_rate)
    if facts.pricing_mode == PricingMode.PER_UNIT:
        return config.per_unit_tax_rate
    return config.tax_rate


def _delivery_terms(facts: PricingFacts, config: PricingConfig) -> DeliveryTerms:
    flat_fee = facts.flat_delivery_fee
    free_qty = facts.free_delivery_qty
    if facts.kind == "bowl":
        flat_fee = config.bowls_delivery_fee if flat_fee is None else flat_fee
        free_qty = config.bowls_free_delivery_qty if free_qty is None else free_qty
    return DeliveryTerms(
        free_km=config.free_km,
        per_km_fee=config.per_km_fee,
        flat_fee=flat_fee,
        free_delivery_qty=free_qty,
    )


def compute_quote(
    spec: OrderSpecification,
    facts: PricingFacts,
    config: Optional[PricingConfig] = None,
    now: Optional[datetime] = None,
    advance_pct: Optional[int] = None,
) -> Quote:
    """
    Compute a quote from an order and the catalog facts of its offering.

    Resolution order:
    1. Validate quantity, distance and event date
    2. Food cost: base/extra pax or qty × unit price, extra items, premium
       add-ons, add-ons
    3. Delivery fee, then weekend surge on the running subtotal
    4. Bulk discount on food cost only, then tax on the discounted subtotal
    5. Advance/balance split

    Pure: the same inputs (including `now`) always give an equal Quote.
    """
    config = config or PricingConfig()
    now = now or datetime.now(timezone.utc)
    trace = []

    if isinstance(spec.qty, bool) or not isinstance(spec.qty, int) or spec.qty <= 0:
        raise InvalidInput(f"Quantity must be a positive integer, got {spec.qty!r}", field="qty")
    distance = _check_distance(spec.distance_km)
    event_day = parse_event_date(spec.event_date)

    pct = advance_pct
    if pct is None:
        pct = facts.advance_pct if facts.advance_pct is not None else config.advance_pct
    pct = check_advance_pct(pct)

    trace.append(TraceStep("Offering", f"{facts.title} ({facts.pricing_mode.value})", facts.ref))

    # Food cost
    food = calculate_subtotal(facts, spec.qty, spec.unique_items(), spec.unique_add_ons())
    lines = list(food.lines)
    trace.append(TraceStep("Food Cost", f"{len(lines)} line(s) for {spec.qty} {facts.unit_noun}", format_rupees(food.food_cost)))

    # Surcharges
    delivery = delivery_fee_line(_delivery_terms(facts, config), distance, spec.qty, facts.unit_noun)
    lines.append(delivery)
    running = food.food_cost + delivery.amount
    trace.append(TraceStep("Delivery", delivery.label, format_rupees(delivery.amount)))

    surge = weekend_surge_line(running, event_day, config.weekend_surge_pct)
    if surge is not None:
        lines.append(surge)
        running += surge.amount
        trace.append(TraceStep("Weekend Surge", surge.label, format_rupees(surge.amount)))

    # Discount, tax, settlement
    discount_pct = bulk_discount_pct(spec.qty, config.bulk_discount_tiers) if facts.discount_eligible else 0
    tax_rate = _tax_rate(facts, config)
    settlement = settle(
        food_cost=food.food_cost,
        subtotal=running,
        discount_pct=discount_pct,
        tax_rate=tax_rate,
        advance_pct=pct,
    )
    lines.extend(settlement.lines)

    if settlement.discount_amount:
        trace.append(TraceStep("Bulk Discount", f"{settlement.discount_pct}% of food cost", format_rupees(-settlement.discount_amount)))
    else:
        trace.append(TraceStep("Bulk Discount", "No discount tier met"))
    trace.append(TraceStep("Tax", f"Rate {tax_rate}", format_rupees(settlement.tax_amount)))
    trace.append(TraceStep("Total", "Subtotal after discount + tax", format_rupees(settlement.total)))
    trace.append(TraceStep("Advance", f"{pct}% payable now", format_rupees(settlement.advance_amount)))

    quote = Quote(
        kind=facts.kind,
        ref=facts.ref,
        qty=spec.qty,
        currency=config.currency,
        food_cost=food.food_cost,
        subtotal=running,
        discount_pct=settlement.discount_pct,
        discount_amount=settlement.discount_amount,
        subtotal_after_discount=settlement.subtotal_after_discount,
        tax_rate=str(tax_rate),
        tax_amount=settlement.tax_amount,
        total=settlement.total,
        advance_pct=settlement.advance_pct,
        advance_amount=settlement.advance_amount,
        balance_amount=settlement.balance_amount,
        breakdown=tuple(lines),
        created_at=now,
        expires_at=now + timedelta(minutes=config.quote_ttl_minutes),
        trace=tuple(trace),
    )
    logger.debug("Quoted %s/%s x%d: total=%d advance=%d", quote.kind, quote.ref, quote.qty, quote.total, quote.advance_amount)
    return quote


class PricingEngine:
    """
    Shared entry point for every pricing mode.

    Holds a catalog provider and a PricingConfig; keeps no per-call state, so
    one instance can serve concurrent requests.
    """

    def __init__(self, catalog: CatalogProvider, config: Optional[PricingConfig] = None):
        self.catalog = catalog
        self.config = config or PricingConfig()

    def quote(
        self,
        spec: OrderSpecification,
        now: Optional[datetime] = None,
        advance_pct: Optional[int] = None,
    ) -> Quote:
        """Look up the offering's facts and compute its quote."""
        facts = self.catalog.get(spec.kind, spec.ref)
        return compute_quote(spec, facts, self.config, now=now, advance_pct=advance_pct)

    def quote_package(self, package_id: str, pax: int, event_date, distance_km=0, **kwargs) -> Quote:
        """Base + extra pax pricing for a catering package."""
        spec = OrderSpecification("package", package_id, pax, event_date, distance_km)
        return self.quote(spec, **kwargs)

    def quote_party_box(self, tier_key: str, pax: int, event_date, selected_items=(), distance_km=0, **kwargs) -> Quote:
        """Per-plate tier pricing with premium items and fixed composition."""
        spec = OrderSpecification("party_box", tier_key, pax, event_date, distance_km, selected_items=selected_items)
        return self.quote(spec, **kwargs)

    def quote_catering(self, plate_id: str, pax: int, event_date, selected_items=(), distance_km=0, **kwargs) -> Quote:
        """Per-plate pricing with base plate allowances and extra items."""
        spec = OrderSpecification("catering", plate_id, pax, event_date, distance_km, selected_items=selected_items)
        return self.quote(spec, **kwargs)

    def quote_bowls(self, bowl_id: str, qty: int, event_date, add_ons=(), distance_km=0, **kwargs) -> Quote:
        """Per-unit bowl pricing with add-ons and volume free delivery."""
        spec = OrderSpecification("bowl", bowl_id, qty, event_date, distance_km, add_ons=add_ons)
        return self.quote(spec, **kwargs)

    def quote_meal_boxes(self, box_id: str, qty: int, event_date, distance_km=0, **kwargs) -> Quote:
        """Per-unit meal box pricing."""
        spec = OrderSpecification("meal_box", box_id, qty, event_date, distance_km)
        return self.quote(spec, **kwargs)

    def settle(self, total: int, advance_pct: Optional[int] = None) -> tuple[int, int]:
        """Advance/balance split for a total computed elsewhere in this engine."""
        if isinstance(total, bool) or not isinstance(total, int) or total < 0:
            raise InvalidInput(f"Total must be a non-negative integer of paise, got {total!r}", field="total")
        return split_advance(total, self.config.advance_pct if advance_pct is None else advance_pct)
