"""
Data models for the pricing engine.

Uses dataclasses for structured, type-safe data representation. Inputs and
outputs are frozen: a Quote is created once and only ever superseded.
All money is integer paise.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from .labels import format_label


class PricingMode(str, Enum):
    PER_UNIT = "per_unit"
    BASE_PLUS_EXTRA = "base_plus_extra"
    PER_PLATE = "per_plate"


class LineKind(str, Enum):
    PER_UNIT = "per_unit"
    BASE_COST = "base_cost"
    EXTRA_PAX = "extra_pax"
    EXTRA_ITEMS = "extra_items"
    PREMIUM_ADD_ONS = "premium_add_ons"
    ADD_ONS = "add_ons"
    DELIVERY_FEE = "delivery_fee"
    WEEKEND_SURGE = "weekend_surge"
    BULK_DISCOUNT = "bulk_discount"
    TAX = "tax"


# Lines that make up the food cost (the bulk discount base)
FOOD_LINE_KINDS = frozenset({
    LineKind.PER_UNIT,
    LineKind.BASE_COST,
    LineKind.EXTRA_PAX,
    LineKind.EXTRA_ITEMS,
    LineKind.PREMIUM_ADD_ONS,
    LineKind.ADD_ONS,
})


def _unique(values) -> tuple:
    return tuple(dict.fromkeys(str(v).strip() for v in values if str(v).strip()))


@dataclass(frozen=True)
class OrderSpecification:
    """A raw order selection, constructed once per quote request."""
    kind: str                  # "package", "party_box", "catering", "bowl", "meal_box"
    ref: str                   # catalog id of the package / tier / bowl / box
    qty: int                   # pax, plates, bowls or boxes
    event_date: Union[date, str]
    distance_km: Union[int, float] = 0
    selected_items: tuple = ()
    add_ons: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "selected_items", tuple(self.selected_items or ()))
        object.__setattr__(self, "add_ons", tuple(self.add_ons or ()))

    def unique_items(self) -> tuple:
        """Selected item ids, duplicates collapsed, first occurrence kept."""
        return _unique(self.selected_items)

    def unique_add_ons(self) -> tuple:
        return _unique(self.add_ons)


@dataclass(frozen=True)
class MenuItem:
    id: str
    name: str
    section: str
    premium_delta: int = 0
    extra_price: Optional[int] = None
    group: Optional[str] = None

    @property
    def allowance_group(self) -> str:
        return self.group or self.section


@dataclass(frozen=True)
class AddOn:
    id: str
    title: str
    price_per_unit: int


@dataclass(frozen=True)
class SectionRule:
    """Per-section composition for a tier or plate."""
    section: str
    required: Optional[int] = None     # exact count a fixed menu demands
    included: Optional[int] = None     # items covered by the base plate price
    extra_price: int = 0               # per plate, for items beyond `included`


@dataclass(frozen=True)
class PricingFacts:
    """Catalog facts for one offering, read-only to the engine."""
    ref: str
    kind: str
    title: str
    pricing_mode: PricingMode
    base_price: int = 0
    per_unit: int = 0
    min_qty: int = 0
    unit_noun: str = "units"
    items: dict = field(default_factory=dict)            # id -> MenuItem
    add_ons: dict = field(default_factory=dict)          # id -> AddOn
    section_rules: dict = field(default_factory=dict)    # section -> SectionRule
    requires_selection: bool = False
    discount_eligible: bool = False
    advance_pct: Optional[int] = None
    tax_rate: Optional[str] = None
    flat_delivery_fee: Optional[int] = None
    free_delivery_qty: Optional[int] = None


@dataclass(frozen=True)
class BreakdownLine:
    """A single itemised charge or discount."""
    kind: LineKind
    amount: int
    details: dict = field(default_factory=dict)

    @property
    def label(self) -> str:
        return format_label(self.kind, self.details)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "label": self.label,
            "amount": self.amount,
            "details": dict(self.details),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BreakdownLine":
        return cls(kind=LineKind(data["kind"]), amount=int(data["amount"]), details=dict(data.get("details") or {}))


@dataclass(frozen=True)
class TraceStep:
    """A single step in the quote computation trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class Quote:
    """Complete, immutable result of a pricing calculation."""
    kind: str
    ref: str
    qty: int
    currency: str
    food_cost: int
    subtotal: int
    discount_pct: int
    discount_amount: int
    subtotal_after_discount: int
    tax_rate: str
    tax_amount: int
    total: int
    advance_pct: int
    advance_amount: int
    balance_amount: int
    breakdown: tuple
    created_at: datetime
    expires_at: datetime
    trace: tuple = ()

    def is_expired(self, at: datetime) -> bool:
        return at >= self.expires_at

    def line(self, kind: LineKind) -> Optional[BreakdownLine]:
        """First breakdown line of the given kind, if any."""
        for item in self.breakdown:
            if item.kind == kind:
                return item
        return None

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """JSON-safe representation; from_dict() restores an equal Quote."""
        return {
            "kind": self.kind,
            "ref": self.ref,
            "qty": self.qty,
            "currency": self.currency,
            "food_cost": self.food_cost,
            "subtotal": self.subtotal,
            "discount_pct": self.discount_pct,
            "discount_amount": self.discount_amount,
            "subtotal_after_discount": self.subtotal_after_discount,
            "tax_rate": self.tax_rate,
            "tax_amount": self.tax_amount,
            "total": self.total,
            "advance_pct": self.advance_pct,
            "advance_amount": self.advance_amount,
            "balance_amount": self.balance_amount,
            "breakdown": [line.to_dict() for line in self.breakdown],
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "trace": [
                {"step": t.step, "description": t.description, "value": t.value}
                for t in self.trace
            ],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Quote":
        return cls(
            kind=data["kind"],
            ref=data["ref"],
            qty=int(data["qty"]),
            currency=data["currency"],
            food_cost=int(data["food_cost"]),
            subtotal=int(data["subtotal"]),
            discount_pct=int(data["discount_pct"]),
            discount_amount=int(data["discount_amount"]),
            subtotal_after_discount=int(data["subtotal_after_discount"]),
            tax_rate=str(data["tax_rate"]),
            tax_amount=int(data["tax_amount"]),
            total=int(data["total"]),
            advance_pct=int(data["advance_pct"]),
            advance_amount=int(data["advance_amount"]),
            balance_amount=int(data["balance_amount"]),
            breakdown=tuple(BreakdownLine.from_dict(b) for b in data["breakdown"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            expires_at=datetime.fromisoformat(data["expires_at"]),
            trace=tuple(
                TraceStep(step=t["step"], description=t["description"], value=t.get("value"))
                for t in data.get("trace", [])
            ),
        )

    def to_legacy_dict(self) -> dict:
        """Convert to the label/amount format older display screens read."""
        return {
            "subtotal": self.subtotal_after_discount,
            "gst": self.tax_amount,
            "total": self.total,
            "breakdown": [{"label": line.label, "amount": line.amount} for line in self.breakdown],
            "expiresAt": self.expires_at.isoformat(),
        }
