"""
Display labels for breakdown lines.

Labels are always generated from a line's structured details; nothing
downstream should need to parse them back. They still carry the tokens older
display screens search for (``plates × ₹N``, ``₹N/km``, ``after N km``,
``(N%)``, ``GST N%``).
"""
from .money import format_number, format_rupees


def _unit_singular(noun: str) -> str:
    if noun.endswith("es") and noun[:-2].endswith(("x", "ch", "sh")):
        return noun[:-2]
    return noun[:-1] if noun.endswith("s") else noun


def format_label(kind: str, details: dict) -> str:
    """Render the label for a line of the given kind."""
    kind = getattr(kind, "value", kind)

    if kind == "per_unit":
        return f"{details['qty']} {details['unit_noun']} × {format_rupees(details['unit_price'])}"

    if kind == "base_cost":
        return f"Base (min {details['min_qty']})"

    if kind == "extra_pax":
        return f"Extra {details['extra_qty']} pax × {format_rupees(details['per_unit'])}"

    if kind == "extra_items":
        per = _unit_singular(details.get("unit_noun", "plates"))
        return f"Extra items ({details['count']}) +{format_rupees(details['per_plate'])}/{per}"

    if kind == "premium_add_ons":
        per = _unit_singular(details.get("unit_noun", "plates"))
        return (
            f"Premium add-ons ({details['count']} items) "
            f"+{format_rupees(details['per_plate'])}/{per}"
        )

    if kind == "add_ons":
        per = _unit_singular(details.get("unit_noun", "units"))
        return f"Add-ons +{format_rupees(details['per_unit'])}/{per}"

    if kind == "delivery_fee":
        mode = details.get("mode")
        if mode == "waived":
            return f"Delivery fee (free above {details['free_delivery_qty']} {details.get('unit_noun', 'units')})"
        if mode in ("flat", "none"):
            return "Delivery fee"
        if mode == "within_free_radius":
            return f"Delivery fee (free within {format_number(details['free_km'])} km)"
        return (
            f"Delivery fee ({format_number(details['chargeable_km'])} km × "
            f"{format_rupees(details['per_km_fee'])}/km after {format_number(details['free_km'])} km)"
        )

    if kind == "weekend_surge":
        return f"Weekend surge {format_number(details['pct'])}%"

    if kind == "bulk_discount":
        return f"Bulk discount ({format_number(details['pct'])}%)"

    if kind == "tax":
        return f"GST {format_number(details['pct'])}%"

    raise ValueError(f"Unknown breakdown line kind: {kind}")
