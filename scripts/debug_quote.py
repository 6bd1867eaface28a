"""
Print the full trace and breakdown for one order.

Usage:
    python scripts/debug_quote.py party_box standard 200 2025-06-11 s1 s2 m3 m4 r1 b1 a1 d1
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from catering_pricing.config.settings import get_settings
from catering_pricing.data.catalog import Catalog
from catering_pricing.engine import OrderSpecification, PricingEngine
from catering_pricing.engine.money import format_rupees


def debug(args):
    if len(args) < 4:
        print(__doc__)
        sys.exit(2)

    kind, ref, qty, event_date, *selected = args
    settings = get_settings()
    engine = PricingEngine(Catalog.load(settings.catalog_dir), settings.pricing)

    # Bowl add-ons and menu items share the positional list
    facts = engine.catalog.get(kind, ref)
    add_ons = [s for s in selected if s in facts.add_ons]
    items = [s for s in selected if s not in facts.add_ons]

    spec = OrderSpecification(kind, ref, int(qty), event_date, selected_items=items, add_ons=add_ons)
    quote = engine.quote(spec)

    print(f"--- {kind}/{ref} x{qty} on {event_date} ---")
    print(quote.get_trace_text())
    print("\nBreakdown:")
    for line in quote.breakdown:
        print(f"  {line.label:<50} {format_rupees(line.amount):>14}")
    print(f"  {'Total':<50} {format_rupees(quote.total):>14}")
    print(f"  {'Advance (' + str(quote.advance_pct) + '%)':<50} {format_rupees(quote.advance_amount):>14}")
    print(f"  {'Balance':<50} {format_rupees(quote.balance_amount):>14}")


if __name__ == "__main__":
    debug(sys.argv[1:])
