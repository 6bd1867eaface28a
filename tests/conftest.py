import os
import sys
from datetime import date, datetime, timezone

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from catering_pricing.config.settings import PricingConfig, Settings
from catering_pricing.data.catalog import Catalog
from catering_pricing.engine import PricingEngine
from catering_pricing.services.payments import PaymentOrder

WEDNESDAY = date(2025, 6, 11)
SATURDAY = date(2025, 6, 14)
NOW = datetime(2025, 6, 1, 10, 0, tzinfo=timezone.utc)

# A valid standard party box: 2 starters, 2 mains, 1 rice, 1 bread, 1 side, 1 dessert.
# s2 (Paneer 65) carries the only premium delta, ₹10.
STANDARD_BOX = ["s1", "s2", "m3", "m4", "r1", "b1", "a1", "d1"]


@pytest.fixture(scope="session")
def settings():
    return Settings.load(environ={})


@pytest.fixture(scope="session")
def catalog(settings):
    return Catalog.load(settings.catalog_dir)


@pytest.fixture
def config():
    return PricingConfig()


@pytest.fixture
def engine(catalog, config):
    return PricingEngine(catalog, config)


class StubGateway:
    """Records orders; a payment verifies when its signature is 'valid'."""

    def __init__(self, amount_offset: int = 0):
        self.orders = []
        self.amount_offset = amount_offset

    def create_order(self, amount_paise, currency, receipt, notes):
        order = PaymentOrder(
            order_id=f"order_{len(self.orders) + 1}",
            amount_paise=amount_paise + self.amount_offset,
            currency=currency,
            receipt=receipt,
            notes=notes,
        )
        self.orders.append(order)
        return order

    def verify_payment(self, order_id, payment_id, signature):
        return signature == "valid"


@pytest.fixture
def gateway():
    return StubGateway()
