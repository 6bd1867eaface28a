"""
Shared application state - one catalog, engine, quote store and booking
service per process.
"""
from dataclasses import dataclass
from typing import Optional

from ..config.settings import Settings, get_settings
from ..data.catalog import Catalog
from ..engine import PricingEngine
from ..services.booking_service import BookingService
from ..services.payments import PaymentGateway
from ..services.quote_store import QuoteStore


@dataclass
class AppState:
    settings: Settings
    catalog: Catalog
    engine: PricingEngine
    store: QuoteStore
    bookings: BookingService

    @classmethod
    def build(cls, settings: Optional[Settings] = None, gateway: Optional[PaymentGateway] = None) -> 'AppState':
        settings = settings or get_settings()
        catalog = Catalog.load(settings.catalog_dir)
        store = QuoteStore(settings.quotes_dir)
        return cls(
            settings=settings,
            catalog=catalog,
            engine=PricingEngine(catalog, settings.pricing),
            store=store,
            bookings=BookingService(store, gateway),
        )


_state: Optional[AppState] = None


def get_state() -> AppState:
    """FastAPI dependency; tests swap it through app.dependency_overrides."""
    global _state
    if _state is None:
        _state = AppState.build()
    return _state
