"""
Catering Pricing API - quotes, bookings and catalog lookups over HTTP.
"""
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config.settings import get_settings
from ..engine.errors import InconsistentTierRules, MissingCatalogReference, PricingError
from ..services.booking_service import BookingNotFound, QuoteExpired
from ..services.payments import PaymentError
from ..services.quote_store import QuoteNotFound
from .bookings_api import router as bookings_router
from .quotes_api import router as quotes_router
from .state import AppState, get_state

logger = logging.getLogger(__name__)

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Catering Pricing API",
    description="Quotes and bookings for packages, party boxes, catering plates, bowls and meal boxes",
    version=__version__,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(quotes_router)
app.include_router(bookings_router)


def _error(request: Request, exc, status_code: int) -> JSONResponse:
    logger.warning("%s %s -> %d %s: %s", request.method, request.url.path, status_code, type(exc).__name__, exc)
    return JSONResponse(status_code=status_code, content={"detail": exc.to_dict()})


@app.exception_handler(PricingError)
async def pricing_error_handler(request: Request, exc: PricingError):
    if isinstance(exc, MissingCatalogReference):
        return _error(request, exc, 404)
    if isinstance(exc, InconsistentTierRules):
        return _error(request, exc, 422)
    return _error(request, exc, 400)


@app.exception_handler(QuoteNotFound)
async def quote_not_found_handler(request: Request, exc: QuoteNotFound):
    return _error(request, exc, 404)


@app.exception_handler(BookingNotFound)
async def booking_not_found_handler(request: Request, exc: BookingNotFound):
    return _error(request, exc, 404)


@app.exception_handler(QuoteExpired)
async def quote_expired_handler(request: Request, exc: QuoteExpired):
    return _error(request, exc, 409)


@app.exception_handler(PaymentError)
async def payment_error_handler(request: Request, exc: PaymentError):
    return _error(request, exc, exc.status_code)


@app.get("/")
async def root():
    return {"status": "online", "message": "Catering Pricing API Active"}


@app.get("/api/catalog/{kind}")
async def get_catalog(kind: str, state: AppState = Depends(get_state)):
    """Active offerings of one kind with their base prices."""
    return [
        {
            "id": facts.ref,
            "title": facts.title,
            "pricing_mode": facts.pricing_mode.value,
            "base_price": facts.base_price,
            "per_unit": facts.per_unit,
            "min_qty": facts.min_qty,
            "unit_noun": facts.unit_noun,
            "discount_eligible": facts.discount_eligible,
            "items": [
                {
                    "id": item.id,
                    "name": item.name,
                    "section": item.section,
                    "premium_delta": item.premium_delta,
                }
                for item in facts.items.values()
            ],
            "add_ons": [
                {"id": a.id, "title": a.title, "price_per_unit": a.price_per_unit}
                for a in facts.add_ons.values()
            ],
        }
        for facts in state.catalog.list(kind)
    ]


@app.get("/system/status")
async def get_status(state: AppState = Depends(get_state)):
    report = state.catalog.validate()
    config = state.engine.config
    return {
        "engine_active": True,
        "catalog_status": report["status"],
        "catalog_metrics": report["metrics"],
        "tax_rate": str(config.tax_rate),
        "advance_pct": config.advance_pct,
        "quote_ttl_minutes": config.quote_ttl_minutes,
        "bulk_discount_tiers": [list(t) for t in config.bulk_discount_tiers],
    }
