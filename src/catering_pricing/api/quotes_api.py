"""
Quotes API - FastAPI router for quote creation and retrieval.
"""
import logging
from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..engine import OrderSpecification
from .state import AppState, get_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quotes", tags=["quotes"])


class QuoteRequest(BaseModel):
    """Request model for pricing an order.

    The advance percent is never taken from the client; the offering or the
    server config decides it. Unknown body fields are ignored.
    """
    kind: str
    ref: str
    qty: int
    event_date: date
    distance_km: float = 0
    selected_items: list[str] = Field(default_factory=list)
    add_ons: list[str] = Field(default_factory=list)

    def to_spec(self) -> OrderSpecification:
        return OrderSpecification(
            kind=self.kind,
            ref=self.ref,
            qty=self.qty,
            event_date=self.event_date,
            distance_km=self.distance_km,
            selected_items=tuple(self.selected_items),
            add_ons=tuple(self.add_ons),
        )


@router.post("/preview")
async def preview_quote(req: QuoteRequest, state: AppState = Depends(get_state)):
    """Price an order without storing it (cart and menu screens)."""
    quote = state.engine.quote(req.to_spec())
    logger.debug("Preview %s/%s x%d total=%d", quote.kind, quote.ref, quote.qty, quote.total)
    return {"quote": quote.to_dict()}


@router.post("", status_code=201)
async def create_quote(req: QuoteRequest, state: AppState = Depends(get_state)):
    """Price an order and store the quote for booking."""
    quote = state.engine.quote(req.to_spec())
    quote_id = state.store.save(quote)
    return {"quote_id": quote_id, "quote": quote.to_dict()}


@router.get("/{quote_id}")
async def get_quote(quote_id: str, state: AppState = Depends(get_state)):
    quote = state.store.get(quote_id)
    return {"quote_id": quote_id, "quote": quote.to_dict()}


@router.get("/{quote_id}/legacy")
async def get_legacy_quote(quote_id: str, state: AppState = Depends(get_state)):
    """Label/amount breakdown for older display screens."""
    quote = state.store.get(quote_id)
    return {"quote_id": quote_id, **quote.to_legacy_dict()}
