"""
Bookings API - FastAPI router for booking a stored quote and confirming payment.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from .state import AppState, get_state

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


class BookingCreate(BaseModel):
    quote_id: str
    user_id: Optional[str] = None


class PaymentConfirmation(BaseModel):
    payment_id: str
    signature: str


@router.post("", status_code=201)
async def create_booking(req: BookingCreate, state: AppState = Depends(get_state)):
    """Open a booking for a stored quote; repeat calls return the same booking."""
    booking = state.bookings.create_booking(req.quote_id, user_id=req.user_id)
    return booking.to_dict()


@router.post("/{booking_id}/confirm")
async def confirm_booking(booking_id: str, req: PaymentConfirmation, state: AppState = Depends(get_state)):
    booking = state.bookings.confirm_payment(booking_id, req.payment_id, req.signature)
    return booking.to_dict()


@router.get("/{booking_id}")
async def get_booking(booking_id: str, state: AppState = Depends(get_state)):
    return state.bookings.get(booking_id).to_dict()
