"""
Booking Service - turns a stored quote into a paid booking.

Reads quotes back from the QuoteStore and charges exactly the advance the
quote recorded; nothing here recomputes prices.

Lifecycle: QUOTED -> BOOKED -> CONFIRMED, or EXPIRED when the quote lapses
before the payment is confirmed.
"""
import logging
import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from .payments import (
    PaymentGateway,
    PaymentVerificationFailed,
    UnconfiguredGateway,
    create_order_for,
)
from .quote_store import QuoteStore

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    QUOTED = "quoted"          # booking opened, no payment order yet
    BOOKED = "booked"          # payment order created for the advance
    CONFIRMED = "confirmed"    # advance paid and verified
    EXPIRED = "expired"


class QuoteExpired(Exception):
    """The quote's validity window has passed."""

    def __init__(self, quote_id: str, expires_at: datetime):
        self.quote_id = quote_id
        self.expires_at = expires_at
        self.message = f"Quote '{quote_id}' expired at {expires_at.isoformat()}"
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": "QuoteExpired", "message": self.message, "field": "quote_id"}


class BookingNotFound(KeyError):
    def __init__(self, booking_id: str):
        super().__init__(booking_id)
        self.booking_id = booking_id
        self.message = f"Booking '{booking_id}' not found"

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        return {"error": "BookingNotFound", "message": self.message, "field": "booking_id"}


@dataclass(frozen=True)
class Booking:
    booking_id: str
    quote_id: str
    status: BookingStatus
    amount_due: int
    total: int
    currency: str
    expires_at: datetime
    created_at: datetime
    user_id: Optional[str] = None
    order_id: Optional[str] = None
    payment_id: Optional[str] = None
    confirmed_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "booking_id": self.booking_id,
            "quote_id": self.quote_id,
            "status": self.status.value,
            "amount_due": self.amount_due,
            "total": self.total,
            "currency": self.currency,
            "expires_at": self.expires_at.isoformat(),
            "created_at": self.created_at.isoformat(),
            "user_id": self.user_id,
            "order_id": self.order_id,
            "payment_id": self.payment_id,
            "confirmed_at": self.confirmed_at.isoformat() if self.confirmed_at else None,
        }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookingService:
    """In-memory bookings, one per quote."""

    def __init__(self, store: QuoteStore, gateway: Optional[PaymentGateway] = None):
        self.store = store
        self.gateway = gateway or UnconfiguredGateway()
        self._bookings: dict[str, Booking] = {}
        self._by_quote: dict[str, str] = {}
        self._lock = threading.RLock()

    def create_booking(self, quote_id: str, user_id: Optional[str] = None, now: Optional[datetime] = None) -> Booking:
        """
        Open (or return) the booking for a stored quote.

        Idempotent per quote: a second call returns the existing booking
        instead of creating another payment order. A booking left in QUOTED by
        an earlier gateway failure retries the order.
        """
        now = now or _utcnow()
        quote = self.store.get(quote_id)
        if quote.is_expired(now):
            logger.warning("Rejected booking for expired quote %s", quote_id)
            raise QuoteExpired(quote_id, quote.expires_at)

        with self._lock:
            existing_id = self._by_quote.get(quote_id)
            booking = self._bookings.get(existing_id) if existing_id else None
            if booking is not None and booking.status != BookingStatus.QUOTED:
                logger.info("Returning existing booking %s for quote %s", booking.booking_id, quote_id)
                return booking

            if booking is None:
                booking = Booking(
                    booking_id=uuid.uuid4().hex,
                    quote_id=quote_id,
                    status=BookingStatus.QUOTED,
                    amount_due=quote.advance_amount,
                    total=quote.total,
                    currency=quote.currency,
                    expires_at=quote.expires_at,
                    created_at=now,
                    user_id=user_id,
                )
                self._store(booking)

            if booking.amount_due == 0:
                booking = replace(booking, status=BookingStatus.CONFIRMED, confirmed_at=now)
                self._store(booking)
                return booking

            order = create_order_for(
                self.gateway,
                booking.amount_due,
                booking.currency,
                receipt=booking.booking_id,
                notes={"quote_id": quote_id, "kind": quote.kind, "ref": quote.ref},
            )
            booking = replace(booking, status=BookingStatus.BOOKED, order_id=order.order_id)
            self._store(booking)

        logger.info("Booking %s created for quote %s, advance=%d", booking.booking_id, quote_id, booking.amount_due)
        return booking

    def get(self, booking_id: str) -> Booking:
        with self._lock:
            booking = self._bookings.get(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    def confirm_payment(self, booking_id: str, payment_id: str, signature: str, now: Optional[datetime] = None) -> Booking:
        """Verify the advance payment and mark the booking CONFIRMED."""
        now = now or _utcnow()
        booking = self.get(booking_id)
        if booking.status == BookingStatus.CONFIRMED:
            return booking
        if booking.status != BookingStatus.BOOKED or not booking.order_id:
            raise PaymentVerificationFailed(f"Booking '{booking_id}' has no open payment order ({booking.status.value})")

        if not self.gateway.verify_payment(booking.order_id, payment_id, signature):
            logger.warning("Payment verification failed for booking %s order %s", booking_id, booking.order_id)
            raise PaymentVerificationFailed(f"Payment for booking '{booking_id}' could not be verified")

        with self._lock:
            # the booking may have expired while the gateway was verifying
            current = self._bookings[booking_id]
            if current.status != BookingStatus.BOOKED or current.order_id != booking.order_id:
                logger.warning("Booking %s changed to %s during verification", booking_id, current.status.value)
                raise PaymentVerificationFailed(
                    f"Booking '{booking_id}' has no open payment order ({current.status.value})"
                )
            booking = replace(current, status=BookingStatus.CONFIRMED, payment_id=payment_id, confirmed_at=now)
            self._store(booking)
        logger.info("Booking %s confirmed with payment %s", booking_id, payment_id)
        return booking

    def expire_stale(self, now: Optional[datetime] = None) -> list[Booking]:
        """Mark unpaid bookings whose quote has lapsed as EXPIRED."""
        now = now or _utcnow()
        expired = []
        with self._lock:
            for booking in list(self._bookings.values()):
                if booking.status in (BookingStatus.QUOTED, BookingStatus.BOOKED) and now >= booking.expires_at:
                    booking = replace(booking, status=BookingStatus.EXPIRED)
                    self._store(booking)
                    expired.append(booking)
        if expired:
            logger.info("Expired %d stale booking(s)", len(expired))
        return expired

    def _store(self, booking: Booking):
        self._bookings[booking.booking_id] = booking
        self._by_quote[booking.quote_id] = booking.booking_id
