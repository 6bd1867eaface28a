"""
Payment-order contract.

The booking flow only needs two capabilities from a gateway: create an order
for an exact amount in paise, and verify a completed payment. The gateway's
own signing scheme stays behind this interface.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class PaymentError(Exception):
    """Base class for payment failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "message": self.message, "field": None}


class PaymentGatewayUnavailable(PaymentError):
    """No gateway configured, or the gateway could not be reached."""

    status_code = 503


class PaymentAmountMismatch(PaymentError):
    """The gateway created an order for a different amount than requested."""

    status_code = 502


class PaymentVerificationFailed(PaymentError):
    """The gateway rejected the payment signature."""


@dataclass(frozen=True)
class PaymentOrder:
    order_id: str
    amount_paise: int
    currency: str
    receipt: Optional[str] = None
    notes: dict = field(default_factory=dict)


class PaymentGateway(Protocol):
    def create_order(self, amount_paise: int, currency: str, receipt: str, notes: dict) -> PaymentOrder:
        ...

    def verify_payment(self, order_id: str, payment_id: str, signature: str) -> bool:
        ...


class UnconfiguredGateway:
    """Placeholder used until real gateway credentials are provided."""

    def create_order(self, amount_paise: int, currency: str, receipt: str, notes: dict) -> PaymentOrder:
        raise PaymentGatewayUnavailable("Payment gateway is not configured")

    def verify_payment(self, order_id: str, payment_id: str, signature: str) -> bool:
        raise PaymentGatewayUnavailable("Payment gateway is not configured")


def create_order_for(gateway: PaymentGateway, amount_paise: int, currency: str, receipt: str, notes: Optional[dict] = None) -> PaymentOrder:
    """Create an order and check the gateway kept the exact amount."""
    order = gateway.create_order(amount_paise, currency, receipt, dict(notes or {}))
    if order.amount_paise != amount_paise:
        logger.error("Gateway order %s amount %d != requested %d", order.order_id, order.amount_paise, amount_paise)
        raise PaymentAmountMismatch(
            f"Gateway order amount {order.amount_paise} does not match requested {amount_paise}"
        )
    return order
