"""
Shipping-related exceptions.
"""

from enums.fault_kind import FaultKind

from .base import StorefrontException


class ShippingException(StorefrontException):
    """Base exception for shipping-related errors."""
    pass


class CourierGatewayException(ShippingException):
    """Raised when a call to the courier aggregator fails."""

    fault_kind = FaultKind.UPSTREAM
    public_detail = "Courier service unavailable"

    def __init__(self, call: str, reason: str, status: int | None = None, body: str | None = None):
        super().__init__(
            f"Courier gateway call '{call}' failed: {reason}",
            details={'call': call, 'status': status, 'body': body}
        )
        self.call = call
        self.reason = reason
        self.status = status
        self.body = body


class TrackingUnavailableException(ShippingException):
    """Raised when tracking is requested for an order that has no AWB yet."""

    fault_kind = FaultKind.CONFLICT
    public_detail = "Tracking not available yet"

    def __init__(self, order_id: str):
        super().__init__(
            f"Order {order_id} has no airway bill yet, tracking unavailable",
            details={'order_id': order_id}
        )
        self.order_id = order_id
