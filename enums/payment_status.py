from enum import Enum


class PaymentStatus(str, Enum):
    """
    Payment status of an order.

    PENDING: Order created at checkout, payment link not yet paid
    PAID: Gateway confirmed the payment (final, never reverts)
    FAILED: Payment link expired or was cancelled before payment
    """
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
