"""
Order-related exceptions.
"""

from enums.fault_kind import FaultKind

from .base import StorefrontException


class OrderException(StorefrontException):
    """Base exception for order-related errors."""
    pass


class OrderNotFoundException(OrderException):
    """Raised when order is not found in database."""

    fault_kind = FaultKind.NOT_FOUND
    public_detail = "Order not found"

    def __init__(self, order_id: str):
        super().__init__(
            f"Order {order_id} not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class InvalidOrderStateException(OrderException):
    """Raised when order is in invalid state for requested operation."""

    fault_kind = FaultKind.CONFLICT
    public_detail = "Order state does not allow this operation"

    def __init__(self, order_id: str, current_state: str, required_state: str):
        super().__init__(
            f"Order {order_id} is in state '{current_state}', required '{required_state}'",
            details={'order_id': order_id, 'current_state': current_state, 'required_state': required_state}
        )
        self.order_id = order_id
        self.current_state = current_state
        self.required_state = required_state


class OrderOwnershipException(OrderException):
    """Raised when user attempts to access order they don't own."""

    fault_kind = FaultKind.FORBIDDEN
    public_detail = "Forbidden"

    def __init__(self, order_id: str, user_id: int):
        super().__init__(
            f"User {user_id} does not have permission to access order {order_id}",
            details={'order_id': order_id, 'user_id': user_id}
        )
        self.order_id = order_id
        self.user_id = user_id
