"""
Order State Machine for validating delivery status transitions.

Delivery status only moves forward:

    Created -> Placed -> Processing -> Shipping -> Delivered

Created -> Placed is performed by the payment webhook alone. The later
steps are set by operators and may skip intermediate statuses. Delivered is
final.
"""

import logging
from typing import List, Optional

from enums.order_status import OrderStatus

logger = logging.getLogger(__name__)


class OrderStatusTransition:
    """Represents a valid status transition with metadata"""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus, requires_admin: bool = False,
                 description: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.requires_admin = requires_admin
        self.description = description

    def __repr__(self):
        admin_flag = " (Admin)" if self.requires_admin else ""
        return f"{self.from_status.value} -> {self.to_status.value}{admin_flag}"


class OrderStateMachine:

    @classmethod
    def transition(cls, from_status: OrderStatus, to_status: OrderStatus) -> Optional[OrderStatusTransition]:
        if not to_status.is_after(from_status):
            return None
        if to_status == OrderStatus.PLACED:
            if from_status != OrderStatus.CREATED:
                return None
            return OrderStatusTransition(from_status, to_status, description="Payment confirmed by gateway")
        if from_status == OrderStatus.CREATED:
            # Unpaid orders cannot be fulfilled
            return None
        return OrderStatusTransition(from_status, to_status, requires_admin=True,
                                     description=f"Order moved to {to_status.value} by operator")

    @classmethod
    def is_valid_transition(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        return cls.transition(from_status, to_status) is not None

    @classmethod
    def get_valid_transitions(cls, from_status: OrderStatus) -> List[OrderStatus]:
        return [status for status in OrderStatus if cls.is_valid_transition(from_status, status)]

    @classmethod
    def is_final_status(cls, status: OrderStatus) -> bool:
        return status == OrderStatus.DELIVERED

    @classmethod
    def validate_and_log_transition(cls, order_id: str, from_status: OrderStatus, to_status: OrderStatus,
                                    admin_id: Optional[int] = None) -> bool:
        """
        Validate a status transition and write an audit log line.

        Args:
            order_id: ID of the order being transitioned
            from_status: Current order status
            to_status: Desired new status
            admin_id: ID of admin performing transition (None for system transitions)

        Returns:
            True if transition is valid and logged, False otherwise
        """
        transition = cls.transition(from_status, to_status)
        if transition is None:
            logger.error(f"Invalid status transition for order {order_id}: {from_status.value} -> {to_status.value}")
            return False

        if transition.requires_admin and admin_id is None:
            logger.error(f"Admin required for transition {transition} on order {order_id}")
            return False

        performer = f"admin {admin_id}" if admin_id is not None else "system"
        logger.info(f"ORDER_STATUS_TRANSITION: Order {order_id} {transition} by {performer}: {transition.description}")
        return True
