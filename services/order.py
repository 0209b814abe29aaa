import logging

from db import get_db_session, session_commit, session_rollback
from enums.admin_status import AdminStatus
from enums.broadcast_event import BroadcastEvent
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from exceptions.order import OrderNotFoundException, OrderOwnershipException, InvalidOrderStateException
from exceptions.shipping import TrackingUnavailableException
from models.order import OrderDTO
from models.tracking import TrackingSnapshotDTO
from repositories.order import OrderRepository
from services.broadcaster import EventBroadcaster
from services.courier_gateway import CourierGatewayClient
from utils.order_state_machine import OrderStateMachine

logger = logging.getLogger(__name__)


def _allowed_next(current: OrderStatus) -> str:
    if OrderStateMachine.is_final_status(current):
        return f"an order not yet {current.value}"
    return " or ".join(status.value for status in OrderStateMachine.get_valid_transitions(current))


class OrderService:

    @staticmethod
    async def get_for_user(order_id: str, user_id: int) -> OrderDTO:
        """
        Returns the order if it belongs to user_id.

        Raises:
            OrderNotFoundException: unknown order id
            OrderOwnershipException: the order belongs to someone else
        """
        async with get_db_session() as session:
            order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        if order.user_id != user_id:
            logger.warning(f"[Orders] User {user_id} tried to read order {order_id} of user {order.user_id}")
            raise OrderOwnershipException(order_id, user_id)
        return order

    @staticmethod
    async def list_orders(admin_status: AdminStatus | None = None) -> list[OrderDTO]:
        async with get_db_session() as session:
            return await OrderRepository.get_all(session, admin_status=admin_status)

    @staticmethod
    async def advance_status(order_id: str, new_status: OrderStatus, admin_id: int,
                             broadcaster: EventBroadcaster) -> OrderDTO:
        """
        Operator update of the delivery status. Only forward moves on paid orders
        are accepted; every accepted change is pushed as orderStatusUpdated.

        Raises:
            OrderNotFoundException: unknown order id
            InvalidOrderStateException: order unpaid or the move is not forward
        """
        async with get_db_session() as session:
            order = await OrderRepository.get_by_id(order_id, session)
            if order is None:
                raise OrderNotFoundException(order_id)
            if order.payment_status != PaymentStatus.PAID:
                raise InvalidOrderStateException(order_id, order.payment_status.value, PaymentStatus.PAID.value)
            if not OrderStateMachine.validate_and_log_transition(order_id, order.status, new_status, admin_id=admin_id):
                raise InvalidOrderStateException(order_id, order.status.value, _allowed_next(order.status))

            is_updated = await OrderRepository.advance_status(order_id, new_status, session)
            if not is_updated:
                # Another operator moved the order in the meantime
                await session_rollback(session)
                current = await OrderRepository.get_by_id(order_id, session)
                raise InvalidOrderStateException(order_id, current.status.value, _allowed_next(current.status))
            await session_commit(session)
            order = await OrderRepository.get_by_id(order_id, session)

        await broadcaster.broadcast(
            BroadcastEvent.ORDER_STATUS_UPDATED,
            {"_id": order.id, "deliveryStatus": order.status.value},
        )
        return order


class TrackingService:

    @staticmethod
    async def get_tracking(order_id: str, user_id: int, courier_gateway: CourierGatewayClient) -> TrackingSnapshotDTO:
        """
        Live scans of the order's shipment. Nothing is cached or persisted.

        Raises:
            OrderNotFoundException, OrderOwnershipException: see OrderService.get_for_user
            TrackingUnavailableException: no AWB has been assigned yet
            CourierGatewayException: the aggregator call failed
        """
        order = await OrderService.get_for_user(order_id, user_id)
        if not order.awb_code:
            raise TrackingUnavailableException(order_id)
        return await courier_gateway.track_shipment(order.awb_code)
