from datetime import datetime
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.admin_status import AdminStatus
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from models.order import Order, OrderDTO, generate_order_id

logger = logging.getLogger(__name__)


class OrderRepository:
    """
    Order Store.

    Every mutating statement carries its own guard in the WHERE clause, so the
    invariants hold even when two requests race on the same order:
    - payment_status never leaves PAID
    - status only moves forward through OrderStatus
    Methods that perform a guarded transition return whether a row changed.
    """

    @staticmethod
    async def create(order_dto: OrderDTO, session: AsyncSession) -> str:
        order = Order(
            id=order_dto.id or generate_order_id(),
            user_id=order_dto.user_id,
            total_amount=order_dto.total_amount,
            payment_status=order_dto.payment_status or PaymentStatus.PENDING,
            status=order_dto.status or OrderStatus.CREATED,
            items_snapshot=[item.model_dump() for item in order_dto.items_snapshot],
            shipping_address=order_dto.shipping_address,
            customer_email=order_dto.customer_email,
        )
        session.add(order)
        await session_flush(session)
        return order.id

    @staticmethod
    async def get_by_id(order_id: str, session: AsyncSession) -> OrderDTO | None:
        stmt = select(Order).where(Order.id == order_id)
        order = await session_execute(stmt, session)
        order = order.scalar()
        if order is not None:
            return OrderDTO.model_validate(order, from_attributes=True)
        else:
            return None

    @staticmethod
    async def get_all(session: AsyncSession, admin_status: AdminStatus | None = None) -> list[OrderDTO]:
        stmt = select(Order)
        if admin_status is not None:
            stmt = stmt.where(Order.admin_status == admin_status)
        stmt = stmt.order_by(Order.created_at.desc())
        orders = await session_execute(stmt, session)
        return [OrderDTO.model_validate(order, from_attributes=True) for order in orders.scalars().all()]

    @staticmethod
    async def mark_paid(order_id: str, paid_at: datetime, session: AsyncSession) -> bool:
        """
        Compare-and-set payment confirmation.

        Sets payment_status=PAID (and status=PLACED when still CREATED) only if
        the order is not already paid. Returns False when another delivery of
        the same event got there first.
        """
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.payment_status != PaymentStatus.PAID)
            .values(payment_status=PaymentStatus.PAID, paid_at=paid_at)
            .execution_options(synchronize_session=False)
        )
        result = await session_execute(stmt, session)
        if result.rowcount != 1:
            return False

        placed_stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status == OrderStatus.CREATED)
            .values(status=OrderStatus.PLACED)
            .execution_options(synchronize_session=False)
        )
        await session_execute(placed_stmt, session)
        return True

    @staticmethod
    async def save_shipment_created(order_id: str, aggregator_order_id: str, shipment_id: str,
                                    shipment_status: str | None, session: AsyncSession) -> None:
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.payment_status == PaymentStatus.PAID)
            .values(
                shipment_aggregator_order_id=aggregator_order_id,
                shipment_id=shipment_id,
                shipment_status=shipment_status,
            )
            .execution_options(synchronize_session=False)
        )
        await session_execute(stmt, session)

    @staticmethod
    async def save_awb_assigned(order_id: str, awb_code: str, courier_name: str | None,
                                shipment_status: str | None, session: AsyncSession) -> None:
        """Stores the airway bill and clears a previous shipping error flag."""
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.payment_status == PaymentStatus.PAID)
            .values(
                shipment_awb_code=awb_code,
                shipment_courier_name=courier_name,
                shipment_status=shipment_status,
                admin_status=None,
            )
            .execution_options(synchronize_session=False)
        )
        await session_execute(stmt, session)

    @staticmethod
    async def flag_shipping_error(order_id: str, session: AsyncSession) -> None:
        stmt = (
            update(Order)
            .where(Order.id == order_id)
            .values(admin_status=AdminStatus.SHIPPING_ERROR)
            .execution_options(synchronize_session=False)
        )
        await session_execute(stmt, session)

    @staticmethod
    async def advance_status(order_id: str, new_status: OrderStatus, session: AsyncSession) -> bool:
        """Moves a paid order to new_status if that is a forward move. Returns False otherwise."""
        earlier_statuses = [status for status in OrderStatus if new_status.is_after(status)]
        stmt = (
            update(Order)
            .where(
                Order.id == order_id,
                Order.payment_status == PaymentStatus.PAID,
                Order.status.in_(earlier_statuses),
            )
            .values(status=new_status)
            .execution_options(synchronize_session=False)
        )
        result = await session_execute(stmt, session)
        return result.rowcount == 1
