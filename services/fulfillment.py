"""
Fulfillment Orchestrator

Turns a confirmed payment into a shipped order:

1. load the order, stop if it is already paid (webhook redelivery)
2. mark it paid/Placed and COMMIT before any external call
3. clear the buyer's cart (best effort)
4. create the shipment at the courier aggregator, persist its ids
5. assign a courier, persist the AWB
6. broadcast newOrder to admin dashboards

A failure in steps 4-5 never undoes step 2: the order keeps its payment and
is flagged adminStatus=shipping_error for an operator to retry. The payment
gateway is answered 200 in every one of these cases.
"""

import logging
from datetime import datetime

from db import get_db_session, session_commit, session_rollback
from enums.broadcast_event import BroadcastEvent
from enums.fulfillment_outcome import FulfillmentOutcome
from enums.fulfillment_state import FulfillmentState
from enums.payment_status import PaymentStatus
from exceptions.order import OrderNotFoundException, InvalidOrderStateException
from exceptions.shipping import CourierGatewayException
from models.order import OrderDTO
from repositories.cart import CartRepository
from repositories.order import OrderRepository
from services.broadcaster import EventBroadcaster
from services.courier_gateway import CourierGatewayClient

logger = logging.getLogger(__name__)


class FulfillmentOrchestrator:

    def __init__(self, courier_gateway: CourierGatewayClient, broadcaster: EventBroadcaster):
        self.courier_gateway = courier_gateway
        self.broadcaster = broadcaster

    async def handle_payment_confirmed(self, order_id: str) -> FulfillmentOutcome:
        """
        Processes one verified payment confirmation.

        Raises:
            OrderNotFoundException: no order with this id exists
        """
        async with get_db_session() as session:
            order = await OrderRepository.get_by_id(order_id, session)
            if order is None:
                raise OrderNotFoundException(order_id)

            if order.payment_status == PaymentStatus.PAID:
                logger.info(f"[Fulfillment] Order {order_id} already paid, ignoring redelivered confirmation")
                return FulfillmentOutcome.ALREADY_PROCESSED

            is_transitioned = await OrderRepository.mark_paid(order_id, datetime.now(), session)
            if not is_transitioned:
                # A concurrent delivery of the same event committed first
                await session_rollback(session)
                logger.info(f"[Fulfillment] Order {order_id} was marked paid concurrently, ignoring")
                return FulfillmentOutcome.ALREADY_PROCESSED
            await session_commit(session)

        logger.info(f"[Fulfillment] Order {order_id} marked as paid and placed")

        await self._clear_cart(order.user_id, order_id)
        return await self._ship(order_id)

    async def retry_shipment(self, order_id: str) -> FulfillmentOutcome:
        """
        Re-runs the courier steps for an order flagged with a shipping error.

        A shipment already created by the failed attempt is reused and only
        the courier assignment is repeated.

        Raises:
            OrderNotFoundException: no order with this id exists
            InvalidOrderStateException: the order is not in shipment_error
        """
        async with get_db_session() as session:
            order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        if order.fulfillment_state != FulfillmentState.SHIPMENT_ERROR:
            raise InvalidOrderStateException(
                order_id, order.fulfillment_state.value, FulfillmentState.SHIPMENT_ERROR.value
            )

        logger.info(f"[Fulfillment] Operator retry of shipment for order {order_id}")
        return await self._ship(order_id)

    async def _clear_cart(self, user_id: int | None, order_id: str) -> None:
        if user_id is None:
            return
        try:
            async with get_db_session() as session:
                removed = await CartRepository.clear(user_id, session)
                await session_commit(session)
            logger.info(f"[Fulfillment] Cleared {removed} cart item(s) of user {user_id} after order {order_id}")
        except Exception as e:
            # The order is already paid, a stale cart must not block shipping
            logger.warning(f"[Fulfillment] Could not clear cart of user {user_id} after order {order_id}: {e}")

    async def _ship(self, order_id: str) -> FulfillmentOutcome:
        async with get_db_session() as session:
            order = await OrderRepository.get_by_id(order_id, session)

        shipment_id = order.shipment_details.shipment_id if order.shipment_details else None
        step = CourierGatewayClient.CREATE_SHIPMENT
        created = None
        try:
            if shipment_id is None:
                created = await self.courier_gateway.create_shipment(order)
                async with get_db_session() as session:
                    await OrderRepository.save_shipment_created(
                        order_id, created.aggregator_order_id, created.shipment_id, created.status, session
                    )
                    await session_commit(session)
                shipment_id = created.shipment_id
            else:
                logger.info(f"[Fulfillment] Reusing shipment {shipment_id} of order {order_id}")

            step = CourierGatewayClient.ASSIGN_COURIER
            assignment = await self.courier_gateway.assign_courier(shipment_id)
            async with get_db_session() as session:
                await OrderRepository.save_awb_assigned(
                    order_id, assignment.awb_code, assignment.courier_name, assignment.status, session
                )
                await session_commit(session)
                order = await OrderRepository.get_by_id(order_id, session)
        except CourierGatewayException as e:
            logger.error(
                f"[Fulfillment] Order {order_id} is PAID but shipping failed: {e.log_line()}. "
                f"Manual intervention required."
            )
            await self._flag_shipping_error(order_id)
            return FulfillmentOutcome.SHIPPING_ERROR
        except Exception:
            # The aggregator may already hold a shipment that was never stored
            orphan = (f" Aggregator already created order {created.aggregator_order_id} "
                      f"shipment {created.shipment_id}, reconcile before retrying."
                      if created is not None and shipment_id is None else "")
            logger.exception(
                f"[Fulfillment] Order {order_id} is PAID but {step} failed unexpectedly.{orphan} "
                f"Manual intervention required."
            )
            await self._flag_shipping_error(order_id)
            return FulfillmentOutcome.SHIPPING_ERROR

        logger.info(f"[Fulfillment] Order {order_id} shipped with AWB {order.awb_code}")
        await self._notify_new_order(order)
        return FulfillmentOutcome.SHIPMENT_CREATED

    async def _flag_shipping_error(self, order_id: str) -> None:
        async with get_db_session() as session:
            await OrderRepository.flag_shipping_error(order_id, session)
            await session_commit(session)

    async def _notify_new_order(self, order: OrderDTO) -> None:
        await self.broadcaster.broadcast(BroadcastEvent.NEW_ORDER, order.to_payload())
