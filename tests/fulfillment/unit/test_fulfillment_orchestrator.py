"""
Fulfillment Orchestrator Tests

Tests the payment confirmed -> shipped flow:
- Happy path: paid/Placed, shipment + AWB stored, one newOrder broadcast
- Idempotency: redelivered confirmation is a no-op
- Failure isolation: courier failures never undo the payment
- Partial shipment persistence and operator retry
- Best-effort cart clearing

Run with:
    pytest tests/fulfillment/unit/test_fulfillment_orchestrator.py -v
"""

from unittest.mock import patch

import pytest

from db import get_db_session
from enums.admin_status import AdminStatus
from enums.broadcast_event import BroadcastEvent
from enums.fulfillment_outcome import FulfillmentOutcome
from enums.fulfillment_state import FulfillmentState
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from exceptions.order import OrderNotFoundException, InvalidOrderStateException
from exceptions.shipping import CourierGatewayException
from repositories.cart import CartRepository
from repositories.order import OrderRepository
from services.fulfillment import FulfillmentOrchestrator


async def cart_of(user_id: int):
    async with get_db_session() as session:
        return await CartRepository.get_by_user_id(user_id, session)


@pytest.fixture
def orchestrator(courier_gateway, broadcaster):
    return FulfillmentOrchestrator(courier_gateway, broadcaster)


class TestPaymentConfirmed:

    @pytest.mark.asyncio
    async def test_successful_fulfillment(self, orchestrator, create_order, get_order,
                                          courier_gateway, broadcaster):
        order_id = await create_order()

        outcome = await orchestrator.handle_payment_confirmed(order_id)

        assert outcome == FulfillmentOutcome.SHIPMENT_CREATED
        order = await get_order(order_id)
        assert order.payment_status == PaymentStatus.PAID
        assert order.status == OrderStatus.PLACED
        assert order.paid_at is not None
        assert order.admin_status is None
        assert order.shipment_details.aggregator_order_id == "SR-1001"
        assert order.shipment_details.shipment_id == "SH-2001"
        assert order.shipment_details.awb_code == "AWB123456"
        assert order.shipment_details.courier_name == "Delhivery"
        assert order.fulfillment_state == FulfillmentState.AWB_ASSIGNED

        courier_gateway.create_shipment.assert_awaited_once()
        courier_gateway.assign_courier.assert_awaited_once_with("SH-2001")

        broadcaster.broadcast.assert_awaited_once()
        event, payload = broadcaster.broadcast.await_args.args
        assert event == BroadcastEvent.NEW_ORDER
        assert payload["_id"] == order_id
        assert payload["paymentStatus"] == "paid"
        assert payload["shipmentDetails"]["awbCode"] == "AWB123456"

        assert await cart_of(order.user_id) == []

    @pytest.mark.asyncio
    async def test_shipment_is_created_from_the_paid_order(self, orchestrator, create_order, courier_gateway):
        order_id = await create_order()

        await orchestrator.handle_payment_confirmed(order_id)

        shipped_order = courier_gateway.create_shipment.await_args.args[0]
        assert shipped_order.id == order_id
        assert shipped_order.payment_status == PaymentStatus.PAID
        assert shipped_order.items_snapshot[0].product_id == "p-1"

    @pytest.mark.asyncio
    async def test_unknown_order_raises_not_found(self, orchestrator, customers, courier_gateway):
        with pytest.raises(OrderNotFoundException):
            await orchestrator.handle_payment_confirmed("does-not-exist")

        courier_gateway.create_shipment.assert_not_awaited()


class TestIdempotency:

    @pytest.mark.asyncio
    async def test_second_confirmation_is_a_no_op(self, orchestrator, create_order, get_order,
                                                   courier_gateway, broadcaster):
        order_id = await create_order()

        with patch.object(CartRepository, "clear", wraps=CartRepository.clear) as clear_mock:
            first = await orchestrator.handle_payment_confirmed(order_id)
            second = await orchestrator.handle_payment_confirmed(order_id)

        assert first == FulfillmentOutcome.SHIPMENT_CREATED
        assert second == FulfillmentOutcome.ALREADY_PROCESSED
        assert clear_mock.call_count == 1
        courier_gateway.create_shipment.assert_awaited_once()
        broadcaster.broadcast.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_redelivery_after_shipping_error_does_not_retry(self, orchestrator, create_order,
                                                                  get_order, courier_gateway):
        courier_gateway.create_shipment.side_effect = CourierGatewayException(
            "create_shipment", "HTTP 500", status=500, body='{"message": "down"}'
        )
        order_id = await create_order()

        await orchestrator.handle_payment_confirmed(order_id)
        outcome = await orchestrator.handle_payment_confirmed(order_id)

        assert outcome == FulfillmentOutcome.ALREADY_PROCESSED
        courier_gateway.create_shipment.assert_awaited_once()
        assert (await get_order(order_id)).admin_status == AdminStatus.SHIPPING_ERROR


class TestFailureIsolation:

    @pytest.mark.asyncio
    async def test_create_shipment_failure_keeps_payment(self, orchestrator, create_order, get_order,
                                                         courier_gateway, broadcaster):
        courier_gateway.create_shipment.side_effect = CourierGatewayException(
            "create_shipment", "HTTP 422", status=422, body='{"message": "Invalid pincode"}'
        )
        order_id = await create_order()

        outcome = await orchestrator.handle_payment_confirmed(order_id)

        assert outcome == FulfillmentOutcome.SHIPPING_ERROR
        order = await get_order(order_id)
        assert order.payment_status == PaymentStatus.PAID
        assert order.status == OrderStatus.PLACED
        assert order.admin_status == AdminStatus.SHIPPING_ERROR
        assert order.shipment_details is None
        assert order.fulfillment_state == FulfillmentState.SHIPMENT_ERROR
        courier_gateway.assign_courier.assert_not_awaited()
        broadcaster.broadcast.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_assign_courier_failure_keeps_created_shipment(self, orchestrator, create_order,
                                                                 get_order, courier_gateway, broadcaster):
        courier_gateway.assign_courier.side_effect = CourierGatewayException(
            "assign_courier", "courier was not assigned", body='{"awb_assign_status": 0}'
        )
        order_id = await create_order()

        outcome = await orchestrator.handle_payment_confirmed(order_id)

        assert outcome == FulfillmentOutcome.SHIPPING_ERROR
        order = await get_order(order_id)
        assert order.payment_status == PaymentStatus.PAID
        assert order.admin_status == AdminStatus.SHIPPING_ERROR
        assert order.shipment_details.shipment_id == "SH-2001"
        assert order.awb_code is None
        broadcaster.broadcast.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unexpected_courier_error_is_contained(self, orchestrator, create_order, get_order,
                                                         courier_gateway):
        courier_gateway.create_shipment.side_effect = RuntimeError("boom")
        order_id = await create_order()

        outcome = await orchestrator.handle_payment_confirmed(order_id)

        assert outcome == FulfillmentOutcome.SHIPPING_ERROR
        order = await get_order(order_id)
        assert order.payment_status == PaymentStatus.PAID
        assert order.admin_status == AdminStatus.SHIPPING_ERROR

    @pytest.mark.asyncio
    async def test_cart_clear_failure_does_not_block_shipping(self, orchestrator, create_order, get_order):
        order_id = await create_order()

        with patch.object(CartRepository, "clear", side_effect=RuntimeError("database is locked")):
            outcome = await orchestrator.handle_payment_confirmed(order_id)

        assert outcome == FulfillmentOutcome.SHIPMENT_CREATED
        assert (await get_order(order_id)).awb_code == "AWB123456"

    @pytest.mark.asyncio
    async def test_unstored_shipment_ids_are_logged(self, orchestrator, create_order, get_order,
                                                    courier_gateway, caplog):
        order_id = await create_order()

        with patch.object(OrderRepository, "save_shipment_created", side_effect=RuntimeError("disk I/O error")):
            outcome = await orchestrator.handle_payment_confirmed(order_id)

        assert outcome == FulfillmentOutcome.SHIPPING_ERROR
        order = await get_order(order_id)
        assert order.payment_status == PaymentStatus.PAID
        assert order.admin_status == AdminStatus.SHIPPING_ERROR
        courier_gateway.assign_courier.assert_not_awaited()
        failure = [r for r in caplog.records if r.levelname == "ERROR" and order_id in r.getMessage()]
        assert len(failure) == 1
        assert "order SR-1001 shipment SH-2001" in failure[0].getMessage()


class TestRetryShipment:

    @pytest.mark.asyncio
    async def test_retry_reuses_existing_shipment(self, orchestrator, create_order, get_order,
                                                  courier_gateway, broadcaster):
        courier_gateway.assign_courier.side_effect = CourierGatewayException("assign_courier", "HTTP 503", status=503)
        order_id = await create_order()
        await orchestrator.handle_payment_confirmed(order_id)

        courier_gateway.assign_courier.side_effect = None
        outcome = await orchestrator.retry_shipment(order_id)

        assert outcome == FulfillmentOutcome.SHIPMENT_CREATED
        courier_gateway.create_shipment.assert_awaited_once()
        assert courier_gateway.assign_courier.await_count == 2
        order = await get_order(order_id)
        assert order.awb_code == "AWB123456"
        assert order.admin_status is None
        broadcaster.broadcast.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_retry_creates_shipment_when_none_exists(self, orchestrator, create_order, get_order,
                                                           courier_gateway):
        courier_gateway.create_shipment.side_effect = CourierGatewayException("create_shipment", "timeout")
        order_id = await create_order()
        await orchestrator.handle_payment_confirmed(order_id)

        courier_gateway.create_shipment.side_effect = None
        outcome = await orchestrator.retry_shipment(order_id)

        assert outcome == FulfillmentOutcome.SHIPMENT_CREATED
        assert courier_gateway.create_shipment.await_count == 2
        assert (await get_order(order_id)).fulfillment_state == FulfillmentState.AWB_ASSIGNED

    @pytest.mark.asyncio
    async def test_failed_retry_keeps_flag(self, orchestrator, create_order, get_order, courier_gateway):
        courier_gateway.create_shipment.side_effect = CourierGatewayException("create_shipment", "HTTP 500", status=500)
        order_id = await create_order()
        await orchestrator.handle_payment_confirmed(order_id)

        outcome = await orchestrator.retry_shipment(order_id)

        assert outcome == FulfillmentOutcome.SHIPPING_ERROR
        assert (await get_order(order_id)).admin_status == AdminStatus.SHIPPING_ERROR

    @pytest.mark.asyncio
    async def test_retry_rejected_for_shipped_order(self, orchestrator, create_order):
        order_id = await create_order()
        await orchestrator.handle_payment_confirmed(order_id)

        with pytest.raises(InvalidOrderStateException) as exc_info:
            await orchestrator.retry_shipment(order_id)

        assert exc_info.value.current_state == FulfillmentState.AWB_ASSIGNED.value

    @pytest.mark.asyncio
    async def test_retry_rejected_for_unpaid_order(self, orchestrator, create_order, courier_gateway):
        order_id = await create_order()

        with pytest.raises(InvalidOrderStateException):
            await orchestrator.retry_shipment(order_id)

        courier_gateway.create_shipment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retry_unknown_order(self, orchestrator, customers):
        with pytest.raises(OrderNotFoundException):
            await orchestrator.retry_shipment("missing")
