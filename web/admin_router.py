"""
Operator endpoints: order overview, manual delivery status and shipment retry.

All routes require a session token of a user listed in ADMIN_ID_LIST.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from enums.admin_status import AdminStatus
from enums.fulfillment_outcome import FulfillmentOutcome
from enums.order_status import OrderStatus
from exceptions.order import OrderNotFoundException, InvalidOrderStateException
from services.broadcaster import EventBroadcaster
from services.fulfillment import FulfillmentOrchestrator
from services.order import OrderService
from web.dependencies import get_admin_user_id, get_broadcaster, get_fulfillment_orchestrator

logger = logging.getLogger(__name__)

admin_router = APIRouter(prefix="/admin", tags=["admin"])


class StatusUpdatePayload(BaseModel):
    status: OrderStatus


@admin_router.get("/orders")
async def list_orders(admin_status: AdminStatus | None = None, admin_id: int = Depends(get_admin_user_id)):
    orders = await OrderService.list_orders(admin_status=admin_status)
    return [order.to_payload() for order in orders]


@admin_router.put("/orders/{order_id}/status")
async def update_order_status(order_id: str, payload: StatusUpdatePayload,
                              admin_id: int = Depends(get_admin_user_id),
                              broadcaster: EventBroadcaster = Depends(get_broadcaster)):
    """
    Returns:
        200: updated order document
        404: order not found
        409: order unpaid, or the new status is not after the current one
    """
    try:
        order = await OrderService.advance_status(order_id, payload.status, admin_id, broadcaster)
    except InvalidOrderStateException as e:
        logger.log(e.log_level, f"Admin {admin_id} status update rejected: {e.log_line()}")
        raise HTTPException(status_code=e.http_status, detail=e.message)
    except OrderNotFoundException as e:
        raise HTTPException(status_code=e.http_status, detail=e.public_detail)
    return order.to_payload()


@admin_router.post("/orders/{order_id}/retry-shipment")
async def retry_shipment(order_id: str, admin_id: int = Depends(get_admin_user_id),
                         orchestrator: FulfillmentOrchestrator = Depends(get_fulfillment_orchestrator)):
    """
    Returns:
        200: shipment created and AWB assigned
        404: order not found
        409: order is not flagged with a shipping error
        502: courier aggregator failed again, flag kept
    """
    logger.info(f"Admin {admin_id} requested shipment retry for order {order_id}")
    try:
        outcome = await orchestrator.retry_shipment(order_id)
    except InvalidOrderStateException as e:
        raise HTTPException(status_code=e.http_status, detail=e.message)
    except OrderNotFoundException as e:
        raise HTTPException(status_code=e.http_status, detail=e.public_detail)

    if outcome == FulfillmentOutcome.SHIPPING_ERROR:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Courier service failed, order still flagged")
    return {"status": "ok", "outcome": outcome.value}
