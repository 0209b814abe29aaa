"""
Storefront API router: order documents and live shipment tracking.

Security:
- Every endpoint requires a valid session token
- Order ownership verification (403 for someone else's order)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from exceptions.order import OrderException
from exceptions.shipping import CourierGatewayException, TrackingUnavailableException
from services.courier_gateway import CourierGatewayClient
from services.order import OrderService, TrackingService
from web.dependencies import get_current_user_id, get_courier_gateway

logger = logging.getLogger(__name__)

api_router = APIRouter(tags=["orders"])


@api_router.get("/orders/{order_id}")
async def get_order(order_id: str, user_id: int = Depends(get_current_user_id)):
    """
    Returns:
        200: order document
        403: order belongs to another user
        404: order not found
    """
    try:
        order = await OrderService.get_for_user(order_id, user_id)
    except OrderException as e:
        raise HTTPException(status_code=e.http_status, detail=e.public_detail)
    return order.to_payload()


@api_router.get("/shipping/track/{order_id}")
async def track_order(order_id: str, user_id: int = Depends(get_current_user_id),
                      courier_gateway: CourierGatewayClient = Depends(get_courier_gateway)):
    """
    Live tracking scans of the order's shipment, in the aggregator's order.

    Returns:
        200: {"tracking_data": {"scans": [{date, activity, location}, ...]}}
        403: order belongs to another user
        404: order not found
        409: no airway bill assigned yet
        502: courier aggregator failed
    """
    try:
        snapshot = await TrackingService.get_tracking(order_id, user_id, courier_gateway)
    except CourierGatewayException as e:
        logger.log(e.log_level, f"Tracking of order {order_id} failed: {e.log_line()}")
        raise HTTPException(status_code=e.http_status, detail=e.public_detail)
    except (OrderException, TrackingUnavailableException) as e:
        raise HTTPException(status_code=e.http_status, detail=e.public_detail)

    return {"tracking_data": {"scans": [scan.model_dump() for scan in snapshot.scans]}}
