import logging

from fastapi import APIRouter, Request, HTTPException, Depends, status

import config
from exceptions.order import OrderNotFoundException
from exceptions.webhook import WebhookException, WebhookDataIntegrityException
from models.webhook import UnhandledWebhookEvent
from processing.webhook_verifier import verify_signature, parse_event
from services.fulfillment import FulfillmentOrchestrator
from utils.logging_config import new_correlation_id
from web.dependencies import get_fulfillment_orchestrator

logger = logging.getLogger(__name__)

processing_router = APIRouter(prefix="/orders", tags=["payments"])


@processing_router.post("/webhook")
async def payment_webhook(request: Request,
                          orchestrator: FulfillmentOrchestrator = Depends(get_fulfillment_orchestrator)):
    """
    Payment gateway webhook receiver.

    Returns:
        200: payment recorded (shipment may have failed and been flagged), duplicate, or ignored event
        400: invalid signature, malformed body or missing internal_order_id
        404: internal_order_id does not reference an order
        500: unexpected internal fault
    """
    correlation_id = new_correlation_id()
    request_body = await request.body()
    logger.debug(f"Payment webhook received ({len(request_body)} bytes)")

    try:
        verify_signature(
            request_body,
            request.headers.get(config.PAYMENT_WEBHOOK_SIGNATURE_HEADER),
            config.PAYMENT_WEBHOOK_SECRET,
        )
        event = parse_event(request_body)
        if isinstance(event, UnhandledWebhookEvent):
            logger.info(f"Payment webhook event '{event.event}' acknowledged without processing")
            return {"status": "ignored", "event": event.event}
        if event.internal_order_id is None:
            raise WebhookDataIntegrityException(
                event.event, f"no internal_order_id (payment link {event.payment_link_id})"
            )
    except WebhookException as e:
        logger.log(e.log_level, f"Payment webhook rejected: {e.log_line()}")
        raise HTTPException(status_code=e.http_status, detail=e.public_detail)

    order_id = event.internal_order_id
    logger.info(f"Payment confirmed for order {order_id} (payment link {event.payment_link_id})")
    try:
        outcome = await orchestrator.handle_payment_confirmed(order_id)
    except OrderNotFoundException as e:
        logger.log(e.log_level, f"Payment confirmed for unknown order: {e.log_line()}")
        raise HTTPException(status_code=e.http_status, detail=e.public_detail)
    except Exception:
        logger.exception(f"Unexpected error while processing payment for order {order_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error")

    logger.info(f"Payment webhook for order {order_id} completed: {outcome.value}")
    return {"status": "ok", "outcome": outcome.value, "correlation_id": correlation_id}
