"""
FastAPI dependencies shared by the routers.

Caller identity comes from a signed session token, read from the session
cookie or an `Authorization: Bearer` header. Long-lived collaborators
(courier client, broadcaster, orchestrator) live on `app.state` and are
created by the application lifespan.
"""

import logging

from fastapi import Request, HTTPException

import config
from exceptions.user import NotAuthenticatedException, AdminRequiredException
from services.broadcaster import EventBroadcaster
from services.courier_gateway import CourierGatewayClient
from services.fulfillment import FulfillmentOrchestrator
from services.user import UserService

logger = logging.getLogger(__name__)


def _extract_token(request: Request) -> str | None:
    authorization = request.headers.get("Authorization")
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return request.cookies.get(config.SESSION_COOKIE_NAME)


async def get_current_user_id(request: Request) -> int:
    try:
        return UserService.authenticate(_extract_token(request))
    except NotAuthenticatedException as e:
        logger.info(f"Rejected request to {request.url.path}: {e.reason}")
        raise HTTPException(status_code=e.http_status, detail=e.public_detail)


async def get_admin_user_id(request: Request) -> int:
    try:
        return UserService.authenticate_admin(_extract_token(request))
    except NotAuthenticatedException as e:
        logger.info(f"Rejected request to {request.url.path}: {e.reason}")
        raise HTTPException(status_code=e.http_status, detail=e.public_detail)
    except AdminRequiredException as e:
        logger.warning(f"User {e.user_id} denied access to {request.url.path}")
        raise HTTPException(status_code=e.http_status, detail=e.public_detail)


def get_courier_gateway(request: Request) -> CourierGatewayClient:
    return request.app.state.courier_gateway


def get_broadcaster(request: Request) -> EventBroadcaster:
    return request.app.state.broadcaster


def get_fulfillment_orchestrator(request: Request) -> FulfillmentOrchestrator:
    return request.app.state.fulfillment_orchestrator
