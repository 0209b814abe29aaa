import logging
from contextlib import asynccontextmanager

import aiohttp
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from db import create_db_and_tables
from processing.processing import processing_router
from services.broadcaster import EventBroadcaster
from services.courier_gateway import CourierGatewayClient
from services.fulfillment import FulfillmentOrchestrator
from utils.config_validator import validate_or_exit
from web.admin_router import admin_router
from web.api_router import api_router
from web.realtime_router import realtime_router


def create_app(courier_gateway: CourierGatewayClient | None = None,
               broadcaster: EventBroadcaster | None = None) -> FastAPI:
    """
    Builds the storefront application.

    The courier client and broadcaster are created by the lifespan unless
    passed in, which is how tests substitute them.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan event handler for startup and shutdown."""
        # Startup
        validate_or_exit(config)
        await create_db_and_tables()

        http_session = None
        gateway = courier_gateway
        if gateway is None:
            http_session = aiohttp.ClientSession()
            gateway = CourierGatewayClient(
                http_session,
                base_url=config.COURIER_API_URL,
                api_token=config.COURIER_API_TOKEN,
                timeout_seconds=config.COURIER_REQUEST_TIMEOUT_SECONDS,
                pickup_location=config.COURIER_PICKUP_LOCATION,
            )
            logging.info(f"[Startup] Courier gateway client ready ({config.COURIER_API_URL})")
        event_broadcaster = broadcaster or EventBroadcaster()

        app.state.courier_gateway = gateway
        app.state.broadcaster = event_broadcaster
        app.state.fulfillment_orchestrator = FulfillmentOrchestrator(gateway, event_broadcaster)
        logging.info(f"[Startup] Storefront backend started ({config.RUNTIME_ENVIRONMENT.value})")

        yield

        # Shutdown
        logging.warning('Shutting down..')
        await event_broadcaster.close()
        if http_session is not None:
            await http_session.close()
        logging.warning('Bye!')

    app = FastAPI(lifespan=lifespan)

    if config.CORS_ALLOWED_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.CORS_ALLOWED_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT"],
            allow_headers=["Content-Type", "Authorization"],
        )
        logging.info(f"[Startup] CORS middleware enabled for origins: {config.CORS_ALLOWED_ORIGINS}")
    else:
        logging.debug("[Startup] CORS middleware disabled (no allowed origins configured)")

    app.include_router(processing_router)
    app.include_router(api_router)
    app.include_router(admin_router)
    app.include_router(realtime_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint for container monitoring."""
        return {"status": "healthy"}

    @app.exception_handler(Exception)
    async def exception_handler(request: Request, exc: Exception):
        # Details stay in the logs, clients get a generic body
        logging.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


def main() -> None:
    uvicorn.run(create_app(), host=config.WEBAPP_HOST, port=config.WEBAPP_PORT)
