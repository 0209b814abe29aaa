"""
Real-time channel for admin dashboards.

Messages are JSON objects {"event": <name>, "data": <payload>}. Clients only
receive; anything they send is ignored. A dashboard that reconnects must
re-fetch current state, missed events are not replayed.
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

import config
from exceptions.user import UserException
from services.user import UserService

logger = logging.getLogger(__name__)

realtime_router = APIRouter()


@realtime_router.websocket("/ws")
async def realtime_channel(websocket: WebSocket):
    # Browsers cannot set headers on WebSocket requests: cookie or ?token=
    token = websocket.query_params.get("token") or websocket.cookies.get(config.SESSION_COOKIE_NAME)
    try:
        UserService.authenticate_admin(token)
    except UserException as e:
        logger.info(f"Real-time connection rejected: {e}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    broadcaster = websocket.app.state.broadcaster
    await broadcaster.connect(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.disconnect(websocket)
