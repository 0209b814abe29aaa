"""
Event Broadcaster

Pushes order events to every connected admin dashboard over WebSocket.
Delivery is fire-and-forget: a dashboard that went away is dropped and
never fails the operation that produced the event.
"""

import logging

from fastapi import WebSocket

from enums.broadcast_event import BroadcastEvent

logger = logging.getLogger(__name__)


class EventBroadcaster:

    def __init__(self):
        self._connections: set[WebSocket] = set()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.add(websocket)
        logger.info(f"[Broadcast] Client connected ({self.connection_count} total)")

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._connections:
            self._connections.discard(websocket)
            logger.info(f"[Broadcast] Client disconnected ({self.connection_count} total)")

    async def broadcast(self, event: BroadcastEvent, data: dict) -> int:
        """Sends {"event", "data"} to all clients. Returns the number of clients reached."""
        message = {"event": event.value, "data": data}
        delivered = 0
        for websocket in list(self._connections):
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"[Broadcast] Dropping client after failed send of {event.value}: {e}")
                self.disconnect(websocket)
        logger.info(f"[Broadcast] {event.value} delivered to {delivered} client(s)")
        return delivered

    async def close(self) -> None:
        for websocket in list(self._connections):
            try:
                await websocket.close()
            except Exception as e:
                logger.debug(f"[Broadcast] Close failed for a client: {e}")
        self._connections.clear()
