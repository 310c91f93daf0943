"""WebSocket routes for the TaskSync API server."""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)


def create_websocket_router(server_state):
    """Create WebSocket router with server_state dependency.

    Args:
        server_state: ServerState instance with the realtime hub

    Returns:
        APIRouter: Configured router with WebSocket endpoint
    """
    router = APIRouter(tags=["websocket"])

    @router.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket, token: Optional[str] = Query(default=None)):
        """Realtime task events for the user the token resolves to."""
        connection = await server_state.hub.connect(websocket, token)
        if connection is None:
            return

        try:
            while True:
                # Clients only ever send keep-alives; anything else is skipped
                received = await websocket.receive()
                if received["type"] == "websocket.disconnect":
                    break
                data = received.get("text")
                if data is None:
                    continue
                try:
                    message = json.loads(data)
                except ValueError:
                    continue
                if isinstance(message, dict) and message.get("event") == "ping":
                    await websocket.send_json({"event": "pong", "data": {}})

        except WebSocketDisconnect:
            pass
        finally:
            await server_state.hub.disconnect(connection)

    return router
