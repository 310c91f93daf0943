"""C3 WebSocket Routes."""

from tasksync.c3_websocket_routes.websocket_routes import create_websocket_router

__all__ = ["create_websocket_router"]
