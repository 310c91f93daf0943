"""In-memory realtime hub: authenticated connections grouped into per-user rooms.

Every live connection belongs to exactly one room, ``user:{id}``, keyed by the
identity its connection-time credential resolved to. A user with several
devices or tabs simply has several connections in the same room.

Delivery is best-effort and at-most-once. Nothing is queued for users who are
not connected, and a send that fails drops the offending connection instead of
raising to the caller.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set

from tasksync.c1_database_session import utcnow
from tasksync.c1_errors import UnauthenticatedError

logger = logging.getLogger(__name__)

# WebSocket close codes (RFC 6455)
CLOSE_GOING_AWAY = 1001
CLOSE_POLICY_VIOLATION = 1008
CLOSE_TRY_AGAIN_LATER = 1013


def room_for(user_id: str) -> str:
    """Name of the private room for ``user_id``."""
    return f"user:{user_id}"


class ConnectionState(Enum):
    """Connection lifecycle; DISCONNECTED is terminal."""
    CONNECTING = "connecting"
    AUTHENTICATED = "authenticated"
    JOINED = "joined"
    DISCONNECTED = "disconnected"


@dataclass(eq=False)
class Connection:
    """One live client socket and its room membership."""

    websocket: Any
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    user_id: Optional[str] = None
    room: Optional[str] = None
    state: ConnectionState = ConnectionState.CONNECTING
    connected_at: datetime = field(default_factory=utcnow)


class RealtimeHub:
    """Tracks live connections and fans task events out to them."""

    def __init__(self, resolve_identity: Callable[[Optional[str]], str]):
        """Initialize realtime hub.

        Args:
            resolve_identity: Maps a credential to a user id, raising
                UnauthenticatedError when it cannot
        """
        self.resolve_identity = resolve_identity
        self._rooms: Dict[str, Set[Connection]] = {}
        self._lock = asyncio.Lock()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def init(self):
        """Start accepting connections."""
        self._running = True
        logger.info("Realtime hub started")

    async def shutdown(self):
        """Close every live connection and stop accepting new ones."""
        self._running = False
        async with self._lock:
            connections = [c for members in self._rooms.values() for c in members]
            self._rooms.clear()

        for connection in connections:
            connection.state = ConnectionState.DISCONNECTED
            await self._close_quietly(connection.websocket, CLOSE_GOING_AWAY)

        logger.info(f"Realtime hub stopped ({len(connections)} connections closed)")

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------
    async def connect(self, websocket, token: Optional[str]) -> Optional[Connection]:
        """Authenticate a new socket and join it to its user's room.

        Returns:
            The joined connection, or None if the socket was refused
        """
        connection = Connection(websocket=websocket)

        if not self._running:
            connection.state = ConnectionState.DISCONNECTED
            await self._close_quietly(websocket, CLOSE_TRY_AGAIN_LATER)
            return None

        try:
            user_id = self.resolve_identity(token)
        except UnauthenticatedError as e:
            logger.info(f"Refused realtime connection: {e.message}")
            connection.state = ConnectionState.DISCONNECTED
            await self._close_quietly(websocket, CLOSE_POLICY_VIOLATION, e.message)
            return None

        connection.user_id = user_id
        connection.state = ConnectionState.AUTHENTICATED

        try:
            await websocket.accept()
        except Exception as e:
            logger.warning(f"Realtime handshake for user {user_id} failed: {e}")
            connection.state = ConnectionState.DISCONNECTED
            return None

        async with self._lock:
            connection.room = room_for(user_id)
            self._rooms.setdefault(connection.room, set()).add(connection)
            connection.state = ConnectionState.JOINED

        logger.info(f"Socket connected {user_id} ({connection.id})")
        return connection

    async def disconnect(self, connection: Connection):
        """Forget a connection; safe to call more than once."""
        async with self._lock:
            members = self._rooms.get(connection.room)
            if members is not None:
                members.discard(connection)
                if not members:
                    del self._rooms[connection.room]
            already_gone = connection.state is ConnectionState.DISCONNECTED
            connection.state = ConnectionState.DISCONNECTED

        if not already_gone:
            logger.info(f"Socket disconnected {connection.user_id} ({connection.id})")

    def connection_count(self) -> int:
        return sum(len(members) for members in self._rooms.values())

    def connections_for(self, user_id: str) -> List[Connection]:
        return list(self._rooms.get(room_for(user_id), ()))

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------
    async def broadcast_all(self, event: str, payload: Dict[str, Any]) -> int:
        """Send an event to every joined connection regardless of room.

        Returns:
            Number of connections the event was handed to
        """
        async with self._lock:
            targets = [c for members in self._rooms.values() for c in members]
        return await self._deliver(targets, event, payload)

    async def notify_user(self, user_id: str, event: str, payload: Dict[str, Any]) -> int:
        """Send an event only to the connections in ``user:{user_id}``."""
        async with self._lock:
            targets = list(self._rooms.get(room_for(user_id), ()))
        return await self._deliver(targets, event, payload)

    async def _deliver(self, targets: List[Connection], event: str, payload: Dict[str, Any]) -> int:
        if not targets:
            logger.debug(f"No live connections for {event}")
            return 0

        frame = {"event": event, "data": payload}
        delivered = 0
        failed = []
        for connection in targets:
            if connection.state is not ConnectionState.JOINED:
                continue
            try:
                await connection.websocket.send_json(frame)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping connection {connection.id} after failed send of {event}: {e}")
                failed.append(connection)

        for connection in failed:
            await self.disconnect(connection)

        logger.debug(f"Delivered {event} to {delivered}/{len(targets)} connections")
        return delivered

    @staticmethod
    async def _close_quietly(websocket, code: int, reason: Optional[str] = None):
        try:
            await websocket.close(code=code, reason=reason)
        except Exception as e:
            logger.debug(f"Ignoring error while closing socket: {e}")
