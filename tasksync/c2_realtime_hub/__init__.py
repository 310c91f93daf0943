"""C2 Realtime Hub - per-user rooms and task event fan-out."""

from tasksync.c2_realtime_hub.hub import (
    Connection,
    ConnectionState,
    RealtimeHub,
    room_for,
)

__all__ = ["Connection", "ConnectionState", "RealtimeHub", "room_for"]
