"""Test doubles for the realtime layer."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tasksync.c1_errors import UnauthenticatedError


@dataclass
class Emit:
    """One call made against a FakeHub."""

    kind: str  # "broadcast" or "notify"
    event: str
    payload: Dict[str, Any]
    user_id: Optional[str] = None


class FakeHub:
    """Records every emit instead of delivering it.

    Usage:
        hub = FakeHub()
        service = TaskService(repository, hub)
        ...
        assert len(hub.notifications("u2")) == 1
    """

    def __init__(self):
        self.emits: List[Emit] = []

    async def broadcast_all(self, event: str, payload: Dict[str, Any]) -> int:
        self.emits.append(Emit("broadcast", event, payload))
        return 0

    async def notify_user(self, user_id: str, event: str, payload: Dict[str, Any]) -> int:
        self.emits.append(Emit("notify", event, payload, user_id))
        return 0

    def broadcasts(self, event: Optional[str] = None) -> List[Emit]:
        return [e for e in self.emits if e.kind == "broadcast" and (event is None or e.event == event)]

    def notifications(self, user_id: Optional[str] = None) -> List[Emit]:
        return [e for e in self.emits if e.kind == "notify" and (user_id is None or e.user_id == user_id)]

    def reset(self):
        self.emits.clear()


class FakeWebSocket:
    """Minimal stand-in for a Starlette WebSocket."""

    def __init__(self, fail_on_send: bool = False, fail_on_accept: bool = False):
        self.fail_on_send = fail_on_send
        self.fail_on_accept = fail_on_accept
        self.accepted = False
        self.close_code: Optional[int] = None
        self.close_reason: Optional[str] = None
        self.sent: List[Dict[str, Any]] = []

    async def accept(self):
        if self.fail_on_accept:
            raise RuntimeError("handshake aborted")
        self.accepted = True

    async def send_json(self, data: Dict[str, Any]):
        if self.fail_on_send:
            raise RuntimeError("socket is gone")
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: Optional[str] = None):
        self.close_code = code
        self.close_reason = reason

    def events(self) -> List[str]:
        return [frame["event"] for frame in self.sent]


def static_resolver(tokens: Dict[str, str]):
    """Identity resolver backed by a fixed token -> user id table."""

    def resolve(token: Optional[str]) -> str:
        if not token:
            raise UnauthenticatedError("No token provided")
        if token not in tokens:
            raise UnauthenticatedError("Invalid token")
        return tokens[token]

    return resolve
