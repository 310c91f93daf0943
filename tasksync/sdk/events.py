"""Push-event subscription primitives for TaskSync clients."""

import json
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Protocol, Union

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]
Unsubscribe = Callable[[], None]


class EventSource(Protocol):
    """Anything that can deliver named push events to handlers."""

    def on(self, event: str, handler: Handler) -> Unsubscribe: ...


class EventDispatcher:
    """In-process event source fed by a realtime transport.

    A transport (WebSocket reader, test harness) pushes raw frames in through
    :meth:`dispatch_frame` or already-decoded events through :meth:`emit`.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {}
        self._lock = threading.Lock()

    def on(self, event: str, handler: Handler) -> Unsubscribe:
        """Register ``handler`` for ``event``.

        Returns:
            A callable that removes exactly this registration; calling it
            again is a no-op
        """
        with self._lock:
            self._handlers.setdefault(event, []).append(handler)

        def unsubscribe():
            with self._lock:
                handlers = self._handlers.get(event, [])
                if handler in handlers:
                    handlers.remove(handler)
                if not handlers:
                    self._handlers.pop(event, None)

        return unsubscribe

    def handler_count(self, event: Optional[str] = None) -> int:
        with self._lock:
            if event is not None:
                return len(self._handlers.get(event, ()))
            return sum(len(h) for h in self._handlers.values())

    def emit(self, event: str, payload: Any) -> int:
        """Call every handler registered for ``event``.

        A failing handler is logged and does not stop the others.

        Returns:
            Number of handlers invoked
        """
        with self._lock:
            handlers = list(self._handlers.get(event, ()))

        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.exception(f"Handler for {event} failed")
        return len(handlers)

    def dispatch_frame(self, frame: Union[str, bytes, Dict[str, Any]]) -> int:
        """Decode a ``{"event": ..., "data": ...}`` frame and emit it."""
        if isinstance(frame, (str, bytes)):
            try:
                frame = json.loads(frame)
            except ValueError:
                logger.warning("Ignoring undecodable realtime frame")
                return 0

        if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
            logger.warning(f"Ignoring malformed realtime frame: {frame!r}")
            return 0

        return self.emit(frame["event"], frame.get("data"))
