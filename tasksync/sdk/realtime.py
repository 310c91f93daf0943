"""Realtime channel client: a WebSocket feeding push events to an EventDispatcher."""

import json
import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from websockets.exceptions import ConnectionClosed, InvalidHandshake
from websockets.sync.client import connect

from tasksync.sdk.events import EventDispatcher

logger = logging.getLogger(__name__)


class RealtimeConnectionError(Exception):
    """The server refused or dropped the realtime handshake."""


class RealtimeClient:
    """One authenticated connection to ``/ws``.

    Frames are read on a background thread and handed to ``dispatcher``, so
    handlers run on that thread. Use as a context manager to tie the
    connection's lifetime to a block:

        with RealtimeClient(api.websocket_url()) as realtime:
            with store.bind(realtime.dispatcher):
                ...
    """

    def __init__(
        self,
        url: str,
        dispatcher: Optional[EventDispatcher] = None,
        open_timeout: float = 10.0,
    ):
        self.url = url
        self.dispatcher = dispatcher or EventDispatcher()
        self.open_timeout = open_timeout
        self._ws = None
        self._reader: Optional[threading.Thread] = None
        self._pong = threading.Event()
        self._release_pong = None

    @property
    def connected(self) -> bool:
        return self._reader is not None and self._reader.is_alive()

    def connect(self) -> "RealtimeClient":
        """Open the socket and start pumping frames.

        Raises:
            RealtimeConnectionError: if the credential is refused or the server
                cannot be reached
        """
        if self._ws is not None:
            return self

        try:
            self._ws = connect(self.url, open_timeout=self.open_timeout)
        except (InvalidHandshake, OSError, TimeoutError) as e:
            raise RealtimeConnectionError(f"Realtime handshake failed: {e}") from e

        self._release_pong = self.dispatcher.on("pong", lambda _: self._pong.set())
        self._reader = threading.Thread(target=self._pump, name="tasksync-realtime", daemon=True)
        self._reader.start()
        logger.info("Realtime channel open")
        return self

    def _pump(self):
        try:
            for message in self._ws:
                if isinstance(message, bytes):
                    continue
                self.dispatcher.dispatch_frame(message)
        except ConnectionClosed as e:
            logger.warning(f"Realtime channel dropped: {e}")

    def ping(self, timeout: float = 5.0) -> bool:
        """Round-trip a keep-alive.

        A pong also means the server has joined this connection to its room.
        """
        if self._ws is None:
            return False
        self._pong.clear()
        try:
            self._ws.send(json.dumps({"event": "ping"}))
        except ConnectionClosed:
            return False
        return self._pong.wait(timeout)

    def close(self):
        """Close the socket and wait for the reader to finish; safe to repeat."""
        ws, self._ws = self._ws, None
        if ws is None:
            return
        ws.close()
        if self._reader is not None:
            self._reader.join(timeout=self.open_timeout)
            self._reader = None
        if self._release_pong is not None:
            self._release_pong()
            self._release_pong = None
        logger.info("Realtime channel closed")

    def __enter__(self) -> "RealtimeClient":
        return self.connect()

    def __exit__(self, exc_type, exc, tb):
        self.close()


@contextmanager
def live_session(api, store) -> Iterator[RealtimeClient]:
    """Keep ``store`` in sync with the server for the duration of the block.

    Opens the realtime channel for the client's current token, binds the
    store to it, then seeds the store with a full fetch. Events that race
    the fetch are harmless because the store's handlers are idempotent. On
    exit the store is unbound and the channel closed.
    """
    with RealtimeClient(api.websocket_url()) as realtime:
        with store.bind(realtime.dispatcher):
            if not realtime.ping():
                logger.warning("Realtime channel did not answer the initial ping")
            store.load(api.list_tasks())
            yield realtime
