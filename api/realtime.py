"""
Real-time broadcast relay.

:class:`RealtimeHub` keeps the registry of live connections and their rooms
and fans events out to them. It knows nothing about the transport: each
connection is registered with a ``send`` callable. :class:`RealtimeServer`
binds the hub to a ``websockets`` server running on its own event loop.

Messages in both directions are JSON objects ``{"event": ..., "data": ...}``.
Delivery is best-effort and nothing is persisted.
"""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
import threading
from typing import Any, Callable, Dict, Optional, Set

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed

logger = logging.getLogger(__name__)

Sender = Callable[[str], None]

JOIN_ROOM = "joinRoom"
TYPING_START = "typingStart"
TYPING_COMPLETE = "typingComplete"
USER_TYPING = "userTyping"
USER_COMPLETED = "userCompleted"
NEW_TEST_RESULT = "newTestResult"


def encode_event(event: str, data: Any) -> str:
    return json.dumps({"event": event, "data": data})


class RealtimeHub:
    """Thread-safe registry of connections and rooms with broadcast."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._connections: Dict[str, Sender] = {}
        self._rooms: Dict[str, Set[str]] = {}

    def connect(self, send: Sender) -> str:
        """Register a connection and return its id."""
        with self._lock:
            connection_id = f"conn-{next(self._ids)}"
            self._connections[connection_id] = send
        logger.info("Realtime client connected: %s", connection_id)
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        """Forget a connection and drop it from all rooms."""
        with self._lock:
            self._connections.pop(connection_id, None)
            for members in self._rooms.values():
                members.discard(connection_id)
            self._rooms = {room: members for room, members in self._rooms.items() if members}
        logger.info("Realtime client disconnected: %s", connection_id)

    def join_room(self, connection_id: str, room: str) -> None:
        with self._lock:
            if connection_id not in self._connections:
                return
            self._rooms.setdefault(room, set()).add(connection_id)
        logger.info("Connection %s joined room: %s", connection_id, room)

    def rooms_of(self, connection_id: str) -> Set[str]:
        with self._lock:
            return {room for room, members in self._rooms.items() if connection_id in members}

    @property
    def connection_count(self) -> int:
        with self._lock:
            return len(self._connections)

    def broadcast(
        self,
        event: str,
        data: Any,
        *,
        exclude: Optional[str] = None,
        room: Optional[str] = None,
    ) -> int:
        """Send ``event`` to every connection (or every member of ``room``) except ``exclude``.

        Returns:
            The number of connections the message was handed to.
        """
        message = encode_event(event, data)
        with self._lock:
            if room is None:
                targets = dict(self._connections)
            else:
                targets = {
                    cid: self._connections[cid]
                    for cid in self._rooms.get(room, set())
                    if cid in self._connections
                }
        delivered = 0
        for connection_id, send in targets.items():
            if connection_id == exclude:
                continue
            try:
                send(message)
            except Exception:
                logger.exception("Failed to deliver %s to %s", event, connection_id)
                continue
            delivered += 1
        return delivered

    def handle_message(self, connection_id: str, raw: str | bytes) -> None:
        """Dispatch one inbound message from ``connection_id``."""
        try:
            message = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring malformed realtime message from %s: %s", connection_id, e)
            return
        if not isinstance(message, dict) or not isinstance(message.get("event"), str):
            logger.warning("Ignoring realtime message without event from %s", connection_id)
            return

        event = message["event"]
        data = message.get("data")
        if event == JOIN_ROOM:
            self.join_room(connection_id, str(data))
        elif event == TYPING_START:
            self.broadcast(USER_TYPING, data, exclude=connection_id)
        elif event == TYPING_COMPLETE:
            self.broadcast(USER_COMPLETED, data, exclude=connection_id)
        else:
            logger.debug("Ignoring unknown realtime event %r from %s", event, connection_id)


class RealtimeServer:
    """Serve a :class:`RealtimeHub` over WebSockets on a background thread."""

    def __init__(self, hub: RealtimeHub, host: str = "0.0.0.0", port: int = 8765) -> None:
        self.hub = hub
        self.host = host
        self.port = port
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._server: Optional[Server] = None
        self._ready = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def bound_port(self) -> int:
        """Port actually listened on; differs from ``port`` when that was 0."""
        if self._server is None:
            return self.port
        return int(next(iter(self._server.sockets)).getsockname()[1])

    @staticmethod
    def _deliver(loop: asyncio.AbstractEventLoop, websocket: ServerConnection, message: str) -> None:
        future = asyncio.run_coroutine_threadsafe(websocket.send(message), loop)
        future.add_done_callback(_log_send_failure)

    async def _handle(self, websocket: ServerConnection) -> None:
        loop = asyncio.get_running_loop()
        connection_id = self.hub.connect(lambda message: self._deliver(loop, websocket, message))
        try:
            async for raw in websocket:
                self.hub.handle_message(connection_id, raw)
        except ConnectionClosed:
            logger.debug("Connection %s closed", connection_id)
        finally:
            self.hub.disconnect(connection_id)

    async def serve(self) -> None:
        """Run the WebSocket server until :meth:`stop` is called."""
        self._loop = asyncio.get_running_loop()
        async with serve(self._handle, self.host, self.port) as server:
            self._server = server
            self._ready.set()
            logger.info("Realtime server running at ws://%s:%s", self.host, self.bound_port)
            await server.wait_closed()
        logger.info("Realtime server stopped")

    def start(self) -> threading.Thread:
        """Start :meth:`serve` on a daemon thread and wait until it listens."""
        self._thread = threading.Thread(target=asyncio.run, args=(self.serve(),), daemon=True)
        self._thread.start()
        self._ready.wait(timeout=5)
        return self._thread

    def stop(self, timeout: float = 5.0) -> None:
        """Close the server and wait up to ``timeout`` seconds for its thread to exit."""
        if self._loop is not None and self._server is not None:
            self._loop.call_soon_threadsafe(self._server.close)
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Realtime server thread did not stop within %.1fs", timeout)
            else:
                self._thread = None


def _log_send_failure(future: "asyncio.Future[None] | Any") -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None and not isinstance(exc, ConnectionClosed):
        logger.warning("Realtime send failed: %s", exc)
