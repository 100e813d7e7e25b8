"""WebSocket subscription channel: one ConnectionHandler per connected client."""

from __future__ import annotations

import asyncio
import json
import logging
from enum import Enum
from typing import Any

from fastapi import APIRouter, WebSocket
from fastapi.websockets import WebSocketState
from starlette.websockets import WebSocketDisconnect

from broadcast.messages import MessageType, fleet_message, initial_data_note, pong_message
from broadcast.registry import (
    CLOSE_TRY_AGAIN_LATER,
    DEFAULT_QUEUE_SIZE,
    Subscriber,
    SubscriberRegistry,
)
from core.exceptions import DeliveryError
from fleet.simulator import VehicleSimulator
from metrics.prometheus_exporter import fleet_connections_total
from sim_logging import log_connection_context

logger = logging.getLogger(__name__)

router = APIRouter()


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class ConnectionHandler:
    """Drives one subscriber connection from accept to close.

    While open, a receiver answers ``ping`` payloads and a sender drains
    the subscriber queue onto the socket. Whichever ends first (peer close,
    send failure, or the registry dropping the subscriber) moves the
    connection to CLOSING, and the rest are cancelled.

    Transport keepalive is the ASGI server's job: uvicorn sends ping frames
    every ``ws_ping_interval`` and drops peers that miss the pong, which
    surfaces here as a disconnect on the receiver.
    """

    def __init__(
        self,
        websocket: WebSocket,
        registry: SubscriberRegistry,
        simulator: VehicleSimulator,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        tick_interval: float = 180.0,
    ) -> None:
        self.websocket = websocket
        self.subscriber = Subscriber(queue_size=queue_size)
        self.state = ConnectionState.CONNECTING
        self._registry = registry
        self._simulator = simulator
        self._greeting = initial_data_note(tick_interval)
        self._closed = asyncio.Event()

    @property
    def connection_id(self) -> str:
        return self.subscriber.connection_id

    async def wait_closed(self) -> None:
        await self._closed.wait()

    async def run(self) -> None:
        with log_connection_context(self.connection_id):
            try:
                await self._open()
            except Exception:
                logger.exception("Error opening WebSocket connection")
                await self._close(set())
                return

            tasks = {
                asyncio.create_task(self._receive_loop(), name="receive"),
                asyncio.create_task(self._send_loop(), name="send"),
                asyncio.create_task(self.subscriber.wait_closed(), name="dropped"),
            }
            pending: set[asyncio.Task[Any]] = tasks
            try:
                done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    self._log_task_outcome(task)
            finally:
                await self._close(pending)

    async def _open(self) -> None:
        await self.websocket.accept()
        self.state = ConnectionState.OPEN

        # Queue the full snapshot before registering so it precedes any update
        snapshot = self._simulator.snapshot()
        self.subscriber.deliver(fleet_message(MessageType.INITIAL_DATA, snapshot, self._greeting))
        self._registry.register(self.subscriber)
        fleet_connections_total.inc()
        logger.info(f"New WebSocket client connected. Total clients: {len(self._registry)}")

    async def _receive_loop(self) -> None:
        while True:
            message = await self.websocket.receive()
            if message["type"] == "websocket.disconnect":
                code = message.get("code", 1000)
                reason = message.get("reason") or "No reason"
                logger.info(f"WebSocket client disconnected ({code}: {reason})")
                return
            payload = message.get("text")
            if payload is None and message.get("bytes") is not None:
                payload = message["bytes"].decode("utf-8", errors="replace")
            self.handle_inbound(payload)

    def handle_inbound(self, payload: str | None) -> None:
        """Answer ``ping`` payloads; anything else is ignored."""
        try:
            data = json.loads(payload) if payload is not None else None
        except json.JSONDecodeError:
            logger.debug("Received non-JSON message, ignoring...")
            return

        if not isinstance(data, dict) or data.get("type") != MessageType.PING.value:
            return

        try:
            self.subscriber.deliver(pong_message())
        except DeliveryError as e:
            # Same handling as a refused broadcast
            logger.warning(f"Dropping subscriber: {e.message}")
            self._registry.unregister(self.subscriber)
            self.subscriber.close(CLOSE_TRY_AGAIN_LATER)

    async def _send_loop(self) -> None:
        while True:
            message = await self.subscriber.next_message()
            await self.websocket.send_json(message)

    def _log_task_outcome(self, task: asyncio.Task[Any]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            if task.get_name() == "dropped":
                logger.info(f"Subscriber closed by server (code {self.subscriber.close_code})")
            return
        if isinstance(exc, WebSocketDisconnect):
            logger.info(f"WebSocket client disconnected ({exc.code})")
        else:
            logger.warning(f"WebSocket error in {task.get_name()} task: {exc!r}")

    async def _close(self, pending: set[asyncio.Task[Any]]) -> None:
        if self.state in (ConnectionState.CLOSING, ConnectionState.CLOSED):
            return
        self.state = ConnectionState.CLOSING

        # Leave the registry before the first await; the handler task itself
        # may be cancelled while unwinding.
        if self._registry.unregister(self.subscriber):
            logger.info(f"Subscriber removed. Remaining clients: {len(self._registry)}")
        self.subscriber.close()

        for task in pending:
            task.cancel()
        try:
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

            if (
                self.websocket.application_state == WebSocketState.CONNECTED
                and self.websocket.client_state != WebSocketState.DISCONNECTED
            ):
                try:
                    await self.websocket.close(code=self.subscriber.close_code)
                except (RuntimeError, OSError) as e:
                    logger.debug(f"Close frame not sent: {e!r}")
        finally:
            self.state = ConnectionState.CLOSED
            self._closed.set()


class ConnectionManager:
    """Tracks live connection handlers so shutdown can close them cleanly."""

    def __init__(self, registry: SubscriberRegistry) -> None:
        self.registry = registry
        self.active_connections: set[ConnectionHandler] = set()

    def connect(self, handler: ConnectionHandler) -> None:
        self.active_connections.add(handler)

    def disconnect(self, handler: ConnectionHandler) -> None:
        self.active_connections.discard(handler)

    async def shutdown(self, grace: float) -> None:
        """Close every subscriber and wait up to ``grace`` seconds for handlers to finish."""
        closed = self.registry.close_all()
        handlers = list(self.active_connections)
        if not handlers:
            return

        logger.info(f"Closing {len(handlers)} WebSocket connections ({closed} subscribers)")
        waiters = [asyncio.create_task(handler.wait_closed()) for handler in handlers]
        _, still_open = await asyncio.wait(waiters, timeout=grace)
        for waiter in still_open:
            waiter.cancel()
        if still_open:
            logger.warning(f"{len(still_open)} WebSocket connections did not close within {grace:g}s")


@router.websocket("/")
@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    state = websocket.app.state
    settings = state.settings
    handler = ConnectionHandler(
        websocket,
        registry=state.registry,
        simulator=state.simulator,
        queue_size=settings.websocket.queue_size,
        tick_interval=settings.tick_interval_seconds,
    )

    manager: ConnectionManager = state.connection_manager
    manager.connect(handler)
    try:
        await handler.run()
    finally:
        manager.disconnect(handler)
