"""Registry of connected subscribers and non-blocking snapshot fan-out."""

import asyncio
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import uuid4

from broadcast.messages import VEHICLE_UPDATE_NOTE, MessageType, fleet_message
from core.exceptions import DeliveryError
from fleet.snapshot import FleetSnapshot
from metrics.prometheus_exporter import fleet_subscribers_connected

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 16

# WebSocket close codes sent when the server ends a subscription
CLOSE_NORMAL = 1000
CLOSE_GOING_AWAY = 1001
CLOSE_TRY_AGAIN_LATER = 1013


class SubscriberState(str, Enum):
    ALIVE = "alive"
    CLOSING = "closing"


@dataclass(frozen=True)
class DeliveryReport:
    delivered: int = 0
    dropped: int = 0


class Subscriber:
    """One connected listener and its bounded outbound queue.

    The registry only ever calls ``deliver``, which never waits: a full or
    closed queue raises ``DeliveryError`` instead. The connection handler
    drains the queue with ``next_message``.
    """

    def __init__(self, connection_id: str | None = None, queue_size: int = DEFAULT_QUEUE_SIZE):
        self.connection_id = connection_id or uuid4().hex[:12]
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=queue_size)
        self._state = SubscriberState.ALIVE
        self._closed = asyncio.Event()
        self.close_code = CLOSE_NORMAL

    def __repr__(self) -> str:
        return f"Subscriber({self.connection_id!r}, state={self._state.value})"

    @property
    def state(self) -> SubscriberState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is SubscriberState.ALIVE

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def deliver(self, message: dict[str, Any]) -> None:
        if not self.is_open:
            raise DeliveryError(
                f"Subscriber {self.connection_id} is not open",
                details={"connection_id": self.connection_id},
            )
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull as e:
            raise DeliveryError(
                f"Subscriber {self.connection_id} queue is full",
                details={"connection_id": self.connection_id, "pending": self.pending},
            ) from e

    async def next_message(self) -> dict[str, Any]:
        return await self._queue.get()

    def close(self, code: int = CLOSE_NORMAL) -> None:
        if self.is_open:
            self.close_code = code
        self._state = SubscriberState.CLOSING
        self._closed.set()

    async def wait_closed(self) -> None:
        await self._closed.wait()


class SubscriberRegistry:
    """Tracks live subscribers and fans fleet snapshots out to them."""

    def __init__(self) -> None:
        self._subscribers: dict[str, Subscriber] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._subscribers)

    def __contains__(self, subscriber: object) -> bool:
        if not isinstance(subscriber, Subscriber):
            return False
        return self._subscribers.get(subscriber.connection_id) is subscriber

    def subscribers(self) -> list[Subscriber]:
        """Point-in-time copy of the registered subscribers."""
        with self._lock:
            return list(self._subscribers.values())

    def register(self, subscriber: Subscriber) -> None:
        with self._lock:
            self._subscribers[subscriber.connection_id] = subscriber
            fleet_subscribers_connected.set(len(self._subscribers))

    def unregister(self, subscriber: Subscriber) -> bool:
        """Remove ``subscriber``; returns False if it was not registered."""
        with self._lock:
            if self._subscribers.get(subscriber.connection_id) is not subscriber:
                return False
            del self._subscribers[subscriber.connection_id]
            fleet_subscribers_connected.set(len(self._subscribers))
            return True

    def broadcast(self, snapshot: FleetSnapshot, note: str = VEHICLE_UPDATE_NOTE) -> DeliveryReport:
        """Hand ``snapshot`` to every registered subscriber without blocking.

        Subscribers that cannot accept the message are dropped and closed.
        """
        if not self._subscribers:
            logger.info("No WebSocket clients connected - skipping broadcast")
            return DeliveryReport()

        message = fleet_message(MessageType.VEHICLE_UPDATE, snapshot, note)
        delivered = 0
        dropped = 0

        for subscriber in self.subscribers():
            try:
                subscriber.deliver(message)
                delivered += 1
            except DeliveryError as e:
                dropped += 1
                logger.warning(f"Dropping subscriber: {e.message}")
                self.unregister(subscriber)
                subscriber.close(CLOSE_TRY_AGAIN_LATER)

        logger.info(f"Broadcast complete: {delivered} successful, {dropped} failed/removed")
        return DeliveryReport(delivered=delivered, dropped=dropped)

    def close_all(self) -> int:
        """Close and remove every subscriber; returns how many were closed."""
        with self._lock:
            subscribers = list(self._subscribers.values())
            self._subscribers.clear()
            fleet_subscribers_connected.set(0)
        for subscriber in subscribers:
            subscriber.close(CLOSE_GOING_AWAY)
        return len(subscribers)
