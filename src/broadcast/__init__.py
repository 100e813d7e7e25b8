"""Real-time distribution of fleet snapshots to connected subscribers."""

from .registry import DeliveryReport, Subscriber, SubscriberRegistry, SubscriberState
from .scheduler import BroadcastScheduler

__all__ = [
    "BroadcastScheduler",
    "DeliveryReport",
    "Subscriber",
    "SubscriberRegistry",
    "SubscriberState",
]
