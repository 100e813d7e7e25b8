"""Envelopes for messages exchanged over the subscription channel."""

from enum import Enum
from typing import Any

from fleet.snapshot import FleetSnapshot
from fleet.vehicle import format_timestamp, utc_now

VEHICLE_UPDATE_NOTE = "Vehicle positions updated automatically"


class MessageType(str, Enum):
    INITIAL_DATA = "initial_data"
    VEHICLE_UPDATE = "vehicle_update"
    PING = "ping"
    PONG = "pong"


def describe_interval(seconds: float) -> str:
    """Render a tick period the way the connection greeting reads it."""
    if seconds >= 60 and seconds % 60 == 0:
        minutes = int(seconds // 60)
        return "minute" if minutes == 1 else f"{minutes} minutes"
    whole = int(seconds)
    return "second" if whole == 1 else f"{whole} seconds"


def initial_data_note(interval_seconds: float) -> str:
    return (
        "Connected to Fleet Tracking WebSocket. "
        f"Updates every {describe_interval(interval_seconds)}."
    )


def fleet_message(kind: MessageType, snapshot: FleetSnapshot, note: str) -> dict[str, Any]:
    return {
        "type": kind.value,
        "data": snapshot.wire,
        "timestamp": format_timestamp(utc_now()),
        "message": note,
    }


def pong_message() -> dict[str, Any]:
    return {"type": MessageType.PONG.value, "timestamp": format_timestamp(utc_now())}
