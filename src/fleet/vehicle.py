"""Vehicle record and its wire representation."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


class VehicleStatus(str, Enum):
    """Vehicle statuses."""

    IDLE = "idle"
    EN_ROUTE = "en_route"
    DELIVERED = "delivered"

    @classmethod
    def values(cls) -> list[str]:
        return [status.value for status in cls]


def format_timestamp(dt: datetime) -> str:
    """Format datetime as ISO 8601 UTC with millisecond precision."""
    dt = dt.astimezone(UTC)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def utc_now() -> datetime:
    return datetime.now(UTC)


class Location(BaseModel):
    lat: float
    lng: float


class Vehicle(BaseModel):
    """One tracked vehicle.

    Serialized with camelCase keys (``vehicleNumber``, ``currentLocation``...)
    which is the shape clients of both the REST API and the WebSocket feed
    consume.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    vehicle_number: str
    driver_name: str
    driver_phone: str
    status: VehicleStatus
    destination: str
    current_location: Location
    speed: int = Field(ge=0)
    last_updated: datetime
    estimated_arrival: datetime | None = None
    battery_level: int = Field(ge=0, le=100)
    fuel_level: int = Field(ge=0, le=100)

    @field_serializer("last_updated", "estimated_arrival")
    def _serialize_timestamp(self, value: datetime | None) -> str | None:
        if value is None:
            return None
        return format_timestamp(value)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
