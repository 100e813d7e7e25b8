import re

from fastapi import APIRouter

from api.dependencies import SnapshotDep
from api.models.vehicles import (
    ErrorResponse,
    VehicleListResponse,
    VehicleResponse,
    VehicleStatusListResponse,
)
from core.exceptions import InvalidStatusError, VehicleNotFoundError
from fleet.vehicle import VehicleStatus, format_timestamp, utc_now

router = APIRouter()

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_limit(raw: str | None) -> int | None:
    """Read the leading integer of ``raw``; anything unparseable means no limit."""
    if not raw:
        return None
    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else None


def parse_status(raw: str | None) -> VehicleStatus | None:
    if raw in VehicleStatus.values():
        return VehicleStatus(raw)
    return None


@router.get("", response_model=VehicleListResponse)
def list_vehicles(
    snapshot: SnapshotDep,
    status: str | None = None,
    limit: str | None = None,
) -> VehicleListResponse:
    """List vehicles, optionally filtered by status and truncated by limit.

    Unknown status values are ignored rather than rejected.
    """
    status_filter = parse_status(status)
    vehicles = snapshot.by_status(status_filter) if status_filter else list(snapshot)

    max_results = parse_limit(limit)
    if max_results is not None:
        vehicles = vehicles[:max_results]

    return VehicleListResponse(
        data=vehicles,
        total=len(vehicles),
        timestamp=format_timestamp(utc_now()),
    )


@router.get(
    "/status/{status}",
    response_model=VehicleStatusListResponse,
    responses={400: {"model": ErrorResponse}},
)
def list_vehicles_by_status(status: str, snapshot: SnapshotDep) -> VehicleStatusListResponse:
    """List vehicles in one status (idle, en_route, delivered)."""
    status_filter = parse_status(status)
    if status_filter is None:
        raise InvalidStatusError(status, VehicleStatus.values())

    vehicles = snapshot.by_status(status_filter)
    return VehicleStatusListResponse(
        data=vehicles,
        total=len(vehicles),
        status=status_filter,
        timestamp=format_timestamp(utc_now()),
    )


@router.get(
    "/{vehicle_id}",
    response_model=VehicleResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_vehicle(vehicle_id: str, snapshot: SnapshotDep) -> VehicleResponse:
    vehicle = snapshot.get(vehicle_id)
    if vehicle is None:
        raise VehicleNotFoundError(vehicle_id)
    return VehicleResponse(data=vehicle, timestamp=format_timestamp(utc_now()))
