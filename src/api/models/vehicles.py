from pydantic import BaseModel

from fleet.vehicle import Vehicle, VehicleStatus


class VehicleListResponse(BaseModel):
    success: bool = True
    data: list[Vehicle]
    total: int
    timestamp: str


class VehicleStatusListResponse(VehicleListResponse):
    status: VehicleStatus


class VehicleResponse(BaseModel):
    success: bool = True
    data: Vehicle
    timestamp: str


class FleetStatistics(BaseModel):
    total: int
    idle: int
    en_route: int
    delivered: int
    average_speed: int
    timestamp: str


class StatisticsResponse(BaseModel):
    success: bool = True
    data: FleetStatistics


class ErrorResponse(BaseModel):
    """Body of every non-2xx JSON response."""

    success: bool = False
    error: str
    message: str
    documentation: str | None = None
