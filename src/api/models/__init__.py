from api.models.vehicles import (
    ErrorResponse,
    FleetStatistics,
    StatisticsResponse,
    VehicleListResponse,
    VehicleResponse,
    VehicleStatusListResponse,
)

__all__ = [
    "ErrorResponse",
    "FleetStatistics",
    "StatisticsResponse",
    "VehicleListResponse",
    "VehicleResponse",
    "VehicleStatusListResponse",
]
