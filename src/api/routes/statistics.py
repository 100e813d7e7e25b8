from fastapi import APIRouter

from api.dependencies import SnapshotDep
from api.models.vehicles import FleetStatistics, StatisticsResponse
from fleet.vehicle import VehicleStatus, format_timestamp, utc_now

router = APIRouter()


@router.get("", response_model=StatisticsResponse)
def get_statistics(snapshot: SnapshotDep) -> StatisticsResponse:
    """Vehicle counts per status and average speed."""
    counts = snapshot.status_counts()
    return StatisticsResponse(
        data=FleetStatistics(
            total=len(snapshot),
            idle=counts[VehicleStatus.IDLE],
            en_route=counts[VehicleStatus.EN_ROUTE],
            delivered=counts[VehicleStatus.DELIVERED],
            average_speed=snapshot.average_speed(),
            timestamp=format_timestamp(utc_now()),
        )
    )
