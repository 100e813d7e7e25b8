from typing import Any

from fastapi import APIRouter, Request

from broadcast.messages import describe_interval
from fleet.vehicle import VehicleStatus

router = APIRouter()


@router.get("/docs")
def api_docs(request: Request) -> dict[str, Any]:
    """Machine-readable summary of the REST endpoints and the WebSocket feed."""
    base_url = str(request.base_url).rstrip("/")
    ws_url = "ws" + base_url.removeprefix("http")
    interval = describe_interval(request.app.state.settings.tick_interval_seconds)

    return {
        "title": request.app.title,
        "version": request.app.version,
        "description": "API for fleet tracking with real-time WebSocket updates",
        "baseUrl": base_url,
        "endpoints": {
            "GET /api/vehicles": "Get all vehicles (supports ?status and ?limit query params)",
            "GET /api/vehicles/:id": "Get vehicle by ID",
            "GET /api/vehicles/status/:status": "Get vehicles by status (idle, en_route, delivered)",
            "GET /api/statistics": "Get fleet statistics",
            "GET /api/docs": "This documentation",
        },
        "websocket": {
            "url": ws_url,
            "description": "WebSocket endpoint for real-time vehicle updates",
            "events": {
                "initial_data": "Sent when client first connects",
                "vehicle_update": f"Sent every {interval} with updated vehicle positions",
            },
        },
        "vehicle_statuses": VehicleStatus.values(),
    }
