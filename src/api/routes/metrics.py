from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST

from metrics import generate_prometheus_metrics

router = APIRouter()


@router.get("/prometheus")
def prometheus_metrics() -> Response:
    """Prometheus text exposition of fleet and broadcast metrics."""
    return Response(content=generate_prometheus_metrics(), media_type=CONTENT_TYPE_LATEST)
