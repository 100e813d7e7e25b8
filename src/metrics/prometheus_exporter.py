"""Prometheus metrics exporter for the fleet tracking service."""

from __future__ import annotations

from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest

if TYPE_CHECKING:
    from broadcast.registry import DeliveryReport
    from fleet.snapshot import FleetSnapshot

# Use a separate registry to avoid default Python metrics
REGISTRY = CollectorRegistry()

# --- Gauges (point-in-time values) ---

fleet_vehicles = Gauge(
    "fleet_vehicles",
    "Number of vehicles by status at the last tick",
    ["status"],
    registry=REGISTRY,
)

fleet_average_speed = Gauge(
    "fleet_average_speed",
    "Average vehicle speed at the last tick",
    registry=REGISTRY,
)

fleet_subscribers_connected = Gauge(
    "fleet_subscribers_connected",
    "Number of WebSocket subscribers currently registered",
    registry=REGISTRY,
)

# --- Counters (cumulative values) ---

fleet_ticks_total = Counter(
    "fleet_ticks_total",
    "Total simulation ticks executed",
    registry=REGISTRY,
)

fleet_broadcast_delivered_total = Counter(
    "fleet_broadcast_delivered_total",
    "Total vehicle updates handed to subscriber queues",
    registry=REGISTRY,
)

fleet_broadcast_dropped_total = Counter(
    "fleet_broadcast_dropped_total",
    "Total subscribers dropped because their queue refused an update",
    registry=REGISTRY,
)

fleet_connections_total = Counter(
    "fleet_connections_total",
    "Total WebSocket connections accepted",
    registry=REGISTRY,
)


def record_tick(snapshot: FleetSnapshot, report: DeliveryReport) -> None:
    """Update fleet gauges and broadcast counters after a tick."""
    fleet_ticks_total.inc()
    for status, count in snapshot.status_counts().items():
        fleet_vehicles.labels(status=status.value).set(count)
    fleet_average_speed.set(snapshot.average_speed())
    fleet_broadcast_delivered_total.inc(report.delivered)
    fleet_broadcast_dropped_total.inc(report.dropped)


def generate_prometheus_metrics() -> bytes:
    """Generate Prometheus format metrics output."""
    result: bytes = generate_latest(REGISTRY)
    return result
