"""Prometheus metrics for the fleet tracking service."""

from .prometheus_exporter import generate_prometheus_metrics

__all__ = ["generate_prometheus_metrics"]
