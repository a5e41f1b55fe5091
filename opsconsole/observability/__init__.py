"""Observability layer: in-process metrics. No external SaaS."""

from opsconsole.observability.metrics import MetricsCollector

__all__ = [
    "MetricsCollector",
]
