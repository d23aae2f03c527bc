"""Stencil Telemetry - OpenTelemetry-based observability."""

from .instrumentation import instrument_compile, instrument_render
from .metrics import MetricLabels, StencilMetrics, get_metrics, reset_metrics

__all__ = [
    # Metrics
    "StencilMetrics",
    "MetricLabels",
    "get_metrics",
    "reset_metrics",
    # Instrumentation
    "instrument_compile",
    "instrument_render",
]
