"""Stencil Metrics Schema - OpenTelemetry conventions.

Metrics:
- stencil_compiles_total: templates compiled (static includes/extends included)
- stencil_renders_total: render calls
- stencil_errors_total: failed compiles/renders, labelled by error code
- stencil_render_duration_seconds: render latency histogram

With no MeterProvider installed by the host application every instrument is
a no-op.
"""

from dataclasses import dataclass

from opentelemetry import metrics
from opentelemetry.metrics import Counter, Histogram

METRIC_PREFIX = "stencil"


@dataclass
class MetricLabels:
    """Standard metric labels/attributes."""

    TEMPLATE = "template"
    OPERATION = "operation"
    STATUS = "status"
    ERROR_CODE = "error_code"

    # Operation values
    OP_COMPILE = "compile"
    OP_RENDER = "render"

    # Status values
    STATUS_SUCCESS = "success"
    STATUS_ERROR = "error"


class StencilMetrics:
    """Compile/render counters and render duration histogram."""

    def __init__(self, meter: metrics.Meter):
        """Initialize metrics.

        Args:
            meter: OpenTelemetry Meter instance
        """
        self._meter = meter

        self.compiles: Counter = meter.create_counter(
            name=f"{METRIC_PREFIX}_compiles_total",
            description="Total number of compiled templates",
            unit="1",
        )
        self.renders: Counter = meter.create_counter(
            name=f"{METRIC_PREFIX}_renders_total",
            description="Total number of template renders",
            unit="1",
        )
        self.errors: Counter = meter.create_counter(
            name=f"{METRIC_PREFIX}_errors_total",
            description="Total number of failed compiles and renders",
            unit="1",
        )
        self.render_duration: Histogram = meter.create_histogram(
            name=f"{METRIC_PREFIX}_render_duration_seconds",
            description="Template render duration",
            unit="s",
        )

    def record_compile(self, template: str) -> None:
        self.compiles.add(1, {MetricLabels.TEMPLATE: template})

    def record_render(self, template: str, duration_seconds: float, status: str) -> None:
        labels = {MetricLabels.TEMPLATE: template, MetricLabels.STATUS: status}
        self.renders.add(1, labels)
        self.render_duration.record(duration_seconds, labels)

    def record_error(self, template: str, operation: str, error_code: str) -> None:
        self.errors.add(
            1,
            {
                MetricLabels.TEMPLATE: template,
                MetricLabels.OPERATION: operation,
                MetricLabels.ERROR_CODE: error_code,
            },
        )


_metrics: StencilMetrics | None = None


def get_metrics() -> StencilMetrics:
    """Return the process metrics, bound to the current global MeterProvider."""
    global _metrics  # noqa: PLW0603
    if _metrics is None:
        _metrics = StencilMetrics(metrics.get_meter(METRIC_PREFIX))
    return _metrics


def reset_metrics() -> None:
    """Drop cached instruments (for testing with a fresh MeterProvider)."""
    global _metrics  # noqa: PLW0603
    _metrics = None
