"""Stencil Telemetry Instrumentation - span and metric helpers.

Provides instrumentation for:
- Template compilation
- Template rendering

Uses the OpenTelemetry API only; exporting is up to the host application.
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from stencil_core.errors import StencilError

from .metrics import MetricLabels, get_metrics

TRACER_NAME = "stencil"


def _error_code(error: Exception) -> str:
    if isinstance(error, StencilError):
        return error.code
    return type(error).__name__


@contextmanager
def instrument_compile(name: str) -> Iterator[dict[str, Any]]:
    """Context manager for instrumenting template compilation.

    Records:
    - Trace span ``stencil.compile``
    - Compile counter, error counter on failure

    Args:
        name: Template name

    Yields:
        Dictionary to store compile status
    """
    tracer = trace.get_tracer(TRACER_NAME)
    recorder = get_metrics()
    result: dict[str, Any] = {"status": MetricLabels.STATUS_SUCCESS, "error_code": None}

    with tracer.start_as_current_span(
        "stencil.compile", record_exception=False, set_status_on_exception=False
    ) as span:
        span.set_attribute("template.name", name)
        try:
            yield result
        except Exception as e:
            result["status"] = MetricLabels.STATUS_ERROR
            result["error_code"] = _error_code(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            recorder.record_error(name, MetricLabels.OP_COMPILE, result["error_code"])
            raise
        recorder.record_compile(name)


@contextmanager
def instrument_render(name: str) -> Iterator[dict[str, Any]]:
    """Context manager for instrumenting a render call.

    Records:
    - Trace span ``stencil.render``
    - Render counter and duration histogram
    - Error counter on failure

    Args:
        name: Template name

    Yields:
        Dictionary to store render status
    """
    tracer = trace.get_tracer(TRACER_NAME)
    recorder = get_metrics()
    start_time = time.perf_counter()
    result: dict[str, Any] = {"status": MetricLabels.STATUS_SUCCESS, "error_code": None}

    with tracer.start_as_current_span(
        "stencil.render", record_exception=False, set_status_on_exception=False
    ) as span:
        span.set_attribute("template.name", name)
        try:
            yield result
        except Exception as e:
            result["status"] = MetricLabels.STATUS_ERROR
            result["error_code"] = _error_code(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            recorder.record_error(name, MetricLabels.OP_RENDER, result["error_code"])
            raise
        finally:
            recorder.record_render(name, time.perf_counter() - start_time, result["status"])
        span.set_status(Status(StatusCode.OK))
