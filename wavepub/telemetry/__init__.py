"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    PIPELINE_RUNS,
    RENDER_DURATION,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    observe_render,
    observe_request,
    record_pipeline_run,
)

__all__ = [
    "ERROR_COUNTER",
    "PIPELINE_RUNS",
    "RENDER_DURATION",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "observe_render",
    "observe_request",
    "record_pipeline_run",
]
