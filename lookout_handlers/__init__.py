"""Lookout Observation Handlers.

Handlers plugged into an ObservationRegistry at startup:
- LoggingObservationHandler: before/after log lines
- MetricsObservationHandler: Prometheus duration/count/active
- TracingObservationHandler: OpenTelemetry spans
"""

from lookout_handlers.logging_handler import LoggingObservationHandler
from lookout_handlers.metrics_handler import MetricsObservationHandler
from lookout_handlers.tracing_handler import TracingObservationHandler

__all__ = ["LoggingObservationHandler", "MetricsObservationHandler", "TracingObservationHandler"]
