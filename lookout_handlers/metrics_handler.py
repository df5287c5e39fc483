"""Prometheus metrics handler.

Metric `name` label is the observation name; `error` is the failing
exception's class name or "none". Each configured tag key adds a label whose
value is the first matching low-cardinality tag, or UNKNOWN.
"""

from collections.abc import Iterable

from prometheus_client import REGISTRY, CollectorRegistry

from lookout_core.context import ObservationContext
from lookout_obs.metrics import label_name, observation_metrics

NO_ERROR = "none"


class MetricsObservationHandler:
    """Records duration, count and in-flight gauge per observation name."""

    def __init__(self, tag_keys: Iterable[str] = (), registry: CollectorRegistry = REGISTRY):
        self.tag_keys = tuple(tag_keys)
        tag_labels = tuple(label_name(key) for key in self.tag_keys)
        if len(set(tag_labels)) != len(tag_labels):
            raise ValueError(f"Tag keys {self.tag_keys} map to duplicate metric labels")
        self.metrics = observation_metrics(tag_labels, registry)

    def supports_context(self, context: ObservationContext) -> bool:
        return True

    def on_start(self, context: ObservationContext) -> None:
        self.metrics.observations_active.labels(name=context.name).inc()

    def on_stop(self, context: ObservationContext) -> None:
        self._record(context, NO_ERROR)

    def on_error(self, context: ObservationContext) -> None:
        error = type(context.error).__name__ if context.error is not None else NO_ERROR
        self._record(context, error)

    def labels(self, context: ObservationContext, error: str) -> list[str]:
        """Label values in metric label order."""
        return [context.name, error] + [context.get_tag_value(key) for key in self.tag_keys]

    def _record(self, context: ObservationContext, error: str) -> None:
        values = self.labels(context, error)
        self.metrics.observations_active.labels(name=context.name).dec()
        self.metrics.observations_total.labels(*values).inc()
        if context.duration is not None:
            self.metrics.observation_duration.labels(*values).observe(context.duration)
