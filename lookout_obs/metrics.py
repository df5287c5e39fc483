"""
Prometheus Metrics Registration.

Observation metrics recorded by MetricsObservationHandler. Label names are the
fixed `name`/`error` pair plus one label per configured low-cardinality tag
key, so the set is built once per collector registry and reused.
"""

import re
import threading

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram

# Labels every observation metric carries
BASE_LABELS = ("name", "error")

_INVALID_LABEL_CHARS = re.compile(r"[^a-zA-Z0-9_]")

_metrics_lock = threading.Lock()
_metrics_by_registry: dict[CollectorRegistry, "ObservationMetrics"] = {}


def label_name(tag_key: str) -> str:
    """Prometheus label name for a tag key ("http.url" -> "http_url")."""
    label = _INVALID_LABEL_CHARS.sub("_", tag_key)
    if not label or label[0].isdigit():
        label = f"_{label}"
    if label in BASE_LABELS or label.startswith("__"):
        raise ValueError(f"Tag key {tag_key!r} maps to reserved label {label!r}")
    return label


class ObservationMetrics:
    """Counter, gauge and histogram for observations in one collector registry."""

    def __init__(self, tag_labels: tuple[str, ...], registry: CollectorRegistry = REGISTRY):
        self.tag_labels = tag_labels
        labels = list(BASE_LABELS) + list(tag_labels)

        # ====================================================================
        # COUNTERS
        # ====================================================================

        self.observations_total = Counter(
            "lookout_observations_total",
            "Completed observations",
            labels,  # error: exception class name or "none"
            registry=registry,
        )

        # ====================================================================
        # GAUGES
        # ====================================================================

        # Name only: tags may still change between start and stop
        self.observations_active = Gauge(
            "lookout_observations_active",
            "Observations started and not yet stopped",
            ["name"],
            registry=registry,
        )

        # ====================================================================
        # HISTOGRAMS
        # ====================================================================

        self.observation_duration = Histogram(
            "lookout_observation_duration_seconds",
            "Observation duration",
            labels,
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
            registry=registry,
        )


def observation_metrics(
    tag_labels: tuple[str, ...], registry: CollectorRegistry = REGISTRY
) -> ObservationMetrics:
    """
    Observation metrics for `registry`, created on first use.

    Raises:
        ValueError: if `registry` already holds the metrics with other tag labels
    """
    with _metrics_lock:
        metrics = _metrics_by_registry.get(registry)
        if metrics is None:
            metrics = ObservationMetrics(tag_labels, registry)
            _metrics_by_registry[registry] = metrics
        elif metrics.tag_labels != tag_labels:
            raise ValueError(
                f"Observation metrics already registered with tag labels {metrics.tag_labels}, "
                f"not {tag_labels}"
            )
        return metrics
