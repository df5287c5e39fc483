"""Observation Handler Tests."""

from unittest.mock import patch

import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode
from prometheus_client import CollectorRegistry

from lookout_core.context import ObservationContext
from lookout_core.observation import Observation
from lookout_handlers import (
    LoggingObservationHandler,
    MetricsObservationHandler,
    TracingObservationHandler,
)
from lookout_obs.metrics import label_name

# ============================================================================
# LOGGING HANDLER
# ============================================================================


def test_logging_handler_logs_before_and_after(registry):
    """Test before and after lines are logged with the tag value."""
    registry.register(LoggingObservationHandler())
    observation = Observation.create("user.name", registry)
    observation.low_cardinality_tag("userType", "userType2")

    with patch("lookout_handlers.logging_handler.logger") as mock_logger:
        observation.scoped(lambda: "foo")

    calls = mock_logger.info.call_args_list
    assert len(calls) == 2
    assert calls[0].args == (
        "Before running the observation for context [%s], %s [%s]",
        "user.name",
        "userType",
        "userType2",
    )
    assert calls[1].args[0].startswith("After running the observation")
    assert calls[1].args[3] == "userType2"


def test_logging_handler_defaults_to_unknown():
    """Test a missing tag is logged as UNKNOWN."""
    handler = LoggingObservationHandler()
    assert handler.tag_value(ObservationContext.create("work")) == "UNKNOWN"


def test_logging_handler_custom_tag_key():
    """Test the logged tag key is configurable."""
    handler = LoggingObservationHandler(tag_key="tenant")
    context = ObservationContext.create("work")
    context.add_low_cardinality_tag("tenant", "acme")
    context.add_low_cardinality_tag("tenant", "other")

    assert handler.tag_value(context) == "acme"
    assert handler.supports_context(context) is True


# ============================================================================
# METRICS HANDLER
# ============================================================================


@pytest.fixture
def collector():
    """Fresh Prometheus collector registry per test."""
    return CollectorRegistry()


def test_metrics_handler_records_success(registry, collector):
    """Test a stopped observation is counted, timed and no longer active."""
    registry.register(MetricsObservationHandler(registry=collector))
    labels = {"name": "metrics.success", "error": "none"}

    observation = Observation.create("metrics.success", registry).start()
    assert collector.get_sample_value("lookout_observations_active", {"name": "metrics.success"}) == 1.0
    observation.stop()

    assert collector.get_sample_value("lookout_observations_active", {"name": "metrics.success"}) == 0.0
    assert collector.get_sample_value("lookout_observations_total", labels) == 1.0
    assert collector.get_sample_value("lookout_observation_duration_seconds_count", labels) == 1.0


def test_metrics_handler_labels_error_class(registry, collector):
    """Test a failed observation is labelled with the exception class."""
    registry.register(MetricsObservationHandler(registry=collector))

    with pytest.raises(TimeoutError):
        Observation.create("metrics.failure", registry).scoped(_raise_timeout)

    assert collector.get_sample_value(
        "lookout_observations_total", {"name": "metrics.failure", "error": "TimeoutError"}
    ) == 1.0
    assert collector.get_sample_value("lookout_observations_active", {"name": "metrics.failure"}) == 0.0


def test_metrics_handler_exports_low_cardinality_tags(registry, collector):
    """Test configured tag keys become labels, first value wins, missing is UNKNOWN."""
    registry.register(
        MetricsObservationHandler(tag_keys=["userType", "http.status"], registry=collector)
    )
    observation = Observation.create("user.name", registry)
    observation.low_cardinality_tag("userType", "userType2")
    observation.low_cardinality_tag("userType", "ignored")
    observation.high_cardinality_tag("http.status", "200")

    observation.scoped(lambda: "foo")

    labels = {
        "name": "user.name",
        "error": "none",
        "userType": "userType2",
        "http_status": "UNKNOWN",
    }
    assert collector.get_sample_value("lookout_observations_total", labels) == 1.0
    assert collector.get_sample_value("lookout_observation_duration_seconds_count", labels) == 1.0


def test_metrics_handler_shares_metrics_per_collector(collector):
    """Test handlers with the same tag keys reuse one set of metrics."""
    first = MetricsObservationHandler(tag_keys=["userType"], registry=collector)
    second = MetricsObservationHandler(tag_keys=["userType"], registry=collector)

    assert first.metrics is second.metrics


def test_metrics_handler_rejects_conflicting_tag_keys(collector):
    """Test a collector cannot hold observation metrics with two label sets."""
    MetricsObservationHandler(tag_keys=["userType"], registry=collector)

    with pytest.raises(ValueError):
        MetricsObservationHandler(tag_keys=["outcome"], registry=collector)


def test_metrics_handler_rejects_reserved_and_duplicate_labels(collector):
    """Test tag keys clashing with built-in or each other's labels are rejected."""
    with pytest.raises(ValueError):
        MetricsObservationHandler(tag_keys=["error"], registry=collector)
    with pytest.raises(ValueError):
        MetricsObservationHandler(tag_keys=["http.url", "http_url"], registry=collector)


def test_label_name_sanitizes_tag_keys():
    """Test tag keys are mapped to valid Prometheus label names."""
    assert label_name("http.url") == "http_url"
    assert label_name("2xx") == "_2xx"
    assert label_name("userType") == "userType"


def _raise_timeout():
    raise TimeoutError("slow")


# ============================================================================
# TRACING HANDLER
# ============================================================================


@pytest.fixture
def span_exporter():
    return InMemorySpanExporter()


@pytest.fixture
def tracer(span_exporter):
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return provider.get_tracer("test")


def test_tracing_handler_span_named_after_contextual_name(registry, tracer, span_exporter):
    """Test the span takes the contextual name and all tags."""
    registry.register(TracingObservationHandler(tracer=tracer))
    observation = Observation.create("user.name", registry, contextual_name="getting-user-name")
    observation.low_cardinality_tag("userType", "userType2")
    observation.high_cardinality_tag("user_id", "42")

    observation.scoped(lambda: "foo")

    (span,) = span_exporter.get_finished_spans()
    assert span.name == "getting-user-name"
    assert span.attributes["userType"] == "userType2"
    assert span.attributes["user_id"] == "42"
    assert span.attributes["lookout.observation"] == "user.name"
    assert observation.context.get(
        "lookout.tracing.span"
    ) is None


def test_tracing_handler_falls_back_to_name(registry, tracer, span_exporter):
    """Test the span is named after the observation without a contextual name."""
    registry.register(TracingObservationHandler(tracer=tracer))

    Observation.create("plain.work", registry).scoped(lambda: None)

    assert span_exporter.get_finished_spans()[0].name == "plain.work"


def test_tracing_handler_first_tag_value_wins(registry, tracer, span_exporter):
    """Test the first value of a duplicated tag becomes the attribute."""
    registry.register(TracingObservationHandler(tracer=tracer))
    observation = Observation.create("dup", registry)
    observation.low_cardinality_tag("k", "first")
    observation.low_cardinality_tag("k", "second")

    observation.scoped(lambda: None)

    assert span_exporter.get_finished_spans()[0].attributes["k"] == "first"


def test_tracing_handler_child_span_has_parent(registry, tracer, span_exporter):
    """Test a nested observation's span is a child of the outer span."""
    registry.register(TracingObservationHandler(tracer=tracer))
    outer = Observation.create("outer", registry)

    outer.scoped(lambda: Observation.create("inner", registry).scoped(lambda: None))

    spans = {span.name: span for span in span_exporter.get_finished_spans()}
    assert spans["inner"].parent.span_id == spans["outer"].context.span_id
    assert spans["inner"].context.trace_id == spans["outer"].context.trace_id


def test_tracing_handler_records_error(registry, tracer, span_exporter):
    """Test a failed observation sets error status and records the exception."""
    registry.register(TracingObservationHandler(tracer=tracer))

    with pytest.raises(ValueError):
        Observation.create("failing", registry).scoped(_raise_value_error)

    (span,) = span_exporter.get_finished_spans()
    assert span.status.status_code == StatusCode.ERROR
    assert span.events[0].name == "exception"


def test_tracing_handler_span_is_current_while_observed(registry, tracer, span_exporter):
    """Test the observation span is the current OpenTelemetry span during the work."""
    registry.register(TracingObservationHandler(tracer=tracer))
    seen = []

    def work():
        seen.append(trace.get_current_span().get_span_context().span_id)
        with tracer.start_as_current_span("downstream"):
            pass

    Observation.create("outer", registry).scoped(work)

    spans = {span.name: span for span in span_exporter.get_finished_spans()}
    assert seen == [spans["outer"].context.span_id]
    assert spans["downstream"].parent.span_id == spans["outer"].context.span_id
    assert not trace.get_current_span().get_span_context().is_valid


def _raise_value_error():
    raise ValueError("bad input")
