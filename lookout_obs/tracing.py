"""
Tracer Provider Setup (OpenTelemetry).

Spans themselves are created by TracingObservationHandler; this module only
installs the global provider and exporter.
"""

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from lookout_config.settings import Settings
from lookout_obs.logging import get_logger

logger = get_logger(__name__)


def setup_tracing(settings: Settings) -> bool:
    """
    Setup OpenTelemetry tracing with OTLP export.

    Returns:
        True if a provider was installed
    """
    if not settings.OTEL_TRACES_ENABLED:
        logger.info("otel_tracing_disabled")
        return False

    resource = Resource.create(
        {
            "service.name": settings.OTEL_SERVICE_NAME,
            "service.version": "0.1.0",
            "deployment.environment": settings.ENVIRONMENT,
        }
    )

    provider = TracerProvider(resource=resource)
    otlp_exporter = OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT)
    provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
    trace.set_tracer_provider(provider)

    logger.info(
        "otel_tracing_enabled",
        service=settings.OTEL_SERVICE_NAME,
        endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT,
    )
    return True
