"""
Observation Registry Bootstrap.

Builds the process-wide registry once at startup. Registration order is
dispatch order: logging, then metrics, then tracing.
"""

from lookout_config.settings import Settings
from lookout_core.observed import ObservedAspect
from lookout_core.registry import ObservationRegistry
from lookout_handlers import (
    LoggingObservationHandler,
    MetricsObservationHandler,
    TracingObservationHandler,
)
from lookout_obs.logging import get_logger

logger = get_logger(__name__)


def build_observation_registry(settings: Settings) -> ObservationRegistry:
    """
    Create the registry and register handlers enabled in settings.

    Args:
        settings: Application settings

    Returns:
        Populated registry (treated as read-only afterwards)
    """
    registry = ObservationRegistry()
    registry.register(LoggingObservationHandler(tag_key=settings.OBSERVATION_LOG_TAG_KEY))

    if settings.METRICS_HANDLER_ENABLED:
        registry.register(MetricsObservationHandler(tag_keys=settings.metrics_tag_keys))

    if settings.TRACING_HANDLER_ENABLED:
        registry.register(TracingObservationHandler())

    logger.info(
        "observation_registry_ready",
        handlers=[type(h).__name__ for h in registry.handlers],
    )
    return registry


def build_observed_aspect(registry: ObservationRegistry) -> ObservedAspect:
    """Aspect applying @observed declarations against `registry`."""
    return ObservedAspect(registry)
