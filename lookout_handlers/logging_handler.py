"""Logging handler.

Prints a statement before and after every observation, including the value of
one low-cardinality tag.
"""

from lookout_core.context import ObservationContext
from lookout_obs.logging import get_logger

logger = get_logger(__name__)


class LoggingObservationHandler:
    """Logs observation start and stop. Supports every context."""

    def __init__(self, tag_key: str = "userType"):
        self.tag_key = tag_key

    def supports_context(self, context: ObservationContext) -> bool:
        return True

    def on_start(self, context: ObservationContext) -> None:
        logger.info(
            "Before running the observation for context [%s], %s [%s]",
            context.name,
            self.tag_key,
            self.tag_value(context),
        )

    def on_stop(self, context: ObservationContext) -> None:
        logger.info(
            "After running the observation for context [%s], %s [%s]",
            context.name,
            self.tag_key,
            self.tag_value(context),
        )

    def tag_value(self, context: ObservationContext) -> str:
        return context.get_tag_value(self.tag_key)
