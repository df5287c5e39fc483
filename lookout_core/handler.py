"""Observation Handler Interface.

Handlers are plain objects; no base class is required. Anything with
`supports_context`, `on_start` and `on_stop` is a handler. Handlers that also
define `on_error` receive it instead of `on_stop` when the observed work fails.
"""

from enum import Enum
from typing import Protocol, runtime_checkable

from lookout_core.context import ObservationContext


class Phase(str, Enum):
    """Lifecycle phase being dispatched."""

    START = "start"
    STOP = "stop"
    ERROR = "error"


@runtime_checkable
class ObservationHandler(Protocol):
    """Handler interface."""

    def supports_context(self, context: ObservationContext) -> bool:
        """Whether this handler wants callbacks for `context`."""
        ...

    def on_start(self, context: ObservationContext) -> None:
        ...

    def on_stop(self, context: ObservationContext) -> None:
        ...


@runtime_checkable
class ErrorAwareObservationHandler(ObservationHandler, Protocol):
    """Handler with a dedicated error callback."""

    def on_error(self, context: ObservationContext) -> None:
        ...
