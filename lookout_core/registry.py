"""Observation Handler Registry.

Ordered handler collection plus dispatch. Registration order is invocation
order for every phase; there is no priority.
"""

import threading
from typing import Any

from lookout_core.context import ObservationContext
from lookout_core.exceptions import HandlerError
from lookout_core.handler import ErrorAwareObservationHandler, Phase
from lookout_obs.logging import get_logger

logger = get_logger(__name__)


class ObservationRegistry:
    """Handler registry with support-filtered, failure-isolated dispatch."""

    def __init__(self):
        # Replaced wholesale on mutation; dispatch iterates a snapshot
        self._handlers: tuple[Any, ...] = ()
        self._lock = threading.Lock()

    def register(self, handler: Any) -> None:
        """Append a handler."""
        with self._lock:
            self._handlers = self._handlers + (handler,)

    def unregister(self, handler: Any) -> bool:
        """Remove the first registration of `handler`, keeping the rest in order."""
        with self._lock:
            handlers = list(self._handlers)
            try:
                handlers.remove(handler)
            except ValueError:
                return False
            self._handlers = tuple(handlers)
            return True

    @property
    def handlers(self) -> tuple[Any, ...]:
        return self._handlers

    @property
    def is_noop(self) -> bool:
        return not self._handlers

    def select(self, context: ObservationContext) -> tuple[Any, ...]:
        """Handlers supporting `context`, in registration order."""
        selected = []
        for handler in self._handlers:
            try:
                supported = handler.supports_context(context)
            except Exception as e:
                logger.error(
                    "observation_handler_supports_failed",
                    handler=type(handler).__name__,
                    observation=context.name,
                    error=str(e),
                    exc_info=True,
                )
                supported = False
            if supported:
                selected.append(handler)
        return tuple(selected)

    def dispatch(self, phase: Phase, context: ObservationContext, handlers: tuple[Any, ...] | None = None) -> None:
        """
        Invoke the `phase` callback on each handler in order.

        Args:
            phase: Lifecycle phase
            context: Context passed to every callback
            handlers: Pre-selected handlers (an Observation passes the set it
                selected at start). Selected fresh when omitted.

        Handlers without `on_error` receive `on_stop` for the ERROR phase.
        Handler exceptions are logged and swallowed.
        """
        if handlers is None:
            handlers = self.select(context)

        for handler in handlers:
            try:
                if phase is Phase.START:
                    handler.on_start(context)
                elif phase is Phase.STOP:
                    handler.on_stop(context)
                elif isinstance(handler, ErrorAwareObservationHandler):
                    handler.on_error(context)
                else:
                    handler.on_stop(context)
            except Exception as e:
                failure = HandlerError(handler, phase.value, context.name, e)
                logger.error(
                    "observation_handler_failed",
                    handler=type(handler).__name__,
                    phase=phase.value,
                    observation=context.name,
                    error=str(failure),
                    exc_info=True,
                )

    def __len__(self) -> int:
        return len(self._handlers)

    def __repr__(self) -> str:
        names = ", ".join(type(h).__name__ for h in self._handlers)
        return f"ObservationRegistry([{names}])"
