"""Observation State Machine.

CREATED -> STARTED -> STOPPED | ERRORED

Handlers see exactly one start and exactly one terminal callback per
observation. The observation currently in scope is tracked in a ContextVar so
nested observations pick up their parent across threads and asyncio tasks;
an explicit `parent=` always wins.
"""

import threading
import time
from collections.abc import Awaitable, Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from enum import Enum
from typing import Any, Optional, TypeVar

from lookout_core.context import ObservationContext
from lookout_core.exceptions import IllegalStateError
from lookout_core.handler import Phase
from lookout_core.registry import ObservationRegistry

T = TypeVar("T")

_current_observation: ContextVar[Optional["Observation"]] = ContextVar("current_observation", default=None)


class ObservationState(str, Enum):
    CREATED = "created"
    STARTED = "started"
    STOPPED = "stopped"
    ERRORED = "errored"


TERMINAL_STATES = frozenset({ObservationState.STOPPED, ObservationState.ERRORED})


class Observation:
    """A named, timed unit of work broadcast to registry handlers."""

    def __init__(
        self,
        context: ObservationContext,
        registry: ObservationRegistry,
        parent: Optional["Observation"] = None,
    ):
        self.context = context
        self.registry = registry
        self.parent = parent if parent is not None else _current_observation.get()
        if self.parent is not None and context.parent is None:
            context.parent = self.parent.context

        self._state = ObservationState.CREATED
        self._handlers: tuple[Any, ...] = ()
        # Held across each transition and its dispatch. Re-entrant so a
        # callback may end its own observation.
        self._lock = threading.RLock()

    @classmethod
    def create(
        cls,
        name: str,
        registry: ObservationRegistry,
        contextual_name: str = "",
        parent: Optional["Observation"] = None,
    ) -> "Observation":
        return cls(ObservationContext.create(name, contextual_name), registry, parent=parent)

    @classmethod
    def current(cls) -> Optional["Observation"]:
        """Observation currently in scope, if any."""
        return _current_observation.get()

    @property
    def state(self) -> ObservationState:
        return self._state

    # ------------------------------------------------------------------
    # Fluent context helpers
    # ------------------------------------------------------------------

    def low_cardinality_tag(self, key: str, value: object) -> "Observation":
        self.context.add_low_cardinality_tag(key, value)
        return self

    def high_cardinality_tag(self, key: str, value: object) -> "Observation":
        self.context.add_high_cardinality_tag(key, value)
        return self

    def contextual_name(self, contextual_name: str) -> "Observation":
        self.context.contextual_name = contextual_name
        return self

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _transition(self, expected: ObservationState, target: ObservationState) -> None:
        # Caller holds self._lock
        if self._state is not expected:
            raise IllegalStateError(
                f"Cannot move observation [{self.context.name}] to {target.value}: "
                f"state is {self._state.value}, expected {expected.value}"
            )
        self._state = target

    def start(self) -> "Observation":
        """Notify handlers of start. Valid only once, from CREATED."""
        with self._lock:
            self._transition(ObservationState.CREATED, ObservationState.STARTED)
            self.context.started_at = time.monotonic()
            self._handlers = self.registry.select(self.context)
            self.registry.dispatch(Phase.START, self.context, self._handlers)
        return self

    def stop(self) -> None:
        """Notify handlers of a normal stop. Valid only from STARTED."""
        with self._lock:
            self._transition(ObservationState.STARTED, ObservationState.STOPPED)
            self.context.stopped_at = time.monotonic()
            try:
                self.registry.dispatch(Phase.STOP, self.context, self._handlers)
            finally:
                self.context.seal()

    def error(self, cause: BaseException) -> None:
        """
        Notify handlers of a failed unit of work. Valid only from STARTED.

        The cause is recorded on the context but not raised; the caller keeps
        ownership of propagating it.
        """
        with self._lock:
            self._transition(ObservationState.STARTED, ObservationState.ERRORED)
            self.context.stopped_at = time.monotonic()
            self.context.error = cause
            try:
                self.registry.dispatch(Phase.ERROR, self.context, self._handlers)
            finally:
                self.context.seal()

    @contextmanager
    def scope(self) -> Generator["Observation", None, None]:
        """Make this observation ambient without changing its state."""
        token = _current_observation.set(self)
        try:
            yield self
        finally:
            _current_observation.reset(token)

    def scoped(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run `fn` inside this observation.

        Starts, runs, then stops; if `fn` raises (including cancellation),
        reports `error` and re-raises the same exception.
        """
        self.start()
        try:
            with self.scope():
                result = fn(*args, **kwargs)
        except BaseException as e:
            self.error(e)
            raise
        self.stop()
        return result

    async def ascoped(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Async variant of `scoped`."""
        self.start()
        try:
            with self.scope():
                result = await fn(*args, **kwargs)
        except BaseException as e:
            self.error(e)
            raise
        self.stop()
        return result

    def _enter(self) -> "Observation":
        self.start()
        self._token = _current_observation.set(self)
        return self

    def _exit(self, exc: BaseException | None) -> None:
        _current_observation.reset(self._token)
        if exc is not None:
            self.error(exc)
        else:
            self.stop()

    def __enter__(self) -> "Observation":
        return self._enter()

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._exit(exc)
        return False

    async def __aenter__(self) -> "Observation":
        return self._enter()

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        self._exit(exc)
        return False

    def __repr__(self) -> str:
        return f"Observation(name={self.context.name!r}, state={self._state.value})"
