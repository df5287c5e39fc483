"""Observation engine exceptions.

Custom exception hierarchy for observation lifecycle errors.
"""


class ObservationError(Exception):
    """Base exception for the observation engine."""

    pass


class IllegalStateError(ObservationError):
    """Invalid lifecycle transition or mutation of a sealed context."""

    pass


class HandlerError(ObservationError):
    """A handler callback raised.

    Built at the dispatch boundary for logging only. Never propagated to the
    observation's caller.
    """

    def __init__(self, handler: object, phase: str, context_name: str, cause: BaseException):
        self.handler = handler
        self.phase = phase
        self.context_name = context_name
        self.cause = cause
        super().__init__(
            f"Handler {type(handler).__name__} failed during {phase} "
            f"for observation [{context_name}]: {cause!r}"
        )
