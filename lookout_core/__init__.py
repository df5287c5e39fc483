"""
Lookout Observation Engine.

Provides:
- Observation contexts with low/high-cardinality tags
- Ordered, failure-isolated handler dispatch
- The Observation lifecycle state machine
- Declarative observation of existing callables
"""

from lookout_core.context import Cardinality, ObservationContext
from lookout_core.exceptions import HandlerError, IllegalStateError, ObservationError
from lookout_core.handler import ErrorAwareObservationHandler, ObservationHandler, Phase
from lookout_core.keyvalue import UNKNOWN, KeyValue, first_value
from lookout_core.observation import Observation, ObservationState
from lookout_core.observed import ObservedAspect, ObservedSpec, observe, observed
from lookout_core.registry import ObservationRegistry

__all__ = [
    "UNKNOWN",
    "Cardinality",
    "ErrorAwareObservationHandler",
    "HandlerError",
    "IllegalStateError",
    "KeyValue",
    "Observation",
    "ObservationContext",
    "ObservationError",
    "ObservationHandler",
    "ObservationRegistry",
    "ObservationState",
    "ObservedAspect",
    "ObservedSpec",
    "Phase",
    "first_value",
    "observe",
    "observed",
]
