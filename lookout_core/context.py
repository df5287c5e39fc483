"""Observation Context.

Mutable record describing one observation: names, tags, timing, parent link and
handler scratch state. Owned by a single Observation and sealed once that
observation reaches a terminal state.
"""

from enum import Enum
from typing import Any

from lookout_core.exceptions import IllegalStateError
from lookout_core.keyvalue import UNKNOWN, KeyValue, first_value


class Cardinality(str, Enum):
    """Tag cardinality."""

    LOW = "low"  # safe as a metric dimension
    HIGH = "high"  # trace/log only


class ObservationContext:
    """Name, tags and timing for a single observation."""

    def __init__(self, name: str, contextual_name: str = "", parent: "ObservationContext | None" = None):
        self._name = name
        self._contextual_name = contextual_name or ""
        self._tags: dict[Cardinality, list[KeyValue]] = {
            Cardinality.LOW: [],
            Cardinality.HIGH: [],
        }
        self._state: dict[Any, Any] = {}
        self._sealed = False
        self.parent = parent
        self.error: BaseException | None = None
        self.started_at: float | None = None
        self.stopped_at: float | None = None

    @classmethod
    def create(cls, name: str, contextual_name: str = "") -> "ObservationContext":
        return cls(name, contextual_name)

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def contextual_name(self) -> str:
        return self._contextual_name

    @contextual_name.setter
    def contextual_name(self, value: str) -> None:
        self._check_mutable()
        self._contextual_name = value or ""

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def add_tag(self, cardinality: Cardinality, key: str, value: object) -> None:
        """Append a tag. Same-key tags are kept side by side."""
        self._check_mutable()
        self._tags[Cardinality(cardinality)].append(KeyValue.of(key, value))

    def add_low_cardinality_tag(self, key: str, value: object) -> None:
        self.add_tag(Cardinality.LOW, key, value)

    def add_high_cardinality_tag(self, key: str, value: object) -> None:
        self.add_tag(Cardinality.HIGH, key, value)

    def get_tags(self, cardinality: Cardinality) -> tuple[KeyValue, ...]:
        return tuple(self._tags[Cardinality(cardinality)])

    @property
    def low_cardinality_tags(self) -> tuple[KeyValue, ...]:
        return self.get_tags(Cardinality.LOW)

    @property
    def high_cardinality_tags(self) -> tuple[KeyValue, ...]:
        return self.get_tags(Cardinality.HIGH)

    @property
    def all_tags(self) -> tuple[KeyValue, ...]:
        return self.low_cardinality_tags + self.high_cardinality_tags

    def get_tag_value(
        self,
        key: str,
        cardinality: Cardinality = Cardinality.LOW,
        default: str = UNKNOWN,
    ) -> str:
        """First tag value for `key`, or `default`."""
        return first_value(self._tags[Cardinality(cardinality)], key, default)

    # ------------------------------------------------------------------
    # Handler state
    # ------------------------------------------------------------------

    def put(self, key: Any, value: Any) -> None:
        """Store handler-private state (timers, spans)."""
        self._state[key] = value

    def get(self, key: Any, default: Any = None) -> Any:
        return self._state.get(key, default)

    def remove(self, key: Any) -> Any:
        return self._state.pop(key, None)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def duration(self) -> float | None:
        """Elapsed seconds between start and stop, if both happened."""
        if self.started_at is None or self.stopped_at is None:
            return None
        return self.stopped_at - self.started_at

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """Make names and tags read-only. Called by the owning Observation."""
        self._sealed = True

    def _check_mutable(self) -> None:
        if self._sealed:
            raise IllegalStateError(f"Observation context [{self._name}] is read-only after stop")

    def __repr__(self) -> str:
        return (
            f"ObservationContext(name={self._name!r}, contextual_name={self._contextual_name!r}, "
            f"low={list(map(str, self.low_cardinality_tags))}, "
            f"high={list(map(str, self.high_cardinality_tags))})"
        )
