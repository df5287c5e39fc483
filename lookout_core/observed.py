"""Declarative Observation Wrapper.

`observed(...)` marks a callable with an ObservedSpec. `ObservedAspect` (bound
to a registry at startup) turns marked callables into ones that run inside an
Observation. `observe(spec, fn, registry)` does the same explicitly.

Example:
    class UserService:
        @observed(
            name="user.name",
            contextual_name="getting-user-name",
            low_cardinality_key_values=(("userType", "userType2"),),
        )
        async def user_name(self, user_id: str) -> str:
            ...

    service = ObservedAspect(registry).apply(UserService())
"""

import functools
import inspect
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from lookout_core.keyvalue import UNKNOWN
from lookout_core.observation import Observation
from lookout_core.registry import ObservationRegistry

SPEC_ATTRIBUTE = "__observed_spec__"

# Keyword a caller may pass to supply tag values that are not arguments
TAGS_KWARG = "observation_tags"


class ObservedSpec(BaseModel):
    """Static observation declaration for a callable."""

    model_config = ConfigDict(frozen=True)

    name: str
    contextual_name: str = ""
    low_cardinality_key_values: tuple[tuple[str, str], ...] = ()
    low_cardinality_keys: frozenset[str] = frozenset()

    @field_validator("low_cardinality_key_values", mode="before")
    @classmethod
    def _pairs(cls, value: Any) -> Any:
        # Accept a flat ("k1", "v1", "k2", "v2") sequence as well as pairs
        if isinstance(value, Mapping):
            return tuple((str(k), str(v)) for k, v in value.items())
        items = tuple(value)
        if items and all(isinstance(item, str) for item in items):
            if len(items) % 2:
                raise ValueError("low_cardinality_key_values needs an even number of entries")
            return tuple(zip(items[::2], items[1::2]))
        return tuple((str(k), str(v)) for k, v in items)


def resolve_tags(
    spec: ObservedSpec,
    fn: Callable[..., Any],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
    extra: Mapping[str, Any] | None = None,
) -> list[tuple[str, str]]:
    """
    Low-cardinality tags for one call of `fn`.

    Static pairs come first, then each declared key (sorted) resolved against
    the bound call arguments and then `extra`. Unresolved keys map to UNKNOWN.
    """
    tags = [(key, str(value)) for key, value in spec.low_cardinality_key_values]
    if not spec.low_cardinality_keys:
        return tags

    try:
        bound = inspect.signature(fn).bind_partial(*args, **kwargs)
        bound.apply_defaults()
        arguments = dict(bound.arguments)
    except (TypeError, ValueError):
        arguments = dict(kwargs)

    for key in sorted(spec.low_cardinality_keys):
        if key in arguments:
            value = arguments[key]
        elif extra is not None and key in extra:
            value = extra[key]
        else:
            value = UNKNOWN
        tags.append((key, str(value)))
    return tags


def _owner_name(fn: Callable[..., Any]) -> str:
    qualname = getattr(fn, "__qualname__", "")
    if "." in qualname:
        return qualname.rsplit(".", 1)[0]
    return getattr(fn, "__module__", "") or UNKNOWN


def _build_observation(
    spec: ObservedSpec,
    fn: Callable[..., Any],
    registry: ObservationRegistry,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
    extra: Mapping[str, Any] | None,
) -> Observation:
    observation = Observation.create(spec.name, registry, contextual_name=spec.contextual_name)
    for key, value in resolve_tags(spec, fn, args, kwargs, extra):
        observation.low_cardinality_tag(key, value)
    observation.low_cardinality_tag("class", _owner_name(fn))
    observation.low_cardinality_tag("method", getattr(fn, "__name__", UNKNOWN))
    return observation


def observe(spec: ObservedSpec, fn: Callable[..., Any], registry: ObservationRegistry) -> Callable[..., Any]:
    """Wrap `fn` so each call runs in its own Observation."""
    try:
        accepts_tags = TAGS_KWARG in inspect.signature(fn).parameters
    except (TypeError, ValueError):
        accepts_tags = False

    def _split(kwargs: dict[str, Any]) -> Mapping[str, Any] | None:
        if accepts_tags:
            return kwargs.get(TAGS_KWARG)
        return kwargs.pop(TAGS_KWARG, None)

    if inspect.iscoroutinefunction(fn):

        @functools.wraps(fn)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            extra = _split(kwargs)
            observation = _build_observation(spec, fn, registry, args, kwargs, extra)
            return await observation.ascoped(fn, *args, **kwargs)

        setattr(async_wrapper, SPEC_ATTRIBUTE, spec)
        return async_wrapper

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        extra = _split(kwargs)
        observation = _build_observation(spec, fn, registry, args, kwargs, extra)
        return observation.scoped(fn, *args, **kwargs)

    setattr(wrapper, SPEC_ATTRIBUTE, spec)
    return wrapper


def observed(
    name: str,
    contextual_name: str = "",
    low_cardinality_key_values: Iterable[Any] | Mapping[str, Any] = (),
    low_cardinality_keys: Iterable[str] = (),
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Attach an ObservedSpec to a callable. Does not wrap it."""
    spec = ObservedSpec(
        name=name,
        contextual_name=contextual_name,
        low_cardinality_key_values=low_cardinality_key_values,
        low_cardinality_keys=frozenset(low_cardinality_keys),
    )

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        setattr(fn, SPEC_ATTRIBUTE, spec)
        return fn

    return decorator


def get_spec(fn: Any) -> ObservedSpec | None:
    return getattr(fn, SPEC_ATTRIBUTE, None)


class ObservedAspect:
    """Applies ObservedSpec declarations against one registry."""

    def __init__(self, registry: ObservationRegistry):
        self.registry = registry

    def wrap(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        """Wrap a spec-bearing callable. Callables without a spec pass through."""
        spec = get_spec(fn)
        if spec is None:
            return fn
        return observe(spec, fn, self.registry)

    def apply(self, obj: Any) -> Any:
        """Replace every spec-bearing method on `obj` with its observed version."""
        for attr_name, member in inspect.getmembers(type(obj)):
            if attr_name.startswith("__"):
                continue
            spec = get_spec(member)
            if spec is None or not callable(member):
                continue
            if attr_name in vars(obj):
                # Already applied to this instance
                continue
            setattr(obj, attr_name, observe(spec, getattr(obj, attr_name), self.registry))
        return obj
