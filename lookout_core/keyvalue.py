"""Key/value tags attached to observation contexts."""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

# Returned by tag lookups when no tag matches
UNKNOWN = "UNKNOWN"


class KeyValue(BaseModel):
    """Immutable tag. Equal (and hashable) by key and value."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str

    @classmethod
    def of(cls, key: str, value: object) -> "KeyValue":
        return cls(key=key, value=str(value))

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


def first_value(key_values: Iterable[KeyValue], key: str, default: str = UNKNOWN) -> str:
    """Value of the first tag named `key`, or `default` when absent."""
    for key_value in key_values:
        if key_value.key == key:
            return key_value.value
    return default
