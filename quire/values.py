"""Typed front matter values for Quire.

Front matter mixes strings, numbers, booleans, timestamps, lists and
tables in a single mapping. Rather than handing raw Python objects to
consumers, each value is wrapped in one variant of a small closed family
so callers resolve it with ``match``:

    match document.metadata["title"]:
        case StringValue(value=title):
            ...
        case _:
            ...

Key functions:
- from_native: Wrap a deserialized TOML/YAML value.
- to_native: Unwrap a value back to plain Python objects.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time
from types import MappingProxyType
from typing import Any, ClassVar, Union


@dataclass(frozen=True)
class StringValue:
    kind: ClassVar[str] = "string"
    value: str

    @property
    def native(self) -> str:
        return self.value


@dataclass(frozen=True)
class IntegerValue:
    kind: ClassVar[str] = "integer"
    value: int

    @property
    def native(self) -> int:
        return self.value


@dataclass(frozen=True)
class FloatValue:
    kind: ClassVar[str] = "float"
    value: float

    @property
    def native(self) -> float:
        return self.value


@dataclass(frozen=True)
class BooleanValue:
    kind: ClassVar[str] = "boolean"
    value: bool

    @property
    def native(self) -> bool:
        return self.value


@dataclass(frozen=True)
class TimestampValue:
    """A date, time or date-time.

    TOML distinguishes offset date-times, local date-times, local dates and
    local times; all of them land here with the Python type that tomllib
    (or PyYAML) produced.
    """

    kind: ClassVar[str] = "timestamp"
    value: datetime | date | time

    @property
    def native(self) -> datetime | date | time:
        return self.value


@dataclass(frozen=True)
class NullValue:
    """YAML ``null``. TOML has no null."""

    kind: ClassVar[str] = "null"

    @property
    def native(self) -> None:
        return None


@dataclass(frozen=True)
class ListValue:
    kind: ClassVar[str] = "list"
    items: tuple[MetadataValue, ...] = ()

    @property
    def native(self) -> list[Any]:
        return [to_native(item) for item in self.items]

    def strings(self) -> list[str]:
        """Return the string items, skipping anything else."""
        return [item.value for item in self.items if isinstance(item, StringValue)]


@dataclass(frozen=True)
class TableValue:
    kind: ClassVar[str] = "table"
    entries: Mapping[str, MetadataValue] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )

    @property
    def native(self) -> dict[str, Any]:
        return {key: to_native(value) for key, value in self.entries.items()}

    def get(self, key: str) -> MetadataValue | None:
        return self.entries.get(key)


MetadataValue = Union[
    StringValue,
    IntegerValue,
    FloatValue,
    BooleanValue,
    TimestampValue,
    NullValue,
    ListValue,
    TableValue,
]


def from_native(obj: Any) -> MetadataValue:
    """Wrap a deserialized value in its variant.

    Args:
        obj: Value produced by tomllib or yaml.safe_load.

    Returns:
        The matching MetadataValue variant.

    Raises:
        TypeError: If the value has no variant (e.g. YAML binary data) or
            contains itself (a recursive YAML alias).
    """
    return _wrap(obj, set())


def wrap_mapping(data: Mapping[Any, Any]) -> Mapping[str, MetadataValue]:
    """Wrap every value of a mapping, returning a read-only view.

    Non-string keys (YAML allows ``1: x``) are stringified.
    """
    return _wrap_entries(data, set())


def _wrap(obj: Any, active: set[int]) -> MetadataValue:
    # bool is a subclass of int, so it has to be checked first
    if isinstance(obj, bool):
        return BooleanValue(obj)
    if isinstance(obj, int):
        return IntegerValue(obj)
    if isinstance(obj, float):
        return FloatValue(obj)
    if isinstance(obj, str):
        return StringValue(obj)
    if isinstance(obj, (datetime, date, time)):
        return TimestampValue(obj)
    if obj is None:
        return NullValue()
    if isinstance(obj, (list, tuple)):
        _enter(obj, active)
        try:
            return ListValue(tuple(_wrap(item, active) for item in obj))
        finally:
            active.discard(id(obj))
    if isinstance(obj, Mapping):
        return TableValue(_wrap_entries(obj, active))
    raise TypeError(f"Unsupported front matter value of type {type(obj).__name__}")


def _wrap_entries(data: Mapping[Any, Any], active: set[int]) -> Mapping[str, MetadataValue]:
    _enter(data, active)
    try:
        return MappingProxyType(
            {str(key): _wrap(value, active) for key, value in data.items()}
        )
    finally:
        active.discard(id(data))


def _enter(container: Any, active: set[int]) -> None:
    # containers on the current path; a repeat means the value contains itself
    if id(container) in active:
        raise TypeError("Recursive front matter value (self-referencing alias)")
    active.add(id(container))


def to_native(value: MetadataValue) -> Any:
    """Unwrap a value to plain Python objects."""
    match value:
        case (
            StringValue(value=v)
            | IntegerValue(value=v)
            | FloatValue(value=v)
            | BooleanValue(value=v)
            | TimestampValue(value=v)
        ):
            return v
        case NullValue():
            return None
        case ListValue(items=items):
            return [to_native(item) for item in items]
        case TableValue(entries=entries):
            return {key: to_native(item) for key, item in entries.items()}
    raise TypeError(f"Not a metadata value: {value!r}")


def to_json(value: MetadataValue) -> Any:
    """Unwrap a value into JSON-compatible objects (timestamps as ISO 8601)."""
    match value:
        case TimestampValue(value=v):
            return v.isoformat()
        case ListValue(items=items):
            return [to_json(item) for item in items]
        case TableValue(entries=entries):
            return {key: to_json(item) for key, item in entries.items()}
    return to_native(value)
