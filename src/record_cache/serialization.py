"""Serialization protocols and implementations for cache payloads.

The record store keeps whatever lands in the payload bin. A serializer turns
caller values into something the store can hold, and back.

Usage:
    serializer = DataclassSerializer(Session)
    payload = serializer.serialize(session)
    session = serializer.deserialize(payload)
"""

from __future__ import annotations

import json
from dataclasses import asdict, fields, is_dataclass
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class Serializer(Protocol[T]):
    """Protocol for serializing and deserializing values for cache storage."""

    def serialize(self, value: T) -> Any:
        """Convert a value to a payload the record store can hold."""
        ...

    def deserialize(self, data: Any) -> T:
        """Convert a stored payload back to the original value."""
        ...


class PassthroughSerializer:
    """Hands values to the store unchanged.

    Suitable for stores that hold native types (strings, numbers, lists, maps).
    """

    def serialize(self, value: Any) -> Any:
        return value

    def deserialize(self, data: Any) -> Any:
        return data


class JsonSerializer[T]:
    """Generic JSON serializer for simple types.

    Works with any JSON-serializable type (dicts, lists, primitives).
    """

    def serialize(self, value: T) -> str:
        """Convert a value to JSON string."""
        return json.dumps(value)

    def deserialize(self, data: str) -> T:
        """Convert a JSON string back to the original type."""
        return json.loads(data)


class DataclassSerializer[T]:
    """Serializer for a single frozen dataclass per cache entry.

    Uses JSON for serialization. Nested dataclasses are flattened to dicts by
    ``asdict`` and are not rebuilt on the way back.

    Args:
        dataclass_type: The dataclass type to serialize/deserialize.
    """

    def __init__(self, dataclass_type: type[T]) -> None:
        self._dataclass_type = dataclass_type
        if not is_dataclass(dataclass_type):  # pyright: ignore[reportUnnecessaryComparison]
            raise TypeError(f"{dataclass_type} is not a dataclass")
        self._field_names = {f.name for f in fields(dataclass_type)}

    def serialize(self, value: T) -> str:
        if not is_dataclass(value) or isinstance(value, type):
            raise TypeError(f"{value!r} is not a dataclass instance")
        return json.dumps(asdict(value))

    def deserialize(self, data: str) -> T:
        raw: dict[str, Any] = json.loads(data)
        return self._dataclass_type(**{k: v for k, v in raw.items() if k in self._field_names})
