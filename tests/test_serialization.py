from dataclasses import dataclass

import pytest

from record_cache.serialization import DataclassSerializer, JsonSerializer, PassthroughSerializer


@dataclass(frozen=True)
class Session:
    user_id: int
    token: str


class TestPassthroughSerializer:
    def test_returns_value_unchanged(self) -> None:
        serializer = PassthroughSerializer()
        value = {"a": [1, 2]}
        assert serializer.serialize(value) is value
        assert serializer.deserialize(value) is value


class TestJsonSerializer:
    def test_serializes_to_json_string(self) -> None:
        serializer: JsonSerializer[dict[str, list[int]]] = JsonSerializer()
        assert serializer.serialize({"a": [1, 2]}) == '{"a": [1, 2]}'
        assert serializer.deserialize('{"a": [1, 2]}') == {"a": [1, 2]}

    def test_unserializable_value_raises(self) -> None:
        with pytest.raises(TypeError):
            JsonSerializer().serialize(object())


class TestDataclassSerializer:
    def test_round_trip(self) -> None:
        serializer = DataclassSerializer(Session)
        assert serializer.deserialize(serializer.serialize(Session(1, "abc"))) == Session(1, "abc")

    def test_ignores_unknown_fields(self) -> None:
        serializer = DataclassSerializer(Session)
        assert serializer.deserialize('{"user_id": 2, "token": "t", "extra": true}') == Session(2, "t")

    def test_rejects_non_dataclass_type(self) -> None:
        with pytest.raises(TypeError, match="not a dataclass"):
            DataclassSerializer(dict)

    def test_rejects_non_dataclass_value(self) -> None:
        with pytest.raises(TypeError, match="not a dataclass instance"):
            DataclassSerializer(Session).serialize({"user_id": 1})  # type: ignore[arg-type]
