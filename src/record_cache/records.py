from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

PAYLOAD_BIN = "data"
TTL_NEVER_EXPIRE = -1


class KeyPolicy(Enum):
    """Whether the store keeps the user key with the record or only its digest."""

    DIGEST = "digest"
    SEND = "send"


@dataclass(frozen=True, slots=True)
class RecordKey:
    namespace: str
    set_name: str
    key: str | None
    digest: bytes | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class RecordMetadata:
    ttl: int
    generation: int


@dataclass(frozen=True, slots=True)
class Record:
    """A record as read back from the store.

    ``metadata is None`` means the record does not exist.
    """

    key: RecordKey
    metadata: RecordMetadata | None = None
    bins: Mapping[str, Any] | None = None

    @property
    def exists(self) -> bool:
        return self.metadata is not None
