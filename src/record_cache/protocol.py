from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol

from record_cache.records import KeyPolicy, Record, RecordKey

type ScanCallback = Callable[[Record], object]


class RecordStoreClient(Protocol):
    """Operations the cache adapter needs from a record store.

    Every operation returns an integer status (see ``record_cache.status``).
    TTLs are seconds, ``0`` meaning the record never expires.
    """

    def init_key(self, namespace: str, set_name: str, key: str) -> RecordKey: ...

    def get(self, key: RecordKey) -> tuple[int, Record]: ...

    def get_many(self, keys: Sequence[RecordKey]) -> tuple[int, list[Record]]: ...

    def put(
        self,
        key: RecordKey,
        bins: Mapping[str, Any],
        ttl: int = 0,
        *,
        key_policy: KeyPolicy = KeyPolicy.DIGEST,
    ) -> int: ...

    def remove(self, key: RecordKey) -> int: ...

    def truncate(self, namespace: str, set_name: str, before_nanos: int = 0) -> int: ...

    def scan(self, namespace: str, set_name: str, callback: ScanCallback) -> int: ...

    def error(self) -> str: ...


class CacheAdapter(Protocol):
    """The pooled-item cache contract implemented on top of a record store."""

    @property
    def cache_namespace(self) -> str: ...

    @property
    def default_ttl(self) -> int: ...

    def fetch_many(self, ids: Sequence[str]) -> dict[str, Any]: ...

    def has(self, cache_id: str) -> bool: ...

    def delete_many(self, ids: Sequence[str]) -> bool: ...

    def save_many(self, values: Mapping[str, Any], ttl: int | None = None) -> bool: ...

    def clear(self, namespace: str = "") -> bool: ...
