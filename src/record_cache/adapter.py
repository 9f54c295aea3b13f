"""Cache adapter over a namespace/set/key record store.

Translates cache semantics into record store primitives:

- a cache key becomes a ``RecordKey`` in the configured namespace and set,
  built by the client so the store's key encoding is used as-is;
- the payload lives in a single bin named ``data``;
- status codes collapse to booleans, except during a scoped clear where a
  failed remove raises ``CacheError``.

Usage:
    adapter = RecordStoreCacheAdapter(client, "test", set_name="cache", default_ttl=3600)
    adapter.save_many({"users:1": "alice"})
    adapter.fetch_many(["users:1", "users:2"])  # {"users:1": "alice"}
    adapter.clear("users:")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from record_cache.errors import CacheError
from record_cache.keys import validate_key
from record_cache.records import PAYLOAD_BIN, KeyPolicy, Record, RecordKey
from record_cache.status import StatusCode, is_status_ok_or_not_found

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from record_cache.protocol import RecordStoreClient

logger = logging.getLogger(__name__)


class RecordStoreCacheAdapter:
    """Cache adapter backed by a borrowed record store client.

    Args:
        client: Record store client. The adapter never connects or closes it.
        namespace: Store namespace holding the cache set.
        set_name: Store set holding the cache records.
        cache_namespace: Sub-namespace prefix scoping this cache's keys.
        default_ttl: Lifetime in seconds for saves without an explicit TTL, 0 for no expiry.
    """

    def __init__(
        self,
        client: RecordStoreClient,
        namespace: str,
        set_name: str = "cache",
        cache_namespace: str = "",
        default_ttl: int = 0,
    ) -> None:
        if not namespace:
            raise ValueError("Record store namespace must not be empty")
        if default_ttl < 0:
            raise ValueError(f"Default TTL must be non-negative, got {default_ttl}")
        if cache_namespace:
            validate_key(cache_namespace)
        self._client = client
        self._namespace = namespace
        self._set_name = set_name
        self._cache_namespace = cache_namespace
        self._default_ttl = default_ttl

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def set_name(self) -> str:
        return self._set_name

    @property
    def cache_namespace(self) -> str:
        return self._cache_namespace

    @property
    def default_ttl(self) -> int:
        return self._default_ttl

    def fetch_many(self, ids: Sequence[str]) -> dict[str, Any]:
        """Read all ids in one bulk request. Misses are left out of the result."""
        keys = [self._create_key(cache_id) for cache_id in ids]
        status, records = self._client.get_many(keys)
        if not is_status_ok_or_not_found(status):
            logger.warning("Bulk read of %d keys returned status %d: %s", len(keys), status, self._client.error())

        result: dict[str, Any] = {}
        for record in records:
            if record.metadata is None or record.key.key is None:
                continue
            result[record.key.key] = _payload(record)
        logger.debug("Fetched %d of %d keys", len(result), len(keys))
        return result

    def has(self, cache_id: str) -> bool:
        status, _ = self._client.get(self._create_key(cache_id))
        return status == StatusCode.OK

    def delete_many(self, ids: Sequence[str]) -> bool:
        removed_all = True
        for cache_id in ids:
            status = self._client.remove(self._create_key(cache_id))
            if not is_status_ok_or_not_found(status):
                logger.warning("Failed to remove key %s (status %d): %s", cache_id, status, self._client.error())
                removed_all = False
        return removed_all

    def save_many(self, values: Mapping[str, Any], ttl: int | None = None) -> bool:
        """Write every entry, in mapping order. True only if all writes succeeded."""
        if ttl is None:
            ttl = self._default_ttl
        if ttl < 0:
            raise ValueError(f"TTL must be non-negative, got {ttl}")

        saved_all = True
        for cache_id, value in values.items():
            status = self._client.put(
                self._create_key(cache_id),
                {PAYLOAD_BIN: value},
                ttl,
                key_policy=KeyPolicy.SEND,
            )
            if not is_status_ok_or_not_found(status):
                logger.warning("Failed to save key %s (status %d): %s", cache_id, status, self._client.error())
                saved_all = False
        return saved_all

    def clear(self, namespace: str = "") -> bool:
        """Remove every record in the set, or only those whose key starts with namespace.

        Raises:
            CacheError: If a record matching namespace could not be removed.
        """
        if namespace == "":
            status = self._client.truncate(self._namespace, self._set_name, 0)
            logger.debug("Truncated %s.%s (status %d)", self._namespace, self._set_name, status)
            return is_status_ok_or_not_found(status)

        removed = 0

        def clear_namespace(record: Record) -> None:
            nonlocal removed
            key = record.key.key
            if key is None or not key.startswith(namespace):
                return
            status = self._client.remove(record.key)
            if not is_status_ok_or_not_found(status):
                raise CacheError(self._client.error())
            removed += 1

        status = self._client.scan(self._namespace, self._set_name, clear_namespace)
        logger.debug("Cleared %d records under %r (scan status %d)", removed, namespace, status)
        return is_status_ok_or_not_found(status)

    def _create_key(self, key: str) -> RecordKey:
        return self._client.init_key(self._namespace, self._set_name, key)


def _payload(record: Record) -> Any:
    if record.bins is None:
        return None
    return record.bins.get(PAYLOAD_BIN)
