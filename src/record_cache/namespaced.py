"""Caller-facing cache over a ``CacheAdapter``.

Validates keys, scopes them under the adapter's cache namespace, applies the
default TTL and runs payloads through a serializer. Store outages are logged
and reported as misses or ``False``; only a failed scoped clear raises.

Usage:
    cache = NamespacedCache(RecordStoreCacheAdapter(client, "test", cache_namespace="sessions"))
    cache.set("abc", {"user": 1}, ttl=600)   # stored as "sessions:abc"
    cache.get("abc")                         # {"user": 1}
    cache.clear()                            # removes only "sessions:*"
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from record_cache.errors import RecordStoreError
from record_cache.keys import namespace_prefix, validate_key
from record_cache.serialization import PassthroughSerializer

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from record_cache.protocol import CacheAdapter
    from record_cache.serialization import Serializer

logger = logging.getLogger(__name__)


class NamespacedCache:
    def __init__(self, adapter: CacheAdapter, serializer: Serializer[Any] | None = None) -> None:
        self._adapter = adapter
        self._serializer: Serializer[Any] = serializer or PassthroughSerializer()
        self._prefix = namespace_prefix(adapter.cache_namespace)

    @property
    def adapter(self) -> CacheAdapter:
        return self._adapter

    def get(self, key: str, default: Any = None) -> Any:
        found = self.get_many([key])
        return found.get(key, default)

    def get_many(self, keys: Iterable[str]) -> dict[str, Any]:
        """Return the cached values for keys. Missing keys are absent from the result."""
        ids = {self._id(key): key for key in keys}
        if not ids:
            return {}
        try:
            payloads = self._adapter.fetch_many(list(ids))
        except RecordStoreError as e:
            logger.warning("Failed to fetch keys %s: %s", ", ".join(ids.values()), e)
            return {}

        result: dict[str, Any] = {}
        for cache_id, payload in payloads.items():
            key = ids.get(cache_id)
            if key is None:
                continue
            try:
                result[key] = None if payload is None else self._serializer.deserialize(payload)
            except Exception as e:
                logger.warning("Failed to deserialize cached key %s: %s", key, e)
                continue
            logger.debug("Cache hit for %s", key)
        return result

    def contains(self, key: str) -> bool:
        cache_id = self._id(key)
        try:
            return self._adapter.has(cache_id)
        except RecordStoreError as e:
            logger.warning("Failed to check key %s: %s", key, e)
            return False

    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        return self.set_many({key: value}, ttl)

    def set_many(self, values: Mapping[str, Any], ttl: int | None = None) -> bool:
        payloads: dict[str, Any] = {}
        serialized_all = True
        for key, value in values.items():
            cache_id = self._id(key)
            try:
                payloads[cache_id] = self._serializer.serialize(value)
            except Exception as e:
                logger.warning("Failed to serialize key %s: %s", key, e)
                serialized_all = False
        if not payloads:
            return serialized_all

        try:
            saved = self._adapter.save_many(payloads, ttl)
        except RecordStoreError as e:
            logger.warning("Failed to save keys %s: %s", ", ".join(values), e)
            return False
        if not saved:
            logger.warning("Failed to save keys %s", ", ".join(values))
        return saved and serialized_all

    def delete(self, key: str) -> bool:
        return self.delete_many([key])

    def delete_many(self, keys: Iterable[str]) -> bool:
        ids = [self._id(key) for key in keys]
        if not ids:
            return True
        try:
            deleted = self._adapter.delete_many(ids)
        except RecordStoreError as e:
            logger.warning("Failed to delete keys %s: %s", ", ".join(ids), e)
            return False
        if not deleted:
            logger.warning("Failed to delete keys %s", ", ".join(ids))
        return deleted

    def clear(self, prefix: str = "") -> bool:
        """Remove every entry of this cache whose key starts with prefix.

        Without a cache namespace and prefix this truncates the whole set.

        Raises:
            CacheError: If a matching record could not be removed.
        """
        try:
            cleared = self._adapter.clear(self._prefix + prefix)
        except RecordStoreError as e:
            logger.warning("Failed to clear cache: %s", e)
            return False
        if not cleared:
            logger.warning("Failed to clear cache under prefix %r", self._prefix + prefix)
        return cleared

    def _id(self, key: str) -> str:
        return self._prefix + validate_key(key)
