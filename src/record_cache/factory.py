from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from record_cache.adapter import RecordStoreCacheAdapter
from record_cache.config import load_cache_settings
from record_cache.errors import RecordStoreError
from record_cache.namespaced import NamespacedCache
from record_cache.stores.sqlite_store import SqliteRecordStore

if TYPE_CHECKING:
    from collections.abc import Iterator

    from record_cache.config import CacheSettings
    from record_cache.protocol import RecordStoreClient
    from record_cache.serialization import Serializer

logger = logging.getLogger(__name__)


def create_record_store(settings: CacheSettings) -> RecordStoreClient:
    """Build the record store client named by ``settings.backend``.

    For ``aerospike`` this connects a new ``aerospike.Client``; the caller owns
    it and must close it.

    Raises:
        RecordStoreError: If the Aerospike cluster cannot be reached.
    """
    if settings.backend == "sqlite":
        logger.debug("Using SQLite record store at %s", settings.db_path)
        return SqliteRecordStore(settings.db_path)

    import aerospike
    from aerospike import exception as aerospike_exception

    from record_cache.stores.aerospike_store import AerospikeRecordStore

    logger.debug("Connecting to Aerospike at %s", settings.hosts)
    try:
        client = aerospike.client({"hosts": list(settings.hosts)}).connect()
    except aerospike_exception.AerospikeError as e:
        raise RecordStoreError("Could not connect to Aerospike", cause=e) from e
    return AerospikeRecordStore(client)


def create_adapter(settings: CacheSettings, client: RecordStoreClient | None = None) -> RecordStoreCacheAdapter:
    if client is None:
        client = create_record_store(settings)
    return RecordStoreCacheAdapter(
        client,
        settings.namespace,
        set_name=settings.set_name,
        cache_namespace=settings.cache_namespace,
        default_ttl=settings.default_ttl,
    )


def create_cache(
    settings: CacheSettings | None = None,
    client: RecordStoreClient | None = None,
    serializer: Serializer[Any] | None = None,
) -> NamespacedCache:
    """Build a NamespacedCache from settings (loaded from the layered config when omitted)."""
    if settings is None:
        settings = load_cache_settings()
    return NamespacedCache(create_adapter(settings, client), serializer)


@contextmanager
def open_cache(
    settings: CacheSettings | None = None,
    serializer: Serializer[Any] | None = None,
) -> Iterator[NamespacedCache]:
    """Build a cache over a record store this context owns, closing the store on exit."""
    if settings is None:
        settings = load_cache_settings()
    store = create_record_store(settings)
    try:
        yield NamespacedCache(create_adapter(settings, store), serializer)
    finally:
        close = getattr(store, "close", None)
        if callable(close):
            close()
