from record_cache.adapter import RecordStoreCacheAdapter
from record_cache.errors import CacheError, InvalidKeyError, RecordStoreError
from record_cache.namespaced import NamespacedCache
from record_cache.protocol import CacheAdapter, RecordStoreClient
from record_cache.records import PAYLOAD_BIN, KeyPolicy, Record, RecordKey, RecordMetadata
from record_cache.status import Outcome, StatusCode, is_status_ok_or_not_found

__all__ = [
    "PAYLOAD_BIN",
    "CacheAdapter",
    "CacheError",
    "InvalidKeyError",
    "KeyPolicy",
    "NamespacedCache",
    "Outcome",
    "Record",
    "RecordKey",
    "RecordMetadata",
    "RecordStoreCacheAdapter",
    "RecordStoreClient",
    "RecordStoreError",
    "StatusCode",
    "is_status_ok_or_not_found",
]
