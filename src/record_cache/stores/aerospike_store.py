"""Record store client binding for an Aerospike cluster.

Wraps a connected ``aerospike.Client``. The Python client reports failures
by raising; this binding turns them back into status codes and keeps the
last error message for ``error()``.

Usage:
    client = aerospike.client({"hosts": [("127.0.0.1", 3000)]}).connect()
    store = AerospikeRecordStore(client)
    adapter = RecordStoreCacheAdapter(store, "test")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import aerospike
from aerospike import exception as aerospike_exception

from record_cache.records import TTL_NEVER_EXPIRE, KeyPolicy, Record, RecordKey, RecordMetadata
from record_cache.status import StatusCode

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from record_cache.protocol import ScanCallback

logger = logging.getLogger(__name__)

# Aerospike reports "never expires" as the maximum unsigned 32-bit TTL.
_SERVER_NEVER_EXPIRE = 0xFFFFFFFF


class AerospikeRecordStore:
    """Record store client over ``aerospike.Client``.

    The client is borrowed: connecting and closing it stays with the caller.
    """

    def __init__(self, client: Any) -> None:
        self._client = client
        self._last_error = ""

    def init_key(self, namespace: str, set_name: str, key: str) -> RecordKey:
        return RecordKey(namespace, set_name, key)

    def get(self, key: RecordKey) -> tuple[int, Record]:
        try:
            _, meta, bins = self._client.get(_as_tuple(key))
        except aerospike_exception.AerospikeError as e:
            return self._fail(e), Record(key)
        return StatusCode.OK, Record(key, _metadata(meta), bins)

    def get_many(self, keys: Sequence[RecordKey]) -> tuple[int, list[Record]]:
        if not keys:
            return StatusCode.OK, []
        try:
            batch = self._client.batch_read([_as_tuple(key) for key in keys])
        except aerospike_exception.AerospikeError as e:
            return self._fail(e), [Record(key) for key in keys]

        records: list[Record] = []
        for key, batch_record in zip(keys, batch.batch_records, strict=True):
            if batch_record.result != StatusCode.OK or batch_record.record is None:
                records.append(Record(key))
                continue
            _, meta, bins = batch_record.record
            records.append(Record(key, _metadata(meta), bins))
        return StatusCode.OK, records

    def put(
        self,
        key: RecordKey,
        bins: Mapping[str, Any],
        ttl: int = 0,
        *,
        key_policy: KeyPolicy = KeyPolicy.DIGEST,
    ) -> int:
        meta = {"ttl": ttl if ttl > 0 else aerospike.TTL_NEVER_EXPIRE}
        policy = {"key": aerospike.POLICY_KEY_SEND if key_policy is KeyPolicy.SEND else aerospike.POLICY_KEY_DIGEST}
        try:
            self._client.put(_as_tuple(key), dict(bins), meta=meta, policy=policy)
        except aerospike_exception.AerospikeError as e:
            return self._fail(e)
        return StatusCode.OK

    def remove(self, key: RecordKey) -> int:
        try:
            self._client.remove(_as_tuple(key))
        except aerospike_exception.AerospikeError as e:
            return self._fail(e)
        return StatusCode.OK

    def truncate(self, namespace: str, set_name: str, before_nanos: int = 0) -> int:
        try:
            self._client.truncate(namespace, set_name, before_nanos)
        except aerospike_exception.AerospikeError as e:
            return self._fail(e)
        return StatusCode.OK

    def scan(self, namespace: str, set_name: str, callback: ScanCallback) -> int:
        """Run callback for every record in the set.

        An exception raised by callback stops the scan and is re-raised here.
        """
        raised: list[BaseException] = []

        def visit(result: tuple[Any, Any, Any]) -> bool | None:
            key, meta, bins = result
            try:
                callback(Record(_from_tuple(key), _metadata(meta), bins))
            except Exception as e:
                raised.append(e)
                return False
            return None

        try:
            self._client.query(namespace, set_name).foreach(visit)
        except aerospike_exception.AerospikeError as e:
            if raised:
                raise raised[0] from e
            return self._fail(e)
        if raised:
            raise raised[0]
        return StatusCode.OK

    def error(self) -> str:
        return self._last_error

    def close(self) -> None:
        """Close the wrapped client. Only for clients this store was handed ownership of."""
        self._client.close()

    def _fail(self, error: aerospike_exception.AerospikeError) -> int:
        status = _status_of(error)
        self._last_error = str(getattr(error, "msg", None) or error)
        if status != StatusCode.ERR_RECORD_NOT_FOUND:
            logger.warning("Aerospike error %d: %s", status, self._last_error)
        return status


def _status_of(error: aerospike_exception.AerospikeError) -> int:
    if isinstance(error, aerospike_exception.RecordNotFound):
        return StatusCode.ERR_RECORD_NOT_FOUND
    code = getattr(error, "code", None)
    if isinstance(code, int):
        return code
    return StatusCode.ERR_CLIENT


def _as_tuple(key: RecordKey) -> tuple[Any, ...]:
    if key.digest is not None and key.key is None:
        return (key.namespace, key.set_name, None, key.digest)
    return (key.namespace, key.set_name, key.key)


def _from_tuple(key: tuple[Any, ...]) -> RecordKey:
    namespace, set_name, user_key = key[0], key[1], key[2]
    digest = key[3] if len(key) > 3 else None
    return RecordKey(namespace, set_name, None if user_key is None else str(user_key), digest)


def _metadata(meta: Mapping[str, Any] | None) -> RecordMetadata | None:
    if meta is None:
        return None
    ttl = int(meta.get("ttl", 0))
    return RecordMetadata(TTL_NEVER_EXPIRE if ttl == _SERVER_NEVER_EXPIRE else ttl, int(meta.get("gen", 0)))
