from record_cache.stores.sqlite_store import SqliteRecordStore

__all__ = ["SqliteRecordStore"]
