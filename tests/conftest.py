"""Shared pytest fixtures for test modules."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from record_cache.adapter import RecordStoreCacheAdapter
from record_cache.namespaced import NamespacedCache
from record_cache.stores.sqlite_store import SqliteRecordStore

if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all RECORD_CACHE__ env vars so tests are isolated from the shell."""
    for key in list(os.environ):
        if key.startswith("RECORD_CACHE__"):
            monkeypatch.delenv(key)


@pytest.fixture
def sqlite_store(tmp_path: Path) -> Generator[SqliteRecordStore]:
    """A SqliteRecordStore on a temporary database, closed after the test."""
    store = SqliteRecordStore(tmp_path / "records.db")
    yield store
    store.close()


@pytest.fixture
def sqlite_cache(sqlite_store: SqliteRecordStore) -> NamespacedCache:
    """A NamespacedCache over sqlite_store, scoped to the ``app`` cache namespace."""
    return NamespacedCache(RecordStoreCacheAdapter(sqlite_store, "test", "cache", "app"))
