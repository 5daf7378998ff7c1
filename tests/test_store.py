import sqlite3

import pytest

from lectern_core.errors import StoreError
from lectern_core.store import SqliteDocumentStore, WriteRecord, classify_sqlite_error


@pytest.fixture
def store(tmp_path):
    with SqliteDocumentStore(str(tmp_path / "lectern.db")) as s:
        yield s


def test_write_and_read_back(store):
    store.write_batch("search_index", [WriteRecord("céus", {"locations": ["pt_nvi/gn/1/1"]})])
    assert store.get("search_index", "céus") == {"locations": ["pt_nvi/gn/1/1"]}
    assert store.get("search_index", "missing") is None


def test_rewrite_replaces_document(store):
    store.write_batch("search_index", [WriteRecord("earth", {"locations": ["a"]})])
    store.write_batch("search_index", [WriteRecord("earth", {"locations": ["b"]})])

    assert store.get("search_index", "earth") == {"locations": ["b"]}
    assert store.count("search_index") == 1


def test_collections_are_separate(store):
    store.write_batch("versions", [WriteRecord("en_kjv", {"name": "KJV"})])
    store.write_batch("search_index", [WriteRecord("en_kjv", {"locations": []})])

    assert store.keys("versions") == ["en_kjv"]
    assert store.get("versions", "en_kjv") == {"name": "KJV"}


def test_locked_database_is_transient(tmp_path):
    path = str(tmp_path / "lectern.db")
    holder = sqlite3.connect(path)
    store = SqliteDocumentStore(path, timeout=0.05)
    holder.execute("BEGIN EXCLUSIVE")
    try:
        with pytest.raises(StoreError) as exc:
            store.write_batch("search_index", [WriteRecord("earth", {})])
        assert exc.value.transient
    finally:
        holder.rollback()
        holder.close()
        store.close()


def test_classification():
    assert classify_sqlite_error(sqlite3.OperationalError("database is locked")).transient
    assert not classify_sqlite_error(sqlite3.OperationalError("no such table: documents")).transient
    assert not classify_sqlite_error(sqlite3.IntegrityError("NOT NULL constraint failed")).transient


def test_unopenable_path_is_a_store_error(tmp_path):
    with pytest.raises(StoreError, match="cannot open document store") as exc:
        SqliteDocumentStore(str(tmp_path / "missing" / "lectern.db"))
    assert not exc.value.transient
    assert exc.value.stage == "persist"
