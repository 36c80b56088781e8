"""
Unit tests for the record stores.

Tests cover:
- CRUD semantics shared by the in-memory and SQLite stores
- Equality-filtered scans and insertion ordering
- Transaction commit, rollback and nesting
- SQLite persistence across connections
"""

import pytest

from investtrack.exceptions import NotFoundError, StoreError
from investtrack.portfolio.store import (
    ASSETS,
    STOCKS,
    InMemoryRecordStore,
    SqliteRecordStore,
    field_equals,
    open_store,
)


class TestRecordStoreContract:
    """Behaviour every RecordStore must share."""

    def test_insert_and_get(self, any_store):
        record_id = any_store.insert(STOCKS, {"name": "INFY", "quantity": 10, "isActive": True})

        record = any_store.get(STOCKS, record_id)

        assert record == {"id": record_id, "name": "INFY", "quantity": 10, "isActive": True}

    def test_ids_are_unique(self, any_store):
        first = any_store.insert(STOCKS, {"name": "A"})
        second = any_store.insert(STOCKS, {"name": "A"})
        assert first != second

    def test_get_missing_returns_none(self, any_store):
        assert any_store.get(STOCKS, "missing") is None

    def test_collections_are_separate(self, any_store):
        record_id = any_store.insert(ASSETS, {"name": "Gold"})
        assert any_store.get(STOCKS, record_id) is None
        assert any_store.scan(STOCKS) == []

    def test_patch_merges_fields(self, any_store):
        record_id = any_store.insert(STOCKS, {"name": "INFY", "quantity": 10})

        any_store.patch(STOCKS, record_id, {"quantity": 6, "isActive": True})

        assert any_store.get(STOCKS, record_id) == {
            "id": record_id, "name": "INFY", "quantity": 6, "isActive": True
        }

    def test_patch_missing_raises(self, any_store):
        with pytest.raises(NotFoundError):
            any_store.patch(STOCKS, "missing", {"quantity": 1})

    def test_delete(self, any_store):
        record_id = any_store.insert(STOCKS, {"name": "INFY"})

        any_store.delete(STOCKS, record_id)

        assert any_store.get(STOCKS, record_id) is None

    def test_delete_missing_raises(self, any_store):
        with pytest.raises(NotFoundError):
            any_store.delete(STOCKS, "missing")

    def test_scan_preserves_insertion_order(self, any_store):
        names = ["C", "A", "B"]
        for name in names:
            any_store.insert(STOCKS, {"name": name})

        assert [r["name"] for r in any_store.scan(STOCKS)] == names

    def test_scan_with_equality_predicate(self, any_store):
        any_store.insert(STOCKS, {"name": "A", "isActive": True})
        any_store.insert(STOCKS, {"name": "B", "isActive": False})
        any_store.insert(STOCKS, {"name": "C", "isActive": True})

        active = any_store.scan(STOCKS, field_equals("isActive", True))

        assert [r["name"] for r in active] == ["A", "C"]

    def test_returned_records_are_copies(self, any_store):
        record_id = any_store.insert(STOCKS, {"name": "INFY"})

        record = any_store.get(STOCKS, record_id)
        record["name"] = "changed"
        any_store.scan(STOCKS)[0]["name"] = "changed"

        assert any_store.get(STOCKS, record_id)["name"] == "INFY"

    def test_unknown_collection_raises(self, any_store):
        with pytest.raises(StoreError):
            any_store.insert("trades", {"name": "INFY"})

    def test_transaction_commits(self, any_store):
        with any_store.transaction():
            record_id = any_store.insert(STOCKS, {"name": "INFY"})
            any_store.patch(STOCKS, record_id, {"quantity": 5})

        assert any_store.get(STOCKS, record_id)["quantity"] == 5

    def test_transaction_rolls_back_on_error(self, any_store):
        kept = any_store.insert(STOCKS, {"name": "KEEP", "quantity": 1})

        with pytest.raises(RuntimeError):
            with any_store.transaction():
                any_store.insert(STOCKS, {"name": "NEW"})
                any_store.patch(STOCKS, kept, {"quantity": 99})
                raise RuntimeError("boom")

        records = any_store.scan(STOCKS)
        assert [r["name"] for r in records] == ["KEEP"]
        assert records[0]["quantity"] == 1

    def test_nested_transaction_joins_outer(self, any_store):
        with pytest.raises(RuntimeError):
            with any_store.transaction():
                with any_store.transaction():
                    any_store.insert(STOCKS, {"name": "INNER"})
                any_store.insert(STOCKS, {"name": "OUTER"})
                raise RuntimeError("boom")

        assert any_store.scan(STOCKS) == []


class TestSqliteRecordStore:
    """SQLite-specific behaviour."""

    def test_persists_across_connections(self, tmp_path):
        db_path = str(tmp_path / "portfolio.db")

        with SqliteRecordStore(db_path) as store:
            record_id = store.insert(STOCKS, {"name": "INFY", "buyDate": "2024-01-15"})

        with SqliteRecordStore(db_path) as reopened:
            assert reopened.get(STOCKS, record_id) == {
                "id": record_id, "name": "INFY", "buyDate": "2024-01-15"
            }

    def test_rollback_is_not_persisted(self, tmp_path):
        db_path = str(tmp_path / "portfolio.db")

        with SqliteRecordStore(db_path) as store:
            with pytest.raises(RuntimeError):
                with store.transaction():
                    store.insert(STOCKS, {"name": "GHOST"})
                    raise RuntimeError("boom")

        with SqliteRecordStore(db_path) as reopened:
            assert reopened.scan(STOCKS) == []


class TestOpenStore:

    def test_memory_backend(self):
        assert isinstance(open_store("memory"), InMemoryRecordStore)

    def test_sqlite_backend(self):
        store = open_store("sqlite", ":memory:")
        try:
            assert isinstance(store, SqliteRecordStore)
        finally:
            store.close()

    def test_unknown_backend(self):
        with pytest.raises(StoreError):
            open_store("postgres")
