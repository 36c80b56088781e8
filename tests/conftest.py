"""Shared fixtures and store doubles for the investtrack test suite."""

import pytest

from investtrack.exceptions import StoreError
from investtrack.portfolio import InMemoryRecordStore, SqliteRecordStore
from investtrack.tracker import InvestmentTracker


class BrokenScanStore(InMemoryRecordStore):
    """Store whose scans fail, simulating a backend outage on reads."""

    def __init__(self, error: Exception = None):
        super().__init__()
        self.error = error or StoreError("database is locked")

    def scan(self, collection, predicate=None):
        raise self.error


class BrokenPatchStore(InMemoryRecordStore):
    """Store whose patches fail after inserts have already succeeded."""

    def patch(self, collection, record_id, fields):
        raise StoreError("disk I/O error")


@pytest.fixture(params=["memory", "sqlite"])
def any_store(request):
    """Each record store implementation in turn."""
    if request.param == "memory":
        yield InMemoryRecordStore()
    else:
        store = SqliteRecordStore(":memory:")
        yield store
        store.close()


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def tracker(store):
    return InvestmentTracker(store)


@pytest.fixture
def broken_scan_store():
    """Factory for a store whose reads raise the given error."""
    return BrokenScanStore


@pytest.fixture
def broken_patch_store():
    return BrokenPatchStore()
