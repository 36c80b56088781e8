"""
Record store for stock and asset documents.

The engine reads and writes plain dict documents through the RecordStore
interface: insert, get, patch, delete and predicate scans over two flat
collections (``stocks`` and ``assets``). Two implementations are provided,
an in-memory store for tests and ephemeral use and a SQLite store for
persistence.
"""

import json
import sqlite3
import threading
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional
import structlog

from ..exceptions import NotFoundError, StoreError

logger = structlog.get_logger(__name__)

STOCKS = "stocks"
ASSETS = "assets"
COLLECTIONS = (STOCKS, ASSETS)

Record = Dict[str, Any]
Predicate = Callable[[Record], bool]


def field_equals(field: str, value: Any) -> Predicate:
    """
    Build an equality predicate for scan().

    Example:
        >>> store.scan(STOCKS, field_equals("isActive", True))
    """
    def predicate(record: Record) -> bool:
        return record.get(field) == value
    return predicate


def _new_id() -> str:
    return uuid.uuid4().hex


class RecordStore(ABC):
    """
    Document store interface consumed by the ledgers.

    Every method returns copies; mutating a returned record never changes
    stored state. ``scan`` yields records in insertion order.
    """

    def _check_collection(self, collection: str) -> None:
        if collection not in COLLECTIONS:
            raise StoreError(
                f"Unknown collection: {collection}",
                details={"collection": collection, "expected": ", ".join(COLLECTIONS)}
            )

    @abstractmethod
    def insert(self, collection: str, record: Record) -> str:
        """Store a new record and return its generated id."""

    @abstractmethod
    def get(self, collection: str, record_id: str) -> Optional[Record]:
        """Return the record (with its ``id``) or None if missing."""

    @abstractmethod
    def patch(self, collection: str, record_id: str, fields: Record) -> None:
        """Merge ``fields`` into an existing record; NotFoundError if missing."""

    @abstractmethod
    def delete(self, collection: str, record_id: str) -> None:
        """Remove a record; NotFoundError if missing."""

    @abstractmethod
    def scan(self, collection: str, predicate: Optional[Predicate] = None) -> List[Record]:
        """Return all records matching ``predicate`` (all when None)."""

    @abstractmethod
    def transaction(self) -> Iterator[None]:
        """
        Context manager grouping writes into one atomic unit.

        Nested transactions join the outermost one.
        """


class InMemoryRecordStore(RecordStore):
    """
    Dict-backed store. Mutations are serialized with a re-entrant lock and
    transactions restore a snapshot when the block raises.

    Example:
        >>> store = InMemoryRecordStore()
        >>> stock_id = store.insert(STOCKS, {"name": "INFY", "isActive": True})
        >>> store.get(STOCKS, stock_id)["name"]
        'INFY'
    """

    def __init__(self):
        self._collections: Dict[str, Dict[str, Record]] = {name: {} for name in COLLECTIONS}
        self._lock = threading.RLock()
        self._depth = 0

        logger.debug("memory_store_initialized")

    def insert(self, collection: str, record: Record) -> str:
        self._check_collection(collection)
        record_id = _new_id()
        with self._lock:
            stored = {k: v for k, v in record.items() if k != "id"}
            self._collections[collection][record_id] = stored
        return record_id

    def get(self, collection: str, record_id: str) -> Optional[Record]:
        self._check_collection(collection)
        with self._lock:
            stored = self._collections[collection].get(record_id)
            if stored is None:
                return None
            return {"id": record_id, **stored}

    def patch(self, collection: str, record_id: str, fields: Record) -> None:
        self._check_collection(collection)
        with self._lock:
            stored = self._collections[collection].get(record_id)
            if stored is None:
                raise NotFoundError(
                    "Record not found",
                    collection=collection,
                    record_id=record_id
                )
            stored.update({k: v for k, v in fields.items() if k != "id"})

    def delete(self, collection: str, record_id: str) -> None:
        self._check_collection(collection)
        with self._lock:
            if self._collections[collection].pop(record_id, None) is None:
                raise NotFoundError(
                    "Record not found",
                    collection=collection,
                    record_id=record_id
                )

    def scan(self, collection: str, predicate: Optional[Predicate] = None) -> List[Record]:
        self._check_collection(collection)
        with self._lock:
            records = [
                {"id": record_id, **stored}
                for record_id, stored in self._collections[collection].items()
            ]
        if predicate is None:
            return records
        return [record for record in records if predicate(record)]

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            snapshot = {
                name: {record_id: dict(stored) for record_id, stored in records.items()}
                for name, records in self._collections.items()
            }
            self._depth = 1
            try:
                yield
            except BaseException:
                self._collections = snapshot
                logger.warning("memory_store_transaction_rolled_back")
                raise
            finally:
                self._depth = 0


class SqliteRecordStore(RecordStore):
    """
    Persistent store using SQLite, one table per collection.

    Each row holds the record id, an autoincrement sequence preserving
    insertion order, and the document serialized as JSON.

    Example:
        >>> store = SqliteRecordStore("portfolio.db")
        >>> stock_id = store.insert(STOCKS, {"name": "INFY", "isActive": True})
        >>> store.close()
    """

    def __init__(self, db_path: str = "investtrack.db"):
        """
        Initialize the SQLite store.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
        """
        self.db_path = db_path
        self._lock = threading.RLock()
        self._depth = 0

        try:
            self._connection = sqlite3.connect(db_path, check_same_thread=False)
        except sqlite3.Error as e:
            raise StoreError(
                "Failed to open database",
                details={"db_path": self.db_path},
                cause=e
            )

        self._init_database()

        logger.info("sqlite_store_initialized", db_path=self.db_path)

    def _init_database(self) -> None:
        """Initialize database schema."""
        try:
            with self._connection:
                cursor = self._connection.cursor()
                for collection in COLLECTIONS:
                    # Table names come from the fixed COLLECTIONS tuple only
                    cursor.execute(f"""
                        CREATE TABLE IF NOT EXISTS {collection} (
                            seq INTEGER PRIMARY KEY AUTOINCREMENT,
                            id TEXT NOT NULL UNIQUE,
                            data TEXT NOT NULL
                        )
                    """)

                logger.debug("database_schema_initialized")

        except sqlite3.Error as e:
            raise StoreError(
                "Failed to initialize database",
                details={"db_path": self.db_path},
                cause=e
            )

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            self._depth = 1
            try:
                # sqlite3's connection context manager commits on success
                # and rolls back when the block raises
                with self._connection:
                    yield
            except sqlite3.Error as e:
                raise StoreError(
                    "Transaction failed",
                    details={"db_path": self.db_path},
                    cause=e
                )
            finally:
                self._depth = 0

    def _execute(self, sql: str, params: tuple) -> sqlite3.Cursor:
        try:
            return self._connection.execute(sql, params)
        except sqlite3.Error as e:
            raise StoreError(
                "Database operation failed",
                details={"db_path": self.db_path},
                cause=e
            )

    def _decode(self, record_id: str, data: str) -> Record:
        try:
            document = json.loads(data)
        except ValueError as e:
            raise StoreError(
                "Corrupt stored document",
                details={"record_id": record_id},
                cause=e
            )
        return {"id": record_id, **document}

    def insert(self, collection: str, record: Record) -> str:
        self._check_collection(collection)
        record_id = _new_id()
        document = {k: v for k, v in record.items() if k != "id"}
        with self.transaction():
            self._execute(
                f"INSERT INTO {collection} (id, data) VALUES (?, ?)",
                (record_id, json.dumps(document))
            )
        return record_id

    def get(self, collection: str, record_id: str) -> Optional[Record]:
        self._check_collection(collection)
        with self._lock:
            row = self._execute(
                f"SELECT id, data FROM {collection} WHERE id = ?",
                (record_id,)
            ).fetchone()
        if row is None:
            return None
        return self._decode(*row)

    def patch(self, collection: str, record_id: str, fields: Record) -> None:
        self._check_collection(collection)
        with self.transaction():
            current = self.get(collection, record_id)
            if current is None:
                raise NotFoundError(
                    "Record not found",
                    collection=collection,
                    record_id=record_id
                )
            current.update({k: v for k, v in fields.items() if k != "id"})
            del current["id"]
            self._execute(
                f"UPDATE {collection} SET data = ? WHERE id = ?",
                (json.dumps(current), record_id)
            )

    def delete(self, collection: str, record_id: str) -> None:
        self._check_collection(collection)
        with self.transaction():
            cursor = self._execute(
                f"DELETE FROM {collection} WHERE id = ?",
                (record_id,)
            )
            if cursor.rowcount == 0:
                raise NotFoundError(
                    "Record not found",
                    collection=collection,
                    record_id=record_id
                )

    def scan(self, collection: str, predicate: Optional[Predicate] = None) -> List[Record]:
        self._check_collection(collection)
        with self._lock:
            rows = self._execute(
                f"SELECT id, data FROM {collection} ORDER BY seq",
                ()
            ).fetchall()
        records = [self._decode(record_id, data) for record_id, data in rows]
        if predicate is None:
            return records
        return [record for record in records if predicate(record)]

    def close(self) -> None:
        """Close the underlying connection."""
        with self._lock:
            self._connection.close()
        logger.debug("sqlite_store_closed", db_path=self.db_path)

    def __enter__(self) -> "SqliteRecordStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_store(backend: str = "sqlite", db_path: str = "investtrack.db") -> RecordStore:
    """
    Create a record store by backend name.

    Args:
        backend: "sqlite" or "memory"
        db_path: Database path for the SQLite backend

    Raises:
        StoreError: If the backend name is unknown
    """
    backend = backend.strip().lower()
    if backend == "memory":
        return InMemoryRecordStore()
    if backend == "sqlite":
        return SqliteRecordStore(db_path)
    raise StoreError(
        f"Unknown store backend: {backend}",
        details={"expected": "sqlite or memory"}
    )
