"""
SQLite Storage Implementation

DESIGN DECISION: SQLite is used as the storage backend because:
1. It is a single local file, so the app needs no server
2. Writes are durable once committed and survive restarts
3. It gives us primary keys and secondary indexes for free

Each collection is one table. The record itself is stored as JSON in the
"data" column; every indexed field is copied into its own column so it can
carry a real SQLite index.

TRADEOFFS:
- sqlite3 is blocking, so every call runs in a worker thread
- One shared connection, guarded by a thread lock, serves the whole process
"""

import asyncio
import sqlite3
import threading
from typing import Any, Callable, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from society.config import StorageSettings, get_settings
from society.models import Collection, Record
from society.services.storage.interface import (
    DuplicateKeyError,
    InitializationError,
    NotFoundError,
    RecordStoreInterface,
    StorageError,
)


class SQLiteRecordStore(RecordStoreInterface):
    """
    SQLite implementation of the record store.

    The connection is opened lazily on first use and reused for the life
    of the process.
    """

    def __init__(
        self,
        settings: Optional[StorageSettings] = None,
        database_path: Optional[str] = None,
    ):
        """
        Initialize the store.

        Args:
            settings: Storage settings. Loaded from the environment if None.
            database_path: Overrides settings.database_path when given.
        """
        self._settings = settings or get_settings().storage
        self._path = database_path or self._settings.database_path
        self._conn: Optional[sqlite3.Connection] = None
        # Shared by UI sessions on different threads and event loops
        self._open_lock = threading.Lock()
        self._db_lock = threading.Lock()
        self._logger = structlog.get_logger(__name__)

    @property
    def database_path(self) -> str:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    # -------------------------------------------------------------------------
    # Connection and schema
    # -------------------------------------------------------------------------

    def _connect(self) -> sqlite3.Connection:
        """Open the database file and create any missing tables and indexes."""
        conn = sqlite3.connect(
            self._path,
            timeout=self._settings.timeout_seconds,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                for collection in Collection:
                    self._create_collection(conn, collection)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    @staticmethod
    def _create_collection(conn: sqlite3.Connection, collection: Collection) -> None:
        index_columns = "".join(
            f", {field} TEXT" for field in collection.index_fields
        )
        conn.execute(
            f"CREATE TABLE IF NOT EXISTS {collection.value} ("
            f"id TEXT PRIMARY KEY, data TEXT NOT NULL{index_columns})"
        )
        for field in collection.index_fields:
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{collection.value}_{field} "
                f"ON {collection.value} ({field})"
            )

    def _connect_with_retry(self) -> sqlite3.Connection:
        """Open the database, retrying while the file is locked or busy."""
        retrying = Retrying(
            stop=stop_after_attempt(self._settings.open_retry_attempts),
            wait=wait_exponential(
                multiplier=0.5,
                max=self._settings.open_retry_max_wait_seconds,
            ),
            retry=retry_if_exception_type(sqlite3.OperationalError),
            reraise=True,
        )
        return retrying(self._connect)

    def _open_once(self) -> bool:
        """Connect unless already connected. Returns True if this call connected."""
        with self._open_lock:
            # Another caller may have finished while we waited
            if self._conn is not None:
                return False
            self._conn = self._connect_with_retry()
            return True

    async def open(self) -> None:
        """Open the database once; later calls return immediately."""
        if self._conn is not None:
            return

        try:
            opened = await asyncio.to_thread(self._open_once)
        except sqlite3.Error as e:
            raise InitializationError(
                f"Failed to open database {self._path}: {e}"
            ) from e

        if opened:
            self._logger.info("store_opened", path=self._path)

    def _close(self) -> None:
        with self._open_lock, self._db_lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    async def close(self) -> None:
        """Close the connection. The next operation reopens it."""
        await asyncio.to_thread(self._close)

    async def _run(self, operation: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking operation on the shared connection in a worker thread."""
        await self.open()

        def locked() -> Any:
            with self._db_lock:
                if self._conn is None:
                    raise StorageError("Store was closed")
                return operation(self._conn, *args)

        return await asyncio.to_thread(locked)

    # -------------------------------------------------------------------------
    # Row conversion
    # -------------------------------------------------------------------------

    def _rows_to_records(
        self,
        collection: Collection,
        rows: list[sqlite3.Row],
    ) -> list[Record]:
        records = []
        for row in rows:
            try:
                records.append(
                    collection.record_type.model_validate_json(row["data"])
                )
            except PydanticValidationError as e:
                # Skip malformed rows rather than failing the whole load
                self._logger.warning(
                    "malformed_record_skipped",
                    collection=collection.value,
                    error=str(e),
                )
        return records

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def add(self, collection: Collection, record: Record) -> None:
        """Insert a record; the row is committed before this returns."""
        if not isinstance(record, collection.record_type):
            raise StorageError(
                f"Cannot add {type(record).__name__} to {collection.value}"
            )

        columns = ["id", "data", *collection.index_fields]
        values = [
            record.id,
            record.model_dump_json(),
            *(str(getattr(record, field)) for field in collection.index_fields),
        ]
        sql = (
            f"INSERT INTO {collection.value} ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)})"
        )

        def insert(conn: sqlite3.Connection) -> None:
            with conn:
                conn.execute(sql, values)

        try:
            await self._run(insert)
        except sqlite3.IntegrityError as e:
            raise DuplicateKeyError(
                f"{collection.value} already contains id {record.id}"
            ) from e
        except sqlite3.Error as e:
            raise StorageError(f"Failed to add to {collection.value}: {e}") from e

    async def get_all(self, collection: Collection) -> list[Record]:
        """Return every record in a collection."""
        def select(conn: sqlite3.Connection) -> list[sqlite3.Row]:
            return conn.execute(f"SELECT data FROM {collection.value}").fetchall()

        try:
            rows = await self._run(select)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {collection.value}: {e}") from e

        return self._rows_to_records(collection, rows)

    async def get_by_index(
        self,
        collection: Collection,
        index_name: str,
        value: Any,
    ) -> list[Record]:
        """Return the records whose indexed field equals value."""
        if index_name not in collection.index_fields:
            raise StorageError(
                f"{collection.value} has no index named {index_name!r}"
            )

        def select(conn: sqlite3.Connection) -> list[sqlite3.Row]:
            return conn.execute(
                f"SELECT data FROM {collection.value} WHERE {index_name} = ?",
                (str(value),),
            ).fetchall()

        try:
            rows = await self._run(select)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to query {collection.value}: {e}") from e

        return self._rows_to_records(collection, rows)

    async def get(self, collection: Collection, record_id: str) -> Record:
        """Retrieve a record by its id."""
        def select(conn: sqlite3.Connection) -> Optional[sqlite3.Row]:
            return conn.execute(
                f"SELECT data FROM {collection.value} WHERE id = ?",
                (record_id,),
            ).fetchone()

        try:
            row = await self._run(select)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {collection.value}: {e}") from e

        if row is None:
            raise NotFoundError(f"{collection.value} has no id {record_id}")
        return collection.record_type.model_validate_json(row["data"])
