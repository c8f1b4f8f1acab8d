"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the controller decoupled from SQLite
2. Use fake stores in tests to simulate storage faults
3. Swap the backend later without touching business logic

The interface is intentionally small: records are only ever added and read.
There is no update or delete.
"""

from abc import ABC, abstractmethod
from typing import Any

from society.models import Collection, Record


class RecordStoreInterface(ABC):
    """
    Abstract interface for the society's record store.

    Three independent collections (members, payments, expenses), each
    addressed by record id, plus secondary indexes declared by
    Collection.index_fields.
    """

    @abstractmethod
    async def open(self) -> None:
        """
        Make sure storage is initialized.

        Idempotent: creates the collections and indexes on first use only.
        Concurrent callers wait for the same initialization.

        Raises:
            InitializationError: If the storage cannot be opened or the
                schema cannot be created
        """
        pass

    @abstractmethod
    async def add(self, collection: Collection, record: Record) -> None:
        """
        Insert a record under its id.

        Args:
            collection: Target collection
            record: The record to persist

        Raises:
            DuplicateKeyError: If the id already exists in the collection
            StorageError: On any other storage fault
        """
        pass

    @abstractmethod
    async def get_all(self, collection: Collection) -> list[Record]:
        """
        Return every record in a collection.

        Order is unspecified. An empty collection returns an empty list.
        """
        pass

    @abstractmethod
    async def get_by_index(
        self,
        collection: Collection,
        index_name: str,
        value: Any,
    ) -> list[Record]:
        """
        Return the records whose indexed field equals value.

        Args:
            collection: Collection to search
            index_name: One of collection.index_fields
            value: Value to match

        Returns:
            Matching records, or an empty list

        Raises:
            StorageError: If the collection has no such index
        """
        pass

    @abstractmethod
    async def get(self, collection: Collection, record_id: str) -> Record:
        """
        Retrieve a record by id.

        Raises:
            NotFoundError: If no record has this id
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class InitializationError(StorageError):
    """Storage could not be opened or its schema could not be created."""
    pass


class NotFoundError(StorageError):
    """Record not found in storage."""
    pass


class DuplicateKeyError(StorageError):
    """Attempted to insert a record whose id already exists."""
    pass
