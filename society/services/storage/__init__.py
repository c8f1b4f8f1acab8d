"""
Storage Services Package

Provides the abstract record store interface and its SQLite implementation.
"""

from society.services.storage.interface import (
    DuplicateKeyError,
    InitializationError,
    NotFoundError,
    RecordStoreInterface,
    StorageError,
)
from society.services.storage.sqlite_store import SQLiteRecordStore

__all__ = [
    # Interface
    "RecordStoreInterface",
    # Exceptions
    "DuplicateKeyError",
    "InitializationError",
    "NotFoundError",
    "StorageError",
    # SQLite implementation
    "SQLiteRecordStore",
]
