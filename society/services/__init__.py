"""Services package."""

from society.services.documents import (
    DocumentRenderError,
    DocumentRenderer,
)
from society.services.image import (
    PhotoError,
    PhotoService,
)
from society.services.storage import (
    DuplicateKeyError,
    InitializationError,
    NotFoundError,
    RecordStoreInterface,
    SQLiteRecordStore,
    StorageError,
)

__all__ = [
    # Documents
    "DocumentRenderError",
    "DocumentRenderer",
    # Photos
    "PhotoError",
    "PhotoService",
    # Storage
    "DuplicateKeyError",
    "InitializationError",
    "NotFoundError",
    "RecordStoreInterface",
    "SQLiteRecordStore",
    "StorageError",
]
