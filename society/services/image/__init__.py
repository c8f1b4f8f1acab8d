"""Member photo services package."""

from society.services.image.photo_service import (
    ALLOWED_MIME_TYPES,
    PhotoError,
    PhotoService,
)

__all__ = [
    "ALLOWED_MIME_TYPES",
    "PhotoError",
    "PhotoService",
]
