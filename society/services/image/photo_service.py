"""
Member Photo Encoding

Member photos are kept inline on the Member record as a data URL, so the
uploaded image is shrunk to a thumbnail before it is encoded. A phone
camera photo would otherwise bloat every members query.
"""

import base64
from io import BytesIO

from PIL import Image, UnidentifiedImageError

ALLOWED_MIME_TYPES = {"image/jpeg", "image/png", "image/webp"}

# Longest side of the stored thumbnail, in pixels
THUMBNAIL_SIZE = 256


class PhotoError(Exception):
    """Uploaded photo could not be used."""
    pass


class PhotoService:
    """Turns uploaded image bytes into a compact data URL."""

    def __init__(self, max_size: int = THUMBNAIL_SIZE, quality: int = 85):
        self._max_size = max_size
        self._quality = quality

    def encode(self, image_bytes: bytes, mime_type: str) -> str:
        """
        Shrink an uploaded photo and encode it as a data URL.

        Args:
            image_bytes: Raw uploaded file contents
            mime_type: MIME type reported by the upload

        Returns:
            "data:image/jpeg;base64,..." string

        Raises:
            PhotoError: If the type is not allowed or the bytes are not an image
        """
        if mime_type.lower() not in ALLOWED_MIME_TYPES:
            raise PhotoError(
                f"Unsupported image type: {mime_type}. "
                f"Allowed: {', '.join(sorted(ALLOWED_MIME_TYPES))}"
            )
        if not image_bytes:
            raise PhotoError("Uploaded photo is empty")

        try:
            img = Image.open(BytesIO(image_bytes))
            img.load()
        except (UnidentifiedImageError, OSError) as e:
            raise PhotoError(f"Could not read photo: {e}") from e

        # JPEG has no alpha channel
        if img.mode != "RGB":
            img = img.convert("RGB")
        img.thumbnail((self._max_size, self._max_size))

        buffer = BytesIO()
        img.save(buffer, format="JPEG", quality=self._quality)
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:image/jpeg;base64,{encoded}"

    @staticmethod
    def decode(data_url: str) -> bytes:
        """Return the raw image bytes of a data URL."""
        _, _, payload = data_url.partition(",")
        return base64.b64decode(payload)
