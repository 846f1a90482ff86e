"""Media handling for post attachments and avatars."""

from __future__ import annotations

import base64
import io
import logging

from PIL import Image, UnidentifiedImageError

from streettalk.core.errors import FileReadFailure, ImageDecodeFailure, UnsupportedMediaType
from streettalk.feed.models import MediaItem

logger = logging.getLogger(__name__)


def to_data_url(data: bytes, media_type: str) -> str:
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


class MediaHandler:
    """Turns uploaded bytes into :class:`MediaItem` references.

    Images are downscaled to ``max_width`` and re-encoded as JPEG; videos
    are passed through untouched.
    """

    def __init__(self, max_size_mb: int = 10, max_width: int = 1024, quality: int = 80) -> None:
        self._max_size_bytes = max_size_mb * 1024 * 1024
        self._max_width = max_width
        self._quality = quality

    def load_attachment(self, data: bytes, content_type: str) -> MediaItem:
        if not data:
            raise FileReadFailure("Attachment is empty")
        if len(data) > self._max_size_bytes:
            raise FileReadFailure(
                f"Attachment too large: {len(data)} bytes (max {self._max_size_bytes})"
            )

        media_type = (content_type or "").split(";")[0].strip().lower()
        if media_type.startswith("image/"):
            return MediaItem(kind="image", data=self.resize_image(data))
        if media_type.startswith("video/"):
            return MediaItem(kind="video", data=to_data_url(data, media_type))
        raise UnsupportedMediaType(f"Unsupported file type: {media_type or 'unknown'}")

    def resize_image(self, data: bytes) -> str:
        """Downscale to the configured width and return a JPEG data URL."""
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise ImageDecodeFailure(f"Invalid image: {e}") from e

        scale = min(1.0, self._max_width / img.width)
        if scale < 1.0:
            size = (round(img.width * scale), round(img.height * scale))
            img = img.resize(size, Image.Resampling.LANCZOS)
            logger.debug("Resized image to %s", size)
        if img.mode != "RGB":
            img = img.convert("RGB")

        buf = io.BytesIO()
        img.save(buf, format="JPEG", quality=self._quality)
        return to_data_url(buf.getvalue(), "image/jpeg")
