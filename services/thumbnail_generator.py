"""Thumbnail generator service.

Provides a small OOP wrapper around Pillow to create preview thumbnails
from raw image bytes. The resulting thumbnail fits within 320x320 pixels
and is returned as PNG bytes.

Public class: `ThumbnailGenerator`

Example:
    tg = ThumbnailGenerator(max_size=(320, 320))
    png_bytes = tg.create_thumbnail(raw_bytes)
"""
from __future__ import annotations

import io
from typing import Tuple

from PIL import Image


class ThumbnailGenerator:
    """Generate thumbnails from image bytes.

    This class accepts raw image bytes in any format Pillow can open and
    returns a PNG thumbnail that fits within the configured `max_size`
    while preserving aspect ratio.

    Args:
        max_size: Maximum width and height for the thumbnail. Defaults to (320, 320).
        background: Optional background color used when flattening images with alpha.
            If None, images with alpha are flattened against white.
    """

    def __init__(self, max_size: Tuple[int, int] = (320, 320), background: Tuple[int, int, int] | None = None):
        self.max_size = max_size
        self.background = background or (255, 255, 255)

    def create_thumbnail(self, data: bytes) -> bytes:
        """Create a PNG thumbnail from raw image bytes.

        Args:
            data: Raw image bytes.

        Returns:
            PNG bytes of the thumbnail.

        Raises:
            ValueError: If the bytes are empty or cannot be opened as an image.
        """
        if not data:
            raise ValueError("Image bytes are required for a thumbnail.")

        try:
            src = Image.open(io.BytesIO(data))
            src.load()
        except Exception as exc:
            raise ValueError("Image bytes are not a supported image format") from exc

        src = src.convert("RGBA")
        src.thumbnail(self.max_size, Image.LANCZOS)

        # Flatten alpha against the background color
        background = Image.new("RGB", src.size, self.background)
        background.paste(src, mask=src.split()[3])

        out_io = io.BytesIO()
        background.save(out_io, format="PNG", optimize=True)
        return out_io.getvalue()
