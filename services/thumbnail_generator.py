"""Thumbnail generator service.

Small wrapper around Pillow that turns an uploaded photo into the PNG
preview shown in the report form and on report cards. The thumbnail fits
within `max_size` while preserving aspect ratio.

Example:
    tg = ThumbnailGenerator(max_size=(160, 160))
    png_bytes = tg.create_thumbnail(photo_bytes)
"""
from __future__ import annotations

import io
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from config import PREVIEW_MAX_SIZE


class ThumbnailGenerator:
    """Generate PNG thumbnails from raw image bytes.

    Args:
        max_size: Maximum width and height for the thumbnail.
        background: Background color used when flattening images with alpha.
            Defaults to white.
    """

    def __init__(self, max_size: Tuple[int, int] = PREVIEW_MAX_SIZE, background: Tuple[int, int, int] | None = None):
        self.max_size = max_size
        self.background = background or (255, 255, 255)

    def create_thumbnail(self, data: bytes) -> bytes:
        """Create a PNG thumbnail from raw image bytes.

        Raises:
            ValueError: If the bytes cannot be opened as an image.
        """
        if not data:
            raise ValueError("Image bytes are required for a thumbnail")

        try:
            src = Image.open(io.BytesIO(data))
            src.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise ValueError("Photo is not a supported image format") from exc

        src = src.convert("RGBA")
        src.thumbnail(self.max_size, Image.LANCZOS)

        # Flatten alpha against the background color
        background = Image.new("RGB", src.size, self.background)
        background.paste(src, mask=src.split()[3])

        out_io = io.BytesIO()
        background.save(out_io, format="PNG", optimize=True)
        return out_io.getvalue()
