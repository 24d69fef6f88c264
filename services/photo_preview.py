"""Process-local photo previews.

A preview is acquired when the reporter selects a photo and released when
the photo is replaced, the form closes or the dashboard shuts down. Refs
only mean something inside this process and are never written to a store.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Dict, Optional
from uuid import uuid4

from services.thumbnail_generator import ThumbnailGenerator

LOGGER = logging.getLogger(__name__)

PREVIEW_PREFIX = "preview:"


@dataclass(frozen=True)
class PhotoPreview:
    ref: str
    file_name: str
    png: bytes


class PhotoPreviewRegistry:
    """Hold PNG previews keyed by opaque `preview:<hex>` refs."""

    def __init__(self, generator: Optional[ThumbnailGenerator] = None) -> None:
        self._generator = generator or ThumbnailGenerator()
        self._previews: Dict[str, PhotoPreview] = {}

    async def acquire(self, file_name: str, data: bytes) -> str:
        """Render a thumbnail for `data` and return a new ref to it.

        Raises:
            ValueError: If the bytes are not a readable image.
        """
        # Pillow work is blocking -> run in thread
        png = await asyncio.to_thread(self._generator.create_thumbnail, data)
        ref = f"{PREVIEW_PREFIX}{uuid4().hex}"
        self._previews[ref] = PhotoPreview(ref=ref, file_name=file_name, png=png)
        LOGGER.debug("Acquired preview %s for %s", ref, file_name)
        return ref

    def get(self, ref: Optional[str]) -> Optional[PhotoPreview]:
        if not ref:
            return None
        return self._previews.get(ref)

    def release(self, ref: Optional[str]) -> bool:
        """Drop a preview; releasing an unknown or already released ref is a no-op."""
        if not ref:
            return False
        released = self._previews.pop(ref, None) is not None
        if released:
            LOGGER.debug("Released preview %s", ref)
        return released

    def release_all(self) -> int:
        count = len(self._previews)
        self._previews.clear()
        return count

    @asynccontextmanager
    async def scoped(self, file_name: str, data: bytes) -> AsyncIterator[str]:
        """Acquire a preview for the duration of the block."""
        ref = await self.acquire(file_name, data)
        try:
            yield ref
        finally:
            self.release(ref)

    def __contains__(self, ref: object) -> bool:
        return ref in self._previews

    def __len__(self) -> int:
        return len(self._previews)


def is_preview_ref(value: Optional[str]) -> bool:
    return bool(value) and value.startswith(PREVIEW_PREFIX)
