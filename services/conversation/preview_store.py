"""Short-lived preview handles for images staged in the composer."""

from __future__ import annotations

from typing import Dict, Optional
from uuid import uuid4

from services.thumbnail_generator import ThumbnailGenerator

PREVIEW_ROUTE = "/api/composer/previews"


class PreviewStore:
    """Hold PNG previews under opaque handles until they are revoked.

    A handle is the server-side counterpart of a browser object URL: it
    stays valid, and keeps its thumbnail in memory, until ``revoke`` is
    called.
    """

    def __init__(self, thumbnails: Optional[ThumbnailGenerator] = None) -> None:
        self.thumbnails = thumbnails or ThumbnailGenerator()
        self._previews: Dict[str, bytes] = {}

    @property
    def active_count(self) -> int:
        return len(self._previews)

    def create(self, data: bytes) -> str:
        """Render a thumbnail for ``data`` and return its handle."""
        png_bytes = self.thumbnails.create_thumbnail(data)
        handle = f"preview-{uuid4().hex}"
        self._previews[handle] = png_bytes
        return handle

    def get(self, handle: str) -> bytes:
        """Return preview bytes or raise KeyError once revoked."""
        png_bytes = self._previews.get(handle)
        if png_bytes is None:
            raise KeyError(f"Preview {handle} not found")
        return png_bytes

    def revoke(self, handle: str) -> bool:
        """Release a handle; revoking twice is harmless."""
        return self._previews.pop(handle, None) is not None

    def clear(self) -> None:
        self._previews.clear()

    @staticmethod
    def url_for(handle: str) -> str:
        return f"{PREVIEW_ROUTE}/{handle}"
