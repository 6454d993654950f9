from __future__ import annotations

import threading
import uuid
from typing import Dict

from .models import PreviewHandle, UploadFile

BLOB_SCHEME = "blob:"


class PreviewRegistry:
    """Allocates and releases preview handles for slot payloads."""

    def __init__(self, origin: str = "vessel") -> None:
        self._origin = origin
        self._lock = threading.RLock()
        self._handles: Dict[str, PreviewHandle] = {}

    @property
    def outstanding(self) -> int:
        with self._lock:
            return len(self._handles)

    def allocate(self, file: UploadFile) -> PreviewHandle:
        handle = PreviewHandle(
            url=f"{BLOB_SCHEME}{self._origin}/{uuid.uuid4().hex}",
            file_name=file.name,
        )
        with self._lock:
            self._handles[handle.url] = handle
        return handle

    def release(self, handle: PreviewHandle) -> None:
        """Release a handle previously returned by :meth:`allocate`.

        Raises ``LookupError`` when the handle is unknown or was already
        released, and ``ValueError`` for non-blob handles.
        """
        if not handle.url.startswith(BLOB_SCHEME):
            raise ValueError(f"not a blob preview: {handle.url}")
        with self._lock:
            if self._handles.pop(handle.url, None) is None:
                raise LookupError(f"preview already released: {handle.url}")

    def is_live(self, handle: PreviewHandle) -> bool:
        with self._lock:
            return handle.url in self._handles


__all__ = ["BLOB_SCHEME", "PreviewRegistry"]
