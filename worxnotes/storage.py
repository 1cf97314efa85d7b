"""
Blob storage for diagnostic attachments.

Files live under a single directory (the ``diagnostic-files`` namespace). The
storage key handed back on upload is the generated file name, which is what
gets written to the repair sheet.
"""
import asyncio
import logging
import re
import time
from pathlib import Path
from typing import Callable, Optional

from worxnotes.errors import BackendError

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def attachment_key(filename: str, now: Optional[Callable[[], float]] = None) -> str:
    """Pair a millisecond timestamp with the original name, e.g. ``1715700000000-scan.txt``."""
    stamp = int((now or time.time)() * 1000)
    safe = _UNSAFE.sub("_", Path(filename).name).strip("._") or "diagnostic.txt"
    return f"{stamp}-{safe}"


class AttachmentStorage:
    def __init__(self, root: str | Path, clock: Optional[Callable[[], float]] = None):
        self.root = Path(root)
        self._clock = clock

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise BackendError(f"Invalid storage key: {key}")
        return path

    async def upload(self, filename: str, data: bytes) -> str:
        key = attachment_key(filename, self._clock)
        path = self._path(key)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            raise BackendError(f"Failed to upload file: {exc}") from exc
        logger.info("Stored attachment %s (%d bytes)", key, len(data))
        return key

    async def read_text(self, key: str) -> str:
        path = self._path(key)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8", errors="replace")
        except OSError as exc:
            raise BackendError(f"Failed to download file: {exc}") from exc

    async def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            await asyncio.to_thread(path.unlink)
        except OSError as exc:
            raise BackendError(f"Failed to delete file: {exc}") from exc
        logger.info("Deleted attachment %s", key)

    def exists(self, key: str) -> bool:
        return self._path(key).exists()
