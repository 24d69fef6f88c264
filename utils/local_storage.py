"""File-backed string key/value storage used by the offline report fallback.

Each key lives in its own file under the storage directory, so a corrupted
value can be cleared without touching the others.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

import aiofiles

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class LocalStorage:
    """Async get/set/remove of string values keyed by a safe name."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory).expanduser()

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    async def get_item(self, key: str) -> Optional[str]:
        """Return the stored string for `key`, or None when absent."""
        path = self._path_for(key)
        if not path.exists():
            return None
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            return await f.read()

    async def set_item(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing the file atomically."""
        path = self._path_for(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(value)
        os.replace(tmp_path, path)

    async def remove_item(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
