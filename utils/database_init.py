import os
import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import aiosqlite

from config import DATABASE_RESET

LOGGER = logging.getLogger(__name__)


class AsyncDatabaseInitializer:
    """
    Manage the async SQLite database holding the REPORT collection.

    - The database file is located at: <DATABASE_DIR>/app.db
    - DATABASE_DIR is required unless `db_dir` is passed explicitly. A
      RuntimeError is raised if it is missing or invalid (not a directory and
      cannot be created).
    - On the first call to `ensure_database()` for a given instance the
      REPORT table and its ordering index are created. When `reset` is true
      (DATABASE_RESET) any existing database file is deleted first.
    - Subsequent calls to `ensure_database()` on the same instance are no-ops,
      so it is safe for `connection()` to call it.
    """

    def __init__(self, db_dir: Optional[Path | str] = None, reset: Optional[bool] = None) -> None:
        env_dir = str(db_dir) if db_dir is not None else os.getenv("DATABASE_DIR")

        if env_dir is None or not env_dir.strip():
            raise RuntimeError(
                "DATABASE_DIR environment variable must be set to a writable "
                "directory path where the SQLite database file will be stored."
            )

        resolved = Path(env_dir).expanduser()

        if resolved.exists() and not resolved.is_dir():
            raise RuntimeError(
                f"DATABASE_DIR={env_dir!r} points to a file, not a directory "
                f"({resolved}). Please set DATABASE_DIR to a directory path."
            )

        try:
            resolved.mkdir(parents=True, exist_ok=True)
        except Exception as exc:
            raise RuntimeError(
                f"Failed to create or access database directory at {resolved}"
            ) from exc

        self.db_dir = resolved
        self.db_path = self.db_dir / "app.db"
        self.reset = DATABASE_RESET if reset is None else reset

        # Schema setup (and the optional wipe) happens once per instance.
        self._initialized = False

    async def ensure_database(self) -> None:
        """
        Ensure the SQLite database at `self.db_path` has the REPORT schema.

        Subsequent calls on the same instance are no-ops.
        """
        if self._initialized:
            return

        if self.reset and self.db_path.exists():
            try:
                self.db_path.unlink()
            except Exception as exc:
                raise RuntimeError(
                    f"Failed to delete existing database at {self.db_path}"
                ) from exc
            LOGGER.info("Removed existing report database at %s", self.db_path)

        max_attempts = 3
        for attempt in range(1, max_attempts + 1):
            try:
                async with aiosqlite.connect(self.db_path) as db:
                    # seq keeps insertion order for reports sharing a timestamp
                    await db.execute(
                        """
                        CREATE TABLE IF NOT EXISTS REPORT (
                            seq INTEGER PRIMARY KEY AUTOINCREMENT,
                            id TEXT NOT NULL UNIQUE,
                            latitude TEXT NOT NULL,
                            longitude TEXT NOT NULL,
                            status TEXT NOT NULL CHECK (
                                status IN ('identified', 'doubtful', 'not_yet_identified')
                            ),
                            description TEXT NOT NULL,
                            photo_file_name TEXT,
                            timestamp REAL NOT NULL
                        )
                        """
                    )
                    await db.execute(
                        "CREATE INDEX IF NOT EXISTS idx_report_timestamp ON REPORT(timestamp DESC, seq ASC)"
                    )
                    await db.commit()
                break
            except FileNotFoundError:
                # On some platforms a transient missing file error may occur; retry a few times.
                if attempt >= max_attempts:
                    raise
                await asyncio.sleep(0.1 * attempt)

        self._initialized = True

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Async context manager yielding an `aiosqlite.Connection`.

        The schema is created on the first use via `ensure_database()`.
        """
        await self.ensure_database()
        conn = await aiosqlite.connect(self.db_path)
        try:
            yield conn
        finally:
            await conn.close()
