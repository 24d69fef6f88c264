"""Async Data Access Layer for the REPORT table.

Provides ReportDAL class with async CRUD operations compatible with
`utils.database_init.AsyncDatabaseInitializer`.
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, Sequence

from models.report import Report, ReportStatus, parse_timestamp
from utils.database_init import AsyncDatabaseInitializer


class ReportDAL:
    """Data access layer for REPORT records.

    The constructor accepts an `AsyncDatabaseInitializer` (or any object
    exposing an async `connection()` context manager that yields an
    `aiosqlite.Connection`).
    """

    _COLUMNS = (
        "id",
        "latitude",
        "longitude",
        "status",
        "description",
        "photo_file_name",
        "timestamp",
    )
    _COLUMN_LIST = ", ".join(_COLUMNS)
    _UPDATABLE = {"latitude", "longitude", "status", "description", "photo_file_name"}

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    async def create_report(self, record: Report) -> str:
        """Insert a new REPORT row and return its id.

        Args:
            record: Report carrying the id and timestamp assigned by the caller.
        """
        async with self._db.connection() as conn:
            await conn.execute(
                f"INSERT INTO REPORT ({self._COLUMN_LIST}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    record.id,
                    record.latitude,
                    record.longitude,
                    record.status.value,
                    record.description,
                    record.photo_file_name,
                    record.timestamp.timestamp(),
                ),
            )
            await conn.commit()
            return record.id

    async def get_report_by_id(self, report_id: str) -> Optional[Report]:
        """Return the Report for `report_id`, or None if not found."""
        async with self._db.connection() as conn:
            cur = await conn.execute(
                f"SELECT {self._COLUMN_LIST} FROM REPORT WHERE id = ?",
                (report_id,),
            )
            row = await cur.fetchone()
            return self._row_to_record(row) if row else None

    async def list_reports(self) -> List[Report]:
        """List REPORT rows newest first; equal timestamps keep insertion order."""
        async with self._db.connection() as conn:
            cur = await conn.execute(
                f"SELECT {self._COLUMN_LIST} FROM REPORT ORDER BY timestamp DESC, seq ASC"
            )
            rows = await cur.fetchall()
            return [self._row_to_record(r) for r in rows]

    async def update_report(self, report_id: str, changes: Dict[str, Any], timestamp: Optional[float] = None) -> bool:
        """Update fields of a REPORT row and refresh its timestamp.

        Returns True if a row was changed.
        """
        unknown = set(changes) - self._UPDATABLE
        if unknown:
            raise ValueError(f"Unknown report columns: {sorted(unknown)}")

        values = {
            col: (val.value if isinstance(val, ReportStatus) else val)
            for col, val in changes.items()
        }
        values["timestamp"] = timestamp if timestamp is not None else time.time()
        fields = [f"{col} = ?" for col in values]
        params = list(values.values())
        params.append(report_id)
        sql = f"UPDATE REPORT SET {', '.join(fields)} WHERE id = ?"

        async with self._db.connection() as conn:
            await conn.execute(sql, tuple(params))
            await conn.commit()
            cur = await conn.execute("SELECT changes()")
            changed = await cur.fetchone()
            return bool(changed and changed[0] > 0)

    async def delete_report(self, report_id: str) -> bool:
        """Delete REPORT row by id. Returns True if a row was deleted."""
        async with self._db.connection() as conn:
            await conn.execute("DELETE FROM REPORT WHERE id = ?", (report_id,))
            await conn.commit()
            cur = await conn.execute("SELECT changes()")
            changed = await cur.fetchone()
            return bool(changed and changed[0] > 0)

    @staticmethod
    def _row_to_record(row: Sequence[object]) -> Report:
        """Convert a DB row tuple into a Report."""
        return Report(
            id=row[0],
            latitude=row[1],
            longitude=row[2],
            status=ReportStatus(row[3]),
            description=row[4],
            photo_file_name=row[5],
            timestamp=parse_timestamp(row[6]),
        )
