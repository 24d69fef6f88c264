"""Report store backed by the service's SQLite database."""

from __future__ import annotations

import logging
from typing import List, Optional
from uuid import uuid4

import aiosqlite

from config import DESCRIPTION_MAX_LENGTH
from dal.report_dal import ReportDAL
from models.errors import NotFound, StoreUnavailable, ValidationRejected
from models.report import Report, ReportDraft, ReportPatch, utcnow, validate_draft
from utils.database_init import AsyncDatabaseInitializer

LOGGER = logging.getLogger(__name__)


class SqliteReportStore:
    """Durable ReportStore over `ReportDAL`; assigns ids and timestamps."""

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._dal = ReportDAL(db_initializer)

    async def list(self) -> List[Report]:
        try:
            return await self._dal.list_reports()
        except aiosqlite.Error as exc:
            raise StoreUnavailable(f"Report database unavailable: {exc}") from exc

    async def get(self, report_id: str) -> Report:
        try:
            report = await self._dal.get_report_by_id(report_id)
        except aiosqlite.Error as exc:
            raise StoreUnavailable(f"Report database unavailable: {exc}") from exc
        if report is None:
            raise NotFound(report_id)
        return report

    async def create(self, draft: ReportDraft) -> str:
        errors = validate_draft(draft)
        if errors:
            raise ValidationRejected("; ".join(f"{e.field}: {e.message}" for e in errors))

        clean = draft.normalized()
        record = Report(
            id=uuid4().hex,
            latitude=clean.latitude,
            longitude=clean.longitude,
            status=clean.status,
            description=clean.description,
            photo_file_name=clean.photo_file_name,
            timestamp=utcnow(),
        )
        try:
            report_id = await self._dal.create_report(record)
        except aiosqlite.Error as exc:
            raise StoreUnavailable(f"Report database unavailable: {exc}") from exc
        LOGGER.info("Created report %s (%s)", report_id, record.status.value)
        return report_id

    async def update(self, report_id: str, patch: ReportPatch, timestamp: Optional[float] = None) -> None:
        changes = patch.changes()
        for key in ("latitude", "longitude", "description"):
            if key in changes and not str(changes[key]).strip():
                raise ValidationRejected(f"{key}: must not be empty")
        if len(changes.get("description", "")) > DESCRIPTION_MAX_LENGTH:
            raise ValidationRejected("description: too long")
        try:
            changed = await self._dal.update_report(
                report_id, changes, timestamp=timestamp if timestamp is not None else utcnow().timestamp()
            )
        except aiosqlite.Error as exc:
            raise StoreUnavailable(f"Report database unavailable: {exc}") from exc
        if not changed:
            raise NotFound(report_id)
        LOGGER.info("Updated report %s", report_id)

    async def delete(self, report_id: str) -> None:
        try:
            deleted = await self._dal.delete_report(report_id)
        except aiosqlite.Error as exc:
            raise StoreUnavailable(f"Report database unavailable: {exc}") from exc
        if not deleted:
            raise NotFound(report_id)
        LOGGER.info("Deleted report %s", report_id)

    async def aclose(self) -> None:
        # Connections are opened per call by the initializer.
        return None
