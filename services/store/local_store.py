"""Offline report store persisting the whole collection as one JSON snapshot.

Used when no remote report service is configured. Ids are assigned locally
from the current time in milliseconds; only JSON-compatible fields are
written, so photo binaries and preview handles never reach disk.
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional

from config import STORAGE_KEY
from models.errors import LocalCacheCorrupted, NotFound, StoreUnavailable, ValidationRejected
from models.report import Report, ReportDraft, ReportPatch, utcnow, validate_draft
from utils.local_storage import LocalStorage

LOGGER = logging.getLogger(__name__)


def decode_snapshot(raw: str) -> List[Report]:
    """Parse a stored snapshot.

    Raises:
        LocalCacheCorrupted: If the text is not a list of valid report documents
            or contains duplicate ids.
    """
    try:
        docs = json.loads(raw)
    except ValueError as exc:
        raise LocalCacheCorrupted(f"Snapshot is not valid JSON: {exc}") from exc
    if not isinstance(docs, list):
        raise LocalCacheCorrupted("Snapshot must be a JSON list")

    reports: List[Report] = []
    seen = set()
    for doc in docs:
        if not isinstance(doc, dict):
            raise LocalCacheCorrupted("Snapshot entries must be JSON objects")
        try:
            report = Report.from_document(doc)
        except ValueError as exc:
            raise LocalCacheCorrupted(str(exc)) from exc
        if report.id in seen:
            raise LocalCacheCorrupted(f"Duplicate report id {report.id}")
        seen.add(report.id)
        reports.append(report)
    return reports


def encode_snapshot(reports: List[Report]) -> str:
    return json.dumps([report.to_document() for report in reports])


class LocalSnapshotStore:
    """ReportStore persisted under a fixed key of a `LocalStorage`.

    Storage I/O failures surface as StoreUnavailable; a write is committed to
    the in-memory collection only after the snapshot reached disk.
    """

    def __init__(self, storage: LocalStorage, key: str = STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key
        self._reports: Optional[List[Report]] = None
        self.discarded_corrupt_snapshot = False

    async def _load(self) -> List[Report]:
        if self._reports is not None:
            return self._reports

        reports: List[Report] = []
        try:
            try:
                raw = await self._storage.get_item(self._key)
            except UnicodeDecodeError as exc:
                raw = None
                LOGGER.warning("Discarding undecodable report snapshot %r: %s", self._key, exc)
                await self._storage.remove_item(self._key)
                self.discarded_corrupt_snapshot = True

            if raw is not None:
                try:
                    reports = decode_snapshot(raw)
                except LocalCacheCorrupted as exc:
                    LOGGER.warning("Discarding corrupted report snapshot %r: %s", self._key, exc)
                    await self._storage.remove_item(self._key)
                    self.discarded_corrupt_snapshot = True
                    reports = []
        except OSError as exc:
            raise StoreUnavailable(f"Could not read local report snapshot: {exc}") from exc
        self._reports = reports
        return reports

    async def _commit(self, reports: List[Report]) -> None:
        try:
            await self._storage.set_item(self._key, encode_snapshot(reports))
        except OSError as exc:
            raise StoreUnavailable(f"Could not write local report snapshot: {exc}") from exc
        self._reports = reports

    def _new_id(self, reports: List[Report]) -> str:
        taken = {r.id for r in reports}
        candidate = int(utcnow().timestamp() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def _index_of(self, reports: List[Report], report_id: str) -> int:
        for idx, report in enumerate(reports):
            if report.id == report_id:
                return idx
        raise NotFound(report_id)

    async def list(self) -> List[Report]:
        reports = await self._load()
        return sorted(reports, key=lambda r: r.timestamp, reverse=True)

    async def create(self, draft: ReportDraft) -> str:
        errors = validate_draft(draft)
        if errors:
            raise ValidationRejected("; ".join(f"{e.field}: {e.message}" for e in errors))

        reports = list(await self._load())
        clean = draft.normalized()
        report = Report(
            id=self._new_id(reports),
            latitude=clean.latitude,
            longitude=clean.longitude,
            status=clean.status,
            description=clean.description,
            photo_file_name=clean.photo_file_name,
            timestamp=utcnow(),
        )
        reports.append(report)
        await self._commit(reports)
        return report.id

    async def update(self, report_id: str, patch: ReportPatch) -> None:
        reports = list(await self._load())
        idx = self._index_of(reports, report_id)
        reports[idx] = patch.apply(reports[idx])
        await self._commit(reports)

    async def delete(self, report_id: str) -> None:
        reports = list(await self._load())
        del reports[self._index_of(reports, report_id)]
        await self._commit(reports)

    async def aclose(self) -> None:
        return None
