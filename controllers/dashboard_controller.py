"""Dashboard state: fetch-on-mount, optimistic writes and reconciliation.

The controller owns the report cache shown on the dashboards. Local
mutations are applied to the cache immediately and the matching store call
runs as a background task; a successful write is followed by a full
refetch that replaces the cache with the canonical listing.

Failure policy (no automatic retry):
    * failed creates/updates stay visible as `orphaned` entries until the
      next successful refetch;
    * failed deletes are rolled back, the entry is restored in place;
    * a delete answered with NotFound counts as done.
Every store failure ends up as a destructive notification.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Awaitable, Dict, List, Optional, Set
from uuid import uuid4

from config import RECENT_REPORTS_LIMIT
from models.errors import CableEyeError, NotFound, ValidationFailed
from models.report import Report, ReportDraft, ReportStatus, utcnow, validate_draft
from services import aggregation
from services.notifier import Notifier
from services.photo_preview import PhotoPreviewRegistry
from services.report_cache import EntryState, ReportCache
from services.store.base import ReportStore

LOGGER = logging.getLogger(__name__)

PROVISIONAL_PREFIX = "local-"


class DashboardController:
    """Coordinate the report cache with a ReportStore.

    Args:
        store: Report store shared for the lifetime of the process.
        notifier: Toast queue for user-visible errors.
        previews: Registry holding photo previews referenced by cached reports.
    """

    def __init__(
        self,
        store: ReportStore,
        notifier: Optional[Notifier] = None,
        previews: Optional[PhotoPreviewRegistry] = None,
    ) -> None:
        self.store = store
        self.notifier = notifier or Notifier()
        self.previews = previews or PhotoPreviewRegistry()
        self.cache = ReportCache()
        self.mounted = False
        self._closing = False
        self._closed = False
        self._locks: Dict[str, asyncio.Lock] = {}
        self._aliases: Dict[str, str] = {}
        self._deletes: Dict[str, asyncio.Task] = {}
        self._pending: Set[asyncio.Task] = set()
        # completed deletes, keyed by report id, valued by delete sequence number
        self._deleted: Dict[str, int] = {}
        self._delete_seq = 0
        self._refreshing = 0

    # ------------------------------------------------------------------ reads

    async def mount(self) -> None:
        """Load the initial listing."""
        await self.refresh()
        self.mounted = True

    async def refresh(self, id_map: Optional[Dict[str, str]] = None) -> bool:
        """Refetch the canonical listing and replace the cache with it.

        Args:
            id_map: Provisional id -> store id pairs, used to carry photo
                previews over to the reconciled reports.

        Returns:
            False when the store could not be read (a notification is queued).
        """
        if self._closed:
            return False
        started = self._delete_seq
        self._refreshing += 1
        try:
            reports = await self.store.list()
        except CableEyeError as exc:
            self.notifier.error("Could not load reports", str(exc))
            return False
        finally:
            self._refreshing -= 1

        # the listing may predate deletes that completed while it was fetched
        stale = {report_id for report_id, seq in self._deleted.items() if seq > started}
        if stale:
            LOGGER.debug("Dropping %d report(s) deleted during refetch", len(stale))
            reports = [report for report in reports if report.id not in stale]
        if not self._refreshing:
            self._deleted.clear()
        self._reconcile(reports, id_map or {})
        return True

    def _reconcile(self, reports: List[Report], id_map: Dict[str, str]) -> None:
        previews: Dict[str, str] = {}
        in_flight = set()
        for entry in self.cache.entries():
            ref = entry.report.photo_preview_ref
            if ref:
                previews[id_map.get(entry.report.id, entry.report.id)] = ref
                if entry.state is EntryState.PENDING:
                    in_flight.add(ref)

        reconciled = []
        for report in reports:
            ref = previews.pop(report.id, None)
            reconciled.append(replace(report, photo_preview_ref=ref) if ref else report)
        self.cache.replace_all(reconciled)

        # previews whose report is gone from the store; pending ones are
        # dropped from the cache but released only on close
        for ref in previews.values():
            if ref not in in_flight:
                self.previews.release(ref)

    @property
    def reports(self) -> List[Report]:
        return self.cache.snapshot()

    def recent(self, limit: int = RECENT_REPORTS_LIMIT) -> List[Report]:
        return self.cache.snapshot()[:limit]

    @property
    def has_more(self) -> bool:
        return len(self.cache) > RECENT_REPORTS_LIMIT

    def map_summary(self) -> str:
        return aggregation.map_summary(len(self.cache))

    def status_counts(self) -> Dict[ReportStatus, int]:
        return aggregation.count_by_status(self.cache.snapshot())

    def chart_data(self) -> List[Dict[str, object]]:
        return aggregation.chart_data(self.cache.snapshot())

    # ----------------------------------------------------------------- writes

    def submit(self, draft: ReportDraft, editing_id: Optional[str] = None) -> Optional[asyncio.Task]:
        """Apply a draft optimistically and schedule the store write.

        Returns the background task performing the write and refetch, or
        None when the report being edited is no longer cached.

        Raises:
            ValidationFailed: The draft is invalid; nothing was changed.
        """
        errors = validate_draft(draft)
        if errors:
            raise ValidationFailed(errors)
        if self._closing:
            raise RuntimeError("Dashboard controller is closed")

        clean = draft.normalized()
        if editing_id:
            return self._submit_edit(clean, self._aliases.get(editing_id, editing_id))
        return self._submit_new(clean)

    def _submit_new(self, draft: ReportDraft) -> asyncio.Task:
        provisional = Report(
            id=f"{PROVISIONAL_PREFIX}{uuid4().hex}",
            latitude=draft.latitude,
            longitude=draft.longitude,
            status=draft.status,
            description=draft.description,
            photo_file_name=draft.photo_file_name,
            photo_preview_ref=draft.photo_preview_ref,
            timestamp=utcnow(),
        )
        self.cache.insert_head(provisional, EntryState.PENDING)
        return self._spawn(self._sync_create(provisional.id, replace(draft, photo_preview_ref=None)))

    def _submit_edit(self, draft: ReportDraft, report_id: str) -> Optional[asyncio.Task]:
        current = self.cache.get(report_id)
        if current is None:
            self.notifier.error("Report not found", f"Report {report_id} is no longer available.")
            return None

        preview_ref = current.photo_preview_ref
        if draft.photo_preview_ref and draft.photo_preview_ref != preview_ref:
            self.previews.release(preview_ref)
            preview_ref = draft.photo_preview_ref

        merged = replace(
            current,
            latitude=draft.latitude,
            longitude=draft.longitude,
            status=draft.status,
            description=draft.description,
            photo_file_name=draft.photo_file_name or current.photo_file_name,
            photo_preview_ref=preview_ref,
            timestamp=utcnow(),
        )
        self.cache.splice(merged, EntryState.PENDING)
        return self._spawn(self._sync_update(report_id, draft))

    def delete(self, report_id: str) -> Optional[asyncio.Task]:
        """Hide a report and delete it from the store.

        Unknown ids are ignored (returns None). Deleting a report whose
        delete is still in flight returns the same task.
        """
        report_id = self._aliases.get(report_id, report_id)
        in_flight = self._deletes.get(report_id)
        if in_flight is not None and not in_flight.done():
            return in_flight

        entry = self.cache.get_entry(report_id)
        if entry is None or entry.state is EntryState.TOMBSTONED:
            return None
        if self._closing:
            raise RuntimeError("Dashboard controller is closed")

        self.cache.tombstone(report_id)
        task = self._spawn(self._sync_delete(report_id))
        self._deletes[report_id] = task
        return task

    # ------------------------------------------------------ background sync

    async def _sync_create(self, provisional_id: str, draft: ReportDraft) -> bool:
        async with self._lock_for(provisional_id):
            try:
                report_id = await self.store.create(draft)
            except CableEyeError as exc:
                self.cache.mark(provisional_id, EntryState.ORPHANED)
                self.notifier.error("Could not save report", str(exc))
                return False

            self._aliases[provisional_id] = report_id
            self._rebind(provisional_id, report_id)
            await self.refresh({provisional_id: report_id})
            return True

    async def _sync_update(self, report_id: str, draft: ReportDraft) -> bool:
        async with self._lock_for(report_id):
            # a create for this report may have settled while we waited
            target = self._aliases.get(report_id, report_id)
            try:
                await self.store.update(target, draft.to_patch())
            except CableEyeError as exc:
                self.cache.mark(target, EntryState.ORPHANED)
                self.notifier.error("Could not update report", str(exc))
                return False
            if self.cache.state_of(target) is EntryState.PENDING:
                self.cache.mark(target, EntryState.CONFIRMED)
            await self.refresh()
            return True

    async def _sync_delete(self, report_id: str) -> bool:
        async with self._lock_for(report_id):
            target = self._aliases.get(report_id, report_id)
            try:
                await self.store.delete(target)
            except NotFound:
                LOGGER.info("Report %s was already deleted", target)
            except CableEyeError as exc:
                self.cache.restore(target)
                self.notifier.error("Could not delete report", str(exc))
                return False

            if self._refreshing:
                self._delete_seq += 1
                self._deleted[target] = self._delete_seq
            removed = self.cache.remove(target)
            if removed is not None:
                self.previews.release(removed.photo_preview_ref)
            return True

    def _rebind(self, provisional_id: str, report_id: str) -> None:
        entry = self.cache.get_entry(provisional_id)
        if entry is None:
            return
        entry.report = replace(entry.report, id=report_id)
        if entry.state is not EntryState.TOMBSTONED:
            entry.state = EntryState.CONFIRMED

    def _lock_for(self, report_id: str) -> asyncio.Lock:
        lock = self._locks.get(report_id)
        if lock is None:
            lock = self._locks[report_id] = asyncio.Lock()
        return lock

    def _spawn(self, coro: Awaitable[bool]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._pending.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.error("Report sync task failed", exc_info=exc)
            self.notifier.error("Unexpected error", str(exc))

    # -------------------------------------------------------------- lifecycle

    async def drain(self) -> None:
        """Wait until every in-flight store call has settled."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        """Refuse new writes, let in-flight ones settle, then drop every preview."""
        self._closing = True
        await self.drain()
        self._closed = True
        self.previews.release_all()

    async def __aenter__(self) -> "DashboardController":
        await self.mount()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
