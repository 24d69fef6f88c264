import json
import tempfile
from pathlib import Path
from unittest import IsolatedAsyncioTestCase

from controllers.dashboard_controller import DashboardController
from models.errors import NotFound, StoreUnavailable
from models.report import ReportDraft, ReportPatch, ReportStatus
from services.report_cache import EntryState
from services.store.factory import create_report_store
from services.store.http_store import HttpReportStore
from services.store.local_store import LocalSnapshotStore
from utils.local_storage import LocalStorage


class TestLocalSnapshotStore(IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.storage = LocalStorage(self._tmp.name)
        self.snapshot_path = Path(self._tmp.name) / "cableReports.json"

    async def asyncTearDown(self):
        self._tmp.cleanup()

    async def test_corrupted_snapshot_is_discarded_and_key_cleared(self):
        await self.storage.set_item("cableReports", "{not json")

        controller = DashboardController(LocalSnapshotStore(self.storage))
        await controller.mount()

        self.assertEqual(controller.reports, [])
        self.assertIsNone(await self.storage.get_item("cableReports"))
        self.assertFalse(self.snapshot_path.exists())
        await controller.aclose()

    async def test_snapshot_with_invalid_status_is_discarded(self):
        doc = {
            "id": "1",
            "latitude": "1",
            "longitude": "2",
            "status": "bogus",
            "description": "x",
            "timestamp": "2024-01-01T00:00:00+00:00",
        }
        await self.storage.set_item("cableReports", json.dumps([doc]))
        store = LocalSnapshotStore(self.storage)

        self.assertEqual(await store.list(), [])
        self.assertTrue(store.discarded_corrupt_snapshot)
        self.assertIsNone(await self.storage.get_item("cableReports"))

    async def test_writes_persist_json_without_preview_refs(self):
        store = LocalSnapshotStore(self.storage)
        report_id = await store.create(
            ReportDraft(
                latitude="1",
                longitude="2",
                status="identified",
                description="tap",
                photo_file_name="pole.jpg",
                photo_preview_ref="preview:abc",
            )
        )

        self.assertTrue(report_id.isdigit())
        docs = json.loads(await self.storage.get_item("cableReports"))
        self.assertEqual(len(docs), 1)
        self.assertEqual(docs[0]["photo_file_name"], "pole.jpg")
        self.assertNotIn("photo_preview_ref", docs[0])

        reloaded = LocalSnapshotStore(self.storage)
        [report] = await reloaded.list()
        self.assertEqual(report.id, report_id)
        self.assertEqual(report.status, ReportStatus.IDENTIFIED)

    async def test_update_delete_and_ordering(self):
        store = LocalSnapshotStore(self.storage)
        first = await store.create(ReportDraft(latitude="1", longitude="2", description="first"))
        second = await store.create(ReportDraft(latitude="1", longitude="2", description="second"))
        self.assertNotEqual(first, second)
        self.assertEqual([r.id for r in await store.list()], [second, first])

        await store.update(first, ReportPatch(description="edited"))
        self.assertEqual([r.description for r in await store.list()], ["edited", "second"])

        await store.delete(first)
        with self.assertRaises(NotFound):
            await store.delete(first)
        self.assertEqual([r.id for r in await store.list()], [second])

    def _unusable_directory(self) -> Path:
        blocker = Path(self._tmp.name) / "blocker"
        blocker.write_text("not a directory")
        return blocker / "storage"

    async def test_unwritable_storage_is_store_unavailable(self):
        store = LocalSnapshotStore(LocalStorage(self._unusable_directory()))

        with self.assertRaises(StoreUnavailable):
            await store.create(ReportDraft(latitude="1", longitude="2", description="tap"))
        self.assertEqual(await store.list(), [])

    async def test_failed_write_leaves_collection_unchanged(self):
        store = LocalSnapshotStore(self.storage)
        report_id = await store.create(ReportDraft(latitude="1", longitude="2", description="first"))
        self.storage.directory = self._unusable_directory()

        with self.assertRaises(StoreUnavailable):
            await store.update(report_id, ReportPatch(description="edited"))
        with self.assertRaises(StoreUnavailable):
            await store.delete(report_id)

        [report] = await store.list()
        self.assertEqual((report.id, report.description), (report_id, "first"))

    async def test_dashboard_orphans_create_when_storage_fails(self):
        controller = DashboardController(LocalSnapshotStore(LocalStorage(self._unusable_directory())))
        await controller.mount()

        task = controller.submit(ReportDraft(latitude="1", longitude="2", description="tap"))

        self.assertFalse(await task)
        [entry] = controller.cache.entries()
        self.assertEqual(entry.state, EntryState.ORPHANED)
        self.assertEqual([n.title for n in controller.notifier.items], ["Could not save report"])
        await controller.aclose()


class TestCreateReportStore(IsolatedAsyncioTestCase):
    async def test_falls_back_to_local_store_without_url(self):
        with tempfile.TemporaryDirectory() as tmp:
            store = create_report_store(store_url="", local_storage_dir=tmp)
            self.assertIsInstance(store, LocalSnapshotStore)

    async def test_uses_http_store_when_url_configured(self):
        store = create_report_store(store_url="http://reports.example")
        self.assertIsInstance(store, HttpReportStore)
        await store.aclose()
