import tempfile
from unittest import IsolatedAsyncioTestCase

from models.errors import NotFound, ValidationRejected
from models.report import ReportDraft, ReportPatch, ReportStatus
from services.store.sqlite_store import SqliteReportStore
from utils.database_init import AsyncDatabaseInitializer


class TestSqliteReportStore(IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.initializer = AsyncDatabaseInitializer(db_dir=self._tmp.name, reset=False)
        self.store = SqliteReportStore(self.initializer)

    async def asyncTearDown(self):
        await self.store.aclose()
        self._tmp.cleanup()

    async def test_create_then_list_round_trips_user_fields(self):
        draft = ReportDraft(
            latitude="34.0522",
            longitude="-118.2437",
            status="doubtful",
            description="Loose cable",
            photo_file_name="pole.jpg",
        )

        report_id = await self.store.create(draft)
        reports = await self.store.list()

        self.assertEqual(len(reports), 1)
        self.assertEqual(reports[0].id, report_id)
        self.assertEqual(
            reports[0].user_fields(),
            {
                "latitude": "34.0522",
                "longitude": "-118.2437",
                "status": ReportStatus.DOUBTFUL,
                "description": "Loose cable",
                "photo_file_name": "pole.jpg",
            },
        )

    async def test_list_is_newest_first(self):
        ids = [
            await self.store.create(ReportDraft(latitude="1", longitude="2", description=f"r{i}"))
            for i in range(3)
        ]

        self.assertEqual([r.id for r in await self.store.list()], list(reversed(ids)))

    async def test_create_rejects_incomplete_draft(self):
        with self.assertRaises(ValidationRejected):
            await self.store.create(ReportDraft(latitude="", longitude="2", description="x"))
        self.assertEqual(await self.store.list(), [])

    async def test_update_changes_fields_and_moves_report_to_front(self):
        first = await self.store.create(ReportDraft(latitude="1", longitude="2", description="first"))
        await self.store.create(ReportDraft(latitude="1", longitude="2", description="second"))

        await self.store.update(first, ReportPatch(status=ReportStatus.IDENTIFIED, description="checked"))

        reports = await self.store.list()
        self.assertEqual(reports[0].id, first)
        self.assertEqual(reports[0].status, ReportStatus.IDENTIFIED)
        self.assertEqual(reports[0].description, "checked")
        self.assertEqual(reports[0].latitude, "1")

    async def test_update_and_delete_unknown_ids(self):
        with self.assertRaises(NotFound):
            await self.store.update("nope", ReportPatch(description="x"))
        with self.assertRaises(NotFound):
            await self.store.delete("nope")

    async def test_delete_twice_raises_not_found_the_second_time(self):
        report_id = await self.store.create(ReportDraft(latitude="1", longitude="2", description="x"))

        await self.store.delete(report_id)
        with self.assertRaises(NotFound):
            await self.store.delete(report_id)
        self.assertEqual(await self.store.list(), [])

    async def test_reports_survive_a_new_initializer_without_reset(self):
        await self.store.create(ReportDraft(latitude="1", longitude="2", description="kept"))

        reopened = SqliteReportStore(AsyncDatabaseInitializer(db_dir=self._tmp.name, reset=False))
        self.assertEqual([r.description for r in await reopened.list()], ["kept"])

        wiped = SqliteReportStore(AsyncDatabaseInitializer(db_dir=self._tmp.name, reset=True))
        self.assertEqual(await wiped.list(), [])
