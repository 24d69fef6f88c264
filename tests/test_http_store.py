import tempfile
from unittest import IsolatedAsyncioTestCase

import httpx

from controllers.dashboard_controller import DashboardController
from main import create_app
from models.errors import NotFound, StoreUnavailable, ValidationRejected
from models.report import ReportDraft, ReportPatch, ReportStatus
from services.store.http_store import HttpReportStore
from services.store.sqlite_store import SqliteReportStore
from utils.database_init import AsyncDatabaseInitializer


def mock_store(handler) -> HttpReportStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://reports.test")
    return HttpReportStore(client=client)


class TestHttpReportStoreErrors(IsolatedAsyncioTestCase):
    async def test_server_error_is_store_unavailable(self):
        store = mock_store(lambda request: httpx.Response(503, json={"detail": "down"}))

        with self.assertRaises(StoreUnavailable):
            await store.list()

    async def test_transport_error_is_store_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        store = mock_store(handler)
        with self.assertRaises(StoreUnavailable):
            await store.delete("abc")

    async def test_missing_report_is_not_found(self):
        store = mock_store(lambda request: httpx.Response(404, json={"detail": "Report abc not found"}))

        with self.assertRaises(NotFound):
            await store.update("abc", ReportPatch(description="x"))

    async def test_unprocessable_draft_is_rejected(self):
        store = mock_store(lambda request: httpx.Response(422, json={"detail": "latitude: Latitude is required."}))

        with self.assertRaises(ValidationRejected):
            await store.create(ReportDraft(latitude="", longitude="1", description="x"))

    async def test_malformed_listing_is_store_unavailable(self):
        store = mock_store(lambda request: httpx.Response(200, json=[{"id": "1"}]))

        with self.assertRaises(StoreUnavailable):
            await store.list()

    async def test_listing_that_is_not_a_list_is_store_unavailable(self):
        store = mock_store(lambda request: httpx.Response(200, json={"reports": []}))

        with self.assertRaises(StoreUnavailable):
            await store.list()

    async def test_create_response_without_id_is_store_unavailable(self):
        draft = ReportDraft(latitude="1", longitude="2", description="tap")

        store = mock_store(lambda request: httpx.Response(201, text="created"))
        with self.assertRaises(StoreUnavailable):
            await store.create(draft)

        store = mock_store(lambda request: httpx.Response(201, json={"ok": True}))
        with self.assertRaises(StoreUnavailable):
            await store.create(draft)


class TestHttpReportStoreAgainstService(IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        app = create_app()
        # ASGITransport does not run the lifespan; attach the store directly
        app.state.db_initializer = AsyncDatabaseInitializer(db_dir=self._tmp.name, reset=True)
        app.state.report_store = SqliteReportStore(app.state.db_initializer)
        client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://cableeye.test")
        self.store = HttpReportStore(client=client)
        self.client = client

    async def asyncTearDown(self):
        await self.client.aclose()
        self._tmp.cleanup()

    async def test_create_then_list_round_trip(self):
        draft = ReportDraft(latitude="34.0522", longitude="-118.2437", status="doubtful", description="Loose cable")

        report_id = await self.store.create(draft)
        [report] = await self.store.list()

        self.assertEqual(report.id, report_id)
        self.assertEqual(report.status, ReportStatus.DOUBTFUL)
        self.assertEqual((report.latitude, report.longitude), ("34.0522", "-118.2437"))
        self.assertEqual(report.description, "Loose cable")
        self.assertIsNone(report.photo_file_name)

    async def test_dashboard_controller_over_http(self):
        controller = DashboardController(self.store)
        await controller.mount()

        await controller.submit(ReportDraft(latitude="1", longitude="2", status="identified", description="tap"))
        [report] = controller.reports
        self.assertFalse(report.id.startswith("local-"))

        await controller.submit(ReportDraft(latitude="1", longitude="2", status="doubtful", description="tap?"), report.id)
        self.assertEqual(controller.reports[0].status, ReportStatus.DOUBTFUL)

        await controller.delete(report.id)
        self.assertEqual(controller.reports, [])
        self.assertEqual(await self.store.list(), [])
        self.assertEqual(len(controller.notifier), 0)
        await controller.aclose()
