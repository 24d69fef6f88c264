import tempfile
from unittest import TestCase

from fastapi.testclient import TestClient

from main import create_app
from utils.database_init import AsyncDatabaseInitializer


class TestReportApi(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        app = create_app(AsyncDatabaseInitializer(db_dir=self._tmp.name, reset=True))
        self.client = TestClient(app)
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)
        self._tmp.cleanup()

    def create(self, **overrides):
        payload = dict(latitude="34.0522", longitude="-118.2437", status="doubtful", description="Loose cable")
        payload.update(overrides)
        return self.client.post("/reports", json=payload)

    def test_health(self):
        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"ok": True, "db_initialized": True, "store_available": True})

    def test_root_redirects_to_login(self):
        response = self.client.get("/", follow_redirects=False)

        self.assertEqual(response.status_code, 307)
        self.assertEqual(response.headers["location"], "/login")

    def test_mock_login(self):
        ok = self.client.post("/login", json={"email": "a@b.c", "password": "pw"}, follow_redirects=False)
        self.assertEqual(ok.status_code, 303)
        self.assertEqual(ok.headers["location"], "/dashboard")

        missing = self.client.post("/login", json={"email": "a@b.c"})
        self.assertEqual(missing.status_code, 400)
        self.assertEqual(missing.json()["detail"], "Please enter email and password.")

        out = self.client.post("/logout", follow_redirects=False)
        self.assertEqual(out.headers["location"], "/login")

    def test_create_list_get(self):
        created = self.create(photo_file_name="pole.jpg")
        self.assertEqual(created.status_code, 201)
        report_id = created.json()["id"]

        listing = self.client.get("/reports").json()
        self.assertEqual([doc["id"] for doc in listing], [report_id])
        doc = self.client.get(f"/reports/{report_id}").json()
        self.assertEqual(doc["status"], "doubtful")
        self.assertEqual(doc["description"], "Loose cable")
        self.assertEqual(doc["photo_file_name"], "pole.jpg")
        self.assertIn("timestamp", doc)
        self.assertNotIn("photo_preview_ref", doc)

    def test_create_validation(self):
        self.assertEqual(self.create(latitude="").status_code, 422)
        self.assertEqual(self.create(description="x" * 501).status_code, 422)
        self.assertEqual(self.create(status="maybe").status_code, 422)
        self.assertEqual(self.client.get("/reports").json(), [])

    def test_create_defaults_status(self):
        report_id = self.client.post(
            "/reports", json={"latitude": "1", "longitude": "2", "description": "x"}
        ).json()["id"]

        self.assertEqual(self.client.get(f"/reports/{report_id}").json()["status"], "not_yet_identified")

    def test_update_and_delete(self):
        report_id = self.create().json()["id"]

        patched = self.client.patch(f"/reports/{report_id}", json={"status": "identified"})
        self.assertEqual(patched.status_code, 200)
        doc = self.client.get(f"/reports/{report_id}").json()
        self.assertEqual(doc["status"], "identified")
        self.assertEqual(doc["description"], "Loose cable")

        self.assertEqual(self.client.delete(f"/reports/{report_id}").status_code, 204)
        self.assertEqual(self.client.delete(f"/reports/{report_id}").status_code, 404)
        self.assertEqual(self.client.get(f"/reports/{report_id}").status_code, 404)
        self.assertEqual(self.client.patch(f"/reports/{report_id}", json={"description": "x"}).status_code, 404)

    def test_user_dashboard(self):
        empty = self.client.get("/dashboard").json()
        self.assertEqual(empty["map_summary"], "No reports to display on map yet.")
        self.assertEqual(empty["recent_reports"], [])

        for idx in range(6):
            self.create(description=f"r{idx}")

        body = self.client.get("/dashboard").json()
        self.assertEqual(body["total"], 6)
        self.assertTrue(body["has_more"])
        self.assertEqual(len(body["recent_reports"]), 5)
        self.assertEqual(body["recent_reports"][0]["description"], "r5")
        self.assertEqual(body["recent_reports"][0]["status_label"], "Doubtful")
        self.assertEqual(body["map_summary"], "Currently showing 6 report(s) on map.")

    def test_admin_dashboard(self):
        self.create(status="identified")
        self.create(status="identified")
        self.create(status="doubtful")

        body = self.client.get("/admin/dashboard").json()

        self.assertEqual(body["counts"], {"identified": 2, "doubtful": 1, "not_yet_identified": 0})
        self.assertEqual(body["total"], 3)
        self.assertEqual(
            [(row["label"], row["count"]) for row in body["chart"]],
            [("Identified", 2), ("Doubtful", 1), ("Not Yet Identified", 0)],
        )
