"""HTTP route tests using FastAPI's test client."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
import tempfile
import unittest

from fastapi.testclient import TestClient

from _factories import BASE_TIME, comments_table, posts_table, snapshot, users_table

from schema_track.config import Settings, get_settings
from schema_track.dependencies import get_snapshot_store
from schema_track.main import app
from schema_track.storage.snapshot_store import JsonFileSnapshotStore


class SnapshotApiTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store = JsonFileSnapshotStore(Path(self._tmp.name))
        self.store.save(snapshot("snapshot_1", {"users": users_table(), "posts": posts_table()}, BASE_TIME))
        self.store.save(
            snapshot(
                "snapshot_2",
                {"users": users_table(length=100), "comments": comments_table()},
                BASE_TIME + timedelta(days=1),
            )
        )
        app.dependency_overrides[get_snapshot_store] = lambda: self.store
        app.dependency_overrides[get_settings] = lambda: Settings()
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self._tmp.cleanup()

    def test_health(self) -> None:
        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_list_snapshots(self) -> None:
        response = self.client.get("/snapshots", params={"limit": 1})

        self.assertEqual(response.status_code, 200)
        items = response.json()["data"]
        self.assertEqual([item["name"] for item in items], ["snapshot_2"])
        self.assertEqual(items[0]["table_count"], 2)

    def test_get_snapshot_uses_schema_key(self) -> None:
        response = self.client.get("/snapshots/snapshot_1")

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(sorted(data["schema"]), ["posts", "users"])

    def test_get_missing_snapshot(self) -> None:
        response = self.client.get("/snapshots/missing")

        self.assertEqual(response.status_code, 404)

    def test_diff_defaults_to_latest_and_reports_summary(self) -> None:
        response = self.client.get("/diff", params={"from": "snapshot_1"})

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["to_snapshot"], "snapshot_2")
        self.assertEqual(data["diff"]["new_tables"], ["comments"])
        change = data["diff"]["modified_tables"]["users"]["modified_columns"]["name"]["length_changed"]
        self.assertEqual(change, {"from": 255, "to": 100})
        self.assertEqual(data["summary"]["total_changes"], 3)
        self.assertTrue(data["summary"]["breaking_changes"])

    def test_diff_with_unknown_reference(self) -> None:
        response = self.client.get("/diff", params={"from": "nope"})

        self.assertEqual(response.status_code, 404)

    def test_changelog_formats(self) -> None:
        response = self.client.get("/changelog", params={"from": "snapshot_1", "format": "text"})

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["format"], "text")
        self.assertIn("Schema Changes (2024-01-10 12:00:00 → 2024-01-11 12:00:00)", data["content"])

    def test_full_changelog(self) -> None:
        response = self.client.get("/changelog", params={"full": "true"})

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["data"]["content"].startswith("# Complete Schema Changelog"))

    def test_changelog_rejects_bad_input(self) -> None:
        bad_format = self.client.get("/changelog", params={"format": "html"})
        bad_date = self.client.get("/changelog", params={"date_from": "soon", "date_to": "2024-01-11"})

        self.assertEqual(bad_format.status_code, 422)
        self.assertEqual(bad_date.status_code, 422)


if __name__ == "__main__":
    unittest.main()
