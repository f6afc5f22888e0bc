from __future__ import annotations

import unittest
from datetime import datetime, timezone

from luckydraw.db.engine import get_sessionmaker, make_engine
from luckydraw.exceptions import NotFoundError, RemoteUnavailableError
from luckydraw.models import Base
from luckydraw.storage import (
    CONTESTS,
    FallbackRepository,
    FetchState,
    LocalRepository,
    LocalStorage,
    SqlRepository,
)


def _contest(name: str) -> dict:
    return {
        "name": name,
        "start_date": datetime(2024, 6, 1, tzinfo=timezone.utc),
        "end_date": datetime(2024, 6, 30, tzinfo=timezone.utc),
    }


class _StorageTestCase(unittest.TestCase):
    create_schema = True

    def setUp(self) -> None:
        self.engine = make_engine("sqlite+pysqlite:///:memory:")
        if self.create_schema:
            Base.metadata.create_all(self.engine)
        self.remote = SqlRepository(get_sessionmaker(self.engine), CONTESTS)
        self.local = LocalRepository(LocalStorage(), CONTESTS)
        self.accessor = FallbackRepository(self.remote, self.local)

    def tearDown(self) -> None:
        self.engine.dispose()


class RemoteAvailableTests(_StorageTestCase):
    def test_create_goes_to_remote(self) -> None:
        record = self.accessor.create(_contest("Remote"))

        self.assertEqual(record["status"], "DRAFT")
        self.assertEqual(self.local.count(), 0)
        self.assertEqual(self.remote.get(record["id"])["name"], "Remote")

    def test_get_all_returns_remote_rows_verbatim(self) -> None:
        created = [self.remote.create(_contest(f"c{i}")) for i in range(3)]
        self.local.create(_contest("stale local row"))

        rows = self.accessor.get_all()

        self.assertEqual(len(rows), 3)
        self.assertEqual({r["id"] for r in rows}, {c["id"] for c in created})
        self.assertNotIn("stale local row", {r["name"] for r in rows})
        self.assertEqual(rows[0], self.remote.get(rows[0]["id"]))

    def test_empty_remote_falls_back_by_default(self) -> None:
        self.local.create(_contest("offline entry"))

        result = self.accessor.fetch_all()

        self.assertIs(result.state, FetchState.OK)
        self.assertEqual([r["name"] for r in result.records], ["offline entry"])

    def test_empty_remote_is_authoritative_when_configured(self) -> None:
        self.local.create(_contest("offline entry"))
        accessor = FallbackRepository(self.remote, self.local, fallback_on_empty=False)

        result = accessor.fetch_all()

        self.assertIs(result.state, FetchState.EMPTY)
        self.assertEqual(accessor.get_all(), [])

    def test_update_and_delete_reach_local_only_records(self) -> None:
        self.remote.create(_contest("remote"))
        local_only = self.local.create(_contest("made while offline"))

        updated = self.accessor.update(local_only["id"], {"name": "patched"})
        self.assertEqual(updated["name"], "patched")
        self.assertEqual(self.local.get(local_only["id"])["name"], "patched")
        self.assertEqual(self.accessor.get(local_only["id"])["name"], "patched")

        self.accessor.delete(local_only["id"])
        self.assertEqual(self.local.count(), 0)

    def test_update_remote_record(self) -> None:
        record = self.remote.create(_contest("remote"))
        updated = self.accessor.update(record["id"], {"status": "ONGOING"})
        self.assertEqual(updated["status"], "ONGOING")
        self.assertEqual(self.remote.get(record["id"])["status"], "ONGOING")

    def test_missing_everywhere(self) -> None:
        self.assertIsNone(self.accessor.get(404))
        with self.assertRaises(NotFoundError):
            self.accessor.update(404, {"name": "x"})
        with self.assertRaises(NotFoundError):
            self.accessor.delete(404)

    def test_constraint_rejection_falls_back(self) -> None:
        bad = _contest("backwards window")
        bad["start_date"], bad["end_date"] = bad["end_date"], bad["start_date"]

        with self.assertRaises(RemoteUnavailableError):
            self.remote.create(bad)
        with self.assertLogs("luckydraw.storage.fallback", level="WARNING"):
            record = self.accessor.create(bad)
        self.assertEqual(self.local.get(record["id"])["name"], "backwards window")

    def test_unparsable_timestamp_in_update_falls_back(self) -> None:
        record = self.remote.create(_contest("Remote"))

        with self.assertRaises(RemoteUnavailableError):
            self.remote.update(record["id"], {"end_date": "soon"})
        with self.assertRaises(NotFoundError):
            self.accessor.update(record["id"], {"end_date": "soon"})
        self.assertEqual(self.remote.get(record["id"])["end_date"], "2024-06-30T00:00:00+00:00")


class RemoteUnavailableTests(_StorageTestCase):
    # no tables: every remote statement fails
    create_schema = False

    def test_remote_errors_are_reported(self) -> None:
        with self.assertRaises(RemoteUnavailableError) as ctx:
            self.remote.fetch_all()
        self.assertEqual(ctx.exception.table, "contests")
        self.assertIs(self.accessor.fetch_remote().state, FetchState.FAILED)

    def test_create_falls_back_and_is_visible(self) -> None:
        with self.assertLogs("luckydraw.storage.fallback", level="WARNING") as logs:
            record = self.accessor.create(_contest("Offline"))

        self.assertTrue(any("local storage" in line for line in logs.output))
        rows = self.accessor.get_all()
        self.assertEqual([r["id"] for r in rows], [record["id"]])
        self.assertEqual(self.accessor.get(record["id"])["name"], "Offline")

    def test_update_and_delete_fall_back(self) -> None:
        record = self.accessor.create(_contest("Offline"))

        self.accessor.update(record["id"], {"name": "Still offline"})
        self.assertEqual(self.accessor.get_all()[0]["name"], "Still offline")

        self.accessor.delete(record["id"])
        self.assertEqual(self.accessor.get_all(), [])
        with self.assertRaises(NotFoundError):
            self.accessor.delete(record["id"])

    def test_unparsable_timestamp_goes_to_local(self) -> None:
        bad = _contest("Bad date")
        bad["start_date"] = "not-a-date"

        with self.assertRaises(RemoteUnavailableError):
            self.remote.create(bad)
        with self.assertLogs("luckydraw.storage.fallback", level="WARNING"):
            record = self.accessor.create(bad)

        self.assertEqual(record["start_date"], "not-a-date")
        self.assertEqual(self.local.get(record["id"])["name"], "Bad date")

    def test_failed_read_with_empty_local(self) -> None:
        result = FallbackRepository(self.remote, self.local, fallback_on_empty=False).fetch_all()
        self.assertIs(result.state, FetchState.EMPTY)
        self.assertEqual(result.records, [])


if __name__ == "__main__":
    unittest.main()
