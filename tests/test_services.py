from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from luckydraw.bootstrap import build_app
from luckydraw.db.engine import make_engine
from luckydraw.exceptions import NotFoundError, ValidationError
from luckydraw.models import Base, ContestStatus, EntryRule
from luckydraw.storage import LocalStorage

START = datetime(2024, 7, 1, tzinfo=timezone.utc)
END = datetime(2024, 7, 31, tzinfo=timezone.utc)


class _ServiceTestCase(unittest.TestCase):
    create_schema = True

    def setUp(self) -> None:
        self.engine = make_engine("sqlite+pysqlite:///:memory:")
        if self.create_schema:
            Base.metadata.create_all(self.engine)
        self.app = build_app(engine=self.engine, local_storage=LocalStorage())

    def tearDown(self) -> None:
        self.engine.dispose()

    def _contest(self, name: str = "Summer Draw", **kwargs):
        return self.app.contests.create_contest(name, START, END, **kwargs)


class ContestServiceTests(_ServiceTestCase):
    def test_create_defaults(self) -> None:
        contest = self._contest(theme="Beach", qr_code_url="https://example.com/qr.png")

        self.assertEqual(contest["status"], ContestStatus.DRAFT.value)
        self.assertEqual(contest["entry_rules"], EntryRule.ONE_ENTRY.value)
        self.assertEqual(contest["theme"], "Beach")
        self.assertEqual(contest["start_date"], "2024-07-01T00:00:00+00:00")
        self.assertEqual(self.app.contests.get_contest(contest["id"])["name"], "Summer Draw")

    def test_create_accepts_iso_strings(self) -> None:
        contest = self.app.contests.create_contest(
            "Strings", "2024-01-01T00:00:00Z", "2024-01-02T00:00:00Z", entry_rules="multiple_entry"
        )
        self.assertEqual(contest["entry_rules"], "multiple_entry")

    def test_window_must_be_positive(self) -> None:
        with self.assertRaises(ValidationError):
            self.app.contests.create_contest("Backwards", END, START)
        with self.assertRaises(ValidationError):
            self.app.contests.create_contest("Instant", START, START)
        self.assertEqual(self.app.contests.get_all_contests(), [])

    def test_rejects_bad_input(self) -> None:
        with self.assertRaises(ValidationError):
            self._contest(status="PAUSED")
        with self.assertRaises(ValidationError):
            self._contest(name="  ")
        with self.assertRaises(ValidationError):
            self.app.contests.create_contest("No start", None, END)

    def test_update_revalidates_window(self) -> None:
        contest = self._contest()

        with self.assertRaises(ValidationError):
            self.app.contests.update_contest(contest["id"], end_date=START - timedelta(days=1))
        with self.assertRaises(ValidationError):
            self.app.contests.update_contest(contest["id"], prize_pool=10)

        updated = self.app.contests.update_contest(
            contest["id"], end_date=END + timedelta(days=7), description="extended"
        )
        self.assertEqual(updated["end_date"], "2024-08-07T00:00:00+00:00")
        self.assertEqual(updated["description"], "extended")

    def test_status_queries(self) -> None:
        draft = self._contest("Draft")
        live = self._contest("Live")
        self.app.contests.change_status(live["id"], ContestStatus.ONGOING)
        later = self.app.contests.create_contest(
            "Later", END + timedelta(days=30), END + timedelta(days=60), status="ONGOING"
        )

        ongoing = self.app.contests.get_contests_by_status("ONGOING")
        self.assertEqual({c["id"] for c in ongoing}, {live["id"], later["id"]})

        active = self.app.contests.get_active_contests(now=START + timedelta(days=3))
        self.assertEqual([c["id"] for c in active], [live["id"]])
        self.assertNotIn(draft["id"], {c["id"] for c in active})

    def test_delete_and_missing(self) -> None:
        contest = self._contest()
        self.app.contests.delete_contest(contest["id"])
        with self.assertRaises(NotFoundError):
            self.app.contests.get_contest(contest["id"])
        with self.assertRaises(NotFoundError):
            self.app.contests.delete_contest(contest["id"])


class PrizeServiceTests(_ServiceTestCase):
    def test_prizes_by_contest_highest_value_first(self) -> None:
        contest = self._contest()
        other = self._contest("Other")
        self.app.prizes.create_prize(contest["id"], "Mug", value=8)
        self.app.prizes.create_prize(contest["id"], "Laptop", value=900, quantity=1)
        self.app.prizes.create_prize(contest["id"], "Thanks card")
        self.app.prizes.create_prize(other["id"], "Elsewhere", value=1000)

        names = [p["prize_name"] for p in self.app.prizes.get_prizes_by_contest(contest["id"])]
        self.assertEqual(names, ["Laptop", "Mug", "Thanks card"])

    def test_quantity_and_value_validation(self) -> None:
        contest = self._contest()
        for bad in (-1, 1.5, True, "3"):
            with self.assertRaises(ValidationError):
                self.app.prizes.create_prize(contest["id"], "Bad", quantity=bad)
        with self.assertRaises(ValidationError):
            self.app.prizes.create_prize(contest["id"], "Bad", value=-0.01)
        with self.assertRaises(ValidationError):
            self.app.prizes.create_prize(contest["id"], "Bad", value="lots")

        prize = self.app.prizes.create_prize(contest["id"], "Zero stock", quantity=0)
        self.assertEqual(prize["quantity"], 0)

    def test_update_and_delete(self) -> None:
        contest = self._contest()
        prize = self.app.prizes.create_prize(contest["id"], "Hat", value=15, quantity=3)

        updated = self.app.prizes.update_prize(prize["id"], quantity=5, value=12.5)
        self.assertEqual(updated["quantity"], 5)
        self.assertAlmostEqual(updated["value"], 12.5)
        with self.assertRaises(ValidationError):
            self.app.prizes.update_prize(prize["id"], quantity=-2)
        with self.assertRaises(ValidationError):
            self.app.prizes.update_prize(prize["id"], contest_id=99)

        self.app.prizes.delete_prize(prize["id"])
        with self.assertRaises(NotFoundError):
            self.app.prizes.get_prize(prize["id"])


class ParticipantServiceTests(_ServiceTestCase):
    def test_duplicates_are_flagged_not_rejected(self) -> None:
        contest = self._contest()
        other = self._contest("Other")
        first = self.app.participants.add_participant(contest["id"], "ana@example.com", name="Ana")
        again = self.app.participants.add_participant(contest["id"], " ANA@example.com ")
        elsewhere = self.app.participants.add_participant(other["id"], "ana@example.com")

        self.assertFalse(first["is_duplicate"])
        self.assertTrue(again["is_duplicate"])
        self.assertFalse(elsewhere["is_duplicate"])
        self.assertEqual(
            self.app.participants.check_duplicate(contest["id"], "Ana@Example.com")["id"],
            first["id"],
        )
        self.assertIsNone(self.app.participants.check_duplicate(contest["id"], "bob@example.com"))

    def test_validation_and_stats(self) -> None:
        contest = self._contest()
        a = self.app.participants.add_participant(contest["id"], "a@example.com", validated=True)
        b = self.app.participants.add_participant(contest["id"], "b@example.com")
        c = self.app.participants.add_participant(contest["id"], "c@example.com")

        self.app.participants.set_validation(c["id"], True)

        self.assertEqual(
            self.app.participants.participant_stats(contest["id"]),
            {"total": 3, "validated": 2, "pending": 1},
        )
        validated = self.app.participants.get_validated_participants(contest["id"])
        self.assertEqual([p["id"] for p in validated], [a["id"], c["id"]])
        newest_first = self.app.participants.get_participants_by_contest(contest["id"])
        self.assertEqual([p["id"] for p in newest_first], [c["id"], b["id"], a["id"]])

        self.app.participants.delete_participant(b["id"])
        self.assertEqual(self.app.participants.participant_stats(contest["id"])["total"], 2)
        with self.assertRaises(NotFoundError):
            self.app.participants.get_participant(b["id"])

    def test_contact_is_required(self) -> None:
        contest = self._contest()
        with self.assertRaises(ValidationError):
            self.app.participants.add_participant(contest["id"], "")


class OfflineServiceTests(_ServiceTestCase):
    create_schema = False

    def test_services_keep_working_from_local_storage(self) -> None:
        with self.assertLogs("luckydraw.storage.fallback", level="WARNING"):
            contest = self._contest("Offline Draw")
            self.app.prizes.create_prize(contest["id"], "Voucher", value=20)
            entry = self.app.participants.add_participant(contest["id"], "x@example.com")

        self.assertEqual(self.app.contests.get_contest(contest["id"])["name"], "Offline Draw")
        self.assertEqual(len(self.app.prizes.get_prizes_by_contest(contest["id"])), 1)
        self.app.participants.set_validation(entry["id"], True)
        self.assertEqual(
            self.app.participants.participant_stats(contest["id"]),
            {"total": 1, "validated": 1, "pending": 0},
        )
        self.assertEqual(self.app.local_storage.keys(), [
            "lucky_draw_contests",
            "lucky_draw_prizes",
            "lucky_draw_participants",
        ])
        self.assertEqual(self.app.monitor.get_storage_status().overall.mode, "local")


if __name__ == "__main__":
    unittest.main()
