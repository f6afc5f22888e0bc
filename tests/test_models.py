import unittest
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from luckydraw.db.engine import make_engine
from luckydraw.exceptions import InvalidTransitionError, ValidationError
from luckydraw.models import (
    Admin,
    AdminRole,
    Base,
    Contest,
    Draw,
    Participant,
    Prize,
    PrizeStatus,
    Winner,
)


def _contest(**kwargs):
    values = {
        "name": "Model Contest",
        "start_date": datetime(2024, 4, 1, tzinfo=timezone.utc),
        "end_date": datetime(2024, 4, 30, tzinfo=timezone.utc),
    }
    values.update(kwargs)
    return Contest(**values)


class DBTestCase(unittest.TestCase):
    def setUp(self):
        # In-memory SQLite for isolation
        self.engine = make_engine("sqlite+pysqlite:///:memory:")
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, future=True, expire_on_commit=False)

    def tearDown(self):
        self.engine.dispose()

    def test_contest_defaults_and_json(self):
        with self.Session() as session:
            contest = _contest(theme="Autumn")
            session.add(contest)
            session.commit()

            data = contest.to_json()
            self.assertEqual(data["status"], "DRAFT")
            self.assertEqual(data["entry_rules"], "one_entry")
            self.assertEqual(data["start_date"], "2024-04-01T00:00:00+00:00")
            self.assertIsNotNone(data["created_at"])
            self.assertEqual(
                set(data),
                {
                    "id",
                    "name",
                    "theme",
                    "description",
                    "start_date",
                    "end_date",
                    "status",
                    "entry_rules",
                    "created_by",
                    "qr_code_url",
                    "created_at",
                    "updated_at",
                },
            )

    def test_contest_window_enforced_by_database(self):
        with self.Session() as session:
            session.add(_contest(end_date=datetime(2024, 3, 1, tzinfo=timezone.utc)))
            with self.assertRaises(IntegrityError):
                session.commit()

    def test_validate_window(self):
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        Contest.validate_window(start, datetime(2024, 1, 2, tzinfo=timezone.utc))
        with self.assertRaises(ValidationError):
            Contest.validate_window(start, start)
        with self.assertRaises(ValidationError):
            Contest.validate_window(None, start)

    def test_enum_columns_are_checked(self):
        with self.Session() as session:
            session.add(_contest(status="PAUSED"))
            with self.assertRaises(IntegrityError):
                session.commit()

    def test_prize_quantity_non_negative(self):
        with self.Session() as session:
            contest = _contest()
            session.add(contest)
            session.flush()
            session.add(Prize(contest_id=contest.id, prize_name="Broken", quantity=-1))
            with self.assertRaises(IntegrityError):
                session.flush()

    def test_admin_email_normalized(self):
        with self.Session() as session:
            admin = Admin(name="Case", email="  Mixed@Example.COM ", password_hash="x")
            session.add(admin)
            session.commit()

            self.assertEqual(admin.email, "mixed@example.com")
            self.assertEqual(Admin.get_by_email(session, "MIXED@example.com").id, admin.id)
            self.assertEqual(admin.role, AdminRole.MODERATOR.value)
            self.assertEqual(admin.role_rank, 1)

    def test_role_and_status_ordering(self):
        self.assertLess(AdminRole.MODERATOR.rank, AdminRole.ADMIN.rank)
        self.assertLess(AdminRole.ADMIN.rank, AdminRole.SUPERADMIN.rank)
        steps = [status.step for status in PrizeStatus]
        self.assertEqual(steps, sorted(steps))
        self.assertEqual(PrizeStatus.PENDING.step, 0)

    def test_deleting_contest_removes_owned_rows(self):
        with self.Session() as session:
            contest = _contest()
            session.add(contest)
            session.flush()
            prize = Prize(contest_id=contest.id, prize_name="Kite", quantity=2)
            entrant = Participant(contest_id=contest.id, contact="k@example.com", validated=True)
            session.add_all([prize, entrant])
            session.flush()
            draw = Draw(contest_id=contest.id, draw_mode="MANUAL", total_winners=1)
            draw.winners.append(Winner(participant=entrant, prize=prize))
            session.add(draw)
            session.commit()

            session.delete(contest)
            session.commit()

            for model in (Prize, Participant, Draw, Winner):
                count = session.scalar(select(func.count()).select_from(model))
                self.assertEqual(count, 0, model.__name__)

    def test_winner_status_timestamps(self):
        winner = Winner(prize_status=PrizeStatus.PENDING.value)
        at = datetime(2024, 5, 5, tzinfo=timezone.utc)

        winner.advance_status(PrizeStatus.NOTIFIED, at=at)
        self.assertIsNone(winner.claimed_at)
        winner.advance_status(PrizeStatus.CLAIMED, at=at)
        self.assertEqual(winner.claimed_at, at)
        winner.advance_status(PrizeStatus.DISPATCHED, at=at)
        self.assertEqual(winner.dispatched_at, at)

        with self.assertRaises(InvalidTransitionError) as ctx:
            winner.advance_status(PrizeStatus.PENDING)
        self.assertEqual(ctx.exception.details, {"current": "DISPATCHED", "requested": "PENDING"})
        self.assertEqual(winner.prize_status, "DISPATCHED")

    def test_prize_availability(self):
        prize = Prize(prize_name="Limited", quantity=1)
        self.assertTrue(prize.is_available)
        prize.winners.append(Winner())
        self.assertFalse(prize.is_available)
        self.assertEqual(prize.units_remaining, 0)

        sold_out = Prize(prize_name="None left", quantity=0)
        self.assertFalse(sold_out.is_available)


if __name__ == "__main__":
    unittest.main()
