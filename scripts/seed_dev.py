from datetime import datetime, timedelta, timezone

from luckydraw.bootstrap import build_app
from luckydraw.config import configure_logging
from luckydraw.models import AdminRole, Base, ContestStatus
from luckydraw.services import AdminService


def main() -> None:
    """Seed the development database with sample data."""
    configure_logging()
    app = build_app()

    # Drop and recreate all tables for a clean reset of the schema.
    with app.engine.connect() as conn:
        if conn.dialect.name == "sqlite":
            conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
        Base.metadata.drop_all(bind=conn)
        if conn.dialect.name == "sqlite":
            conn.exec_driver_sql("PRAGMA foreign_keys=ON")
        conn.commit()
    Base.metadata.create_all(app.engine)

    now = datetime.now(timezone.utc)

    with app.session_factory.begin() as session:
        admins = AdminService(session)
        superadmin = admins.create_admin(
            "Dev Superadmin", "superadmin@example.com", "dev-password", AdminRole.SUPERADMIN
        )
        admins.create_admin("Dev Moderator", "moderator@example.com", "dev-password")
        superadmin_id = superadmin.id

    contest = app.contests.create_contest(
        "Summer Giveaway",
        now - timedelta(days=1),
        now + timedelta(days=30),
        theme="summer",
        description="Sample contest seeded for local development.",
        status=ContestStatus.ONGOING,
        created_by=superadmin_id,
    )
    app.prizes.create_prize(contest["id"], "Grand Prize", quantity=1, value=500)
    app.prizes.create_prize(contest["id"], "Runner-up Voucher", quantity=3, value=50)

    for i in range(1, 11):
        app.participants.add_participant(
            contest["id"],
            f"participant{i:02d}@example.com",
            name=f"Participant {i:02d}",
            validated=i <= 8,
        )

    with app.session_factory.begin() as session:
        draw = app.draw_engine(session).execute_random_draw(contest["id"], superadmin_id, 2)
        print(f"Seeded contest {contest['id']} and draw {draw.id} with {len(draw.winners)} winners")


if __name__ == "__main__":
    main()
