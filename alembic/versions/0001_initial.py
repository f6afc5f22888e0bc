"""initial lucky draw schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa

from luckydraw.models.enums import (
    ActivityStatus,
    AdminRole,
    ContestStatus,
    DrawMode,
    EntryRule,
    PrizeStatus,
    sql_in,
)
from luckydraw.models.base import ID_TYPE

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "admins",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("two_factor", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(f"role IN {sql_in(AdminRole)}", name=op.f("ck_admins_role_enum")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_admins")),
    )
    op.create_index(op.f("ix_admins_id"), "admins", ["id"], unique=False)
    op.create_index(op.f("ix_admins_email"), "admins", ["email"], unique=True)

    op.create_table(
        "contests",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("theme", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("entry_rules", sa.String(length=20), nullable=False),
        sa.Column("created_by", ID_TYPE, nullable=True),
        sa.Column("qr_code_url", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("end_date > start_date", name=op.f("ck_contests_window")),
        sa.CheckConstraint(
            f"status IN {sql_in(ContestStatus)}", name=op.f("ck_contests_status_enum")
        ),
        sa.CheckConstraint(
            f"entry_rules IN {sql_in(EntryRule)}", name=op.f("ck_contests_entry_rules_enum")
        ),
        sa.ForeignKeyConstraint(
            ["created_by"],
            ["admins.id"],
            name=op.f("fk_contests_created_by_admins"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_contests")),
    )
    op.create_index(op.f("ix_contests_created_by"), "contests", ["created_by"], unique=False)
    op.create_index("ix_contests_status", "contests", ["status"], unique=False)

    op.create_table(
        "prizes",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("contest_id", ID_TYPE, nullable=False),
        sa.Column("prize_name", sa.String(length=255), nullable=False),
        sa.Column("value", sa.Numeric(precision=12, scale=2, asdecimal=False), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("quantity >= 0", name=op.f("ck_prizes_quantity_non_negative")),
        sa.ForeignKeyConstraint(
            ["contest_id"],
            ["contests.id"],
            name=op.f("fk_prizes_contest_id_contests"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_prizes")),
    )
    op.create_index(op.f("ix_prizes_contest_id"), "prizes", ["contest_id"], unique=False)

    op.create_table(
        "participants",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("contest_id", ID_TYPE, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("contact", sa.String(length=255), nullable=False),
        sa.Column("validated", sa.Boolean(), nullable=False),
        sa.Column("is_duplicate", sa.Boolean(), nullable=False),
        sa.Column("entry_timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["contest_id"],
            ["contests.id"],
            name=op.f("fk_participants_contest_id_contests"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_participants")),
    )
    op.create_index(
        op.f("ix_participants_contest_id"), "participants", ["contest_id"], unique=False
    )
    op.create_index(
        "ix_participants_contest_contact",
        "participants",
        ["contest_id", "contact"],
        unique=False,
    )

    op.create_table(
        "draws",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("contest_id", ID_TYPE, nullable=False),
        sa.Column("executed_by", ID_TYPE, nullable=True),
        sa.Column("draw_mode", sa.String(length=20), nullable=False),
        sa.Column("total_winners", sa.Integer(), nullable=False),
        sa.Column("executed_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            f"draw_mode IN {sql_in(DrawMode)}", name=op.f("ck_draws_draw_mode_enum")
        ),
        sa.CheckConstraint("total_winners >= 1", name=op.f("ck_draws_total_winners_positive")),
        sa.ForeignKeyConstraint(
            ["contest_id"],
            ["contests.id"],
            name=op.f("fk_draws_contest_id_contests"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["executed_by"],
            ["admins.id"],
            name=op.f("fk_draws_executed_by_admins"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_draws")),
    )
    op.create_index(op.f("ix_draws_contest_id"), "draws", ["contest_id"], unique=False)
    op.create_index(op.f("ix_draws_executed_by"), "draws", ["executed_by"], unique=False)

    op.create_table(
        "winners",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("draw_id", ID_TYPE, nullable=False),
        sa.Column("participant_id", ID_TYPE, nullable=False),
        sa.Column("prize_id", ID_TYPE, nullable=True),
        sa.Column("notified", sa.Boolean(), nullable=False),
        sa.Column("notified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("prize_status", sa.String(length=20), nullable=False),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("dispatched_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.CheckConstraint(
            f"prize_status IN {sql_in(PrizeStatus)}", name=op.f("ck_winners_prize_status_enum")
        ),
        sa.ForeignKeyConstraint(
            ["draw_id"], ["draws.id"], name=op.f("fk_winners_draw_id_draws"), ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["participant_id"],
            ["participants.id"],
            name=op.f("fk_winners_participant_id_participants"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["prize_id"],
            ["prizes.id"],
            name=op.f("fk_winners_prize_id_prizes"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_winners")),
    )
    op.create_index(op.f("ix_winners_draw_id"), "winners", ["draw_id"], unique=False)
    op.create_index(
        op.f("ix_winners_participant_id"), "winners", ["participant_id"], unique=False
    )
    op.create_index(op.f("ix_winners_prize_id"), "winners", ["prize_id"], unique=False)
    op.create_index("ix_winners_prize_status", "winners", ["prize_status"], unique=False)

    op.create_table(
        "admin_activity_log",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("admin_id", ID_TYPE, nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("target_table", sa.String(length=50), nullable=False),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("session_id", sa.String(length=100), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            f"status IN {sql_in(ActivityStatus)}",
            name=op.f("ck_admin_activity_log_status_enum"),
        ),
        sa.ForeignKeyConstraint(
            ["admin_id"],
            ["admins.id"],
            name=op.f("fk_admin_activity_log_admin_id_admins"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_admin_activity_log")),
    )
    op.create_index(
        op.f("ix_admin_activity_log_admin_id"), "admin_activity_log", ["admin_id"], unique=False
    )


def downgrade() -> None:
    op.drop_table("admin_activity_log")
    op.drop_table("winners")
    op.drop_table("draws")
    op.drop_table("participants")
    op.drop_table("prizes")
    op.drop_table("contests")
    op.drop_table("admins")
