"""Database models for draws and their winners."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.utils import dt_iso
from ..exceptions import InvalidTransitionError
from .base import ID_TYPE, Base, utcnow
from .enums import DrawMode, PrizeStatus, sql_in

if TYPE_CHECKING:
    from .admin import Admin
    from .contest import Contest, Participant, Prize


class Draw(Base):
    """One execution of winner selection against a contest's participant pool."""

    __tablename__ = "draws"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    contest_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("contests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    """Contest whose participants were drawn from."""

    executed_by: Mapped[Optional[int]] = mapped_column(
        ID_TYPE, ForeignKey("admins.id", ondelete="SET NULL"), nullable=True, index=True
    )
    """Admin who ran the draw."""

    draw_mode: Mapped[str] = mapped_column(String(20), nullable=False)
    """``RANDOM`` or ``MANUAL``."""

    total_winners: Mapped[int] = mapped_column(Integer, nullable=False)
    """Number of winners requested for this draw."""

    executed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    """Timestamp of the draw."""

    contest: Mapped["Contest"] = relationship(back_populates="draws")
    executor: Mapped[Optional["Admin"]] = relationship(back_populates="draws")
    winners: Mapped[list["Winner"]] = relationship(
        back_populates="draw",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Winner.id",
    )

    __table_args__ = (
        CheckConstraint(f"draw_mode IN {sql_in(DrawMode)}", name="draw_mode_enum"),
        CheckConstraint("total_winners >= 1", name="total_winners_positive"),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<Draw(id={self.id}, contest_id={self.contest_id}, "
            f"draw_mode={self.draw_mode}, total_winners={self.total_winners})>"
        )

    def to_json(self, *, include_winners: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "contest_id": self.contest_id,
            "executed_by": self.executed_by,
            "draw_mode": self.draw_mode,
            "total_winners": self.total_winners,
            "executed_at": dt_iso(self.executed_at),
        }
        if include_winners:
            data["winners"] = [winner.to_json() for winner in self.winners]
        return data


class Winner(Base):
    """A participant selected by a draw, optionally paired with a prize.

    Winner rows are never deleted by the application; only the notification
    flag and the prize-fulfillment status change over time.
    """

    __tablename__ = "winners"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    draw_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("draws.id", ondelete="CASCADE"), nullable=False, index=True
    )
    participant_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    prize_id: Mapped[Optional[int]] = mapped_column(
        ID_TYPE, ForeignKey("prizes.id", ondelete="SET NULL"), nullable=True, index=True
    )
    notified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    prize_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PrizeStatus.PENDING.value
    )
    claimed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    dispatched_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    delivered_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    draw: Mapped["Draw"] = relationship(back_populates="winners")
    participant: Mapped["Participant"] = relationship(back_populates="winners")
    prize: Mapped[Optional["Prize"]] = relationship(back_populates="winners")

    __table_args__ = (
        CheckConstraint(f"prize_status IN {sql_in(PrizeStatus)}", name="prize_status_enum"),
        Index("ix_winners_prize_status", "prize_status"),
    )

    def advance_status(self, status: PrizeStatus, *, at: Optional[datetime] = None) -> None:
        """Move the prize status forward, stamping the matching timestamp.

        Raises
        ------
        InvalidTransitionError
            If ``status`` is not strictly after the current status.
        """
        current = PrizeStatus(self.prize_status)
        target = PrizeStatus(status)
        if target.step <= current.step:
            raise InvalidTransitionError(current.value, target.value)

        now = at or utcnow()
        self.prize_status = target.value
        if target is PrizeStatus.CLAIMED:
            self.claimed_at = now
        elif target is PrizeStatus.DISPATCHED:
            self.dispatched_at = now
        elif target is PrizeStatus.DELIVERED:
            self.delivered_at = now

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<Winner(id={self.id}, draw_id={self.draw_id}, "
            f"participant_id={self.participant_id}, prize_id={self.prize_id}, "
            f"prize_status={self.prize_status})>"
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "draw_id": self.draw_id,
            "participant_id": self.participant_id,
            "prize_id": self.prize_id,
            "notified": self.notified,
            "notified_at": dt_iso(self.notified_at),
            "prize_status": self.prize_status,
            "claimed_at": dt_iso(self.claimed_at),
            "dispatched_at": dt_iso(self.dispatched_at),
            "delivered_at": dt_iso(self.delivered_at),
            "notes": self.notes,
            "participant": self.participant.to_json() if self.participant else None,
            "prize": self.prize.to_json() if self.prize else None,
        }


__all__ = ["Draw", "Winner"]
