"""Contest, prize and participant models."""

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
    Numeric,
    String,
    Text,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from ..db.utils import dt_iso
from ..exceptions import ValidationError
from .base import ID_TYPE, Base, utcnow
from .enums import ContestStatus, EntryRule, sql_in

if TYPE_CHECKING:
    from .admin import Admin
    from .draw import Draw, Winner


class Contest(Base):
    """A time-boxed campaign that accepts participant entries."""

    __tablename__ = "contests"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    theme: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ContestStatus.DRAFT.value
    )
    entry_rules: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EntryRule.ONE_ENTRY.value
    )
    created_by: Mapped[Optional[int]] = mapped_column(
        ID_TYPE, ForeignKey("admins.id", ondelete="SET NULL"), nullable=True, index=True
    )
    qr_code_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    creator: Mapped[Optional["Admin"]] = relationship(back_populates="contests")
    prizes: Mapped[list["Prize"]] = relationship(
        back_populates="contest",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    participants: Mapped[list["Participant"]] = relationship(
        back_populates="contest",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    draws: Mapped[list["Draw"]] = relationship(
        back_populates="contest",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="window"),
        CheckConstraint(f"status IN {sql_in(ContestStatus)}", name="status_enum"),
        CheckConstraint(f"entry_rules IN {sql_in(EntryRule)}", name="entry_rules_enum"),
        Index("ix_contests_status", "status"),
    )

    @staticmethod
    def validate_window(start_date: Optional[datetime], end_date: Optional[datetime]) -> None:
        """Raise :class:`ValidationError` unless ``end_date`` is strictly after ``start_date``."""
        if start_date is None or end_date is None:
            raise ValidationError("Contest start and end dates are required")
        if end_date <= start_date:
            raise ValidationError(
                "Contest end date must be after its start date",
                details={"start_date": dt_iso(start_date), "end_date": dt_iso(end_date)},
            )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<Contest(id={self.id}, name='{self.name}', status={self.status})>"

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "theme": self.theme,
            "description": self.description,
            "start_date": dt_iso(self.start_date),
            "end_date": dt_iso(self.end_date),
            "status": self.status,
            "entry_rules": self.entry_rules,
            "created_by": self.created_by,
            "qr_code_url": self.qr_code_url,
            "created_at": dt_iso(self.created_at),
            "updated_at": dt_iso(self.updated_at),
        }


class Prize(Base):
    """A reward offered by a contest, available in ``quantity`` units."""

    __tablename__ = "prizes"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    contest_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("contests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    prize_name: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[Optional[float]] = mapped_column(
        Numeric(12, 2, asdecimal=False), nullable=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    contest: Mapped["Contest"] = relationship(back_populates="prizes")
    winners: Mapped[list["Winner"]] = relationship(back_populates="prize")

    __table_args__ = (CheckConstraint("quantity >= 0", name="quantity_non_negative"),)

    @property
    def units_won(self) -> int:
        return len(self.winners)

    @property
    def units_remaining(self) -> int:
        return max(self.quantity - self.units_won, 0)

    @property
    def is_available(self) -> bool:
        """A prize stays available while fewer units were won than exist."""
        return self.units_won < self.quantity

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<Prize(id={self.id}, contest_id={self.contest_id}, "
            f"prize_name='{self.prize_name}', quantity={self.quantity})>"
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "contest_id": self.contest_id,
            "prize_name": self.prize_name,
            "value": self.value,
            "quantity": self.quantity,
            "description": self.description,
            "created_at": dt_iso(self.created_at),
        }


class Participant(Base):
    """One entry into a contest."""

    __tablename__ = "participants"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    contest_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("contests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact: Mapped[str] = mapped_column(String(255), nullable=False)
    validated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_duplicate: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    entry_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    contest: Mapped["Contest"] = relationship(back_populates="participants")
    winners: Mapped[list["Winner"]] = relationship(
        back_populates="participant",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # (contest, contact) uniqueness is checked by the service layer, not enforced here
    __table_args__ = (Index("ix_participants_contest_contact", "contest_id", "contact"),)

    @classmethod
    def validated_for_contest(cls, session: Session, contest_id: int) -> list["Participant"]:
        """Return validated participants of ``contest_id`` in entry order."""
        stmt = (
            select(cls)
            .where(cls.contest_id == contest_id, cls.validated.is_(True))
            .order_by(cls.entry_timestamp.asc(), cls.id.asc())
        )
        return list(session.scalars(stmt).all())

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<Participant(id={self.id}, contest_id={self.contest_id}, "
            f"validated={self.validated})>"
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "contest_id": self.contest_id,
            "name": self.name,
            "contact": self.contact,
            "validated": self.validated,
            "is_duplicate": self.is_duplicate,
            "entry_timestamp": dt_iso(self.entry_timestamp),
        }


__all__ = ["Contest", "Prize", "Participant"]
