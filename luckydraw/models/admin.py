from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship, validates

from ..db.utils import dt_iso
from .base import ID_TYPE, Base, utcnow
from .enums import ActivityStatus, AdminRole, ROLE_HIERARCHY, sql_in

if TYPE_CHECKING:
    from .contest import Contest
    from .draw import Draw


class Admin(Base):
    """Dashboard operator account."""

    __tablename__ = "admins"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, index=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AdminRole.MODERATOR.value
    )
    two_factor: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    last_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    contests: Mapped[list["Contest"]] = relationship(back_populates="creator")
    draws: Mapped[list["Draw"]] = relationship(back_populates="executor")
    activity: Mapped[list["AdminActivityLog"]] = relationship(back_populates="admin")

    __table_args__ = (CheckConstraint(f"role IN {sql_in(AdminRole)}", name="role_enum"),)

    @validates("email")
    def _normalize_email(self, _key: str, value: str) -> str:
        return value.strip().lower()

    @property
    def role_rank(self) -> int:
        try:
            return ROLE_HIERARCHY[AdminRole(self.role)]
        except ValueError:
            return 0

    @classmethod
    def get_by_email(cls, session: Session, email: str) -> Optional["Admin"]:
        """Get admin by their email address."""
        return session.scalar(select(cls).where(cls.email == email.strip().lower()))

    def __repr__(self) -> str:
        return f"<Admin(id={self.id}, name='{self.name}', role='{self.role}')>"

    def to_json(self) -> dict[str, Any]:
        # password_hash is never serialized
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "two_factor": self.two_factor,
            "created_at": dt_iso(self.created_at),
            "last_login": dt_iso(self.last_login),
        }


class AdminActivityLog(Base):
    """Append-only audit trail of admin actions."""

    __tablename__ = "admin_activity_log"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    admin_id: Mapped[Optional[int]] = mapped_column(
        ID_TYPE, ForeignKey("admins.id", ondelete="SET NULL"), nullable=True, index=True
    )
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    target_table: Mapped[str] = mapped_column(String(50), nullable=False)
    target_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    session_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ActivityStatus.SUCCESS.value
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    admin: Mapped[Optional["Admin"]] = relationship(back_populates="activity")

    __table_args__ = (
        CheckConstraint(f"status IN {sql_in(ActivityStatus)}", name="status_enum"),
    )

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "admin_id": self.admin_id,
            "admin_name": self.admin.name if self.admin else None,
            "action": self.action,
            "target_table": self.target_table,
            "target_id": self.target_id,
            "session_id": self.session_id,
            "status": self.status,
            "timestamp": dt_iso(self.timestamp),
        }
