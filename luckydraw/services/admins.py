"""Admin directory, role checks and the activity log."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from werkzeug.security import check_password_hash, generate_password_hash

from ..config import settings
from ..exceptions import NotFoundError, ValidationError
from ..models import Admin, AdminActivityLog, Contest, Draw
from ..models.enums import ActivityStatus, AdminRole
from .common import coerce_enum, require_text

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {"name", "email", "role", "two_factor", "password"}


class AdminService:
    """Manage admin accounts bound to a SQLAlchemy session.

    Passwords are stored as salted hashes produced by
    :func:`werkzeug.security.generate_password_hash`; plaintext is never
    persisted or compared.
    """

    def __init__(self, session: Session, *, hash_method: Optional[str] = None) -> None:
        self._session = session
        self._hash_method = hash_method or settings.PASSWORD_HASH_METHOD

    def create_admin(
        self,
        name: str,
        email: str,
        password: str,
        role: AdminRole | str = AdminRole.MODERATOR,
        *,
        two_factor: bool = False,
    ) -> Admin:
        email = require_text(email, "email").lower()
        if Admin.get_by_email(self._session, email) is not None:
            raise ValidationError("An admin with this email already exists", details={"email": email})
        admin = Admin(
            name=require_text(name, "name"),
            email=email,
            password_hash=self._hash(password),
            role=coerce_enum(AdminRole, role, "role").value,
            two_factor=two_factor,
        )
        self._session.add(admin)
        self._session.flush()
        logger.info("Admin %s created with role %s", admin.id, admin.role)
        return admin

    def get_admin(self, admin_id: int) -> Admin:
        admin = self._session.get(Admin, admin_id)
        if admin is None:
            raise NotFoundError("Admin", admin_id)
        return admin

    def get_admin_by_email(self, email: str) -> Optional[Admin]:
        return Admin.get_by_email(self._session, email)

    def list_admins(self) -> list[Admin]:
        stmt = select(Admin).order_by(Admin.created_at.desc(), Admin.id.desc())
        return list(self._session.scalars(stmt).all())

    def update_admin(self, admin_id: int, **fields: Any) -> Admin:
        unknown = set(fields) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Unknown admin field(s): {', '.join(sorted(unknown))}",
                details={"fields": sorted(unknown)},
            )
        admin = self.get_admin(admin_id)
        if "email" in fields:
            email = require_text(fields["email"], "email").lower()
            other = Admin.get_by_email(self._session, email)
            if other is not None and other.id != admin.id:
                raise ValidationError(
                    "An admin with this email already exists", details={"email": email}
                )
            admin.email = email
        if "name" in fields:
            admin.name = require_text(fields["name"], "name")
        if "role" in fields:
            admin.role = coerce_enum(AdminRole, fields["role"], "role").value
        if "two_factor" in fields:
            admin.two_factor = bool(fields["two_factor"])
        if "password" in fields:
            admin.password_hash = self._hash(fields["password"])
        self._session.flush()
        return admin

    def update_last_login(self, admin_id: int) -> Admin:
        admin = self.get_admin(admin_id)
        admin.last_login = datetime.now(timezone.utc)
        self._session.flush()
        return admin

    def delete_admin(self, admin_id: int) -> None:
        admin = self.get_admin(admin_id)
        self._session.delete(admin)
        self._session.flush()
        logger.info("Admin %s deleted", admin_id)

    def authenticate(self, email: str, password: str) -> Optional[Admin]:
        """Return the admin matching ``email`` and ``password``, or ``None``.

        Successful logins stamp ``last_login``. Both outcomes are written to
        the activity log when the account exists.
        """
        admin = Admin.get_by_email(self._session, email)
        if admin is None:
            logger.info("Login attempt for unknown admin email")
            return None
        if not check_password_hash(admin.password_hash, password):
            logger.info("Rejected login for admin %s", admin.id)
            self.log_activity(admin.id, "LOGIN", "admins", admin.id, status=ActivityStatus.FAILURE)
            return None
        admin.last_login = datetime.now(timezone.utc)
        self._session.flush()
        self.log_activity(admin.id, "LOGIN", "admins", admin.id)
        return admin

    def check_permissions(self, admin_id: int, required_role: AdminRole | str) -> bool:
        """True iff the admin's role ranks at least as high as ``required_role``.

        Ranks: SUPERADMIN (3) > ADMIN (2) > MODERATOR (1). An unknown admin
        has no permissions.
        """
        required = coerce_enum(AdminRole, required_role, "required_role")
        admin = self._session.get(Admin, admin_id)
        if admin is None:
            return False
        return admin.role_rank >= required.rank

    def log_activity(
        self,
        admin_id: Optional[int],
        action: str,
        target_table: str,
        target_id: Optional[int] = None,
        *,
        session_id: Optional[str] = None,
        status: ActivityStatus | str = ActivityStatus.SUCCESS,
    ) -> Optional[AdminActivityLog]:
        """Append an entry to the activity log.

        The entry is written in its own savepoint. Any failure is logged as a
        warning and ``None`` is returned; the caller's operation goes on.
        """
        try:
            with self._session.begin_nested():
                entry = AdminActivityLog(
                    admin_id=admin_id,
                    action=action,
                    target_table=target_table,
                    target_id=target_id,
                    session_id=session_id,
                    status=ActivityStatus(status).value,
                )
                self._session.add(entry)
                self._session.flush()
        except (SQLAlchemyError, ValueError) as exc:
            logger.warning(
                "Could not record %s on %s for admin %s: %s", action, target_table, admin_id, exc
            )
            return None
        return entry

    def get_activity_logs(
        self, admin_id: Optional[int] = None, limit: int = 50
    ) -> list[AdminActivityLog]:
        stmt = (
            select(AdminActivityLog)
            .options(selectinload(AdminActivityLog.admin))
            .order_by(AdminActivityLog.timestamp.desc(), AdminActivityLog.id.desc())
            .limit(limit)
        )
        if admin_id is not None:
            stmt = stmt.where(AdminActivityLog.admin_id == admin_id)
        return list(self._session.scalars(stmt).all())

    def role_stats(self) -> dict[str, int]:
        rows = self._session.execute(
            select(Admin.role, func.count(Admin.id)).group_by(Admin.role)
        ).all()
        counts = {role: count for role, count in rows}
        stats = {
            "superadmins": counts.get(AdminRole.SUPERADMIN.value, 0),
            "admins": counts.get(AdminRole.ADMIN.value, 0),
            "moderators": counts.get(AdminRole.MODERATOR.value, 0),
        }
        stats["total"] = sum(stats.values())
        return stats

    def admin_stats(self, admin_id: int) -> dict[str, int]:
        def _count(stmt) -> int:
            return int(self._session.scalar(stmt) or 0)

        return {
            "contests_created": _count(
                select(func.count(Contest.id)).where(Contest.created_by == admin_id)
            ),
            "draws_executed": _count(
                select(func.count(Draw.id)).where(Draw.executed_by == admin_id)
            ),
            "activities_logged": _count(
                select(func.count(AdminActivityLog.id)).where(
                    AdminActivityLog.admin_id == admin_id
                )
            ),
        }

    def _hash(self, password: str) -> str:
        if not password:
            raise ValidationError("password is required", details={"field": "password"})
        return generate_password_hash(password, method=self._hash_method)
