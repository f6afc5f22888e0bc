"""Contest directory backed by the dual-storage accessor."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from ..exceptions import NotFoundError, ValidationError
from ..models import Contest
from ..models.enums import ContestStatus, EntryRule
from ..storage import FallbackRepository
from ..storage.base import Record
from .common import coerce_dt, coerce_enum, require_text, sort_key_dt

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {
    "name",
    "theme",
    "description",
    "start_date",
    "end_date",
    "status",
    "entry_rules",
    "created_by",
    "qr_code_url",
}


class ContestService:
    """Create, query and edit contests.

    Records are plain dicts in the row shape of the ``contests`` table. They
    come from the remote store when it is usable and from local storage
    otherwise.
    """

    def __init__(self, accessor: FallbackRepository) -> None:
        self._accessor = accessor

    def create_contest(
        self,
        name: str,
        start_date: datetime | str,
        end_date: datetime | str,
        *,
        theme: Optional[str] = None,
        description: Optional[str] = None,
        status: ContestStatus | str = ContestStatus.DRAFT,
        entry_rules: EntryRule | str = EntryRule.ONE_ENTRY,
        created_by: Optional[int] = None,
        qr_code_url: Optional[str] = None,
    ) -> Record:
        start = coerce_dt(start_date, "start_date")
        end = coerce_dt(end_date, "end_date")
        Contest.validate_window(start, end)
        data = {
            "name": require_text(name, "name"),
            "theme": theme,
            "description": description,
            "start_date": start,
            "end_date": end,
            "status": coerce_enum(ContestStatus, status, "status").value,
            "entry_rules": coerce_enum(EntryRule, entry_rules, "entry_rules").value,
            "created_by": created_by,
            "qr_code_url": qr_code_url,
        }
        record = self._accessor.create(data)
        logger.info("Contest %s created: %s", record["id"], record["name"])
        return record

    def get_all_contests(self) -> list[Record]:
        return self._accessor.get_all()

    def get_contest(self, contest_id: Any) -> Record:
        record = self._accessor.get(contest_id)
        if record is None:
            raise NotFoundError("Contest", contest_id)
        return record

    def update_contest(self, contest_id: Any, **fields: Any) -> Record:
        """Apply ``fields`` to a contest.

        The date window is re-validated against the stored values whenever
        either bound changes.
        """
        unknown = set(fields) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Unknown contest field(s): {', '.join(sorted(unknown))}",
                details={"fields": sorted(unknown)},
            )

        changes = dict(fields)
        if "name" in changes:
            changes["name"] = require_text(changes["name"], "name")
        if "status" in changes:
            changes["status"] = coerce_enum(ContestStatus, changes["status"], "status").value
        if "entry_rules" in changes:
            changes["entry_rules"] = coerce_enum(
                EntryRule, changes["entry_rules"], "entry_rules"
            ).value
        if "start_date" in changes or "end_date" in changes:
            current = self.get_contest(contest_id)
            start = coerce_dt(changes.get("start_date", current.get("start_date")), "start_date")
            end = coerce_dt(changes.get("end_date", current.get("end_date")), "end_date")
            Contest.validate_window(start, end)
            if "start_date" in changes:
                changes["start_date"] = start
            if "end_date" in changes:
                changes["end_date"] = end
        changes["updated_at"] = datetime.now(timezone.utc)
        return self._accessor.update(contest_id, changes)

    def change_status(self, contest_id: Any, status: ContestStatus | str) -> Record:
        return self.update_contest(contest_id, status=status)

    def delete_contest(self, contest_id: Any) -> None:
        self._accessor.delete(contest_id)
        logger.info("Contest %s deleted", contest_id)

    def get_contests_by_status(self, status: ContestStatus | str) -> list[Record]:
        wanted = coerce_enum(ContestStatus, status, "status").value
        return [c for c in self.get_all_contests() if c.get("status") == wanted]

    def get_active_contests(self, now: Optional[datetime] = None) -> list[Record]:
        """Return ongoing contests whose window contains ``now``."""
        moment = now or datetime.now(timezone.utc)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        active = []
        for contest in self.get_contests_by_status(ContestStatus.ONGOING):
            start = coerce_dt(contest.get("start_date"), "start_date")
            end = coerce_dt(contest.get("end_date"), "end_date")
            if start <= moment <= end:
                active.append(contest)
        return sorted(active, key=lambda c: sort_key_dt(c, "created_at"), reverse=True)
