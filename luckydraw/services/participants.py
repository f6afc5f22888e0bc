"""Participant registry backed by the dual-storage accessor."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..exceptions import NotFoundError
from ..storage import FallbackRepository
from ..storage.base import Record
from .common import require_text, sort_key_dt

logger = logging.getLogger(__name__)


def _same_contact(a: Optional[str], b: Optional[str]) -> bool:
    if a is None or b is None:
        return False
    return a.strip().lower() == b.strip().lower()


class ParticipantService:
    """Add, validate and query contest entries.

    Duplicate entries (same contest, same contact) are flagged with
    ``is_duplicate`` rather than rejected.
    """

    def __init__(self, accessor: FallbackRepository) -> None:
        self._accessor = accessor

    def add_participant(
        self,
        contest_id: int,
        contact: str,
        *,
        name: Optional[str] = None,
        validated: bool = False,
    ) -> Record:
        contact = require_text(contact, "contact")
        duplicate = self.check_duplicate(contest_id, contact) is not None
        if duplicate:
            logger.warning("Duplicate entry for contest %s flagged", contest_id)
        return self._accessor.create(
            {
                "contest_id": contest_id,
                "name": name,
                "contact": contact,
                "validated": bool(validated),
                "is_duplicate": duplicate,
            }
        )

    def get_participant(self, participant_id: Any) -> Record:
        record = self._accessor.get(participant_id)
        if record is None:
            raise NotFoundError("Participant", participant_id)
        return record

    def get_participants_by_contest(self, contest_id: Any) -> list[Record]:
        """Return entries of ``contest_id``, newest first."""
        entries = [p for p in self._accessor.get_all() if p.get("contest_id") == contest_id]
        return sorted(entries, key=lambda p: sort_key_dt(p, "entry_timestamp"), reverse=True)

    def get_validated_participants(self, contest_id: Any) -> list[Record]:
        """Return validated entries of ``contest_id``, oldest first."""
        entries = [
            p
            for p in self._accessor.get_all()
            if p.get("contest_id") == contest_id and p.get("validated")
        ]
        return sorted(entries, key=lambda p: sort_key_dt(p, "entry_timestamp"))

    def set_validation(self, participant_id: Any, validated: bool) -> Record:
        return self._accessor.update(participant_id, {"validated": bool(validated)})

    def check_duplicate(self, contest_id: Any, contact: str) -> Optional[Record]:
        for entry in self._accessor.get_all():
            if entry.get("contest_id") == contest_id and _same_contact(entry.get("contact"), contact):
                return entry
        return None

    def participant_stats(self, contest_id: Any) -> dict[str, int]:
        entries = [p for p in self._accessor.get_all() if p.get("contest_id") == contest_id]
        validated = sum(1 for p in entries if p.get("validated"))
        return {
            "total": len(entries),
            "validated": validated,
            "pending": len(entries) - validated,
        }

    def delete_participant(self, participant_id: Any) -> None:
        self._accessor.delete(participant_id)
