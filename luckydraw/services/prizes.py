"""Prize catalogue backed by the dual-storage accessor."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..exceptions import NotFoundError, ValidationError
from ..storage import FallbackRepository
from ..storage.base import Record
from .common import require_text

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {"prize_name", "value", "quantity", "description"}


def _check_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise ValidationError(
            "Prize quantity must be a non-negative integer",
            details={"quantity": quantity},
        )
    return quantity


def _check_value(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Prize value must be a number", details={"value": value}) from None
    if amount < 0:
        raise ValidationError("Prize value cannot be negative", details={"value": value})
    return amount


class PrizeService:
    def __init__(self, accessor: FallbackRepository) -> None:
        self._accessor = accessor

    def create_prize(
        self,
        contest_id: int,
        prize_name: str,
        *,
        quantity: int = 1,
        value: Optional[float] = None,
        description: Optional[str] = None,
    ) -> Record:
        data = {
            "contest_id": contest_id,
            "prize_name": require_text(prize_name, "prize_name"),
            "quantity": _check_quantity(quantity),
            "value": _check_value(value),
            "description": description,
        }
        record = self._accessor.create(data)
        logger.info("Prize %s added to contest %s", record["id"], contest_id)
        return record

    def get_all_prizes(self) -> list[Record]:
        return self._accessor.get_all()

    def get_prize(self, prize_id: Any) -> Record:
        record = self._accessor.get(prize_id)
        if record is None:
            raise NotFoundError("Prize", prize_id)
        return record

    def get_prizes_by_contest(self, contest_id: Any) -> list[Record]:
        """Return the prizes of ``contest_id``, most valuable first."""
        prizes = [p for p in self.get_all_prizes() if p.get("contest_id") == contest_id]
        return sorted(prizes, key=lambda p: -(p.get("value") or 0.0))

    def update_prize(self, prize_id: Any, **fields: Any) -> Record:
        unknown = set(fields) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Unknown prize field(s): {', '.join(sorted(unknown))}",
                details={"fields": sorted(unknown)},
            )
        changes = dict(fields)
        if "prize_name" in changes:
            changes["prize_name"] = require_text(changes["prize_name"], "prize_name")
        if "quantity" in changes:
            changes["quantity"] = _check_quantity(changes["quantity"])
        if "value" in changes:
            changes["value"] = _check_value(changes["value"])
        return self._accessor.update(prize_id, changes)

    def delete_prize(self, prize_id: Any) -> None:
        self._accessor.delete(prize_id)
