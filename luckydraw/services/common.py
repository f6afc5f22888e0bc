"""Small validation helpers shared by the services."""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any, Optional, TypeVar

from ..db.utils import parse_dt
from ..exceptions import ValidationError

E = TypeVar("E", bound=enum.Enum)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def coerce_enum(enum_cls: type[E], value: Any, field: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"Invalid {field} {value!r}; expected one of: {allowed}",
            details={"field": field, "value": value},
        ) from None


def require_text(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", details={"field": field})
    return str(value).strip()


def coerce_dt(value: Any, field: str) -> datetime:
    try:
        parsed = parse_dt(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid {field}: {value!r}", details={"field": field}) from exc
    if parsed is None:
        raise ValidationError(f"{field} is required", details={"field": field})
    return parsed


def sort_key_dt(record: dict[str, Any], field: str) -> tuple[datetime, int]:
    """Sort key ordering records by an ISO timestamp field, then by id."""
    raw = record.get(field)
    try:
        stamp = parse_dt(raw) or _EPOCH
    except (TypeError, ValueError):
        stamp = _EPOCH
    record_id = record.get("id")
    return stamp, record_id if isinstance(record_id, int) else 0
