"""Enumerated values stored in string columns."""

from __future__ import annotations

import enum


class ContestStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    UPCOMING = "UPCOMING"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class EntryRule(str, enum.Enum):
    ONE_ENTRY = "one_entry"
    MULTIPLE_ENTRY = "multiple_entry"


class DrawMode(str, enum.Enum):
    RANDOM = "RANDOM"
    MANUAL = "MANUAL"


class PrizeStatus(str, enum.Enum):
    """Fulfillment lifecycle of a won prize, in order."""

    PENDING = "PENDING"
    NOTIFIED = "NOTIFIED"
    CLAIMED = "CLAIMED"
    DISPATCHED = "DISPATCHED"
    DELIVERED = "DELIVERED"

    @property
    def step(self) -> int:
        return _PRIZE_STATUS_ORDER.index(self)


_PRIZE_STATUS_ORDER = list(PrizeStatus)


class AdminRole(str, enum.Enum):
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"
    SUPERADMIN = "SUPERADMIN"

    @property
    def rank(self) -> int:
        return ROLE_HIERARCHY[self]


# SUPERADMIN > ADMIN > MODERATOR
ROLE_HIERARCHY = {
    AdminRole.MODERATOR: 1,
    AdminRole.ADMIN: 2,
    AdminRole.SUPERADMIN: 3,
}


class ActivityStatus(str, enum.Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    PENDING = "PENDING"


def sql_in(enum_cls: type[enum.Enum]) -> str:
    """Render the values of ``enum_cls`` as a SQL ``IN`` list for check constraints."""
    return "(" + ",".join(f"'{member.value}'" for member in enum_cls) + ")"
