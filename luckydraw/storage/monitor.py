"""Diagnostics for the dual-storage accessors."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional

from ..exceptions import LuckyDrawError
from ..models.enums import ContestStatus
from .base import FetchState, Record
from .fallback import FallbackRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityStorageStatus:
    """Where one entity's data currently lives."""

    entity: str
    remote_state: FetchState
    remote_count: int
    local_count: int

    @property
    def remote_active(self) -> bool:
        """True when the remote tier answered with at least one row."""
        return self.remote_state is FetchState.OK

    @property
    def remote_reachable(self) -> bool:
        return self.remote_state is not FetchState.FAILED

    @property
    def total(self) -> int:
        """Number of records a read would return right now."""
        return self.remote_count if self.remote_active else self.local_count

    def to_json(self) -> dict[str, Any]:
        return {
            "entity": self.entity,
            "remote_state": self.remote_state.value,
            "remote_active": self.remote_active,
            "remote_count": self.remote_count,
            "local_count": self.local_count,
            "total": self.total,
        }


@dataclass(frozen=True)
class OverallStatus:
    using_remote: bool
    using_local: bool
    is_hybrid: bool

    @property
    def mode(self) -> str:
        if self.is_hybrid:
            return "hybrid"
        if self.using_remote:
            return "remote"
        return "local"


@dataclass(frozen=True)
class StorageStatus:
    entities: dict[str, EntityStorageStatus]
    overall: OverallStatus

    def __getitem__(self, entity: str) -> EntityStorageStatus:
        return self.entities[entity]

    def to_json(self) -> dict[str, Any]:
        return {
            "entities": {name: status.to_json() for name, status in self.entities.items()},
            "overall": {
                "using_remote": self.overall.using_remote,
                "using_local": self.overall.using_local,
                "is_hybrid": self.overall.is_hybrid,
                "mode": self.overall.mode,
            },
        }


class StorageMonitor:
    """Reports which tier is authoritative for each dual-storage entity.

    The monitor is built explicitly with the accessors it should inspect and
    handed to whatever needs diagnostics.
    """

    def __init__(
        self,
        accessors: Iterable[FallbackRepository],
        *,
        probe_entity: str = "contests",
    ) -> None:
        self._accessors = {accessor.name: accessor for accessor in accessors}
        self._probe_entity = probe_entity

    def get_storage_status(self) -> StorageStatus:
        entities: dict[str, EntityStorageStatus] = {}
        for name, accessor in self._accessors.items():
            remote = accessor.fetch_remote()
            entities[name] = EntityStorageStatus(
                entity=name,
                remote_state=remote.state,
                remote_count=len(remote.records),
                local_count=accessor.local.count(),
            )

        using_remote = any(status.remote_active for status in entities.values())
        using_local = any(status.local_count > 0 for status in entities.values())
        overall = OverallStatus(
            using_remote=using_remote,
            using_local=using_local,
            is_hybrid=using_remote and using_local,
        )
        return StorageStatus(entities=entities, overall=overall)

    def test_connection(self) -> bool:
        """Return True when the remote tier of the probe entity can be read."""
        accessor = self._probe_accessor()
        return accessor.fetch_remote().state is not FetchState.FAILED

    def test_insert(self, probe: Optional[Record] = None) -> bool:
        """Insert and delete a throwaway record through the remote tier only."""
        accessor = self._probe_accessor()
        record = probe or self._default_probe()
        try:
            created = accessor.remote.create(record)
            accessor.remote.delete(created["id"])
        except LuckyDrawError as exc:
            logger.warning("Remote insert probe on %s failed: %s", accessor.name, exc)
            return False
        return True

    @staticmethod
    def format_report(status: StorageStatus) -> str:
        lines = ["Storage status report:"]
        names = list(status.entities)
        for index, name in enumerate(names):
            entity = status.entities[name]
            branch = "`-" if index == len(names) - 1 else "|-"
            lines.append(
                f"{branch} {name}: {entity.total} "
                f"(remote: {entity.remote_state.value}, {entity.remote_count} | "
                f"local: {entity.local_count})"
            )
        lines.append(f"mode: {status.overall.mode}")
        return "\n".join(lines)

    def log_status(self) -> StorageStatus:
        status = self.get_storage_status()
        for line in self.format_report(status).splitlines():
            logger.info(line)
        return status

    def _probe_accessor(self) -> FallbackRepository:
        try:
            return self._accessors[self._probe_entity]
        except KeyError:
            raise LuckyDrawError(
                f"No accessor registered for '{self._probe_entity}'", code="no_probe"
            ) from None

    def _default_probe(self) -> Record:
        now = datetime.now(timezone.utc)
        if self._probe_entity != "contests":
            raise LuckyDrawError(
                f"A probe record is required for '{self._probe_entity}'", code="no_probe"
            )
        return {
            "name": "Connection Test",
            "start_date": now,
            "end_date": now + timedelta(days=1),
            "status": ContestStatus.DRAFT.value,
        }


__all__ = [
    "EntityStorageStatus",
    "OverallStatus",
    "StorageMonitor",
    "StorageStatus",
]
