"""Repository contract shared by the remote and local storage tiers."""

from __future__ import annotations

import abc
import enum
from dataclasses import dataclass, field
from typing import Any, Optional

from ..exceptions import NotFoundError

Record = dict[str, Any]


class FetchState(str, enum.Enum):
    """Outcome of reading a whole collection from one tier."""

    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchResult:
    """Records read from a tier, tagged with how the read went.

    Keeps "the store is reachable but empty" apart from "the store could
    not be read", which a bare list cannot express.
    """

    state: FetchState
    records: list[Record] = field(default_factory=list)

    @classmethod
    def of(cls, records: list[Record]) -> "FetchResult":
        return cls(FetchState.OK if records else FetchState.EMPTY, records)

    @classmethod
    def failed(cls) -> "FetchResult":
        return cls(FetchState.FAILED, [])


@dataclass(frozen=True)
class EntitySpec:
    """Static description of an entity kept in both tiers.

    Attributes
    ----------
    name : str
        Remote table name, also used as the entity label in status reports.
    model : type
        ORM model mapped to ``name``.
    storage_key : str
        Key of the JSON collection in the local store.
    timestamp_fields : tuple[str, ...]
        Fields stamped with the current time when a record is created locally.
        The first one orders remote reads (newest first).
    """

    name: str
    model: type
    storage_key: str
    timestamp_fields: tuple[str, ...] = ("created_at",)

    @property
    def order_field(self) -> str:
        return self.timestamp_fields[0]


class Repository(abc.ABC):
    """CRUD contract for one entity in one storage tier."""

    spec: EntitySpec

    @abc.abstractmethod
    def create(self, data: Record) -> Record:
        """Store ``data`` and return the record with its assigned id."""

    @abc.abstractmethod
    def fetch_all(self) -> FetchResult:
        """Return every record of the entity."""

    @abc.abstractmethod
    def get(self, record_id: Any) -> Record:
        """Return the record with ``record_id`` or raise ``NotFoundError``."""

    @abc.abstractmethod
    def update(self, record_id: Any, fields: Record) -> Record:
        """Merge ``fields`` into the record and return the result."""

    @abc.abstractmethod
    def delete(self, record_id: Any) -> None:
        """Remove the record or raise ``NotFoundError``."""

    def find(self, record_id: Any) -> Optional[Record]:
        try:
            return self.get(record_id)
        except NotFoundError:
            return None
