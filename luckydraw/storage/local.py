"""Local tier: a process-local key/value store of JSON-serialized collections."""

from __future__ import annotations

import enum
import json
import logging
import os
import tempfile
import time
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterator, Optional

from ..db.utils import dt_iso
from ..exceptions import NotFoundError, PersistenceError
from .base import EntitySpec, FetchResult, Record, Repository

logger = logging.getLogger(__name__)


class LocalStorage:
    """String key/value store, optionally persisted to a JSON file.

    Behaves like a browser's ``localStorage``: values are plain strings and
    every ``set_item`` rewrites the backing file. With ``path=None`` the
    store lives in memory only.
    """

    def __init__(self, path: Optional[os.PathLike | str] = None) -> None:
        self._path = Path(path) if path is not None else None
        self._items: dict[str, str] = {}
        if self._path is not None and self._path.exists():
            self._items = self._read_file(self._path)

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError("LocalStorage values must be strings")
        previous = dict(self._items)
        self._items[key] = value
        self._flush_or_restore(previous, f"Could not write local storage key '{key}'")

    def remove_item(self, key: str) -> None:
        if key not in self._items:
            return
        previous = dict(self._items)
        del self._items[key]
        self._flush_or_restore(previous, f"Could not remove local storage key '{key}'")

    def clear(self) -> None:
        previous = dict(self._items)
        self._items.clear()
        self._flush_or_restore(previous, "Could not clear local storage")

    def keys(self) -> list[str]:
        return list(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def _flush_or_restore(self, previous: dict[str, str], message: str) -> None:
        try:
            self._flush()
        except OSError as exc:
            self._items = previous
            raise PersistenceError(
                message, details={"path": str(self._path), "error": str(exc)}
            ) from exc

    @staticmethod
    def _read_file(path: Path) -> dict[str, str]:
        try:
            data = json.loads(path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as exc:
            logger.critical("Local storage file %s is unreadable: %s", path, exc)
            raise PersistenceError(
                "Local storage file is unreadable", details={"path": str(path)}
            ) from exc
        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            raise PersistenceError(
                "Local storage file must hold a JSON object of strings",
                details={"path": str(path)},
            )
        return data

    def _flush(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # write-then-rename so a crash never leaves a half-written file
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".local_storage-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._items, fh, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return dt_iso(value)
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _normalize(data: Record) -> Record:
    """Return a JSON-safe copy of ``data`` (datetimes as ISO strings, enums as values)."""
    return json.loads(json.dumps(data, default=_json_default))


class LocalRepository(Repository):
    """Repository storing one entity as a JSON array under ``spec.storage_key``.

    Ids are synthesized from the wall clock in milliseconds and bumped past
    the largest existing id, so they stay unique and increasing within the
    collection.
    """

    def __init__(self, storage: LocalStorage, spec: EntitySpec) -> None:
        self._storage = storage
        self.spec = spec

    @property
    def key(self) -> str:
        return self.spec.storage_key

    def create(self, data: Record) -> Record:
        records = self._load(strict=True)
        now = dt_iso(datetime.now(timezone.utc))
        record = _normalize(data)
        record["id"] = self._next_id(records)
        for field in self.spec.timestamp_fields:
            if record.get(field) is None:
                record[field] = now
        records.append(record)
        self._save(records)
        logger.debug("Created %s %s in local storage", self.spec.name, record["id"])
        return record

    def fetch_all(self) -> FetchResult:
        return FetchResult.of(self._load(strict=False))

    def get(self, record_id: Any) -> Record:
        for record in self._load(strict=False):
            if record.get("id") == record_id:
                return record
        raise NotFoundError(self.spec.name, record_id)

    def update(self, record_id: Any, fields: Record) -> Record:
        records = self._load(strict=True)
        index = self._index_of(records, record_id)
        changes = {k: v for k, v in _normalize(fields).items() if k != "id"}
        records[index] = {**records[index], **changes}
        self._save(records)
        logger.debug("Updated %s %s in local storage", self.spec.name, record_id)
        return records[index]

    def delete(self, record_id: Any) -> None:
        records = self._load(strict=True)
        index = self._index_of(records, record_id)
        del records[index]
        self._save(records)
        logger.debug("Deleted %s %s from local storage", self.spec.name, record_id)

    def count(self) -> int:
        return len(self._load(strict=False))

    def _index_of(self, records: list[Record], record_id: Any) -> int:
        for index, record in enumerate(records):
            if record.get("id") == record_id:
                return index
        raise NotFoundError(self.spec.name, record_id)

    @staticmethod
    def _next_id(records: list[Record]) -> int:
        clock_id = int(time.time() * 1000)
        ids = [r["id"] for r in records if isinstance(r.get("id"), int)]
        return max(clock_id, max(ids) + 1) if ids else clock_id

    def _load(self, *, strict: bool) -> list[Record]:
        """Read the collection.

        A corrupt collection reads as empty for queries (``strict=False``) but
        raises :class:`PersistenceError` for writes, which would otherwise
        overwrite it.
        """
        raw = self._storage.get_item(self.key)
        if raw is None:
            return []
        try:
            records = json.loads(raw)
            if not isinstance(records, list):
                raise ValueError("expected a JSON array")
        except ValueError as exc:
            logger.error("Local collection '%s' is corrupt: %s", self.key, exc)
            if strict:
                raise PersistenceError(
                    f"Local collection '{self.key}' is corrupt", details={"key": self.key}
                ) from exc
            return []
        return records

    def _save(self, records: list[Record]) -> None:
        self._storage.set_item(self.key, json.dumps(records, default=_json_default))


__all__ = ["LocalStorage", "LocalRepository"]
