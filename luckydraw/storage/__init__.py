"""Dual-storage persistence: remote relational store with a local fallback."""

from .base import EntitySpec, FetchResult, FetchState, Repository
from .entities import ALL_ENTITIES, CONTESTS, PARTICIPANTS, PRIZES
from .fallback import FallbackRepository
from .local import LocalRepository, LocalStorage
from .monitor import EntityStorageStatus, OverallStatus, StorageMonitor, StorageStatus
from .remote import SqlRepository

__all__ = [
    "ALL_ENTITIES",
    "CONTESTS",
    "PARTICIPANTS",
    "PRIZES",
    "EntitySpec",
    "EntityStorageStatus",
    "FallbackRepository",
    "FetchResult",
    "FetchState",
    "LocalRepository",
    "LocalStorage",
    "OverallStatus",
    "Repository",
    "SqlRepository",
    "StorageMonitor",
    "StorageStatus",
]
